"""Spreadsheet cell normalization and period aggregation.

Reads workbook sheets, normalizes cells into typed records through per-layout
column maps and folds them into chronological period series.
"""

__version__ = "0.3.0"
