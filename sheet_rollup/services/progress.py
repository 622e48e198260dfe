from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display for workbook loading (tqdm, TTY only).

In non-TTY environments (CI, pipes) no bar is created so that log output is
not interleaved with ANSI control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check whether stdout is a terminal.

    Returns:
        True when the progress bar should be displayed
    """
    return sys.stdout.isatty()


class ProgressTracker:
    """One tqdm bar over the workbooks of a cache ``init`` pass."""

    def __init__(self, total: int, *, description: str = "Loading workbooks") -> None:
        """Create the tracker (the bar itself only on a TTY).

        Args:
            total: number of workbooks to load
            description: base label of the bar
        """
        self.total = total
        self.description = description
        self.current = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit="workbook",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start(self, path: Path) -> None:
        """Mark the start of one workbook load.

        Args:
            path: workbook file; its name is shown next to the description
        """
        self.current += 1
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({path.name})")

    def finish(self, **postfix: Any) -> None:
        """Advance the bar by one workbook.

        Args:
            **postfix: running counters shown after the bar (e.g. loaded=3 failed=1)
        """
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            if postfix:
                self.pbar.set_postfix(**postfix)
            self.pbar.set_description(self.description)

    def close(self) -> None:
        """Close the bar; safe to call more than once."""
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
