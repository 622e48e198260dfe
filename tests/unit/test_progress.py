from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock, patch

from sheet_rollup.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:

    def test_init_with_tty_enabled(self):
        with patch('sheet_rollup.services.progress.is_tty_enabled', return_value=True), \
             patch('sheet_rollup.services.progress.tqdm') as mock_tqdm:

            tracker = ProgressTracker(5, description="Loading")

            assert tracker.total == 5
            assert tracker.current == 0
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5,
                desc="Loading",
                unit="workbook",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('sheet_rollup.services.progress.is_tty_enabled', return_value=False), \
             patch('sheet_rollup.services.progress.tqdm') as mock_tqdm:
            tracker = ProgressTracker(5)

            assert tracker.enabled is False
            assert tracker.pbar is None
            mock_tqdm.assert_not_called()

            # no-ops without a bar
            tracker.start(Path("PT.xlsx"))
            tracker.finish(loaded=1)
            tracker.close()
            assert tracker.current == 1

    def test_start_and_finish_with_tty_enabled(self):
        mock_pbar = Mock()

        with patch('sheet_rollup.services.progress.is_tty_enabled', return_value=True), \
             patch('sheet_rollup.services.progress.tqdm', return_value=mock_pbar):

            tracker = ProgressTracker(2, description="Loading workbooks")
            tracker.start(Path("data/PT.xlsx"))
            mock_pbar.set_description.assert_called_with("Loading workbooks (PT.xlsx)")

            tracker.finish(loaded=1, failed=0)
            mock_pbar.update.assert_called_once_with(1)
            mock_pbar.set_postfix.assert_called_once_with(loaded=1, failed=0)
            mock_pbar.set_description.assert_called_with("Loading workbooks")

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()

        with patch('sheet_rollup.services.progress.is_tty_enabled', return_value=True), \
             patch('sheet_rollup.services.progress.tqdm', return_value=mock_pbar):
            with ProgressTracker(1) as tracker:
                assert tracker.pbar is mock_pbar
            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None
