from __future__ import annotations

from unittest.mock import Mock, patch

from monarch_import.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:

    def test_init_with_tty_enabled(self):
        with patch("monarch_import.services.progress.is_tty_enabled", return_value=True), \
             patch("monarch_import.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(4, description="Resolving invoices", unit="invoice")
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=4,
                desc="Resolving invoices",
                unit="invoice",
                disable=False,
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch("monarch_import.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(4)
            assert tracker.enabled is False
            assert tracker.pbar is None
            tracker.start_item("00123")
            tracker.finish_item()
            tracker.set_postfix(rejected=1)
            tracker.close()
            assert tracker.current == 1

    def test_items_update_bar(self):
        mock_pbar = Mock()
        with patch("monarch_import.services.progress.is_tty_enabled", return_value=True), \
             patch("monarch_import.services.progress.tqdm", return_value=mock_pbar):
            with ProgressTracker(2, description="Resolving") as tracker:
                tracker.start_item("00123")
                mock_pbar.set_description.assert_called_with("Resolving (00123)")
                tracker.finish_item()
                mock_pbar.update.assert_called_once_with(1)
                tracker.set_postfix(rejected=1)
                mock_pbar.set_postfix.assert_called_once_with(rejected=1)
            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None
