"""Test the matching progress bar counters"""

from unittest.mock import Mock

from chart_matcher.core.progress import MatchingProgressBar, SizedTextColumn


class TestMatchingProgressBar:
    """Test status counting (display not started)"""

    def test_counts(self):
        progress = MatchingProgressBar(total=4)

        progress.update(matched=True)
        progress.update(matched=True)
        progress.update(matched=False)
        progress.update(matched=False, errored=True)

        assert progress.completed == 4
        assert progress.matched == 2
        assert progress.unmatched == 2
        assert progress.errored == 1

    def test_status_text(self):
        progress = MatchingProgressBar(total=2)
        progress.update(matched=True)

        assert "✓ 1" in progress._get_status_text()
        assert "✗ 0" in progress._get_status_text()
        assert "!" not in progress._get_status_text()

        progress.update(matched=False, errored=True)
        assert "! 1" in progress._get_status_text()

    def test_context_manager(self):
        with MatchingProgressBar(total=1) as progress:
            progress.update(matched=True)
        assert not progress._started


class TestSizedTextColumn:
    """Test fixed-width text rendering"""

    def test_pads_short_text(self):
        task = Mock(description="2012")
        column = SizedTextColumn("{task.description}", width=8)

        assert column.render(task).plain == "2012    "

    def test_truncates_long_text(self):
        task = Mock(description="Year-end chart 2012")
        column = SizedTextColumn("{task.description}", overflow="ellipsis", width=8)

        rendered = column.render(task).plain
        assert len(rendered) == 8
        assert rendered.endswith("…")
