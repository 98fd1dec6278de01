"""Tests for the review outcome hand-off to the commit-msg step."""

from commitguard_core.decision import ReviewOutcome
from commitguard_core.errors import CollectionError
from commitguard_core.marker import (
    MARKER_NAME,
    annotate_message,
    consume_marker,
    default_marker_path,
    write_marker,
)


class TestMarkerFile:
    def test_write_then_consume(self, tmp_path):
        marker = tmp_path / MARKER_NAME
        write_marker(marker, ReviewOutcome.TIMED_OUT)
        assert consume_marker(marker) is ReviewOutcome.TIMED_OUT
        assert not marker.exists()

    def test_consume_missing(self, tmp_path):
        assert consume_marker(tmp_path / MARKER_NAME) is None

    def test_consume_garbage_deletes_marker(self, tmp_path):
        marker = tmp_path / MARKER_NAME
        marker.write_text("maybe")
        assert consume_marker(marker) is None
        assert not marker.exists()

    def test_write_failure_does_not_raise(self, tmp_path):
        write_marker(tmp_path / "missing-dir" / MARKER_NAME, ReviewOutcome.APPROVED)

    def test_default_path_inside_git_dir(self, mocker, tmp_path):
        mocker.patch("commitguard_core.marker.git_dir", return_value=tmp_path / ".git")
        assert default_marker_path() == tmp_path / ".git" / MARKER_NAME

    def test_default_path_outside_repository(self, mocker, tmp_path):
        mocker.patch("commitguard_core.marker.git_dir", side_effect=CollectionError("not a repo"))
        assert default_marker_path(tmp_path) == tmp_path / f".{MARKER_NAME}"


class TestAnnotateMessage:
    def test_appends_flag_to_subject(self, tmp_path):
        msg = tmp_path / "COMMIT_EDITMSG"
        msg.write_text("Add login form\n\nLonger body.\n")

        assert annotate_message(msg, ReviewOutcome.APPROVED)
        assert msg.read_text() == "Add login form [AI-REVIEW-PASSED]\n\nLonger body.\n"

    def test_skips_leading_comments(self, tmp_path):
        msg = tmp_path / "COMMIT_EDITMSG"
        msg.write_text("# Please enter the commit message\n\nFix typo\n")

        annotate_message(msg, ReviewOutcome.TIMED_OUT)

        assert msg.read_text().splitlines()[2] == "Fix typo [AI-REVIEW-FAILED-TIMEOUT]"

    def test_does_not_duplicate_flag(self, tmp_path):
        msg = tmp_path / "COMMIT_EDITMSG"
        msg.write_text("Fix typo [AI-REVIEW-SKIPPED-ERROR]\n")

        assert not annotate_message(msg, ReviewOutcome.ERRORED)
        assert msg.read_text() == "Fix typo [AI-REVIEW-SKIPPED-ERROR]\n"

    def test_rejected_has_no_flag(self, tmp_path):
        msg = tmp_path / "COMMIT_EDITMSG"
        msg.write_text("Fix typo\n")
        assert not annotate_message(msg, ReviewOutcome.REJECTED)

    def test_empty_message_untouched(self, tmp_path):
        msg = tmp_path / "COMMIT_EDITMSG"
        msg.write_text("# only comments\n")
        assert not annotate_message(msg, ReviewOutcome.APPROVED)
        assert msg.read_text() == "# only comments\n"
