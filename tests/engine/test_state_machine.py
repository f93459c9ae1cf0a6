import pytest

from src.engine.errors import InvalidTransition
from src.engine.state_machine import (
    STATUS_ORDER,
    next_status,
    process_progress,
    progress_percentage,
    transition,
)
from src.models.lease_end import LeaseEndProcess, ProcessStatus


class TestProgress:
    def test_non_decreasing_along_order(self):
        percentages = [progress_percentage(status) for status in STATUS_ORDER]
        assert percentages == sorted(percentages)
        assert percentages[0] == 0
        assert percentages[-1] == 100

    def test_known_values(self):
        assert progress_percentage(ProcessStatus.DG_CALCULATED) == 55
        assert progress_percentage("ready_to_rent") == 90

    def test_cancelled_is_zero(self):
        assert progress_percentage(ProcessStatus.CANCELLED) == 0

    def test_unknown_status_is_zero(self):
        assert progress_percentage("archived") == 0

    def test_process_progress(self):
        process = LeaseEndProcess(id="p", status=ProcessStatus.EDL_COMPLETED)
        progress = process_progress(process)
        assert progress.status == ProcessStatus.EDL_COMPLETED
        assert progress.progress_percentage == 35


class TestNextStatus:
    def test_follows_order(self):
        assert next_status(ProcessStatus.PENDING) == ProcessStatus.TRIGGERED

    def test_last_has_none(self):
        assert next_status(ProcessStatus.COMPLETED) is None
        assert next_status(ProcessStatus.CANCELLED) is None


class TestTransition:
    def test_lenient_allows_skips(self):
        target = transition(ProcessStatus.PENDING, ProcessStatus.DG_CALCULATED, strict=False)
        assert target == ProcessStatus.DG_CALCULATED

    def test_accepts_string_target(self):
        assert transition(ProcessStatus.PENDING, "triggered", strict=True) == ProcessStatus.TRIGGERED

    def test_strict_rejects_skip(self):
        with pytest.raises(InvalidTransition):
            transition(ProcessStatus.PENDING, ProcessStatus.DG_CALCULATED, strict=True)

    def test_strict_rejects_regression(self):
        with pytest.raises(InvalidTransition):
            transition(ProcessStatus.DG_CALCULATED, ProcessStatus.TRIGGERED, strict=True)

    def test_strict_terminal(self):
        with pytest.raises(InvalidTransition):
            transition(ProcessStatus.CANCELLED, ProcessStatus.PENDING, strict=True)

    def test_cancel_from_any_open_status(self):
        for status in STATUS_ORDER[:-1]:
            assert transition(status, ProcessStatus.CANCELLED, strict=True) == ProcessStatus.CANCELLED

    def test_cannot_cancel_completed(self):
        with pytest.raises(InvalidTransition):
            transition(ProcessStatus.COMPLETED, ProcessStatus.CANCELLED, strict=False)

    def test_unknown_target(self):
        with pytest.raises(InvalidTransition):
            transition(ProcessStatus.PENDING, "archived", strict=False)
