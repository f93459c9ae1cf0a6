"""Lease-end process state machine.

Statuses run in a fixed forward order, each with a display percentage.
Callers drive transitions from external events. By default any known status
may follow any other (the orchestrator owns preconditions); strict mode only
allows the next status in order, or cancellation.
"""

from typing import Optional

from src.config import settings
from src.engine.errors import InvalidTransition
from src.models.lease_end import LeaseEndProcess, ProcessProgress, ProcessStatus

STATUS_ORDER: list[ProcessStatus] = [
    ProcessStatus.PENDING,
    ProcessStatus.TRIGGERED,
    ProcessStatus.EDL_SCHEDULED,
    ProcessStatus.EDL_IN_PROGRESS,
    ProcessStatus.EDL_COMPLETED,
    ProcessStatus.DAMAGES_ASSESSED,
    ProcessStatus.DG_CALCULATED,
    ProcessStatus.RENOVATION_PLANNED,
    ProcessStatus.RENOVATION_IN_PROGRESS,
    ProcessStatus.READY_TO_RENT,
    ProcessStatus.COMPLETED,
]

PROGRESS_BY_STATUS: dict[ProcessStatus, int] = {
    ProcessStatus.PENDING: 0,
    ProcessStatus.TRIGGERED: 10,
    ProcessStatus.EDL_SCHEDULED: 15,
    ProcessStatus.EDL_IN_PROGRESS: 25,
    ProcessStatus.EDL_COMPLETED: 35,
    ProcessStatus.DAMAGES_ASSESSED: 45,
    ProcessStatus.DG_CALCULATED: 55,
    ProcessStatus.RENOVATION_PLANNED: 65,
    ProcessStatus.RENOVATION_IN_PROGRESS: 75,
    ProcessStatus.READY_TO_RENT: 90,
    ProcessStatus.COMPLETED: 100,
    ProcessStatus.CANCELLED: 0,
}

TERMINAL_STATUSES = frozenset({ProcessStatus.COMPLETED, ProcessStatus.CANCELLED})


def parse_status(status: ProcessStatus | str) -> Optional[ProcessStatus]:
    if isinstance(status, ProcessStatus):
        return status
    try:
        return ProcessStatus(status)
    except ValueError:
        return None


def progress_percentage(status: ProcessStatus | str) -> int:
    """Display percentage for a status. Unknown statuses render as 0."""
    parsed = parse_status(status)
    if parsed is None:
        return 0
    return PROGRESS_BY_STATUS.get(parsed, 0)


def next_status(status: ProcessStatus) -> Optional[ProcessStatus]:
    if status not in STATUS_ORDER:
        return None
    index = STATUS_ORDER.index(status)
    if index + 1 >= len(STATUS_ORDER):
        return None
    return STATUS_ORDER[index + 1]


def transition(
    current: ProcessStatus,
    target: ProcessStatus | str,
    strict: Optional[bool] = None,
) -> ProcessStatus:
    """Validate a status change and return the new status.

    Args:
        current: Status the process is in.
        target: Requested status (enum or its string value).
        strict: Only allow the next status in order (or cancel). Defaults to
            settings.strict_transitions.

    Raises:
        InvalidTransition: unknown target, cancelling a completed process,
            or (strict) any skip, regression, or exit from a terminal status.
    """
    strict = settings.strict_transitions if strict is None else strict
    parsed = parse_status(target)
    if parsed is None:
        raise InvalidTransition(f"Unknown process status: {target}", {"target": str(target)})

    if parsed == ProcessStatus.CANCELLED:
        if current in TERMINAL_STATUSES:
            raise InvalidTransition(
                f"Cannot cancel a process that is already {current.value}",
                {"current": current.value},
            )
        return parsed

    if not strict:
        return parsed

    if current in TERMINAL_STATUSES:
        raise InvalidTransition(
            f"Process is {current.value}; no further transitions",
            {"current": current.value, "target": parsed.value},
        )
    if parsed != next_status(current):
        raise InvalidTransition(
            f"Cannot move from {current.value} to {parsed.value} in strict mode",
            {"current": current.value, "target": parsed.value},
        )
    return parsed


def process_progress(process: LeaseEndProcess) -> ProcessProgress:
    return ProcessProgress(status=process.status, progress_percentage=progress_percentage(process.status))
