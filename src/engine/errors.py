"""Error taxonomy for the lease-end settlement engine.

Engine functions raise these synchronously and never log; the caller decides
whether to retry, log, or surface them.
"""

from typing import Any, Optional


class LeaseEndError(Exception):
    """Base class for settlement engine errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInput(LeaseEndError, ValueError):
    """Input cannot be classified or aggregated (missing category, negative or NaN amount)."""


class ProcessNotFound(LeaseEndError, LookupError):
    """The lease-end process referenced by the call does not exist."""

    def __init__(self, process_id: str):
        super().__init__(f"Lease-end process not found: {process_id}", {"process_id": process_id})
        self.process_id = process_id


class InconsistentState(LeaseEndError):
    """A problem item reached the allocator without a damage type."""


class InvalidTransition(LeaseEndError):
    """A status change the state machine or timeline refuses."""
