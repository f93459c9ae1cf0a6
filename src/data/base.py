"""Protocol definitions for lease-end process storage.

The settlement engine never touches storage itself; the coordinator reads a
consistent snapshot through this interface and writes results back.
"""

from typing import Protocol, runtime_checkable

from src.models.inspection import InspectionItem
from src.models.lease_end import LeaseEndProcess, ProcessStatus, SettlementResult
from src.models.renovation import Quote, RenovationItem
from src.models.retention import FinalRetention
from src.models.timeline import TimelineItem


@runtime_checkable
class ProcessRepository(Protocol):
    def get(self, process_id: str) -> LeaseEndProcess | None:
        """Load a snapshot of a process with its items, or None."""
        ...

    def save_inspection_items(self, process_id: str, items: list[InspectionItem]) -> None:
        """Replace the process's inspection items."""
        ...

    def save_renovation_items(self, process_id: str, items: list[RenovationItem]) -> None:
        """Replace the process's renovation items."""
        ...

    def save_totals(self, process_id: str, result: SettlementResult) -> None:
        """Persist all aggregate totals for a process in one atomic write."""
        ...

    def save_timeline(self, process_id: str, items: list[TimelineItem]) -> None:
        """Replace the process's timeline."""
        ...

    def save_status(self, process_id: str, status: ProcessStatus) -> None:
        """Persist a new process status."""
        ...

    def add(self, process: LeaseEndProcess) -> None:
        """Register a new process."""
        ...

    def save_quotes(self, process_id: str, quotes: list[Quote]) -> None:
        """Replace the process's renovation quotes."""
        ...

    def save_retention_decision(self, process_id: str, decision: FinalRetention | None) -> None:
        """Persist the owner's retention decision, or clear it with None."""
        ...
