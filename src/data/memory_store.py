"""In-memory process repository.

Backs the API in development and the test suite. Writes go through a lock so
each save is atomic per process; reads hand out deep copies so callers work
on a stable snapshot.
"""

import copy
import logging
import threading

from src.engine.errors import ProcessNotFound
from src.models.inspection import InspectionItem
from src.models.lease_end import LeaseEndProcess, ProcessStatus, SettlementResult
from src.models.renovation import Quote, RenovationItem
from src.models.retention import FinalRetention
from src.models.timeline import TimelineItem

logger = logging.getLogger(__name__)


class InMemoryProcessStore:
    def __init__(self, processes: list[LeaseEndProcess] | None = None):
        self._lock = threading.Lock()
        self._processes: dict[str, LeaseEndProcess] = {}
        for process in processes or []:
            self.add(process)

    def add(self, process: LeaseEndProcess) -> None:
        with self._lock:
            self._processes[process.id] = copy.deepcopy(process)
        logger.debug("Stored lease-end process %s", process.id)

    def get(self, process_id: str) -> LeaseEndProcess | None:
        with self._lock:
            process = self._processes.get(process_id)
            return copy.deepcopy(process) if process is not None else None

    def _require(self, process_id: str) -> LeaseEndProcess:
        process = self._processes.get(process_id)
        if process is None:
            raise ProcessNotFound(process_id)
        return process

    def save_inspection_items(self, process_id: str, items: list[InspectionItem]) -> None:
        with self._lock:
            self._require(process_id).inspection_items = list(items)

    def save_renovation_items(self, process_id: str, items: list[RenovationItem]) -> None:
        with self._lock:
            self._require(process_id).renovation_items = list(items)

    def save_totals(self, process_id: str, result: SettlementResult) -> None:
        with self._lock:
            process = self._require(process_id)
            process.tenant_damage_cost = result.tenant_damage_cost
            process.vetusty_cost = result.vetusty_cost
            process.renovation_cost = result.renovation_cost
            process.deposit_retention_amount = result.deposit_retention_amount
            process.deposit_refund_amount = result.deposit_refund_amount
            process.total_budget = result.total_budget

    def save_timeline(self, process_id: str, items: list[TimelineItem]) -> None:
        with self._lock:
            self._require(process_id).timeline = list(items)

    def save_status(self, process_id: str, status: ProcessStatus) -> None:
        with self._lock:
            self._require(process_id).status = status

    def save_quotes(self, process_id: str, quotes: list[Quote]) -> None:
        with self._lock:
            self._require(process_id).quotes = list(quotes)

    def save_retention_decision(self, process_id: str, decision: FinalRetention | None) -> None:
        with self._lock:
            self._require(process_id).retention_decision = decision
