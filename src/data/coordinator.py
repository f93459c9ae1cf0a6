"""Lease-end coordinator: sequences the settlement engine against storage.

Flow: open process → classify inspection → allocate costs → settle deposit →
owner retention decision → plan recovery. The engine functions are pure; this
class owns loading, saving, ids, status changes and logging.
"""

import logging
import uuid
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

from src.data.base import ProcessRepository
from src.engine.allocator import allocate_costs, validate_renovation_item
from src.engine.classifier import ClassificationPolicy, classify_items
from src.engine.errors import InconsistentState, InvalidInput, ProcessNotFound
from src.engine.renovation import accept_quote, order_by_priority, propose_renovation_items
from src.engine.retention import apply_owner_decision, propose_retention, retention_lines
from src.engine.settlement import require_amount
from src.engine.state_machine import process_progress, transition
from src.engine.timeline import complete_item, generate_timeline, regenerate_timeline, start_item
from src.engine.triggers import allows_deposit, should_trigger
from src.models.inspection import InspectionItem
from src.models.lease_end import LeaseEndProcess, LeaseType, ProcessProgress, ProcessStatus, SettlementResult
from src.models.renovation import Quote, RenovationItem, RenovationItemStatus
from src.models.retention import FinalRetention, OwnerDecision, RetentionProposal
from src.models.timeline import Timeline, TimelineActionType

logger = logging.getLogger(__name__)


class LeaseEndCoordinator:
    def __init__(
        self,
        repository: ProcessRepository,
        policy: ClassificationPolicy | None = None,
        strict_transitions: bool | None = None,
    ):
        self.repository = repository
        self.policy = policy
        self.strict_transitions = strict_transitions

    def _load(self, process_id: str) -> LeaseEndProcess:
        process = self.repository.get(process_id)
        if process is None:
            logger.warning("Lease-end process %s not found", process_id)
            raise ProcessNotFound(process_id)
        return process

    def _clear_retention_decision(self, process: LeaseEndProcess) -> None:
        # Any change to tenant liability voids the owner's earlier decision
        if process.retention_decision is not None:
            self.repository.save_retention_decision(process.id, None)
            logger.info("Process %s: retention decision cleared, tenant liability changed", process.id)

    def open_process(
        self,
        deposit_amount: Decimal,
        lease_type: LeaseType = LeaseType.NU,
        lease_end_date: date | None = None,
        plan_start_date: date | None = None,
        process_id: str | None = None,
        today: date | None = None,
    ) -> LeaseEndProcess:
        """Register a new lease-end process.

        The process starts TRIGGERED when the lease end is inside the lease
        type's notice window, PENDING otherwise.
        """
        deposit = require_amount(deposit_amount, "deposit_amount")
        if deposit > 0 and not allows_deposit(lease_type):
            raise InvalidInput(
                f"A {lease_type.value} lease holds no security deposit",
                {"lease_type": lease_type.value, "deposit_amount": str(deposit)},
            )
        process_id = process_id or uuid.uuid4().hex
        if self.repository.get(process_id) is not None:
            raise InvalidInput(f"Process {process_id} already exists", {"process_id": process_id})

        status = ProcessStatus.PENDING
        if lease_end_date is not None and should_trigger(lease_end_date, lease_type, today):
            status = ProcessStatus.TRIGGERED

        process = LeaseEndProcess(
            id=process_id,
            deposit_amount=deposit,
            lease_type=lease_type,
            lease_end_date=lease_end_date,
            plan_start_date=plan_start_date,
            status=status,
        )
        self.repository.add(process)
        logger.info("Opened lease-end process %s (%s, deposit %s, %s)",
                    process_id, lease_type.value, deposit, status.value)
        return process

    def get(self, process_id: str) -> LeaseEndProcess:
        return self._load(process_id)

    def advance(self, process_id: str, target: ProcessStatus | str) -> ProcessStatus:
        """Move a process to a new status, validated by the state machine."""
        process = self._load(process_id)
        new_status = transition(process.status, target, strict=self.strict_transitions)
        self.repository.save_status(process_id, new_status)
        logger.info("Process %s: %s → %s", process_id, process.status.value, new_status.value)
        return new_status

    def assess_damages(
        self,
        process_id: str,
        items: list[InspectionItem],
        lease_duration_years: Decimal | None = None,
    ) -> list[InspectionItem]:
        """Classify the exit inspection and store it. Fails closed on any invalid item."""
        process = self._load(process_id)
        classified = classify_items(items, self.policy, lease_duration_years)
        self.repository.save_inspection_items(process_id, classified)
        self._clear_retention_decision(process)
        logger.info("Process %s: classified %d inspection items", process_id, len(classified))
        return classified

    def recalculate(self, process_id: str) -> SettlementResult:
        """Recompute and persist all process totals from the current item set.

        Nothing is written unless the whole aggregation succeeds.
        """
        process = self._load(process_id)
        result = allocate_costs(
            process.inspection_items,
            process.renovation_items,
            process.deposit_amount,
        )
        self.repository.save_totals(process_id, result)
        logger.info(
            "Process %s totals: tenant=%s vetusty=%s renovation=%s retention=%s refund=%s budget=%s",
            process_id,
            result.tenant_damage_cost,
            result.vetusty_cost,
            result.renovation_cost,
            result.deposit_retention_amount,
            result.deposit_refund_amount,
            result.total_budget,
        )
        if result.outstanding_claim > 0:
            logger.info(
                "Process %s: tenant damage exceeds deposit by %s, separate claim required",
                process_id,
                result.outstanding_claim,
            )
        return result

    def propose_renovations(self, process_id: str) -> list[RenovationItem]:
        """Suggested owner-paid work from the inspection, most urgent first."""
        process = self._load(process_id)
        return order_by_priority(propose_renovation_items(process.inspection_items))

    def add_renovation_items(self, process_id: str, items: list[RenovationItem]) -> list[RenovationItem]:
        """Attach renovation items to a process and recompute its totals."""
        process = self._load(process_id)
        added = []
        for item in items:
            validate_renovation_item(item)
            added.append(item if item.id else replace(item, id=uuid.uuid4().hex))
        self.repository.save_renovation_items(process_id, process.renovation_items + added)
        if any(item.tenant_share > 0 for item in added):
            self._clear_retention_decision(process)
        logger.info("Process %s: added %d renovation items", process_id, len(added))
        self.recalculate(process_id)
        return added

    def add_quote(
        self,
        process_id: str,
        renovation_item_id: str,
        amount: Decimal,
        tax_amount: Decimal = Decimal("0"),
        provider_name: str | None = None,
    ) -> Quote:
        """Record a contractor quote against one renovation item."""
        process = self._load(process_id)
        items = list(process.renovation_items)
        index = next((i for i, item in enumerate(items) if item.id == renovation_item_id), None)
        if index is None:
            raise InvalidInput(
                f"Process {process_id} has no renovation item {renovation_item_id}",
                {"process_id": process_id, "renovation_item_id": renovation_item_id},
            )
        quote = Quote(
            id=uuid.uuid4().hex,
            renovation_item_id=renovation_item_id,
            amount=require_amount(amount, "amount"),
            tax_amount=require_amount(tax_amount, "tax_amount"),
            provider_name=provider_name,
        )
        if items[index].status in (RenovationItemStatus.PENDING, RenovationItemStatus.QUOTE_REQUESTED):
            items[index] = replace(items[index], status=RenovationItemStatus.QUOTE_RECEIVED)
            self.repository.save_renovation_items(process_id, items)
        self.repository.save_quotes(process_id, process.quotes + [quote])
        logger.info("Process %s: quote %s of %s for item %s",
                    process_id, quote.id, quote.total_amount, renovation_item_id)
        return quote

    def select_quote(self, process_id: str, quote_id: str) -> RenovationItem:
        """Accept a quote: the item takes the quoted cost and totals are recomputed."""
        process = self._load(process_id)
        quote = next((q for q in process.quotes if q.id == quote_id), None)
        if quote is None:
            raise InvalidInput(
                f"Process {process_id} has no quote {quote_id}",
                {"process_id": process_id, "quote_id": quote_id},
            )
        items = list(process.renovation_items)
        index = next((i for i, item in enumerate(items) if item.id == quote.renovation_item_id), None)
        if index is None:
            raise InconsistentState(
                f"Quote {quote_id} points at a missing renovation item",
                {"quote_id": quote_id, "renovation_item_id": quote.renovation_item_id},
            )
        revised, quotes = accept_quote(items[index], process.quotes, quote_id)
        items[index] = revised
        self.repository.save_renovation_items(process_id, items)
        self.repository.save_quotes(process_id, quotes)
        if revised.tenant_share > 0:
            self._clear_retention_decision(process)
        logger.info("Process %s: accepted quote %s, item %s now costs %s",
                    process_id, quote_id, revised.id, revised.estimated_cost)
        self.recalculate(process_id)
        return revised

    def retention_proposal(self, process_id: str) -> RetentionProposal:
        """Proposed deposit retention for the owner to review."""
        process = self._load(process_id)
        lines = retention_lines(process.inspection_items, process.renovation_items)
        return propose_retention(lines, process.deposit_amount)

    def decide_retention(
        self,
        process_id: str,
        decision: OwnerDecision,
        modified_amount: Decimal | None = None,
        owner_comments: str = "",
    ) -> FinalRetention:
        """Record the owner's approval, modification or rejection of the proposal."""
        final = apply_owner_decision(
            self.retention_proposal(process_id),
            decision,
            modified_amount=modified_amount,
            owner_comments=owner_comments,
        )
        self.repository.save_retention_decision(process_id, final)
        logger.info("Process %s: owner %s retention of %s, refund %s",
                    process_id, decision.value, final.retention, final.refund)
        return final

    def plan_recovery(self, process_id: str, start_date: date | None = None) -> Timeline:
        """Generate (or regenerate) the recovery timeline from current totals."""
        process = self._load(process_id)
        start = start_date or process.plan_start_date or date.today()
        quotes_needed = sum(1 for item in process.renovation_items if item.needs_quotes)
        # Quoted tenant-paid work carries no owner cost but still needs a work slot
        work_budget = process.vetusty_cost if process.vetusty_cost > 0 else process.renovation_cost
        retention = process.deposit_retention_amount
        if process.retention_decision is not None:
            retention = process.retention_decision.retention
        fresh = generate_timeline(
            start,
            owner_budget=work_budget,
            renovation_items_count=quotes_needed,
            retention_amount=retention,
        )
        timeline = regenerate_timeline(process.timeline, fresh)
        self.repository.save_timeline(process_id, list(timeline.items))
        logger.info(
            "Process %s: timeline of %d actions, ready on %s",
            process_id,
            len(timeline.items),
            timeline.estimated_ready_date,
        )
        return timeline

    def update_action(
        self,
        process_id: str,
        action_type: TimelineActionType,
        completed: bool = True,
        on: date | None = None,
    ) -> Timeline:
        """Start or complete one timeline action."""
        process = self._load(process_id)
        items = list(process.timeline)
        for index, item in enumerate(items):
            if item.action_type == action_type:
                items[index] = complete_item(item, on) if completed else start_item(item)
                break
        else:
            raise InvalidInput(
                f"Process {process_id} has no {action_type.value} action",
                {"process_id": process_id, "action_type": action_type.value},
            )
        self.repository.save_timeline(process_id, items)
        first = items[0]
        start = first.scheduled_date - timedelta(days=first.day_offset)
        return Timeline(start_date=start, items=tuple(items))

    def progress(self, process_id: str) -> ProcessProgress:
        return process_progress(self._load(process_id))
