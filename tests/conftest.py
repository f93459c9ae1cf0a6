"""Shared fixtures for engine, data and API tests.

Fixture process: unfurnished lease, 1000 EUR deposit, exit inspection done.
"""

from datetime import date
from decimal import Decimal

import pytest

from src.data.memory_store import InMemoryProcessStore
from src.engine.classifier import ClassificationPolicy
from src.models.inspection import (
    DamageType,
    InspectionCategory,
    InspectionItem,
    InspectionStatus,
)
from src.models.lease_end import LeaseEndProcess, LeaseType, ProcessStatus

PLAN_START = date(2025, 7, 1)


@pytest.fixture
def policy() -> ClassificationPolicy:
    """Explicit policy so tests do not depend on environment settings."""
    return ClassificationPolicy(
        misuse_keywords=("hole", "burn", "broken"),
        wear_ratio_threshold=Decimal("0.5"),
        default_repair_cost=Decimal("150.00"),
        zone="france",
    )


@pytest.fixture
def exit_inspection() -> list[InspectionItem]:
    """One item per outcome: tenant damage, normal wear, renovation, and an OK room."""
    return [
        InspectionItem(
            category=InspectionCategory.WALL,
            status=InspectionStatus.PROBLEM,
            problem_description="Hole in living room wall",
            quantity=Decimal("10"),
        ),
        InspectionItem(
            category=InspectionCategory.FLOOR,
            status=InspectionStatus.PROBLEM,
            problem_description="Laminate worn in hallway",
            element_age_years=Decimal("6"),
            quantity=Decimal("20"),
        ),
        InspectionItem(
            category=InspectionCategory.KITCHEN,
            status=InspectionStatus.PROBLEM,
            problem_description="Dated cabinet fronts",
            element_age_years=Decimal("2"),
        ),
        InspectionItem(
            category=InspectionCategory.BATHROOM,
            status=InspectionStatus.OK,
        ),
    ]


@pytest.fixture
def make_classified():
    """Build an already-classified problem item."""

    def _make(
        damage_type: DamageType,
        cost: str,
        category: InspectionCategory = InspectionCategory.WALL,
    ) -> InspectionItem:
        return InspectionItem(
            category=category,
            status=InspectionStatus.PROBLEM,
            damage_type=damage_type,
            estimated_cost=Decimal(cost),
        )

    return _make


@pytest.fixture
def process() -> LeaseEndProcess:
    return LeaseEndProcess(
        id="proc-1",
        deposit_amount=Decimal("1000"),
        lease_type=LeaseType.NU,
        lease_end_date=date(2025, 6, 30),
        plan_start_date=PLAN_START,
        status=ProcessStatus.EDL_COMPLETED,
    )


@pytest.fixture
def store(process) -> InMemoryProcessStore:
    return InMemoryProcessStore([process])
