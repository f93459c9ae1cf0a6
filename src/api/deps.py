"""FastAPI dependency injection."""

from fastapi import Depends, Request

from src.data.base import ProcessRepository
from src.data.coordinator import LeaseEndCoordinator
from src.engine.classifier import ClassificationPolicy
from src.config import settings


def get_policy() -> ClassificationPolicy:
    return ClassificationPolicy.from_settings(settings)


def get_store(request: Request) -> ProcessRepository:
    return request.app.state.process_store


def get_coordinator(
    store: ProcessRepository = Depends(get_store),
    policy: ClassificationPolicy = Depends(get_policy),
) -> LeaseEndCoordinator:
    return LeaseEndCoordinator(store, policy=policy, strict_transitions=settings.strict_transitions)
