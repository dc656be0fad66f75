"""
FastAPI dependencies shared by the routers.
"""

from uuid import UUID

from fastapi import Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_pipeline.core.config import settings
from hiring_pipeline.db.session import get_db
from hiring_pipeline.errors import AppError
from hiring_pipeline.repositories.pipeline_repository import PipelineRepository
from hiring_pipeline.repositories.pipeline_store import PipelineStore
from hiring_pipeline.services.candidate_locks import CandidateLockRegistry
from hiring_pipeline.services.pipeline_service import PipelineService
from hiring_pipeline.services.status_transition_service import StatusTransitionService

__all__ = [
    "get_db",
    "get_tenant_id",
    "get_pipeline_store",
    "get_transition_locks",
    "get_pipeline_service",
    "get_transition_service",
]

# One registry per process so every request for a candidate shares its lock
_transition_locks = CandidateLockRegistry(timeout=settings.TRANSITION_LOCK_TIMEOUT_SECONDS)


async def get_tenant_id(x_tenant_id: str = Header(...)) -> UUID:
    """Tenant from the X-Tenant-ID header."""
    try:
        return UUID(x_tenant_id)
    except ValueError:
        raise AppError(
            status.HTTP_400_BAD_REQUEST,
            "invalid_tenant",
            "X-Tenant-ID must be a UUID",
        ) from None


def get_pipeline_store(db: AsyncSession = Depends(get_db)) -> PipelineStore:
    return PipelineRepository(db)


def get_transition_locks() -> CandidateLockRegistry:
    return _transition_locks


def get_pipeline_service(store: PipelineStore = Depends(get_pipeline_store)) -> PipelineService:
    return PipelineService(store)


def get_transition_service(
    store: PipelineStore = Depends(get_pipeline_store),
    locks: CandidateLockRegistry = Depends(get_transition_locks),
) -> StatusTransitionService:
    return StatusTransitionService(store, locks)
