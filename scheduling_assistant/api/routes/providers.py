"""Provider routes - API endpoints for provider operations."""

from fastapi import APIRouter

from scheduling_assistant.api.deps import DBSession
from scheduling_assistant.exceptions import NotFoundError
from scheduling_assistant.schemas.provider import ProviderResponse
from scheduling_assistant.services.provider_service import ProviderService

router = APIRouter()


@router.get("", response_model=list[ProviderResponse])
async def list_providers(db: DBSession):
    """Get all providers."""
    service = ProviderService(db)
    return await service.list_providers()


@router.get("/{provider_id}", response_model=ProviderResponse)
async def get_provider(provider_id: int, db: DBSession):
    """Get a provider by ID."""
    service = ProviderService(db)
    provider = await service.get_provider_by_id(provider_id)

    if not provider:
        raise NotFoundError("Provider not found", details={"provider_id": provider_id})

    return provider
