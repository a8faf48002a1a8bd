"""Provider service - Business logic for provider operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scheduling_assistant.models.provider import Provider


class ProviderService:
    """Service class for provider operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_provider(self, name: str, timezone: str | None = None) -> Provider:
        """Create a new provider."""
        provider = Provider(name=name, timezone=timezone)
        self.db.add(provider)
        await self.db.flush()
        await self.db.refresh(provider)
        return provider

    async def get_provider_by_id(self, provider_id: int) -> Provider | None:
        """Get a provider by ID."""
        return await self.db.get(Provider, provider_id)

    async def list_providers(self) -> list[Provider]:
        """Get all providers, oldest first."""
        result = await self.db.execute(select(Provider).order_by(Provider.id))
        return list(result.scalars().all())
