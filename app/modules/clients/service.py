import uuid
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import ClientNotFound, IntegrityConflict
from app.modules.addresses.models import ClientAddress
from app.modules.addresses.service import ClientAddressService
from app.modules.clients.models import Client
from app.modules.clients.repository import ClientRepository
from app.modules.clients.schemas import ClientCreate

logger = logging.getLogger(__name__)

class ClientService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = ClientRepository(session)
        self.addresses = ClientAddressService(session)

    async def create(self, org_id: uuid.UUID, payload: ClientCreate,
                     actor: uuid.UUID | None = None) -> tuple[Client, list[ClientAddress]]:
        if payload.external_id and await self.repo.get_by_external_id(org_id, payload.external_id):
            raise IntegrityConflict(f"Client with external id {payload.external_id} already exists",
                                    code="error.msg.client.duplicate.externalId")
        client = await self.repo.create(
            org_id,
            display_name=payload.display_name,
            external_id=payload.external_id,
            active=payload.active,
        )
        links: list[ClientAddress] = []
        if payload.address:
            links = await self.addresses.attach_bulk(org_id, client, payload.address, actor)
        logger.info(f"Created client {client.id} with {len(links)} addresses")
        return client, links

    async def get(self, org_id: uuid.UUID, client_id: int) -> Client:
        obj = await self.repo.get(org_id, client_id)
        if obj is None:
            raise ClientNotFound(client_id)
        return obj
