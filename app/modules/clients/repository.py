import uuid
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.base import storable_id
from app.modules.clients.models import Client

class ClientRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, org_id: uuid.UUID, **data) -> Client:
        obj = Client(org_id=org_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, org_id: uuid.UUID, client_id: int) -> Client | None:
        if not storable_id(client_id):
            return None
        q = select(Client).where(Client.id == client_id, Client.org_id == org_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_by_external_id(self, org_id: uuid.UUID, external_id: str) -> Client | None:
        q = select(Client).where(Client.external_id == external_id, Client.org_id == org_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()
