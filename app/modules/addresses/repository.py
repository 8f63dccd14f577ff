import uuid
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.orm import joinedload
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.base import storable_id
from app.modules.addresses.models import Address, ClientAddress

class AddressRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, org_id: uuid.UUID, **data) -> Address:
        obj = Address(org_id=org_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def save(self, obj: Address) -> Address:
        await self.session.flush()
        return obj

    async def delete(self, obj: Address) -> None:
        await self.session.delete(obj)
        await self.session.flush()


class ClientAddressRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, org_id: uuid.UUID, *, client_id: int, address: Address,
                     address_type_id: int, is_active: bool) -> ClientAddress:
        obj = ClientAddress(
            org_id=org_id,
            client_id=client_id,
            address_id=address.id,
            address_type_id=address_type_id,
            is_active=is_active,
        )
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def find_by_client_and_address(self, org_id: uuid.UUID, client_id: int,
                                         address_id: int) -> ClientAddress | None:
        if not (storable_id(client_id) and storable_id(address_id)):
            return None
        q = (
            select(ClientAddress)
            .options(joinedload(ClientAddress.address))
            .where(
                ClientAddress.org_id == org_id,
                ClientAddress.client_id == client_id,
                ClientAddress.address_id == address_id,
            )
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list_for_client(self, org_id: uuid.UUID, client_id: int,
                              is_active: bool | None = None) -> Sequence[ClientAddress]:
        q = (
            select(ClientAddress)
            .options(joinedload(ClientAddress.address))
            .where(ClientAddress.org_id == org_id, ClientAddress.client_id == client_id)
            .order_by(ClientAddress.id)
        )
        if is_active is not None:
            q = q.where(ClientAddress.is_active.is_(is_active))
        res = await self.session.execute(q)
        return res.scalars().all()
