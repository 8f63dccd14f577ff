import uuid
import logging
from typing import Any, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.dates import tenant_today
from app.core.errors import AddressNotFound, ClientNotFound, ValidationError
from app.modules.addresses.models import Address, ClientAddress
from app.modules.addresses.repository import AddressRepository, ClientAddressRepository
from app.modules.addresses.schemas import AddressCreate, AddressUpdate, validate_for_create
from app.modules.clients.models import Client
from app.modules.clients.repository import ClientRepository
from app.modules.codes.models import CodeValue
from app.modules.codes.resolver import ReferenceResolver

logger = logging.getLogger(__name__)

# overwritten only when sent with a non-blank value
TEXT_ATTRS = ("street", "address_line_1", "address_line_2", "address_line_3",
              "town_village", "city", "county_district", "postal_code")
DECIMAL_ATTRS = ("latitude", "longitude")
# code value references: (payload field, column, code name setting)
REFERENCE_ATTRS = (
    ("state_province_id", "state_province_id", "STATE_CODE_NAME"),
    ("country_id", "country_id", "COUNTRY_CODE_NAME"),
)

def _reported(payload: Any, field: str) -> str:
    return type(payload).model_fields[field].alias or field


class AddressRecordManager:
    """Creates and partially updates standalone Address rows."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = AddressRepository(session)

    async def create(self, org_id: uuid.UUID, payload: AddressCreate,
                     state: CodeValue | None = None, country: CodeValue | None = None,
                     actor: uuid.UUID | None = None) -> Address:
        today = tenant_today(org_id)
        data = {attr: getattr(payload, attr) for attr in TEXT_ATTRS + DECIMAL_ATTRS}
        obj = await self.repo.create(
            org_id,
            **data,
            state_province_id=state.id if state else None,
            country_id=country.id if country else None,
            created_on=today,
            updated_on=today,
            created_by=actor,
            updated_by=actor,
        )
        logger.info(f"Created address {obj.id}")
        return obj

    async def update(self, org_id: uuid.UUID, address: Address, payload: AddressUpdate,
                     actor: uuid.UUID | None = None) -> dict:
        """Apply the fields present in ``payload``; returns what actually changed.

        Nothing is written when no value differs from what is stored.
        """
        sent = payload.model_fields_set
        changes: dict = {}

        for attr in TEXT_ATTRS:
            if attr not in sent:
                continue
            value = getattr(payload, attr)
            if value != getattr(address, attr):
                setattr(address, attr, value)
                changes[_reported(payload, attr)] = value

        resolver = ReferenceResolver(self.session, org_id)
        for field, column, code_setting in REFERENCE_ATTRS:
            token = getattr(payload, field)
            if field not in sent or token is None:
                continue
            ref = await resolver.resolve(token, getattr(settings, code_setting))
            if ref.id != getattr(address, column):
                setattr(address, column, ref.id)
                changes[_reported(payload, field)] = ref.id

        for attr in DECIMAL_ATTRS:
            value = getattr(payload, attr)
            if attr not in sent or value is None:
                continue
            if value != getattr(address, attr):
                setattr(address, attr, value)
                changes[attr] = str(value)

        if changes:
            address.updated_on = tenant_today(org_id)
            address.updated_by = actor
            await self.repo.save(address)
            logger.info(f"Updated address {address.id}: {sorted(changes)}")
        return changes


class ClientAddressService:
    """Links addresses to clients and keeps the Address/ClientAddress pair consistent."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.addresses = AddressRecordManager(session)
        self.repo = ClientAddressRepository(session)
        self.clients = ClientRepository(session)

    async def _references(self, org_id: uuid.UUID, payload: AddressCreate, type_token: Any):
        resolver = ReferenceResolver(self.session, org_id)
        state = await resolver.resolve_optional(payload.state_province_id, settings.STATE_CODE_NAME)
        country = await resolver.resolve_optional(payload.country_id, settings.COUNTRY_CODE_NAME)
        address_type = await resolver.resolve(type_token, settings.ADDRESS_TYPE_CODE_NAME)
        return state, country, address_type

    async def attach(self, org_id: uuid.UUID, client_id: int, type_token: Any,
                     payload: AddressCreate, actor: uuid.UUID | None = None) -> tuple[ClientAddress, Address]:
        state, country, address_type = await self._references(org_id, payload, type_token)
        address = await self.addresses.create(org_id, payload, state, country, actor)

        client = await self.clients.get(org_id, client_id)
        if client is None:
            raise ClientNotFound(client_id)

        link = await self.repo.create(
            org_id,
            client_id=client.id,
            address=address,
            address_type_id=address_type.id,
            is_active=bool(payload.is_active),
        )
        logger.info(f"Attached address {address.id} to client {client.id} as {link.id}")
        return link, address

    async def attach_bulk(self, org_id: uuid.UUID, client: Client, items: Sequence[dict],
                          actor: uuid.UUID | None = None) -> list[ClientAddress]:
        """Attach every address in ``items`` to ``client``.

        Each element is validated on its own; the first invalid element raises
        and the caller's transaction discards whatever was already flushed.
        """
        links: list[ClientAddress] = []
        for index, item in enumerate(items):
            payload = validate_for_create(item, index)
            if payload.address_type_id is None:
                raise ValidationError(
                    [{"field": "addressTypeId", "message": "Field required", "index": index}],
                    message=f"Validation errors exist in address {index}.",
                )
            state, country, address_type = await self._references(org_id, payload, payload.address_type_id)
            address = await self.addresses.create(org_id, payload, state, country, actor)
            links.append(await self.repo.create(
                org_id,
                client_id=client.id,
                address=address,
                address_type_id=address_type.id,
                is_active=bool(payload.is_active),
            ))
        logger.info(f"Attached {len(links)} addresses to client {client.id}")
        return links

    async def update(self, org_id: uuid.UUID, client_id: int, payload: AddressUpdate,
                     actor: uuid.UUID | None = None) -> tuple[ClientAddress, dict]:
        link = await self.repo.find_by_client_and_address(org_id, client_id, payload.address_id)
        if link is None:
            raise AddressNotFound(client_id, payload.address_id)

        changes = await self.addresses.update(org_id, link.address, payload, actor)

        if "is_active" in payload.model_fields_set and payload.is_active is not None:
            if link.is_active != payload.is_active:
                link.is_active = payload.is_active
                changes["isActive"] = payload.is_active
                await self.session.flush()
        return link, changes

    async def detach(self, org_id: uuid.UUID, client_id: int, address_id: int) -> Address:
        """Delete the client's address identified by its Address id, association included."""
        link = await self.get(org_id, client_id, address_id)
        address = link.address
        await self.session.delete(link)
        await self.addresses.repo.delete(address)
        logger.info(f"Detached and deleted address {address_id} from client {client_id}")
        return address

    async def get(self, org_id: uuid.UUID, client_id: int, address_id: int) -> ClientAddress:
        """The client's association for an Address id, with the address loaded."""
        link = await self.repo.find_by_client_and_address(org_id, client_id, address_id)
        if link is None:
            raise AddressNotFound(client_id, address_id)
        return link

    async def list_for_client(self, org_id: uuid.UUID, client_id: int,
                              is_active: bool | None = None) -> Sequence[ClientAddress]:
        if await self.clients.get(org_id, client_id) is None:
            raise ClientNotFound(client_id)
        return await self.repo.list_for_client(org_id, client_id, is_active)
