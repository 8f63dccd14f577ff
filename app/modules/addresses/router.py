from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_principal, require_scopes, Principal
from app.core.errors import ClientNotFound, ValidationError
from app.modules.addresses.models import ClientAddress
from app.modules.addresses.schemas import AddressCreate, AddressUpdate, BulkAddressAttach, ClientAddressOut
from app.modules.addresses.service import ClientAddressService
from app.modules.clients.repository import ClientRepository
from app.modules.commands.schemas import CommandResult
from app.modules.commands.service import CommandSourceService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> ClientAddressService:
    return ClientAddressService(session)

def commands(session: AsyncSession = Depends(get_session)) -> CommandSourceService:
    return CommandSourceService(session)

def _out(link: ClientAddress) -> dict:
    address = link.address
    return {
        "client_id": link.client_id,
        "address_id": link.address_id,
        "address_type_id": link.address_type_id,
        "is_active": link.is_active,
        **{col: getattr(address, col) for col in ClientAddressOut.model_fields
           if col not in ("client_id", "address_id", "address_type_id", "is_active")},
    }

@router.get("/clients/{client_id}/addresses", response_model=list[ClientAddressOut],
            dependencies=[Depends(require_scopes("clients:read"))])
async def list_client_addresses(
    client_id: int,
    status: bool | None = Query(default=None, description="true: active only, false: inactive only"),
    principal: Principal = Depends(get_principal),
    service: ClientAddressService = Depends(svc),
):
    links = await service.list_for_client(principal.org_id, client_id, status)
    return [_out(link) for link in links]

@router.get("/clients/{client_id}/addresses/{address_id}", response_model=ClientAddressOut,
            dependencies=[Depends(require_scopes("clients:read"))])
async def get_client_address(
    client_id: int,
    address_id: int,
    principal: Principal = Depends(get_principal),
    service: ClientAddressService = Depends(svc),
):
    link = await service.get(principal.org_id, client_id, address_id)
    return _out(link)

@router.post("/clients/{client_id}/addresses", response_model=CommandResult, response_model_exclude_none=True,
             dependencies=[Depends(require_scopes("clients:write"))])
async def add_client_address(
    client_id: int,
    payload: AddressCreate,
    request: Request,
    address_type: str | None = Query(default=None, alias="type", description="address type code value id or label"),
    principal: Principal = Depends(get_principal),
    service: ClientAddressService = Depends(svc),
    log: CommandSourceService = Depends(commands),
):
    type_token = address_type if address_type is not None else payload.address_type_id
    if type_token is None:
        raise ValidationError([{"field": "type", "message": "Field required"}])

    async def handler():
        link, address = await service.attach(principal.org_id, client_id, type_token, payload, principal.user_id)
        return CommandResult(resource_id=link.id, sub_resource_id=address.id, client_id=client_id)
    return await log.execute(principal, action="CREATE", entity="ADDRESS", href=request.url.path,
                             payload=payload.model_dump(mode="json", by_alias=True, exclude_unset=True),
                             handler=handler)

@router.post("/clients/{client_id}/addresses/bulk", response_model=CommandResult, response_model_exclude_none=True,
             dependencies=[Depends(require_scopes("clients:write"))])
async def add_client_addresses(
    client_id: int,
    payload: BulkAddressAttach,
    request: Request,
    principal: Principal = Depends(get_principal),
    service: ClientAddressService = Depends(svc),
    session: AsyncSession = Depends(get_session),
    log: CommandSourceService = Depends(commands),
):
    async def handler():
        client = await ClientRepository(session).get(principal.org_id, client_id)
        if client is None:
            raise ClientNotFound(client_id)
        links = await service.attach_bulk(principal.org_id, client, payload.address, principal.user_id)
        ids = [link.id for link in links]
        return CommandResult(resource_id=ids[-1], resource_ids=ids, client_id=client_id)
    return await log.execute(principal, action="CREATE", entity="ADDRESS", href=request.url.path,
                             payload=payload.model_dump(mode="json"), handler=handler)

@router.put("/clients/{client_id}/addresses", response_model=CommandResult, response_model_exclude_none=True,
            dependencies=[Depends(require_scopes("clients:write"))])
async def update_client_address(
    client_id: int,
    payload: AddressUpdate,
    request: Request,
    principal: Principal = Depends(get_principal),
    service: ClientAddressService = Depends(svc),
    log: CommandSourceService = Depends(commands),
):
    async def handler():
        link, changes = await service.update(principal.org_id, client_id, payload, principal.user_id)
        return CommandResult(resource_id=link.id, sub_resource_id=link.address_id, client_id=client_id, changes=changes)
    return await log.execute(principal, action="UPDATE", entity="ADDRESS", href=request.url.path,
                             payload=payload.model_dump(mode="json", by_alias=True, exclude_unset=True),
                             handler=handler)

@router.delete("/clients/{client_id}/addresses/{address_id}", response_model=CommandResult,
               response_model_exclude_none=True, dependencies=[Depends(require_scopes("clients:write"))])
async def delete_client_address(
    client_id: int,
    address_id: int,
    request: Request,
    principal: Principal = Depends(get_principal),
    service: ClientAddressService = Depends(svc),
    log: CommandSourceService = Depends(commands),
):
    async def handler():
        address = await service.detach(principal.org_id, client_id, address_id)
        return CommandResult(resource_id=address.id, client_id=client_id)
    return await log.execute(principal, action="DELETE", entity="ADDRESS", href=request.url.path,
                             payload=None, handler=handler)
