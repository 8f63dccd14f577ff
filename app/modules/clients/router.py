from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_principal, require_scopes, Principal
from app.modules.clients.schemas import ClientCreate, ClientOut
from app.modules.clients.service import ClientService
from app.modules.commands.schemas import CommandResult
from app.modules.commands.service import CommandSourceService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> ClientService:
    return ClientService(session)

def commands(session: AsyncSession = Depends(get_session)) -> CommandSourceService:
    return CommandSourceService(session)

@router.post("", response_model=CommandResult, response_model_exclude_none=True,
             dependencies=[Depends(require_scopes("clients:write"))])
async def create_client(
    payload: ClientCreate,
    request: Request,
    principal: Principal = Depends(get_principal),
    service: ClientService = Depends(svc),
    log: CommandSourceService = Depends(commands),
):
    async def handler():
        client, links = await service.create(principal.org_id, payload, principal.user_id)
        return CommandResult(
            resource_id=client.id,
            client_id=client.id,
            resource_ids=[link.id for link in links] or None,
        )
    return await log.execute(principal, action="CREATE", entity="CLIENT", href=request.url.path,
                             payload=payload.model_dump(mode="json", by_alias=True, exclude_unset=True),
                             handler=handler)

@router.get("/{client_id}", response_model=ClientOut, dependencies=[Depends(require_scopes("clients:read"))])
async def get_client(
    client_id: int,
    principal: Principal = Depends(get_principal),
    service: ClientService = Depends(svc),
):
    return await service.get(principal.org_id, client_id)
