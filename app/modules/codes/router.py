from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_principal, require_scopes, Principal
from app.modules.codes.schemas import CodeCreate, CodeOut, CodeValueCreate, CodeValueUpdate, CodeValueOut
from app.modules.codes.service import CodeService, CodeValueService
from app.modules.commands.schemas import CommandResult
from app.modules.commands.service import CommandSourceService

router = APIRouter()

def code_svc(session: AsyncSession = Depends(get_session)) -> CodeService:
    return CodeService(session)

def value_svc(session: AsyncSession = Depends(get_session)) -> CodeValueService:
    return CodeValueService(session)

def commands(session: AsyncSession = Depends(get_session)) -> CommandSourceService:
    return CommandSourceService(session)

# ---- Codes ----

@router.get("/codes", response_model=list[CodeOut], dependencies=[Depends(require_scopes("codes:read"))])
async def list_codes(principal: Principal = Depends(get_principal), service: CodeService = Depends(code_svc)):
    return await service.list(principal.org_id)

@router.get("/codes/{code_id}", response_model=CodeOut, dependencies=[Depends(require_scopes("codes:read"))])
async def get_code(code_id: int, principal: Principal = Depends(get_principal), service: CodeService = Depends(code_svc)):
    return await service.get(principal.org_id, code_id)

@router.post("/codes", response_model=CommandResult, response_model_exclude_none=True,
             dependencies=[Depends(require_scopes("codes:write"))])
async def create_code(
    payload: CodeCreate,
    request: Request,
    principal: Principal = Depends(get_principal),
    service: CodeService = Depends(code_svc),
    log: CommandSourceService = Depends(commands),
):
    async def handler():
        obj = await service.create(principal.org_id, payload)
        return CommandResult(resource_id=obj.id)
    return await log.execute(principal, action="CREATE", entity="CODE", href=request.url.path,
                             payload=payload.model_dump(mode="json"), handler=handler)

@router.delete("/codes/{code_id}", response_model=CommandResult, response_model_exclude_none=True,
               dependencies=[Depends(require_scopes("codes:write"))])
async def delete_code(
    code_id: int,
    request: Request,
    principal: Principal = Depends(get_principal),
    service: CodeService = Depends(code_svc),
    log: CommandSourceService = Depends(commands),
):
    async def handler():
        obj = await service.delete(principal.org_id, code_id)
        return CommandResult(resource_id=obj.id)
    return await log.execute(principal, action="DELETE", entity="CODE", href=request.url.path,
                             payload=None, handler=handler)

# ---- Code values ----

@router.get("/codes/{code_id}/codevalues", response_model=list[CodeValueOut],
            dependencies=[Depends(require_scopes("codes:read"))])
async def list_code_values(
    code_id: int,
    byName: bool = False,
    principal: Principal = Depends(get_principal),
    service: CodeValueService = Depends(value_svc),
):
    return await service.list_by_code(principal.org_id, code_id, by_name=byName)

@router.get("/codes/{code_id}/codevalues/{code_value}", response_model=CodeValueOut,
            dependencies=[Depends(require_scopes("codes:read"))])
async def get_code_value(
    code_id: int,
    code_value: str,
    principal: Principal = Depends(get_principal),
    service: CodeValueService = Depends(value_svc),
):
    # numeric id or label
    return await service.get(principal.org_id, code_id, code_value)

@router.post("/codes/{code_id}/codevalues", response_model=CommandResult, response_model_exclude_none=True,
             dependencies=[Depends(require_scopes("codes:write"))])
async def create_code_value(
    code_id: int,
    payload: CodeValueCreate,
    request: Request,
    principal: Principal = Depends(get_principal),
    service: CodeValueService = Depends(value_svc),
    log: CommandSourceService = Depends(commands),
):
    async def handler():
        obj = await service.create(principal.org_id, code_id, payload)
        return CommandResult(resource_id=obj.id)
    return await log.execute(principal, action="CREATE", entity="CODEVALUE", href=request.url.path,
                             payload=payload.model_dump(mode="json", by_alias=True), handler=handler)

@router.put("/codes/{code_id}/codevalues/{code_value_id}", response_model=CommandResult,
            response_model_exclude_none=True, dependencies=[Depends(require_scopes("codes:write"))])
async def update_code_value(
    code_id: int,
    code_value_id: int,
    payload: CodeValueUpdate,
    request: Request,
    principal: Principal = Depends(get_principal),
    service: CodeValueService = Depends(value_svc),
    log: CommandSourceService = Depends(commands),
):
    async def handler():
        obj, changes = await service.update(principal.org_id, code_id, code_value_id, payload)
        return CommandResult(resource_id=obj.id, changes=changes)
    return await log.execute(principal, action="UPDATE", entity="CODEVALUE", href=request.url.path,
                             payload=payload.model_dump(mode="json", by_alias=True, exclude_unset=True),
                             handler=handler)

@router.delete("/codes/{code_id}/codevalues/{code_value_id}", response_model=CommandResult,
               response_model_exclude_none=True, dependencies=[Depends(require_scopes("codes:write"))])
async def delete_code_value(
    code_id: int,
    code_value_id: int,
    request: Request,
    principal: Principal = Depends(get_principal),
    service: CodeValueService = Depends(value_svc),
    log: CommandSourceService = Depends(commands),
):
    async def handler():
        obj = await service.delete(principal.org_id, code_id, code_value_id)
        return CommandResult(resource_id=obj.id)
    return await log.execute(principal, action="DELETE", entity="CODEVALUE", href=request.url.path,
                             payload=None, handler=handler)
