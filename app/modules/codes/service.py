import uuid
import logging
from typing import Sequence
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import CodeNotFound, CodeValueNotFound, IntegrityConflict
from app.modules.codes.models import Code, CodeValue
from app.modules.codes.repository import CodeRepository, CodeValueRepository
from app.modules.codes.resolver import parse_numeric_id
from app.modules.codes.schemas import CodeCreate, CodeValueCreate, CodeValueUpdate

logger = logging.getLogger(__name__)

# payload field -> (column, name reported in changes)
_VALUE_FIELDS = {
    "name": ("label", "name"),
    "position": ("position", "position"),
    "description": ("description", "description"),
    "is_mandatory": ("is_mandatory", "isMandatory"),
    "is_active": ("active", "isActive"),
}
_NULLABLE = {"description"}

class CodeService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = CodeRepository(session)

    async def list(self, org_id: uuid.UUID) -> Sequence[Code]:
        return await self.repo.list_codes(org_id)

    async def get(self, org_id: uuid.UUID, code_id: int) -> Code:
        obj = await self.repo.get_code(org_id, code_id)
        if obj is None:
            raise CodeNotFound(code_id)
        return obj

    async def create(self, org_id: uuid.UUID, payload: CodeCreate) -> Code:
        if await self.repo.get_code_by_name(org_id, payload.name):
            raise IntegrityConflict(f"Code with name {payload.name} already exists",
                                    code="error.msg.code.duplicate.name")
        obj = await self.repo.create_code(org_id, payload.name)
        logger.info(f"Created code {obj.id} ({obj.name})")
        return obj

    async def delete(self, org_id: uuid.UUID, code_id: int) -> Code:
        obj = await self.get(org_id, code_id)
        if obj.system_defined:
            raise IntegrityConflict(f"Code {obj.name} is system defined and cannot be deleted",
                                    code="error.msg.code.systemdefined")
        if await CodeValueRepository(self.session).count_for_code(obj.id):
            raise IntegrityConflict(f"Code {obj.name} still has code values",
                                    code="error.msg.code.has.values")
        await self.repo.delete_code(obj)
        logger.info(f"Deleted code {code_id}")
        return obj


class CodeValueService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.codes = CodeRepository(session)
        self.repo = CodeValueRepository(session)

    async def _code(self, org_id: uuid.UUID, code_id: int) -> Code:
        code = await self.codes.get_code(org_id, code_id)
        if code is None:
            raise CodeNotFound(code_id)
        return code

    async def list_by_code(self, org_id: uuid.UUID, code_id: int, by_name: bool = False) -> Sequence[CodeValue]:
        await self._code(org_id, code_id)
        return await self.repo.list_by_code(org_id, code_id, by_name=by_name)

    async def get(self, org_id: uuid.UUID, code_id: int, token: str) -> CodeValue:
        """Look up by numeric id first, then by label, both within the code."""
        value_id = parse_numeric_id(token)
        if value_id is not None:
            obj = await self.repo.get(org_id, value_id, code_id=code_id)
            if obj is None:
                raise CodeValueNotFound(value_id, code_id)
            return obj
        obj = await self.repo.find_by_label(org_id, token, code_id=code_id)
        if obj is None:
            raise CodeValueNotFound(token, code_id)
        return obj

    async def create(self, org_id: uuid.UUID, code_id: int, payload: CodeValueCreate) -> CodeValue:
        code = await self._code(org_id, code_id)
        if await self.repo.label_taken(code.id, payload.name):
            raise IntegrityConflict(f"Code value with label {payload.name} already exists for code {code.name}",
                                    code="error.msg.codevalue.duplicate.label")
        try:
            obj = await self.repo.create(
                org_id, code.id,
                label=payload.name,
                position=payload.position,
                description=payload.description,
                is_mandatory=payload.is_mandatory,
                active=payload.is_active,
            )
        except IntegrityError as e:
            raise IntegrityConflict("Code value could not be created", details={"cause": str(e.orig)}) from e
        logger.info(f"Created code value {obj.id} ({obj.label}) under code {code.id}")
        return obj

    async def update(self, org_id: uuid.UUID, code_id: int, value_id: int,
                     payload: CodeValueUpdate) -> tuple[CodeValue, dict]:
        await self._code(org_id, code_id)
        obj = await self.repo.get(org_id, value_id, code_id=code_id)
        if obj is None:
            raise CodeValueNotFound(value_id, code_id)

        changes: dict = {}
        updates: dict = {}
        for key, value in payload.model_dump(exclude_unset=True).items():
            if value is None and key not in _NULLABLE:
                continue
            column, reported = _VALUE_FIELDS[key]
            if getattr(obj, column) != value:
                updates[column] = value
                changes[reported] = value

        if "name" in changes and await self.repo.label_taken(code_id, changes["name"], exclude_id=obj.id):
            raise IntegrityConflict(f"Code value with label {changes['name']} already exists",
                                    code="error.msg.codevalue.duplicate.label")

        if changes:
            for column, value in updates.items():
                setattr(obj, column, value)
            await self.session.flush()
            logger.info(f"Updated code value {obj.id}: {sorted(changes)}")
        return obj, changes

    async def delete(self, org_id: uuid.UUID, code_id: int, value_id: int) -> CodeValue:
        await self._code(org_id, code_id)
        obj = await self.repo.get(org_id, value_id, code_id=code_id)
        if obj is None:
            raise CodeValueNotFound(value_id, code_id)
        try:
            await self.repo.delete(obj)
        except IntegrityError as e:
            raise IntegrityConflict(
                f"Code value {value_id} is still referenced and cannot be deleted",
                code="error.msg.codevalue.in.use",
                details={"codeValueId": value_id},
            ) from e
        logger.info(f"Deleted code value {value_id} from code {code_id}")
        return obj
