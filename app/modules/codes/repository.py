import uuid
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.base import storable_id
from app.modules.codes.models import Code, CodeValue

class CodeRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_code(self, org_id: uuid.UUID, name: str, system_defined: bool = False) -> Code:
        obj = Code(org_id=org_id, name=name, system_defined=system_defined)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get_code(self, org_id: uuid.UUID, code_id: int) -> Code | None:
        if not storable_id(code_id):
            return None
        q = select(Code).where(Code.id == code_id, Code.org_id == org_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def get_code_by_name(self, org_id: uuid.UUID, name: str) -> Code | None:
        q = select(Code).where(Code.name == name, Code.org_id == org_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list_codes(self, org_id: uuid.UUID) -> Sequence[Code]:
        q = select(Code).where(Code.org_id == org_id).order_by(Code.name)
        res = await self.session.execute(q)
        return res.scalars().all()

    async def delete_code(self, obj: Code) -> None:
        await self.session.delete(obj)
        await self.session.flush()


class CodeValueRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, org_id: uuid.UUID, code_id: int, **data) -> CodeValue:
        obj = CodeValue(org_id=org_id, code_id=code_id, **data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, org_id: uuid.UUID, value_id: int, *,
                  code_id: int | None = None, code_name: str | None = None) -> CodeValue | None:
        if not storable_id(value_id):
            return None
        q = select(CodeValue).where(CodeValue.id == value_id, CodeValue.org_id == org_id)
        if code_id is not None:
            q = q.where(CodeValue.code_id == code_id)
        if code_name is not None:
            q = q.join(Code, Code.id == CodeValue.code_id).where(Code.name == code_name)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def find_by_label(self, org_id: uuid.UUID, label: str, *,
                            code_id: int | None = None, code_name: str | None = None) -> CodeValue | None:
        q = select(CodeValue).where(CodeValue.label == label, CodeValue.org_id == org_id)
        if code_id is not None:
            q = q.where(CodeValue.code_id == code_id)
        if code_name is not None:
            q = q.join(Code, Code.id == CodeValue.code_id).where(Code.name == code_name)
        # labels are only unique per code; unscoped lookups take the oldest row
        q = q.order_by(CodeValue.id).limit(1)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list_by_code(self, org_id: uuid.UUID, code_id: int, by_name: bool = False) -> Sequence[CodeValue]:
        q = select(CodeValue).where(CodeValue.org_id == org_id, CodeValue.code_id == code_id)
        if by_name:
            q = q.order_by(CodeValue.label)
        else:
            q = q.order_by(CodeValue.position, CodeValue.id)
        res = await self.session.execute(q)
        return res.scalars().all()

    async def label_taken(self, code_id: int, label: str, exclude_id: int | None = None) -> bool:
        q = select(CodeValue.id).where(CodeValue.code_id == code_id, CodeValue.label == label)
        if exclude_id is not None:
            q = q.where(CodeValue.id != exclude_id)
        res = await self.session.execute(q.limit(1))
        return res.scalar_one_or_none() is not None

    async def count_for_code(self, code_id: int) -> int:
        res = await self.session.execute(select(CodeValue.id).where(CodeValue.code_id == code_id))
        return len(res.scalars().all())

    async def delete(self, obj: CodeValue) -> None:
        await self.session.delete(obj)
        await self.session.flush()
