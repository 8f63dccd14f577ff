import uuid
import logging
from typing import Any
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import ReferenceNotFound
from app.modules.codes.models import CodeValue
from app.modules.codes.repository import CodeValueRepository

logger = logging.getLogger(__name__)

def parse_numeric_id(token: Any) -> int | None:
    """Return ``token`` as an id when it is a plain non-negative integer, else None."""
    if isinstance(token, bool):
        return None
    if isinstance(token, int):
        return token if token >= 0 else None
    text = str(token).strip()
    if text.isascii() and text.isdigit():
        return int(text)
    return None

class ReferenceResolver:
    """Turns a code value token (numeric id or label) into the CodeValue it names."""

    def __init__(self, session: AsyncSession, org_id: uuid.UUID):
        self.org_id = org_id
        self.values = CodeValueRepository(session)

    async def resolve(self, token: Any, code_name: str | None = None) -> CodeValue:
        value_id = parse_numeric_id(token)
        if value_id is not None:
            obj = await self.values.get(self.org_id, value_id, code_name=code_name)
            if obj is None:
                logger.warning("Unresolved code value id %s (code=%s)", value_id, code_name)
                raise ReferenceNotFound(value_id, code_name)
            return obj

        label = str(token)
        obj = await self.values.find_by_label(self.org_id, label, code_name=code_name)
        if obj is None:
            logger.warning("Unresolved code value label %r (code=%s)", label, code_name)
            raise ReferenceNotFound(label, code_name)
        return obj

    async def resolve_optional(self, token: Any, code_name: str | None = None) -> CodeValue | None:
        if token is None:
            return None
        return await self.resolve(token, code_name)
