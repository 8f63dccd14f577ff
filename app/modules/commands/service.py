import logging
from typing import Any, Awaitable, Callable
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import transaction
from app.core.security import Principal
from app.modules.commands.models import CommandSource
from app.modules.commands.schemas import CommandResult

log = logging.getLogger("command.source")

Handler = Callable[[], Awaitable[CommandResult]]

class CommandSourceService:
    """Records each write command and runs its handler inside one transaction.

    The command row, every entity the handler touches, and the recorded outcome
    are committed together; any exception rolls all of them back.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def execute(self, principal: Principal, *, action: str, entity: str, href: str,
                      payload: dict[str, Any] | None, handler: Handler) -> CommandResult:
        async with transaction(self.session):
            cmd = CommandSource(
                org_id=principal.org_id,
                maker_id=principal.user_id,
                action_name=action,
                entity_name=entity,
                href=href,
                command_as_json=payload,
            )
            self.session.add(cmd)
            await self.session.flush()

            result = await handler()

            cmd.status = "processed"
            cmd.resource_id = result.resource_id
            cmd.sub_resource_id = result.sub_resource_id
            cmd.client_id = result.client_id
            await self.session.flush()
            result.command_id = cmd.id
        log.info("%s %s processed as command %s (resource=%s)", action, entity, cmd.id, result.resource_id)
        return result
