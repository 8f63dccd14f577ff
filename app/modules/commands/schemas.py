from typing import Any
from pydantic import BaseModel, ConfigDict, Field

class CommandResult(BaseModel):
    """Identifiers produced by a write command; ``command_id`` is filled in by the command log."""
    model_config = ConfigDict(populate_by_name=True)

    command_id: int | None = Field(default=None, alias="commandId")
    resource_id: int | None = Field(default=None, alias="resourceId")
    sub_resource_id: int | None = Field(default=None, alias="subResourceId")
    client_id: int | None = Field(default=None, alias="clientId")
    # every id created by a batch; resource_id then holds the last one
    resource_ids: list[int] | None = Field(default=None, alias="resourceIds")
    changes: dict[str, Any] | None = None
