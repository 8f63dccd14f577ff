from typing import Any
from pydantic import BaseModel, ConfigDict, Field

class ClientCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    display_name: str = Field(..., min_length=1, max_length=200, alias="displayName")
    external_id: str | None = Field(default=None, max_length=100, alias="externalId")
    active: bool = True
    # each element is validated by the address module, one at a time
    address: list[dict[str, Any]] | None = None

class ClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    display_name: str = Field(serialization_alias="displayName")
    external_id: str | None = Field(serialization_alias="externalId")
    active: bool
