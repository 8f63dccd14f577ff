from pydantic import BaseModel, ConfigDict, Field

class CodeCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)

class CodeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    system_defined: bool = Field(serialization_alias="systemDefined")

class CodeValueCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    position: int = Field(default=0, ge=0)
    description: str | None = Field(default=None, max_length=500)
    is_mandatory: bool = Field(default=False, alias="isMandatory")
    is_active: bool = Field(default=True, alias="isActive")

class CodeValueUpdate(BaseModel):
    """Partial update; only keys sent by the caller are applied."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    position: int | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=500)
    is_mandatory: bool | None = Field(default=None, alias="isMandatory")
    is_active: bool | None = Field(default=None, alias="isActive")

class CodeValueOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str = Field(validation_alias="label")
    position: int
    is_mandatory: bool = Field(serialization_alias="isMandatory")
    description: str | None
    active: bool
