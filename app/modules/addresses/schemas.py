from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from app.core.errors import ValidationError

TEXT_FIELDS = ("street", "addressLine1", "addressLine2", "addressLine3",
               "townVillage", "city", "countyDistrict", "postalCode")

_TEXT_KEYS = set(TEXT_FIELDS) | {"address_line_1", "address_line_2", "address_line_3",
                                 "town_village", "county_district", "postal_code"}

CodeToken = int | str

# scale of the latitude / longitude Numeric columns
COORDINATE_STEP = Decimal("0.00000001")

class _AddressFields(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    street: str | None = Field(default=None, max_length=100)
    address_line_1: str | None = Field(default=None, max_length=100, alias="addressLine1")
    address_line_2: str | None = Field(default=None, max_length=100, alias="addressLine2")
    address_line_3: str | None = Field(default=None, max_length=100, alias="addressLine3")
    town_village: str | None = Field(default=None, max_length=100, alias="townVillage")
    city: str | None = Field(default=None, max_length=100)
    county_district: str | None = Field(default=None, max_length=100, alias="countyDistrict")
    postal_code: str | None = Field(default=None, max_length=20, alias="postalCode")
    latitude: Decimal | None = Field(default=None, ge=-90, le=90)
    longitude: Decimal | None = Field(default=None, ge=-180, le=180)
    state_province_id: CodeToken | None = Field(default=None, alias="stateProvinceId")
    country_id: CodeToken | None = Field(default=None, alias="countryId")
    is_active: bool | None = Field(default=None, alias="isActive")

    @model_validator(mode="before")
    @classmethod
    def _blank_means_absent(cls, data: Any) -> Any:
        # A blank or null text field is treated as if the key had not been sent,
        # so it never shows up in model_fields_set.
        if not isinstance(data, dict):
            return data
        return {
            k: v for k, v in data.items()
            if not (k in _TEXT_KEYS and (v is None or (isinstance(v, str) and not v.strip())))
        }

    @field_validator("latitude", "longitude")
    @classmethod
    def _to_column_scale(cls, v: Decimal | None) -> Decimal | None:
        # rounded as the database rounds, so a resent coordinate equals the stored one
        if v is None:
            return v
        return v.quantize(COORDINATE_STEP, rounding=ROUND_HALF_UP)

class AddressCreate(_AddressFields):
    address_type_id: CodeToken | None = Field(default=None, alias="addressTypeId")

class AddressUpdate(_AddressFields):
    address_id: int = Field(..., alias="addressId")

class BulkAddressAttach(BaseModel):
    model_config = ConfigDict(extra="forbid")

    address: list[dict[str, Any]] = Field(..., min_length=1)

class ClientAddressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    client_id: int = Field(serialization_alias="clientId")
    address_id: int = Field(serialization_alias="addressId")
    address_type_id: int = Field(serialization_alias="addressTypeId")
    is_active: bool = Field(serialization_alias="isActive")
    street: str | None
    address_line_1: str | None = Field(serialization_alias="addressLine1")
    address_line_2: str | None = Field(serialization_alias="addressLine2")
    address_line_3: str | None = Field(serialization_alias="addressLine3")
    town_village: str | None = Field(serialization_alias="townVillage")
    city: str | None
    county_district: str | None = Field(serialization_alias="countyDistrict")
    postal_code: str | None = Field(serialization_alias="postalCode")
    latitude: Decimal | None
    longitude: Decimal | None
    state_province_id: int | None = Field(serialization_alias="stateProvinceId")
    country_id: int | None = Field(serialization_alias="countryId")
    created_on: date = Field(serialization_alias="createdOn")
    updated_on: date = Field(serialization_alias="updatedOn")


def _errors(exc: PydanticValidationError, index: int | None = None) -> list[dict]:
    out = []
    for err in exc.errors():
        item = {
            "field": ".".join(str(p) for p in err["loc"]) or "body",
            "message": err["msg"],
        }
        if index is not None:
            item["index"] = index
        out.append(item)
    return out

def validate_for_create(data: Any, index: int | None = None) -> AddressCreate:
    """Validate one address payload, raising the platform ValidationError on failure."""
    try:
        return AddressCreate.model_validate(data)
    except PydanticValidationError as e:
        where = f" in address {index}" if index is not None else ""
        raise ValidationError(_errors(e, index), message=f"Validation errors exist{where}.") from e
