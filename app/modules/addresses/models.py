import uuid
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Date, Numeric, ForeignKey
from app.core.base import Base, TimestampedTenantMixin

class Address(Base, TimestampedTenantMixin):
    street: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address_line_1: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address_line_2: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address_line_3: Mapped[str | None] = mapped_column(String(100), nullable=True)
    town_village: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    county_district: Mapped[str | None] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)

    # lookups into code_value; never owned
    state_province_id: Mapped[int | None] = mapped_column(ForeignKey("code_value.id", ondelete="RESTRICT"), nullable=True)
    country_id: Mapped[int | None] = mapped_column(ForeignKey("code_value.id", ondelete="RESTRICT"), nullable=True)

    # tenant-local calendar dates
    created_on: Mapped[date] = mapped_column(Date)
    updated_on: Mapped[date] = mapped_column(Date)
    created_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)
    updated_by: Mapped[uuid.UUID | None] = mapped_column(nullable=True)

    client_address: Mapped["ClientAddress | None"] = relationship(
        back_populates="address", cascade="all, delete-orphan", passive_deletes=True, uselist=False
    )

class ClientAddress(Base, TimestampedTenantMixin):
    client_id: Mapped[int] = mapped_column(ForeignKey("client.id", ondelete="CASCADE"), index=True)
    address_id: Mapped[int] = mapped_column(ForeignKey("address.id", ondelete="CASCADE"), unique=True)
    address_type_id: Mapped[int] = mapped_column(ForeignKey("code_value.id", ondelete="RESTRICT"))
    is_active: Mapped[bool] = mapped_column(default=False)

    address: Mapped[Address] = relationship(back_populates="client_address")
