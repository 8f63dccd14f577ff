from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, UniqueConstraint
from app.core.base import Base, TimestampedTenantMixin

class Client(Base, TimestampedTenantMixin):
    display_name: Mapped[str] = mapped_column(String(200))
    external_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    active: Mapped[bool] = mapped_column(default=True)
    __table_args__ = (UniqueConstraint("org_id", "external_id", name="uq_client_org_external_id"),)
