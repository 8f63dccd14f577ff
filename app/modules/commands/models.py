import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, TIMESTAMP, text, JSON, Integer
from app.core.base import Base, TimestampedTenantMixin

class CommandSource(Base, TimestampedTenantMixin):
    # who
    maker_id: Mapped[uuid.UUID] = mapped_column()
    # what was asked
    action_name: Mapped[str] = mapped_column(String(32))   # CREATE | UPDATE | DELETE
    entity_name: Mapped[str] = mapped_column(String(48))   # CODE | CODEVALUE | CLIENT | ADDRESS
    href: Mapped[str] = mapped_column(String(256))
    command_as_json: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    made_on: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    # outcome
    status: Mapped[str] = mapped_column(String(16), default="received")  # received | processed
    resource_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sub_resource_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    client_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
