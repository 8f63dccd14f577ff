from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from app.core.base import Base, TimestampedTenantMixin

class Code(Base, TimestampedTenantMixin):
    name: Mapped[str] = mapped_column(String(100))
    system_defined: Mapped[bool] = mapped_column(default=False)  # values editable, code itself is not
    __table_args__ = (UniqueConstraint("org_id", "name", name="uq_code_org_name"),)

class CodeValue(Base, TimestampedTenantMixin):
    code_id: Mapped[int] = mapped_column(ForeignKey("code.id", ondelete="RESTRICT"), index=True)
    label: Mapped[str] = mapped_column(String(100))
    position: Mapped[int] = mapped_column(Integer, default=0)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_mandatory: Mapped[bool] = mapped_column(default=False)
    active: Mapped[bool] = mapped_column(default=True)
    __table_args__ = (UniqueConstraint("code_id", "label", name="uq_code_value_code_label"),)
