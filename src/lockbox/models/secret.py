from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lockbox.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from lockbox.models.resource import Resource


class Secret(Base, UUIDPrimaryKeyMixin, AuditMixin):
    """A resource's encrypted payload, readable by exactly one recipient user."""

    __tablename__ = "secrets"
    __table_args__ = (
        UniqueConstraint("resource_id", "user_id", name="uq_secret_resource_user"),
    )

    resource_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("resources.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("users.id"), nullable=False, index=True
    )
    data: Mapped[str] = mapped_column(Text, nullable=False)

    resource: Mapped[Resource] = relationship(back_populates="secrets", lazy="raise")
