from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lockbox.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from lockbox.models.permission import Permission
    from lockbox.models.secret import Secret
    from lockbox.models.user import User


class Resource(Base, UUIDPrimaryKeyMixin, AuditMixin):
    """A stored credential entry (name, login, URL) owning permissions and secrets."""

    __tablename__ = "resources"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    uri: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, server_default="false", default=False, nullable=False)
    created_by: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("users.id"), nullable=False
    )
    modified_by: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("users.id"), nullable=False
    )

    creator: Mapped[User] = relationship(foreign_keys=[created_by], lazy="raise")
    modifier: Mapped[User] = relationship(foreign_keys=[modified_by], lazy="raise")
    permissions: Mapped[list[Permission]] = relationship(
        back_populates="resource", cascade="all, delete-orphan", lazy="raise"
    )
    secrets: Mapped[list[Secret]] = relationship(
        back_populates="resource", cascade="all, delete-orphan", lazy="raise"
    )
