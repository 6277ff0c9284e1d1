from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lockbox.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from lockbox.models.resource import Resource

# Permission levels, ordered so that a higher value implies the lower ones.
READ = 1
UPDATE = 7
OWNER = 15

ARO_USER = "User"
ACO_RESOURCE = "Resource"


class Permission(Base, UUIDPrimaryKeyMixin, AuditMixin):
    """Grant binding a requester (ARO) to a permission level on a resource (ACO)."""

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("aco_foreign_key", "aro_foreign_key", name="uq_permission_aco_aro"),
    )

    aco: Mapped[str] = mapped_column(String(30), nullable=False)
    aco_foreign_key: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("resources.id"), nullable=False, index=True
    )
    aro: Mapped[str] = mapped_column(String(30), nullable=False)
    aro_foreign_key: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    type: Mapped[int] = mapped_column(Integer, nullable=False)

    resource: Mapped[Resource] = relationship(back_populates="permissions", lazy="raise")
