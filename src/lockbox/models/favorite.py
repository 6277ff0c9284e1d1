from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from lockbox.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin


class Favorite(Base, UUIDPrimaryKeyMixin, AuditMixin):
    """A user's star on a resource."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "foreign_key", name="uq_favorite_user_foreign_key"),
    )

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("users.id"), nullable=False
    )
    foreign_model: Mapped[str] = mapped_column(
        String(30), server_default="Resource", default="Resource", nullable=False
    )
    foreign_key: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("resources.id"), nullable=False, index=True
    )
