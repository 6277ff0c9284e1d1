from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from lockbox.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin


class ActionLog(Base, UUIDPrimaryKeyMixin, AuditMixin):
    """Audit trail entry for a user-initiated action.

    Rows are written inside the transaction of the action they describe, so
    an entry exists only for actions that were committed.
    """

    __tablename__ = "action_logs"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    resource_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
    )
    details: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
    )
