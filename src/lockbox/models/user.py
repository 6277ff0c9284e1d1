from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from lockbox.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin


class User(Base, UUIDPrimaryKeyMixin, AuditMixin):
    """A human account able to own resources and receive secrets.

    Users are provisioned by the identity provider; this service only reads
    them to resolve the acting principal and to expand creator/modifier
    identities on read-back.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(50), server_default="user", default="user", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, server_default="true", default=True, nullable=False)
