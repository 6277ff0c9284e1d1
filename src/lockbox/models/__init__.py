from lockbox.models.action_log import ActionLog
from lockbox.models.base import AuditMixin, Base, UUIDPrimaryKeyMixin
from lockbox.models.favorite import Favorite
from lockbox.models.permission import Permission
from lockbox.models.resource import Resource
from lockbox.models.secret import Secret
from lockbox.models.user import User

__all__ = [
    "Base",
    "UUIDPrimaryKeyMixin",
    "AuditMixin",
    "ActionLog",
    "Favorite",
    "Permission",
    "Resource",
    "Secret",
    "User",
]
