"""
Permission names.

One permission per mutating endpoint. Tokens carry a set of these strings;
the registry itself accepts any string, so the enum is the single place
the HTTP layer spells them.
"""

from enum import Enum


class Permission(str, Enum):
    """Permission required by each mutating route."""
    
    CREATE_MICROBLOG = "create_microblog"
    DELETE_MICROBLOG = "delete_microblog"
    CREATE_RELATION = "create_relation"
    DELETE_RELATION = "delete_relation"


def permission_name(permission: Permission | str) -> str:
    """Plain string form of a permission."""
    if isinstance(permission, Permission):
        return permission.value
    return str(permission)
