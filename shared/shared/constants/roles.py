from enum import Enum


class Role(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


# Roles allowed into the moderation back-office.
MODERATION_ROLES: tuple[Role, ...] = (Role.MODERATOR, Role.ADMIN, Role.SUPER_ADMIN)
