"""
Social graph domain — business exceptions.

Pure Python exceptions with no HTTP coupling; the controller maps them to
HTTP responses.
"""


class UserNotFoundError(Exception):
    """Target account does not exist."""


class CannotFollowSelfError(Exception):
    pass


class CannotBlockSelfError(Exception):
    pass


class CannotMuteSelfError(Exception):
    pass


class BlockedRelationshipError(Exception):
    """A block exists between the two accounts in either direction."""


class AlreadyBlockedError(Exception):
    pass


class NotBlockedError(Exception):
    pass


class AlreadyMutedError(Exception):
    pass


class NotMutedError(Exception):
    pass


class HiddenByBlockError(Exception):
    """The target account has blocked the viewer; its lists are not visible."""


class NotFollowingError(Exception):
    pass
