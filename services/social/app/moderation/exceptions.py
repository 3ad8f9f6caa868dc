"""Moderation domain — business exceptions."""


class TargetNotFoundError(Exception):
    """Reported / moderated item does not exist."""


class ContentDeletionFailedError(Exception):
    """The variant's delete operation failed at the store."""


class AdminNotificationNotFoundError(Exception):
    pass
