"""Notifications domain — business exceptions."""


class NotificationNotFoundError(Exception):
    """Notification does not exist or belongs to another user."""
