"""Posts domain — business exceptions."""


class PostNotFoundError(Exception):
    pass


class NotPostOwnerError(Exception):
    """Caller tried to modify a post authored by someone else."""


class TooManyGenresError(Exception):
    pass


class GenreNotFoundError(Exception):
    """One or more genre ids do not exist."""
