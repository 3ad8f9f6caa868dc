"""Search domain — business exceptions."""


class HashtagNotFoundError(Exception):
    pass
