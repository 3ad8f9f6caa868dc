"""Shops domain — business exceptions."""


class ShopNotFoundError(Exception):
    """Shop does not exist or is hidden."""
