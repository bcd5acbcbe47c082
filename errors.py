# errors.py

class CatalogError(Exception):
    """Base class for catalog browsing errors."""
    retryable = False


class InvalidRequest(CatalogError):
    """A write payload failed validation."""


class UnknownAttribute(CatalogError):
    """An attribute name outside the attribute schema was referenced."""

    def __init__(self, name: str):
        super().__init__(f"Unknown attribute: {name!r}")
        self.name = name


class StoreUnavailable(CatalogError):
    """The backing store could not execute a call. Safe to retry."""
    retryable = True


class MalformedRecord(CatalogError):
    """A product is missing, or lacks fields a read expected."""

    def __init__(self, product_id, reason: str = "product not found"):
        super().__init__(f"Product {product_id}: {reason}")
        self.product_id = product_id
