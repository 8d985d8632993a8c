"""Error taxonomy of the catalog engine."""


class CatalogError(Exception):
    """Base class for catalog engine errors."""


class ValidationError(CatalogError):
    """Malformed input: empty label, short prefix, missing required field."""


class ConflictError(CatalogError):
    """Prefix (or slug) already used by another category of the same owner."""


class NotFoundError(CatalogError):
    """Targeted category or rule does not exist."""


class ForbiddenError(CatalogError):
    """Targeted resource belongs to a different owner."""


class TransientStoreError(CatalogError):
    """Atomic store operation kept failing because of contention."""
