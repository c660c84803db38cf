"""Failure taxonomy shared by the resolution pipeline and the HTTP layer."""


class ResolveError(Exception):
    """Base class for resolution failures."""


class InvalidInput(ResolveError):
    """Caller input failed validation; no network I/O was attempted."""


class MalformedSlug(InvalidInput):
    """Slug is not of the form ``GiftName-N`` with a positive N."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"invalid slug, expected GiftSlug-123: {slug!r}")


class NotFound(ResolveError):
    """Every source was consulted and confirmed the item is absent."""


class UpstreamError(ResolveError):
    """A required source could not be reached or its answer could not be parsed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
