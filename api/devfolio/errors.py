"""Domain exceptions mapped to HTTP error responses in ``devfolio.main``."""


class DevfolioError(Exception):
    """Base class for errors with a stable error code."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingIdentityError(DevfolioError):
    """A write was attempted without the owner's external identity id."""

    code = "BAD_REQUEST"


class InvalidURLError(DevfolioError):
    """A URL was rejected before any network call."""

    code = "BAD_REQUEST"


class UpstreamError(DevfolioError):
    """GitHub or an arbitrary page fetch failed or answered non-2xx."""

    code = "UPSTREAM_ERROR"


class PersistenceError(DevfolioError):
    """The aggregate transaction failed or timed out and was rolled back."""

    code = "PERSISTENCE_ERROR"
