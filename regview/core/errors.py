"""Error taxonomy for calls made against the upstream registry.

Every failure the registry client can produce is one of these types, each
carrying the HTTP status code the API layer should answer with:

- NetworkError: transport level failure (connect, TLS, timeout). Always 500.
- UpstreamError: the registry answered with a non-2xx status, forwarded as-is.
- DecodeError: the body did not match the expected shape. 400, with an
  excerpt of the raw body so schema mismatches can be diagnosed.
- MetadataMissingError: an optional field the caller needed was absent.
  The enrichment pipelines absorb it into degraded results.
"""
from typing import Optional

# Maximum number of raw body characters embedded in a DecodeError message
BODY_EXCERPT_LIMIT = 512


class RegistryError(Exception):
    """Base class for every registry failure surfaced to the API layer."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class NetworkError(RegistryError):
    status_code = 500

    @classmethod
    def from_exception(cls, exc: Exception) -> "NetworkError":
        return cls(f"Network error: {type(exc).__name__}: {exc}")


class UpstreamError(RegistryError):
    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(message or f"Registry error: {status_code}", status_code=status_code)


class DecodeError(RegistryError):
    status_code = 400

    @classmethod
    def from_body(cls, exc: Exception, body: str) -> "DecodeError":
        excerpt = body[:BODY_EXCERPT_LIMIT]
        if len(body) > BODY_EXCERPT_LIMIT:
            excerpt += "..."
        return cls(f"Error parsing registry response: {exc}. Body: {excerpt}")


class MetadataMissingError(RegistryError):
    status_code = 500
