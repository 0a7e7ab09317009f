"""
Error taxonomy for the ingestion core.

Provider errors are raised by the Leaguepedia client; the remaining errors
are raised while turning provider rows into persisted records.
"""
import enum


class IngestionError(Exception):
    pass


class ProviderErrorKind(str, enum.Enum):
    unauthorized = "unauthorized"
    bad_request = "bad_request"
    transient = "transient"


class ProviderError(IngestionError):
    """Outbound query to the stats provider failed."""

    kind: ProviderErrorKind = ProviderErrorKind.transient

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.kind == ProviderErrorKind.transient


class ProviderUnauthorized(ProviderError):
    kind = ProviderErrorKind.unauthorized


class ProviderBadRequest(ProviderError):
    kind = ProviderErrorKind.bad_request


class ProviderTransient(ProviderError):
    kind = ProviderErrorKind.transient


class EntityResolutionFailure(IngestionError):
    """A team or player could not be found or created; aborts that match."""


class PersistenceConflict(IngestionError):
    """Insert lost a uniqueness race; the row exists and should be re-read."""


class MalformedRecord(IngestionError):
    """Provider row is missing required fields."""
