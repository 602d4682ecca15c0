"""Errors raised by smarta.

Callers that only need to know that an operation failed can catch
``SmartaError``; every subclass carries a message fit for display.
"""


class SmartaError(Exception):
    """Root of every error raised by smarta."""


class EntityNotFoundError(SmartaError):
    """A record is missing or belongs to another landlord."""


class ReferentialIntegrityError(EntityNotFoundError):
    """A write names a parent row that does not exist."""


class InvalidEntityStateError(SmartaError):
    """The record's status does not allow the operation (e.g. paying a paid bill)."""


class ValidationError(SmartaError):
    """An input value is missing, negative or malformed."""


class DataStoreError(SmartaError):
    """The table store could not run a query."""


class UniqueConstraintError(DataStoreError):
    """A write duplicates a value of a unique column."""


class PaymentGatewayError(SmartaError):
    """The hosted payment function failed or could not be reached.

    ``status_code`` is the HTTP status when the function answered.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(SmartaError):
    """A setting is invalid, or a collaborator needed by the call is missing."""
