"""Tests for the exception hierarchy."""

import pytest

from smarta.exceptions import (
    ConfigurationError,
    DataStoreError,
    EntityNotFoundError,
    InvalidEntityStateError,
    PaymentGatewayError,
    ReferentialIntegrityError,
    SmartaError,
    UniqueConstraintError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            EntityNotFoundError,
            ReferentialIntegrityError,
            InvalidEntityStateError,
            ValidationError,
            DataStoreError,
            UniqueConstraintError,
            PaymentGatewayError,
            ConfigurationError,
        ],
    )
    def test_all_inherit_from_smarta_error(self, exc_class: type) -> None:
        """Test every error can be caught as SmartaError."""
        assert issubclass(exc_class, SmartaError)

    def test_referential_integrity_is_not_found(self) -> None:
        """Test a dangling reference is a missing entity."""
        with pytest.raises(EntityNotFoundError):
            raise ReferentialIntegrityError("tenants row t-1 not found")

    def test_unique_constraint_is_data_store_error(self) -> None:
        """Test unique violations are store errors."""
        assert issubclass(UniqueConstraintError, DataStoreError)

    def test_message_preserved(self) -> None:
        """Test the message is the string form."""
        assert str(ValidationError("amount is required")) == "amount is required"


class TestPaymentGatewayError:
    """Tests for PaymentGatewayError."""

    def test_status_code(self) -> None:
        """Test the HTTP status is kept."""
        error = PaymentGatewayError("Payment function error 502: bad gateway", status_code=502)

        assert error.status_code == 502
        assert "502" in str(error)

    def test_status_code_defaults_to_none(self) -> None:
        """Test errors without a response have no status."""
        assert PaymentGatewayError("unreachable").status_code is None
