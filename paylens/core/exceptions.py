"""PayLens exception hierarchy.

Every error raised by the library derives from PayLensError and carries a
machine-readable code, the wrapped cause (if any) and the time it was raised.
"""

from datetime import UTC, datetime
from typing import Any


class PayLensError(Exception):
    """Base PayLens exception."""

    code: str = "PAYLENS_ERROR"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.timestamp = datetime.now(UTC)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(PayLensError):
    """Invalid input or unsupported operation for the chosen gateway."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.field = field
        self.errors = errors or []


class AuthenticationError(PayLensError):
    """Gateway rejected the supplied credentials."""

    code = "AUTHENTICATION_ERROR"

    def __init__(
        self,
        message: str = "Authentication failed",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)


class PaymentError(PayLensError):
    """Failure while processing or fetching a payment."""

    code = "PAYMENT_ERROR"

    def __init__(
        self,
        message: str,
        payment_id: str | None = None,
        gateway_code: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.payment_id = payment_id
        self.gateway_code = gateway_code


class RefundError(PayLensError):
    """Failure while processing or fetching a refund."""

    code = "REFUND_ERROR"

    def __init__(
        self,
        message: str,
        payment_id: str | None = None,
        refund_id: str | None = None,
        gateway_code: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.payment_id = payment_id
        self.refund_id = refund_id
        self.gateway_code = gateway_code


class NetworkError(PayLensError):
    """Transport failure: an HTTP error status or no response at all."""

    code = "NETWORK_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: Any = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.status_code = status_code
        self.response = response


class ConfigurationError(PayLensError):
    """Missing or invalid gateway configuration."""

    code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.parameter = parameter


class GatewayError(PayLensError):
    """Structural error reported by a gateway (not a payment rejection)."""

    code = "GATEWAY_ERROR"

    def __init__(
        self,
        message: str,
        gateway: str,
        gateway_code: str | None = None,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.gateway = gateway
        self.gateway_code = gateway_code
        self.status_code = status_code


def create_validation_error(message: str, field: str | None = None) -> ValidationError:
    return ValidationError(message, field=field)


def create_payment_error(
    message: str,
    payment_id: str | None = None,
    gateway_code: str | None = None,
) -> PaymentError:
    return PaymentError(message, payment_id=payment_id, gateway_code=gateway_code)


def create_network_error(
    message: str,
    status_code: int | None = None,
    response: Any = None,
) -> NetworkError:
    return NetworkError(message, status_code=status_code, response=response)


def create_gateway_error(
    message: str,
    gateway: str,
    gateway_code: str | None = None,
    status_code: int | None = None,
) -> GatewayError:
    return GatewayError(
        message,
        gateway=gateway,
        gateway_code=gateway_code,
        status_code=status_code,
    )
