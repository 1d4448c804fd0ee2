from typing import Optional


class CirPlaneError(Exception):
    """
    Base class for domain errors.

    `message` is user-facing (localized) and is rendered as the `error` field
    of the JSON response; `status_code` is the HTTP status the API maps it to.
    """
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailure(CirPlaneError):
    status_code = 400


class NotFoundError(CirPlaneError):
    status_code = 404


class InvalidStatusTransitionError(CirPlaneError):
    """Raised when a tracking record is asked to move to a state it cannot reach from its current one."""
    status_code = 409

    def __init__(self, current_status: str, target_status: str, message: Optional[str] = None):
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            message or f"Transição de status inválida: {current_status} -> {target_status}"
        )


class ProvisioningError(CirPlaneError):
    status_code = 500


class IdentityProviderError(CirPlaneError):
    status_code = 500
