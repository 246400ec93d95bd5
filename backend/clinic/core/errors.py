"""
Error kinds raised by the service layer.

The hosting layer maps each kind onto a response (see `clinic.main`):

* NotFoundError         - referenced or target row is absent
* InvalidArgumentError  - malformed input, bad enum value, missing argument
* ConflictError         - slot taken, doctor unavailable, appointment already
                          bound to a result, wrong verification code
* ServiceError          - a lower-level failure (database, SMTP) wrapped with
                          a readable message; the original is kept as __cause__
"""


class ClinicError(Exception):
    """Base class for every error the services raise on purpose."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ClinicError):
    pass


class InvalidArgumentError(ClinicError, ValueError):
    pass


class ConflictError(ClinicError):
    pass


class DoctorUnavailableError(ConflictError):
    pass


class InvalidVerificationCodeError(ConflictError):
    pass


class ServiceError(ClinicError):
    pass


class EmailDeliveryError(Exception):
    """Raised by the email sender when a message could not be handed to SMTP."""
