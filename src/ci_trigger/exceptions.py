from sanic.exceptions import SanicException


class UnrecoverableError(ValueError):
    """Base class for errors raised inside the webhook pipeline.

    These never reach a caller as-is: the dispatcher folds each of them into
    one of the client-facing ``StatusError`` types below.
    """

    pass


class SecretMismatchError(UnrecoverableError):
    """Raised when no trigger accepts the presented secret."""

    def __init__(self, message: str = "the provided secret does not match"):
        super().__init__(message)


class HookNotEnabledError(UnrecoverableError):
    """Raised when the requested hook is not enabled on a build configuration.

    Plugins may also raise it from ``extract`` for calls their trigger does
    not allow.
    """

    def __init__(self, message: str = "the specified hook is not enabled"):
        super().__init__(message)


class UnsupportedMethodError(UnrecoverableError):
    """Raised by a plugin when the HTTP method is not one its provider uses."""

    def __init__(self, message: str = "unsupported HTTP method"):
        super().__init__(message)


class NoMatchingTriggersError(HookNotEnabledError):
    """Raised when a build configuration has no usable triggers for a hook type."""

    def __init__(self, message: str = "no usable triggers for the specified hook"):
        super().__init__(message)


class StoreError(Exception):
    """Raised when the backing API cannot serve a request."""

    pass


class NotFoundError(StoreError):
    """Raised when the backing API has no object with the requested name."""

    pass


class StatusError(SanicException):
    """A structured error that is safe to hand back to the webhook caller."""

    status_code = 500
    quiet = True


class MalformedPathError(StatusError):
    status_code = 400


class UnknownHookTypeError(StatusError):
    status_code = 404


class UnauthorizedError(StatusError):
    status_code = 401


class MethodNotSupportedError(StatusError):
    status_code = 405


class BadRequestError(StatusError):
    status_code = 400


class InternalError(StatusError):
    status_code = 500
    quiet = False


class PayloadTooLargeError(StatusError):
    status_code = 413
