# app/errors.py
# expose=False errors reach the caller as "Internal error"; the real message is only logged.

GENERIC_MESSAGE = "Internal error"


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, *, expose: bool = True):
        super().__init__(message)
        self.message = message
        self.expose = expose

    @property
    def public_message(self) -> str:
        return self.message if self.expose else GENERIC_MESSAGE


class InvalidRequest(AppError):
    status_code = 400


class AuthError(AppError):
    status_code = 401


class PreconditionFailed(AppError):
    status_code = 400


class NotConnected(PreconditionFailed):
    def __init__(self, message: str = "LinkedIn not connected"):
        super().__init__(message)


class ReconnectRequired(PreconditionFailed):
    def __init__(self, message: str = "LinkedIn session expired; reconnect your account"):
        super().__init__(message)


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    status_code = 409


class UpstreamError(AppError):
    status_code = 500
