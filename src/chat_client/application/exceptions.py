from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ValidationError(AppError):
    pass


class InvalidStateError(AppError):
    pass


class ClientNotInitializedError(AppError):
    pass


class ThreadSetupError(AppError):
    """Conversation lookup or initial history fetch failed."""


class ActionFailedError(AppError):
    """A user-triggered provider action (send, add, rename, leave) failed."""


class MediaResolutionError(AppError):
    pass


class DirectoryError(AppError):
    pass


class TokenFetchError(AppError):
    pass
