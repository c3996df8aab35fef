"""Domain errors raised by the service layer.

Routers translate these into HTTP responses; row- and item-level handlers in
the import and bulk-sync loops catch them and record a report entry instead.
"""


class ServiceError(Exception):
    """Base class for expected, user-visible failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """A required field is missing or a value is malformed or too long."""


class LookupFailure(ServiceError):
    """A referenced entity could not be resolved or created."""


class NotFoundError(ServiceError):
    pass


class GameNotFoundError(NotFoundError):
    def __init__(self, message: str = "Game not found"):
        super().__init__(message)


class PreconditionFailure(ServiceError):
    """The operation cannot run in the current state."""


class CalendarNotConnectedError(PreconditionFailure):
    def __init__(self, message: str = "Google Calendar not connected"):
        super().__init__(message)


class GameNotSyncedError(PreconditionFailure):
    def __init__(self, message: str = "Game not synced to calendar"):
        super().__init__(message)


class ExternalServiceFailure(ServiceError):
    """The external calendar API rejected a call."""


class CalendarSyncError(ExternalServiceFailure):
    pass


class GamesNotFoundError(NotFoundError):
    def __init__(self, missing_ids: list[int]):
        super().__init__("Some games were not found")
        self.missing_ids = missing_ids


class PermissionDenied(ServiceError):
    """The caller may not act on the referenced records."""


class GamesForbiddenError(PermissionDenied):
    def __init__(self, unauthorized_ids: list[int]):
        super().__init__("You can only delete games you created")
        self.unauthorized_ids = unauthorized_ids
