class AppError(Exception):
    """Base class for all application exceptions."""

    code = "app_error"

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing required field or illegal placement on the weekly grid."""

    code = "validation_error"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""

    code = "not_found"

    def __init__(self, resource_type: str, resource_id: object):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class PermissionDeniedError(AppError):
    """The operation needs edit mode (or another session state) the caller is not in."""

    code = "permission_denied"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=403, details=details)


class NoBaselineError(AppError):
    """Reset requested for a schedule that never saved an original copy."""

    code = "no_baseline"

    def __init__(self, schedule_id: int):
        super().__init__(
            "No original schedule found, save an original schedule first",
            status_code=400,
            details={"schedule_id": schedule_id},
        )


class TransactionError(AppError):
    """A multi-step store operation failed and was rolled back; safe to retry."""

    code = "transaction_failed"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)


class WeekBoundaryError(ValidationError):
    code = "week_boundary"

    def __init__(self, week: int):
        super().__init__("Already at the first week", details={"requested_week": week})


class StaleResponseError(AppError):
    """Client-side only: a response arrived after the session context moved on."""

    code = "stale_response"

    def __init__(self, expected: tuple, actual: tuple):
        super().__init__(
            "Response no longer matches the session context",
            status_code=409,
            details={"expected": list(expected), "actual": list(actual)},
        )
