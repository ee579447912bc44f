class KpiError(Exception):
    """Base exception for errors surfaced to API clients"""

    code = "SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(KpiError):
    """A required request parameter is missing or empty"""

    code = "VALIDATION_ERROR"
    status_code = 400


class AuthError(KpiError):
    """Service account credentials are missing or malformed"""

    code = "AUTH_ERROR"


class NotFoundError(KpiError):
    """The requested date, sheet or range does not exist"""

    code = "DATE_NOT_FOUND"
    status_code = 404


class UpstreamError(KpiError):
    """The Sheets API call failed"""

    code = "UPSTREAM_ERROR"
