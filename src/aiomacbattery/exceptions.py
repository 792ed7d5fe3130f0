"""Library for exceptions using the battery fleet API."""


class BatteryFleetError(Exception):
    """Base class for all client Errors."""


class ApiError(BatteryFleetError):
    """Raised during problems talking to the API."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize."""
        super().__init__(message)
        self.status = status


class ApiTransientError(ApiError):
    """Raised when the API asked to retry later and the retry budget ran out."""


class ApiRateLimitError(ApiTransientError):
    """Raised when the API keeps answering 429 Too Many Requests."""


class ApiServiceUnavailableError(ApiTransientError):
    """Raised when the API keeps answering 503 Service Unavailable."""


class ApiBadRequestError(ApiError):
    """Raised due sending a request resulting in a bad request."""


class ApiUnauthorizedError(ApiError):
    """Raised when the access token is rejected."""


class ApiForbiddenError(ApiError):
    """Raised due to permission errors talking to API."""


class ApiNotFoundError(ApiError):
    """Raised when the requested resource does not exist."""


class AuthError(BatteryFleetError):
    """Raised due to auth problems talking to API."""


class AttributeNotFoundError(BatteryFleetError):
    """Raised when no custom attribute matches the given identifier."""


class NoDataAvailableError(BatteryFleetError):
    """Raised when rows are requested before anything was fetched."""


class NotificationError(BatteryFleetError):
    """Raised when a report or failure notice could not be delivered."""


class ConfigurationError(BatteryFleetError):
    """Raised when the report job is not configured completely."""
