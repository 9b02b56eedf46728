class AirBuddyError(Exception):
    """Base error; every route turns it into ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingParameter(AirBuddyError):
    status_code = 400


class UpstreamUnavailable(AirBuddyError):
    # upstream answered, but with a non-"ok" status
    status_code = 400


class UpstreamError(AirBuddyError):
    status_code = 502


class ServiceMisconfigured(AirBuddyError):
    status_code = 500


class NotFound(AirBuddyError):
    status_code = 404


class ServiceError(AirBuddyError):
    status_code = 500


class NetworkUnreachable(AirBuddyError):
    status_code = 503
