class ClientError(Exception):
    """Base class for failures talking to the backend."""

    retryable = False


class ApiError(ClientError):
    def __init__(self, status, message):
        super().__init__(message)
        self.status = status
        self.message = message


class RateLimitedError(ApiError):
    """429 from the backend: back off, nothing is corrupted."""

    retryable = True

    def __init__(self, message='Rate limit exceeded'):
        super().__init__(429, message)


class RequestTimeout(ClientError):
    retryable = True

    def __init__(self, action):
        super().__init__(f'Request timeout: {action}')
        self.action = action


class NetworkError(ClientError):
    retryable = True


class ActionFailed(ClientError):
    """A user-triggered action failed; the message asks the user to retry."""

    def __init__(self, action, cause=None):
        super().__init__(f'Could not {action}. Check your connection and try again.')
        self.action = action
        self.cause = cause
        self.retryable = bool(getattr(cause, 'retryable', False))


class PayloadError(ValueError):
    """A request payload failed client-side validation."""
