from werkzeug import exceptions


class InvalidInput(exceptions.BadRequest):
    description = 'Invalid input'


class Unauthorized(exceptions.Unauthorized):
    description = 'Invalid secret'


class NotFound(exceptions.NotFound):
    description = 'Not found'


class RateLimited(exceptions.TooManyRequests):
    description = 'Rate limit exceeded. Please try again later.'


class ServiceUnavailable(exceptions.InternalServerError):
    description = 'Service unavailable'


class ConstraintViolation(Exception):
    """A uniqueness constraint rejected an insert.

    Raised by the store and handled inside the lifecycle service; it is never
    rendered to a caller.
    """

    def __init__(self, constraint=None):
        super().__init__(constraint or 'unique constraint violated')
        self.constraint = constraint
