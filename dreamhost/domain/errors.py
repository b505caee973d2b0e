class DreamHostError(Exception):
    """Base for errors that map onto an HTTP status."""

    status = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | list[str] | None = None) -> None:
        self.message = self.default_message if message is None else message
        super().__init__(self.message)


class BadRequestError(DreamHostError):
    status = 400
    default_message = "Bad Request"


class DuplicateError(BadRequestError):
    pass


class UnauthorizedError(DreamHostError):
    status = 401
    default_message = "Unauthorized"


class NotFoundError(DreamHostError):
    status = 404
    default_message = "Not Found"
