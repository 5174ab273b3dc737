"""Domain exceptions raised by the service layer.

Controllers translate these into HTTP responses: `NotFoundError` becomes a
404 and `UserProjectError` a 400 (or 404, depending on the route).
"""


class NotFoundError(LookupError):
    """A referenced organization, project, user or image does not exist."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UserProjectError(ValueError):
    """A user/project relation cannot be created (e.g. it already exists)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.error_message = message
