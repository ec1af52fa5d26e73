"""Domain errors raised by the service layer.

Each error carries the HTTP status it is rendered with by the handler
registered in ``backend.py``.
"""


class MockPrepError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(MockPrepError):
    status_code = 400


class NotFound(MockPrepError):
    status_code = 404


class Unauthorized(MockPrepError):
    """The caller is authenticated but does not own the resource."""

    status_code = 403


class UsageLimitExceeded(MockPrepError):
    status_code = 403


class GenerationError(MockPrepError):
    status_code = 502
