"""Exception hierarchy shared by the schema builder, generators and server."""

from http import HTTPStatus


class RapidError(Exception):
    """Base class for every error raised by rapid-api."""


class SchemaError(RapidError):
    """The API definition is inconsistent. Raised at construction time."""


class HandlerNotFoundError(SchemaError):
    """A route has no handler to dispatch to."""


class UnsupportedTypeError(RapidError):
    """A type that cannot be rendered as a RAML primitive was supplied."""


class SerializationError(RapidError):
    """A JSON schema or example value could not be serialized."""


class DecodeError(RapidError):
    """A path, query or body value in a request could not be decoded."""


class HTTPError(RapidError):
    """Raised by handlers to answer with an explicit status and headers."""

    def __init__(self, status: int, message: str, headers: dict[str, str] | None = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.headers = dict(headers or {})


def error_for_status(status: int, message: str | None = None) -> HTTPError:
    """Build an HTTPError using the standard reason phrase as message."""
    if message is None:
        message = HTTPStatus(status).phrase
    return HTTPError(status, message)
