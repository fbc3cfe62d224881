"""Exceptions raised by the Dial9 API client."""


class Dial9Error(Exception):
    """Base class for every failure reported by the API layer."""


class TransportError(Dial9Error):
    """The request never produced a response (network, DNS, timeout)."""


class DecodeError(Dial9Error):
    """A response arrived but its body is missing or has the wrong shape."""


class AudioCorruptError(Dial9Error):
    """The recording payload is absent or is not valid base64."""


class ApiStatusError(Dial9Error):
    """The server answered with a status other than ``success``."""

    def __init__(self, message: str, status: str):
        super().__init__(message)
        self.status = status


class EmptyResponseError(DecodeError):
    """The server answered with an empty body."""
