# errors.py
"""Exception taxonomy for the signal stream.

- ParamError: bad connection parameters, fatal to the session.
- SignalUnavailable (DataUnavailable, InsufficientHistory): one symbol could
  not be computed this tick; the session skips it and carries on.
- SendFailure: the connection can no longer be written to, fatal to the session.
"""


class SignalStreamError(Exception):
    """Base class for every error raised by the service."""


class ParamError(SignalStreamError):
    """Missing or invalid ``symbols`` / ``ticker`` query parameters.

    ``str(exc)`` is the exact text sent to the client.
    """


class SignalUnavailable(SignalStreamError):
    """A signal could not be produced for one symbol."""


class DataUnavailable(SignalUnavailable):
    """The provider call failed or returned no usable close series."""


class InsufficientHistory(SignalUnavailable):
    """The close series is too short for the requested moving average."""


class SendFailure(SignalStreamError):
    """Writing to the client connection failed."""
