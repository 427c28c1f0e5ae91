from typing import Callable, Optional

import structlog

from barehttp.errors import HttpError

logger = structlog.get_logger(__name__)

ErrorCallback = Callable[[str], None]


def format_error(error: str, origin: str) -> str:
    return f"BAREHTTP ERROR: ({origin}) {error}"


class ErrorReporter:
    """
    Sends error messages to the log and, when one is set, to the caller's callback.
    One reporter belongs to one Client.
    """

    def __init__(self, callback: Optional[ErrorCallback] = None):
        self._callback = callback

    @property
    def callback(self) -> Optional[ErrorCallback]:
        return self._callback

    def set_callback(self, callback: Optional[ErrorCallback]) -> bool:
        if callback is None:
            self.log_error("The passed error callback is empty; Operation cancelled!", "set_error_callback")
            return False

        self._callback = callback
        return True

    def unset_callback(self) -> bool:
        self._callback = None
        return True

    def log_error(self, error: str, origin: str, kind=None) -> None:
        """
        :param error: what went wrong
        :param origin: the step that failed
        :param kind: ErrorKind, if the error has one
        """
        logger.error("http_error", origin=origin, kind=kind.name if kind is not None else None, error=error)

        if self._callback is not None:
            self._callback(format_error(error, origin))

    def report(self, exc: HttpError) -> None:
        self.log_error(exc.message, exc.origin or "submit", exc.kind)
