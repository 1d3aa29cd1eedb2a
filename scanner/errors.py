# scanner/errors.py
"""
Errors raised by the scanner.

- SessionCreationError: credentials/config invalid or unreachable; nothing is scanned.
- CheckExecutionError: a check could not list its resources (or blew up).
- AlreadyRunError: a Scanner was asked to run twice.
"""


class ScannerError(Exception):
    """Base class for all scanner errors."""


class SessionCreationError(ScannerError):
    pass


class CheckExecutionError(ScannerError):
    """
    A named check failed to complete its provider queries.

    Check units raise it without a name; the Scanner fills in the check name
    so the message reads "<check name> failed: <cause>".
    """

    def __init__(self, check_name: str, cause):
        self.check_name = check_name
        self.cause = cause
        if check_name:
            message = f"{check_name} failed: {cause}"
        else:
            message = str(cause)
        super().__init__(message)


class AlreadyRunError(ScannerError):
    pass
