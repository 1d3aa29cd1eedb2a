from scanner.errors import AlreadyRunError, CheckExecutionError, ScannerError, SessionCreationError
from scanner.scanner import DEFAULT_CHECKS, CheckUnit, Scanner
from scanner.session import CloudSession, create_session
from scanner.store import FindingStore

__all__ = [
    "AlreadyRunError",
    "CheckExecutionError",
    "CheckUnit",
    "CloudSession",
    "DEFAULT_CHECKS",
    "FindingStore",
    "Scanner",
    "ScannerError",
    "SessionCreationError",
    "create_session",
]
