"""Stream-level failures that end a run. Record-level problems never raise."""

from typing import Optional


class EngineError(Exception):
    """Base class for failures surfaced by the ledger to its caller"""
    pass


class InputDecodeError(EngineError):
    """The input could not be decoded into records (bad header, broken CSV structure)"""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(f"CSV data reading error: {message}")


class InputIoError(EngineError):
    """The underlying byte source failed"""

    def __init__(self, cause: OSError):
        self.cause = cause
        super().__init__(f"IO error: {cause}")
