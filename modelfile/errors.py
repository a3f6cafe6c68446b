"""
Error reporting for model descriptions.

Problems found while reading a model are warnings: each one is logged and
counted, reading continues so that as many problems as possible are reported
in one pass, and the caller aborts afterwards if there were any.
"""

import logging
from typing import List

logger = logging.getLogger(__name__)


class ModelDescriptionError(Exception):
    """Raised when a model description contains errors."""

    def __init__(self, message: str, warnings: List[str] = None):
        self.warnings = list(warnings or [])
        details = "".join(f"\n  {w}" for w in self.warnings)
        super().__init__(f"{message}{details}")


class ErrorReporter:
    """Collects warnings about a model description."""

    def __init__(self, source: str = "<string>"):
        self.source = source
        self.warnings: List[str] = []

    def warn(self, message: str, line: int = 0, column: int = 0) -> None:
        """Record and log a non-fatal warning."""
        if line:
            message = f"{self.source}:{line}:{column}: {message}"
        else:
            message = f"{self.source}: {message}"
        logger.warning(message)
        self.warnings.append(message)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def raise_if_warnings(self, message: str) -> None:
        """Abort if anything has been reported so far."""
        if self.warnings:
            raise ModelDescriptionError(message, self.warnings)
