"""
Exceptions raised by the result matching engine.

Data-quality problems (malformed conditions, missing scores or codes) are
never raised; they are absorbed by the matching chain. These exceptions
cover the cases a caller explicitly asks to be told about.
"""

from typing import Any, Dict, Optional


class ResultMatchingError(Exception):
    """Custom exception for result matching errors."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize with message, optional cause, and structured context."""
        self.message = message
        self.original_error = original_error
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context."""
        msg = self.message
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            msg = f"{msg} (context: {ctx_str})"
        if self.original_error:
            msg = f"{msg} - caused by: {str(self.original_error)}"
        return msg


class NoResultsDefinedError(ResultMatchingError):
    """The test has no results, so no outcome can be produced."""

    def __init__(self, test_id: Any):
        self.test_id = test_id
        super().__init__("Test has no defined results", context={"test_id": test_id})
