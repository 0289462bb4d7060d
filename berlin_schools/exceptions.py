"""Error types raised by the enrichment pipeline.

``FetchError`` is fatal and aborts a pipeline run. ``ParseError`` and
``GeocodeError`` are scoped to one row or one project and are absorbed by the
stage that detects them.
"""

from typing import Any


class PipelineError(Exception):
    """Base class for all pipeline errors."""

    code = "PIPELINE_ERROR"

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
        }


class FetchError(PipelineError):
    """A source could not be retrieved or had the wrong shape."""

    code = "FETCH_ERROR"

    def __init__(self, source: str, reason: str, *, status: int | None = None):
        detail = f"{source}: {reason}" if status is None else f"{source}: {status} {reason}"
        super().__init__(
            detail,
            context={"source": source, "status": status, "reason": reason},
        )
        self.source = source
        self.reason = reason
        self.status = status


class ParseError(PipelineError):
    """A single delimited row could not be parsed."""

    code = "PARSE_ERROR"

    def __init__(self, line: str, reason: str):
        super().__init__(f"{reason}: {line!r}", context={"line": line})
        self.line = line
        self.reason = reason


class GeocodeError(PipelineError):
    """The address lookup service failed for one address."""

    code = "GEOCODE_ERROR"

    def __init__(self, address: str, reason: str):
        super().__init__(f"{address}: {reason}", context={"address": address})
        self.address = address
        self.reason = reason
