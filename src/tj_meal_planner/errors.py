"""
Error taxonomy for the planning pipeline.

Every error carries the pipeline stage it escaped from (set by
``pipeline_stage``) so callers get a single failure that says where and why.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional


class PlannerError(Exception):
    """Base class for all planner failures.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context
        stage: pipeline stage that failed (derive_terms, retrieve_products, ...)
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.stage = stage

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.stage:
            payload["stage"] = self.stage
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class ValidationError(PlannerError):
    """Missing or malformed caller input. Raised before any external call."""

    http_status = 400


class GenerationParseError(PlannerError):
    """The generative service answered, but not in the expected shape.

    ``raw`` keeps the untouched response text for diagnostics.
    """

    http_status = 502

    def __init__(
        self,
        message: str,
        raw: str,
        details: Optional[Mapping[str, Any]] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message, details=details, stage=stage)
        self.raw = raw

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["raw"] = self.raw
        return payload


class ExternalServiceError(PlannerError):
    """Network failure, timeout or non-success answer from a collaborator."""

    http_status = 502

    def __init__(
        self,
        message: str,
        service: str,
        details: Optional[Mapping[str, Any]] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message, details=details, stage=stage)
        self.service = service

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["service"] = self.service
        return payload


@contextmanager
def pipeline_stage(name: str) -> Iterator[None]:
    """Tag any PlannerError escaping the block with the stage name."""
    try:
        yield
    except PlannerError as exc:
        if exc.stage is None:
            exc.stage = name
        raise
