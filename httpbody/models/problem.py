"""RFC 9457 problem details payload."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from .results import DecodeResult


class ProblemDetails(BaseModel):
    """Structured error body sent by servers as ``application/problem+json``.

    Extension members are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    title: Optional[str] = None
    status: Optional[int] = None
    detail: Optional[str] = None
    instance: Optional[str] = None

    @property
    def extensions(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def to_result(self, status_code: Optional[int] = None) -> DecodeResult[Any]:
        """Wrap as a failed DecodeResult; the HTTP status wins over the body's ``status``."""
        if status_code is None:
            status_code = self.status if self.status is not None else 500
        return DecodeResult.from_problem(self, status_code)
