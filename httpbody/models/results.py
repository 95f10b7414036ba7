from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from .problem import ProblemDetails

T = TypeVar("T")

GENERIC_FAILURE_TITLE = "Unexpected response"
GENERIC_FAILURE_DETAIL = "The response could not be processed."


@dataclass(frozen=True)
class DecodeResult(Generic[T]):
    """
    Value-or-problem outcome of a result-wrapped decode.

    Only ``status_code`` and the problem's own fields reach callers; exception
    text from a failed parse goes to the log and never into ``problem``.
    """

    status_code: int
    succeeded: bool = False
    value: Optional[T] = None
    problem: Optional["ProblemDetails"] = None

    @classmethod
    def success(cls, value: T, status_code: int) -> "DecodeResult[T]":
        return cls(status_code=status_code, succeeded=True, value=value)

    @classmethod
    def failure(
        cls,
        title: str = GENERIC_FAILURE_TITLE,
        detail: str = GENERIC_FAILURE_DETAIL,
        status_code: int = 500,
    ) -> "DecodeResult[T]":
        from .problem import ProblemDetails

        problem = ProblemDetails(title=title, detail=detail, status=status_code)
        return cls(status_code=status_code, problem=problem)

    @classmethod
    def from_problem(cls, problem: "ProblemDetails", status_code: int) -> "DecodeResult[T]":
        return cls(status_code=status_code, problem=problem)

    @classmethod
    def empty(cls, status_code: int) -> "DecodeResult[T]":
        """No body to decode; neither a value nor a problem."""
        return cls(status_code=status_code, succeeded=200 <= status_code <= 299)

    @property
    def is_empty(self) -> bool:
        return self.value is None and self.problem is None
