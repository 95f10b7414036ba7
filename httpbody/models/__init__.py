from .results import (
    DecodeResult,
    GENERIC_FAILURE_TITLE,
    GENERIC_FAILURE_DETAIL,
)

from .problem import ProblemDetails

__all__ = [
    # Result Models
    "DecodeResult",
    "GENERIC_FAILURE_TITLE",
    "GENERIC_FAILURE_DETAIL",

    # Payload Models
    "ProblemDetails",
]
