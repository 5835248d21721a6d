from typing import Any

from math_solver.config import Config
from math_solver.errors import ProblemValidationError
from math_solver.logging_utils import StructuredLogger

logger = StructuredLogger("input_processor")


def validate_problem(problem: Any, request_id: str) -> str:
    """Return the problem text unchanged, or raise ProblemValidationError."""
    if not isinstance(problem, str) or not problem.strip():
        logger.warning(
            "Rejected problem",
            context={"reason": "missing_or_empty", "type": type(problem).__name__},
            request_id=request_id,
        )
        raise ProblemValidationError(
            "Problem statement is required and must be a non-empty string"
        )

    if len(problem) > Config.INPUT_PROCESSING.MAX_PROBLEM_LENGTH:
        logger.warning(
            "Rejected problem",
            context={"reason": "too_long", "length": len(problem)},
            request_id=request_id,
        )
        raise ProblemValidationError(
            f"Problem statement exceeds maximum length of {Config.INPUT_PROCESSING.MAX_PROBLEM_LENGTH} characters"
        )

    return problem
