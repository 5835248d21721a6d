from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# === Extraction ===


class ParsedSolution(BaseModel):
    """Structured fields extracted from free-text model output"""

    operation: str = Field(..., description="Mathematical operation performed")
    expression: str = Field(..., description="Expression being worked with")
    result: str = Field(..., description="Final answer")
    steps: str = Field(..., description="Step-by-step solution text")
    matched: dict[str, bool] = Field(
        default_factory=dict,
        description="Per field: True if extracted, False if defaulted",
    )

    @property
    def fully_matched(self) -> bool:
        return bool(self.matched) and all(self.matched.values())


# === Solver Outcome ===


class OutcomeKind(str, Enum):
    """Terminal states of one solve request"""

    SUCCESS = "success"
    DEGRADED_SUCCESS = "degraded_success"
    TERMINAL_FAILURE = "terminal_failure"


class SolveOutcome(BaseModel):
    """What the solver orchestrator produced for one problem"""

    kind: OutcomeKind
    problem: str
    parsed: Optional[ParsedSolution] = None
    explanation: Optional[str] = None
    fallback_answer: Optional[str] = None
    error: Optional[str] = None
    fallback_error: Optional[str] = None
    suspicious: bool = False


# === API Schemas ===


class SolveRequest(BaseModel):
    """Body of POST /solve. ``problem`` is checked by the solver, not here."""

    model_config = ConfigDict(extra="ignore")

    problem: Optional[Any] = Field(None, description="Math problem in plain language")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Analysis(_CamelModel):
    operation: str
    expression: str
    context: str


class Calculation(_CamelModel):
    method: str
    result: str
    operation: str
    steps: str
    confidence: str


class SolveResponse(_CamelModel):
    """Response of POST /solve for both structured and fallback answers"""

    success: bool = True
    original_problem: str = Field(..., alias="originalProblem")
    analysis: Analysis
    calculation: Calculation
    explanation: str
    timestamp: str
    processing_time: int = Field(
        ..., alias="processingTime", description="Elapsed milliseconds"
    )
    degraded: bool = False
    note: Optional[str] = None
