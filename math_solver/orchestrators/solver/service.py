import asyncio
import time
from datetime import datetime, timezone
from typing import Protocol

from math_solver.errors import TerminalFailure
from math_solver.logging_utils import StructuredLogger
from math_solver.metrics import (
    solver_errors_total,
    solver_llm_calls_total,
    solver_llm_duration_seconds,
    solver_outcomes_total,
)
from math_solver.models.schemas import (
    Analysis,
    Calculation,
    OutcomeKind,
    SolveOutcome,
    SolveResponse,
)
from math_solver.orchestrators.solver.prompts import (
    EXPLANATION_PROMPT,
    FALLBACK_PROMPT,
    SOLVE_PROMPT,
)
from math_solver.services.extractor.service import check_result, extract_solution

logger = StructuredLogger("solver")

STRUCTURED_METHOD = "gemini-ai-enhanced"
FALLBACK_METHOD = "gemini-fallback"
FALLBACK_EXPLANATION = "Used simplified solution method due to parsing complexity."
FALLBACK_NOTE = "Fallback method used - solution may be less structured"


class CompletionClient(Protocol):
    def complete(self, prompt: str) -> str: ...


def _error_message(e: Exception) -> str:
    return str(e) or type(e).__name__


async def _call_llm(
    client: CompletionClient, prompt: str, call: str, request_id: str
) -> str:
    """Run one blocking completion off the event loop, with timing and metrics."""
    start_time = time.time()
    logger.info(f"  → LLM ({call})", request_id=request_id)
    try:
        text = await asyncio.to_thread(client.complete, prompt)
    except Exception as e:
        duration = time.time() - start_time
        solver_llm_duration_seconds.labels(call=call).observe(duration)
        solver_llm_calls_total.labels(call=call, status="error").inc()
        solver_errors_total.labels(error_type=f"{call}_error").inc()
        logger.error(
            f"LLM ({call}) failed ({duration:.1f}s): {_error_message(e)}",
            context={"error_type": type(e).__name__},
            request_id=request_id,
        )
        raise

    duration = time.time() - start_time
    solver_llm_duration_seconds.labels(call=call).observe(duration)
    solver_llm_calls_total.labels(call=call, status="ok").inc()
    logger.info(
        f"  ✓ LLM ({call}) ({duration:.1f}s): {len(text)} chars",
        request_id=request_id,
    )
    return text


async def _primary_attempt(
    problem: str, client: CompletionClient, request_id: str
) -> SolveOutcome:
    """Structured prompt, extraction, then a plain-language explanation."""
    raw = await _call_llm(
        client, SOLVE_PROMPT.format(problem=problem), "solve", request_id
    )
    logger.debug("Raw model response", context={"text": raw}, request_id=request_id)

    parsed = extract_solution(raw, problem)
    logger.info(
        "Parsed results",
        context={
            "operation": parsed.operation,
            "expression": parsed.expression,
            "result": parsed.result,
            "missing": [f for f, ok in parsed.matched.items() if not ok] or "none",
        },
        request_id=request_id,
    )
    suspicious = check_result(parsed, request_id)

    explanation = await _call_llm(
        client,
        EXPLANATION_PROMPT.format(
            problem=problem,
            operation=parsed.operation,
            expression=parsed.expression,
            result=parsed.result,
            steps=parsed.steps,
        ),
        "explanation",
        request_id,
    )

    return SolveOutcome(
        kind=OutcomeKind.SUCCESS,
        problem=problem,
        parsed=parsed,
        explanation=explanation.strip(),
        suspicious=suspicious,
    )


async def solve_problem(
    problem: str, client: CompletionClient, request_id: str
) -> SolveOutcome:
    """
    Solve one problem: structured attempt first, one free-form fallback on
    any error, never more.

    Returns a SolveOutcome whose kind is SUCCESS, DEGRADED_SUCCESS or
    TERMINAL_FAILURE. Does not raise for upstream failures.
    """
    logger.info(
        "Solving problem",
        context={"problem": problem[:100]},
        request_id=request_id,
    )

    try:
        outcome = await _primary_attempt(problem, client, request_id)
    except Exception as primary_error:
        logger.error(
            "Structured solve failed, attempting fallback",
            context={
                "error": _error_message(primary_error),
                "error_type": type(primary_error).__name__,
            },
            request_id=request_id,
        )
        try:
            answer = await _call_llm(
                client, FALLBACK_PROMPT.format(problem=problem), "fallback", request_id
            )
            outcome = SolveOutcome(
                kind=OutcomeKind.DEGRADED_SUCCESS,
                problem=problem,
                fallback_answer=answer.strip(),
                error=_error_message(primary_error),
            )
        except Exception as fallback_error:
            logger.error(
                "Fallback also failed",
                context={
                    "error": _error_message(fallback_error),
                    "error_type": type(fallback_error).__name__,
                },
                request_id=request_id,
            )
            outcome = SolveOutcome(
                kind=OutcomeKind.TERMINAL_FAILURE,
                problem=problem,
                error=_error_message(primary_error),
                fallback_error=_error_message(fallback_error),
            )

    solver_outcomes_total.labels(outcome=outcome.kind.value).inc()
    logger.info(
        "Solve finished",
        context={"outcome": outcome.kind.value},
        request_id=request_id,
    )
    return outcome


def build_solve_response(outcome: SolveOutcome, started_at: float) -> SolveResponse:
    """Render a successful outcome; raise TerminalFailure for a failed one."""
    if outcome.kind == OutcomeKind.TERMINAL_FAILURE:
        raise TerminalFailure(outcome.error or "Unknown error", outcome.fallback_error)

    timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    processing_time = int((time.time() - started_at) * 1000)

    if outcome.kind == OutcomeKind.DEGRADED_SUCCESS:
        return SolveResponse(
            original_problem=outcome.problem,
            analysis=Analysis(
                operation="general_solution",
                expression=outcome.problem,
                context="Fallback solution method used",
            ),
            calculation=Calculation(
                method=FALLBACK_METHOD,
                result=outcome.fallback_answer or "",
                operation="solve",
                steps="Solution provided directly by AI",
                confidence="low",
            ),
            explanation=FALLBACK_EXPLANATION,
            timestamp=timestamp,
            processing_time=processing_time,
            degraded=True,
            note=FALLBACK_NOTE,
        )

    parsed = outcome.parsed
    if parsed is None:
        raise TerminalFailure(
            outcome.error or "No parsed solution", outcome.fallback_error
        )

    return SolveResponse(
        original_problem=outcome.problem,
        analysis=Analysis(
            operation=parsed.operation,
            expression=parsed.expression,
            context=f"Solving {parsed.operation} problem using AI analysis",
        ),
        calculation=Calculation(
            method=STRUCTURED_METHOD,
            result=parsed.result,
            operation=parsed.operation,
            steps=parsed.steps,
            confidence="high",
        ),
        explanation=outcome.explanation or "",
        timestamp=timestamp,
        processing_time=processing_time,
    )
