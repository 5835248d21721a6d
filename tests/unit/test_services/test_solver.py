import time

import pytest

from math_solver.errors import TerminalFailure, UpstreamCallFailure
from math_solver.models.schemas import OutcomeKind, SolveOutcome
from math_solver.orchestrators.solver.service import (
    FALLBACK_METHOD,
    STRUCTURED_METHOD,
    build_solve_response,
    solve_problem,
)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_solve_success(sample_problem, structured_reply, make_llm):
    """Test structured reply + explanation yields SUCCESS."""
    fake = make_llm([structured_reply, "  The power rule does the work.  "])

    outcome = await solve_problem(sample_problem, fake, "test-req-1")

    assert outcome.kind == OutcomeKind.SUCCESS
    assert outcome.parsed is not None
    assert outcome.parsed.operation == "derivative"
    assert outcome.parsed.result == "2x + 3"
    assert outcome.explanation == "The power rule does the work."
    assert outcome.suspicious is False
    assert len(fake.prompts) == 2
    assert sample_problem in fake.prompts[0]
    assert "OPERATION:" in fake.prompts[0]
    assert "Final Result: 2x + 3" in fake.prompts[1]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_solve_unstructured_reply_is_still_success(make_llm):
    """Test a reply without labels is parsed with defaults, not a fallback."""
    fake = make_llm(["It is 4.", "Two plus two is four."])

    outcome = await solve_problem("2 + 2", fake, "test-req-2")

    assert outcome.kind == OutcomeKind.SUCCESS
    assert outcome.parsed.expression == "2 + 2"
    assert not any(outcome.parsed.matched.values())


@pytest.mark.unit
@pytest.mark.asyncio
async def test_solve_flags_suspicious_derivative(make_llm):
    """Test a numeric derivative result is flagged but still successful."""
    fake = make_llm(["OPERATION: derivative\nRESULT: 7", "Explanation"])

    outcome = await solve_problem("derivative of 7x", fake, "test-req-3")

    assert outcome.kind == OutcomeKind.SUCCESS
    assert outcome.suspicious is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_primary_failure_uses_fallback(make_llm):
    """Test a failed structured call leads to DEGRADED_SUCCESS."""
    fake = make_llm([UpstreamCallFailure("timeout"), "x = 2 or x = -2"])

    outcome = await solve_problem("Solve x^2 - 4 = 0", fake, "test-req-4")

    assert outcome.kind == OutcomeKind.DEGRADED_SUCCESS
    assert outcome.fallback_answer == "x = 2 or x = -2"
    assert outcome.error == "timeout"
    assert len(fake.prompts) == 2
    assert "OPERATION:" not in fake.prompts[1]
    assert "Solve x^2 - 4 = 0" in fake.prompts[1]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_explanation_failure_uses_fallback(structured_reply, make_llm):
    """Test the explanation call is part of the primary attempt."""
    fake = make_llm([structured_reply, RuntimeError("503"), "2x + 3"])

    outcome = await solve_problem("d/dx x^2 + 3x + 2", fake, "test-req-5")

    assert outcome.kind == OutcomeKind.DEGRADED_SUCCESS
    assert outcome.fallback_answer == "2x + 3"
    assert len(fake.prompts) == 3


@pytest.mark.unit
@pytest.mark.asyncio
async def test_both_attempts_fail(make_llm):
    """Test TERMINAL_FAILURE after exactly one fallback attempt."""
    fake = make_llm([ConnectionError("network down"), ValueError()])

    outcome = await solve_problem("Integrate 2x", fake, "test-req-6")

    assert outcome.kind == OutcomeKind.TERMINAL_FAILURE
    assert outcome.error == "network down"
    assert outcome.fallback_error == "ValueError"
    assert len(fake.prompts) == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_build_response_success(structured_reply, make_llm):
    """Test SUCCESS renders the structured response."""
    fake = make_llm([structured_reply, "Explained."])
    outcome = await solve_problem("p", fake, "test-req-7")

    response = build_solve_response(outcome, time.time())
    data = response.model_dump(by_alias=True, exclude_none=True)

    assert data["success"] is True
    assert data["originalProblem"] == "p"
    assert data["analysis"] == {
        "operation": "derivative",
        "expression": "x^2 + 3x + 2",
        "context": "Solving derivative problem using AI analysis",
    }
    assert data["calculation"]["method"] == STRUCTURED_METHOD
    assert data["calculation"]["confidence"] == "high"
    assert data["explanation"] == "Explained."
    assert data["degraded"] is False
    assert "note" not in data
    assert data["processingTime"] >= 0
    assert data["timestamp"].endswith("Z")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_build_response_degraded(make_llm):
    """Test DEGRADED_SUCCESS renders the fallback marker fields."""
    fake = make_llm([Exception("boom"), "The answer is 4"])
    outcome = await solve_problem("2 + 2", fake, "test-req-8")

    data = build_solve_response(outcome, time.time()).model_dump(by_alias=True)

    assert data["success"] is True
    assert data["degraded"] is True
    assert data["calculation"]["method"] == FALLBACK_METHOD
    assert data["calculation"]["result"] == "The answer is 4"
    assert data["calculation"]["operation"] == "solve"
    assert data["analysis"]["operation"] == "general_solution"
    assert data["analysis"]["expression"] == "2 + 2"
    assert data["note"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_build_response_terminal_raises(make_llm):
    """Test TERMINAL_FAILURE is surfaced as TerminalFailure."""
    fake = make_llm([Exception("primary"), Exception("secondary")])
    outcome = await solve_problem("p", fake, "test-req-9")

    with pytest.raises(TerminalFailure) as exc_info:
        build_solve_response(outcome, time.time())

    payload = exc_info.value.to_payload()
    assert payload["success"] is False
    assert payload["details"] == "primary"
    assert payload["fallbackDetails"] == "secondary"
    assert "troubleshooting" in payload


@pytest.mark.unit
def test_build_response_success_without_parsed_raises():
    """Test a SUCCESS outcome with nothing parsed is not rendered as a solution."""
    outcome = SolveOutcome(kind=OutcomeKind.SUCCESS, problem="p")

    with pytest.raises(TerminalFailure):
        build_solve_response(outcome, time.time())
