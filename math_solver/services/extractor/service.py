from typing import Optional

from math_solver.logging_utils import StructuredLogger
from math_solver.metrics import (
    solver_fields_extracted_total,
    solver_suspicious_results_total,
)
from math_solver.models.schemas import ParsedSolution
from math_solver.services.extractor.patterns import (
    DEFAULT_OPERATION,
    DEFAULT_RESULT,
    DEFAULT_STEPS,
    DIGITS_ONLY_PATTERN,
    FIELDS,
    LINE_FIELD_PATTERNS,
    SECTION_LABEL_PATTERN,
    STEPS_PATTERN,
)

logger = StructuredLogger("extractor")


def _match_line_field(field: str, text: str) -> Optional[str]:
    """Return the trimmed single-line value after ``FIELD:``, or None."""
    match = LINE_FIELD_PATTERNS[field].search(text)
    if not match:
        return None
    value = match.group("value").strip()
    return value or None


def _match_steps(text: str) -> Optional[str]:
    """
    Return the STEPS body, or None.

    The body may start on the label line or on a later line. It stops at the
    first blank line after content, at the next section label line, or at
    the end of the text.
    """
    match = STEPS_PATTERN.search(text)
    if not match:
        return None

    lines = match.group("body").split("\n")
    collected: list[str] = []

    first = lines[0].strip()
    if first:
        collected.append(first)

    for line in lines[1:]:
        if not line.strip():
            if collected:
                break
            continue
        if SECTION_LABEL_PATTERN.match(line):
            break
        collected.append(line)

    steps = "\n".join(collected).strip()
    return steps or None


def extract_solution(text: str, problem: str) -> ParsedSolution:
    """
    Extract OPERATION / EXPRESSION / RESULT / STEPS from model output.

    Every field is matched independently, so a malformed line only costs that
    one field its value. Missing fields get their defaults; EXPRESSION defaults
    to the trimmed problem text.
    """
    text = (text or "").replace("\r\n", "\n")

    found = {
        "operation": _match_line_field("operation", text),
        "expression": _match_line_field("expression", text),
        "result": _match_line_field("result", text),
        "steps": _match_steps(text),
    }
    defaults = {
        "operation": DEFAULT_OPERATION,
        "expression": problem.strip(),
        "result": DEFAULT_RESULT,
        "steps": DEFAULT_STEPS,
    }

    matched = {field: found[field] is not None for field in FIELDS}
    for field in FIELDS:
        solver_fields_extracted_total.labels(
            field=field, matched=str(matched[field]).lower()
        ).inc()

    return ParsedSolution(
        operation=found["operation"] or defaults["operation"],
        expression=found["expression"] or defaults["expression"],
        result=found["result"] or defaults["result"],
        steps=found["steps"] or defaults["steps"],
        matched=matched,
    )


def is_suspicious_derivative(parsed: ParsedSolution) -> bool:
    """A derivative whose result is a bare number is probably wrong."""
    return "deriv" in parsed.operation.lower() and bool(
        DIGITS_ONLY_PATTERN.match(parsed.result)
    )


def check_result(parsed: ParsedSolution, request_id: Optional[str] = None) -> bool:
    """Log (never reject) results that look wrong. Returns True if flagged."""
    if not is_suspicious_derivative(parsed):
        return False

    solver_suspicious_results_total.inc()
    logger.warning(
        "Derivative result appears to be just a number, this might be incorrect",
        context={"operation": parsed.operation, "result": parsed.result},
        request_id=request_id,
    )
    return True
