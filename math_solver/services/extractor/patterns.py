import re

DEFAULT_OPERATION = "mathematical_operation"
DEFAULT_RESULT = "Solution provided in explanation"
DEFAULT_STEPS = "Detailed steps provided in explanation below"

FIELDS = ("operation", "expression", "result", "steps")

# Single-line fields: label keyword is case-insensitive, value runs to end of line.
LINE_FIELD_PATTERNS: dict[str, re.Pattern[str]] = {
    "operation": re.compile(r"(?i:OPERATION):[ \t]*(?P<value>[^\n]*)"),
    "expression": re.compile(r"(?i:EXPRESSION):[ \t]*(?P<value>[^\n]*)"),
    "result": re.compile(r"(?i:RESULT):[ \t]*(?P<value>[^\n]*)"),
}

# STEPS captures everything after its label; the body is cut in the service.
STEPS_PATTERN = re.compile(r"(?i:STEPS):[ \t]*(?P<body>.*)", re.DOTALL)

# A new section header ends the STEPS body: any ALL-CAPS label, or one of the
# four solution labels in any case. Mixed-case prose such as "Note:" does not.
SECTION_LABEL_PATTERN = re.compile(
    r"^(?:[A-Z][A-Z_]+|(?i:operation|expression|result|steps)):"
)

DIGITS_ONLY_PATTERN = re.compile(r"^\d+$")
