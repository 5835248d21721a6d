from typing import Any, Optional

SUPPORTED_OPERATIONS = [
    "derivatives",
    "integrals",
    "factoring",
    "simplification",
    "solving equations",
]


class SolverError(Exception):
    """Base class for errors rendered as ``success: false`` payloads."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": False, "error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ProblemValidationError(SolverError):
    """Problem text missing, not a string, empty, or too long."""

    status_code = 400


class UpstreamUnavailable(SolverError):
    """No LLM client could be built (missing API key)."""

    status_code = 500

    def __init__(
        self,
        message: str = "Gemini AI not properly initialized",
        details: Optional[str] = "GEMINI_API_KEY environment variable may be missing or invalid",
    ):
        super().__init__(message, details)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["troubleshooting"] = {
            "checkApiKey": "Ensure GEMINI_API_KEY is set in the service environment",
            "supportedOperations": SUPPORTED_OPERATIONS,
        }
        return payload


class UpstreamCallFailure(SolverError):
    """
    The model call raised or returned no usable text.

    Internal: the solver turns it into a fallback or a TerminalFailure, so it
    never reaches a client as its own response.
    """


class TerminalFailure(SolverError):
    """Both the structured attempt and the fallback attempt failed."""

    status_code = 500

    def __init__(self, primary_error: str, fallback_error: Optional[str] = None):
        super().__init__("Failed to solve math problem", primary_error)
        self.fallback_error = fallback_error

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.fallback_error:
            payload["fallbackDetails"] = self.fallback_error
        payload["troubleshooting"] = {
            "checkApiKey": "Ensure GEMINI_API_KEY is properly configured",
            "checkProblem": "Verify the math problem is clearly stated",
            "supportedOperations": SUPPORTED_OPERATIONS,
        }
        return payload
