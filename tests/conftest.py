import os

import pytest

# Config is read at import time: pin the environment before math_solver loads.
os.environ["LOG_DIR"] = ""
os.environ["APP_ENV"] = "development"


def pytest_addoption(parser):
    """Add custom pytest command-line options"""
    parser.addoption(
        "--use-real-apis",
        action="store_true",
        default=False,
        help="Run integration tests against the real Gemini API (requires GEMINI_API_KEY)",
    )


@pytest.fixture
def sample_problem():
    """Sample math problem for testing"""
    return "Find the derivative of x^2 + 3x + 2"


@pytest.fixture
def structured_reply():
    """Model reply that follows the four-label format"""
    return (
        "OPERATION: derivative\n"
        "EXPRESSION: x^2 + 3x + 2\n"
        "RESULT: 2x + 3\n"
        "STEPS:\n"
        "1. Apply power rule to x^2: derivative is 2x\n"
        "2. Apply power rule to 3x: derivative is 3\n"
        "3. Derivative of constant 2 is 0"
    )


@pytest.fixture
def mock_openai_response():
    """Mock OpenAI API response"""
    return {"choices": [{"message": {"content": "The derivative is 2x + 3"}}]}
