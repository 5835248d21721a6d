from fastapi import APIRouter

from math_solver.config import Config
from math_solver.orchestrators.solver.service import STRUCTURED_METHOD

router = APIRouter()

AVAILABLE_OPERATIONS = [
    "derivative",
    "integral",
    "simplify",
    "factor",
    "solve",
    "find_zeros",
    "expand",
    "evaluate",
]

EXAMPLE_PROMPTS = [
    "Find the derivative of x^2 + 3x + 2",
    "Integrate 2x + 3",
    "Factor x^2 + 5x + 6",
    "Simplify (x + 1)^2",
    "Solve x^2 - 4 = 0",
]

EXAMPLE_PROBLEMS = [
    {
        "problem": "Find the derivative of x^2 + 3x + 2",
        "expectedOperation": "derivative",
        "expectedResult": "2x + 3",
        "difficulty": "basic",
    },
    {
        "problem": "Integrate 2x + 3 dx",
        "expectedOperation": "integral",
        "expectedResult": "x^2 + 3x + C",
        "difficulty": "basic",
    },
    {
        "problem": "Factor x^2 + 5x + 6",
        "expectedOperation": "factor",
        "expectedResult": "(x + 2)(x + 3)",
        "difficulty": "intermediate",
    },
    {
        "problem": "Simplify (x^2 + 2x + 1)",
        "expectedOperation": "simplify",
        "expectedResult": "(x + 1)^2",
        "difficulty": "basic",
    },
    {
        "problem": "Find the zeros of x^2 - 4",
        "expectedOperation": "find_zeros",
        "expectedResult": "x = 2, x = -2",
        "difficulty": "basic",
    },
]

KNOWN_ENDPOINTS = [
    "/solve",
    "/health",
    "/operations",
    "/examples",
    "/metrics",
    "/logs/{request_id}",
]


@router.get("/operations")
async def operations():
    """Mathematical operations the solver prompt asks the model to name."""
    return {
        "availableOperations": AVAILABLE_OPERATIONS,
        "method": STRUCTURED_METHOD,
        "description": "Mathematical operations supported by the Gemini-powered solver",
        "examples": EXAMPLE_PROMPTS,
    }


@router.get("/examples")
async def examples():
    return {
        "examples": EXAMPLE_PROBLEMS,
        "usage": "POST to /solve with { problem: 'your math problem here' }",
    }


@router.get("/")
async def root():
    """API documentation payload."""
    return {
        "name": Config.APP.NAME,
        "version": Config.APP.VERSION,
        "description": "AI-powered mathematical problem solver using Google Gemini",
        "endpoints": {
            "POST /solve": "Solve a mathematical problem",
            "GET /health": "Check server health and configuration",
            "GET /operations": "List supported mathematical operations",
            "GET /examples": "Get example problems and expected results",
            "GET /metrics": "Prometheus metrics",
            "GET /logs/{request_id}": "Log lines recorded for one request",
        },
        "usage": {
            "solve": {
                "method": "POST",
                "url": "/solve",
                "body": {"problem": "Find the derivative of x^2 + 3x"},
                "response": "Structured solution with steps and explanation",
            }
        },
        "ai_model": Config.GEMINI.MODEL_NAME,
        "frontend": Config.CORS.FRONTEND_URL,
    }
