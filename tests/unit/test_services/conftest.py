from typing import Union

import pytest

from math_solver.clients.llm import get_llm_client
from math_solver.main import app as solver_app


class FakeLLMClient:
    """
    Stand-in for LLMClient. Replies are consumed in order; an Exception
    instance in the list is raised instead of returned.
    """

    def __init__(self, replies: list[Union[str, Exception]]):
        self.replies = list(replies)
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("FakeLLMClient called more times than expected")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_llm():
    """Factory that builds a FakeLLMClient and injects it into the app."""

    def _install(*replies: Union[str, Exception]) -> FakeLLMClient:
        fake = FakeLLMClient(list(replies))
        solver_app.dependency_overrides[get_llm_client] = lambda: fake
        return fake

    yield _install
    solver_app.dependency_overrides.clear()


@pytest.fixture
def no_llm():
    """Simulate a missing API key."""
    solver_app.dependency_overrides[get_llm_client] = lambda: None
    yield
    solver_app.dependency_overrides.clear()


@pytest.fixture
def app():
    return solver_app


@pytest.fixture
def make_llm():
    """Build a FakeLLMClient without installing it in the app."""
    return FakeLLMClient
