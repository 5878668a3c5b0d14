"""Shared test fixtures for all test modules."""

import pytest

from chatweave.chat.conversation import ChatModel
from chatweave.models.request import (
    ChatRequest,
    ParsedChatRequest,
    ParsedTextPart,
    ParsedVariablePart,
    ResolvedVariable,
)


def make_parsed_request(text: str = "Explain this file", variables=None) -> ParsedChatRequest:
    """Build a parsed request with one text part and optional resolved variables."""
    parts = [ParsedTextPart(text=text)]
    for name, value in (variables or {}).items():
        parts.append(
            ParsedVariablePart(
                variable_name=name,
                resolution=ResolvedVariable(variable=name, value=value),
            )
        )
    return ParsedChatRequest(request=ChatRequest(text=text), parts=parts)


@pytest.fixture
def chat():
    """Empty conversation with the default (ignore) terminal policy."""
    return ChatModel()


@pytest.fixture
def request_model(chat):
    """A request freshly added to the conversation."""
    return chat.add_request(make_parsed_request())


@pytest.fixture
def response_model(request_model):
    """The response owned by ``request_model``."""
    return request_model.response


@pytest.fixture
def response(response_model):
    """The content aggregator of ``response_model``."""
    return response_model.response


@pytest.fixture
def recorder():
    """
    Callable listener that records every event it receives.

    Usage:
        subscription = emitter.subscribe(recorder)
        assert len(recorder.events) == 1
    """

    class Recorder:
        def __init__(self):
            self.events = []

        def __call__(self, event):
            self.events.append(event)

        @property
        def kinds(self):
            return [getattr(e, "kind", None) for e in self.events]

    return Recorder()


@pytest.fixture
def parsed_request_factory():
    """The ``make_parsed_request`` helper, as a fixture."""
    return make_parsed_request
