"""
Global pytest configuration for journeykit
"""

import pytest

from journeykit.core.journey import rules
from journeykit.core.journey.journey_models import JourneyConfig
from journeykit.core.registry.renderer_registry import QuestionRenderer, QuestionRendererRegistry


class RecordingRenderer(QuestionRenderer):
    """Renderer that records what it was asked to draw"""

    def __init__(self, answer=None):
        self.answer = answer
        self.calls = []

    def render(self, question, value, on_change, error=None):
        self.calls.append({"name": question.name, "value": value, "error": error})
        if self.answer is not None:
            on_change(question.name, self.answer)
        return f"<{question.type}:{question.name}>"


def two_step_data():
    """firstName (min length 2) then email"""
    return [
        {
            "header": "Let's get started",
            "subheader": "Tell us about yourself",
            "questions": [
                {
                    "name": "firstName",
                    "prompt": "What's your first name?",
                    "type": "input",
                    "placeholder": "Enter your first name",
                    "validation": rules.string(min_length=2, message="Name must be at least 2 characters"),
                },
            ],
        },
        {
            "header": "Contact Info",
            "questions": [
                {
                    "name": "email",
                    "prompt": "What is your email address?",
                    "type": "input",
                    "validation": rules.email(message="Please enter a valid email"),
                },
            ],
        },
    ]


@pytest.fixture
def two_step_config():
    return JourneyConfig.model_validate(two_step_data())


@pytest.fixture
def three_step_config():
    """Two ruled steps plus an optional-only step in the middle"""
    data = two_step_data()
    data.insert(1, {
        "header": "Extras",
        "questions": [
            {"name": "nickname", "prompt": "Nickname?", "type": "input"},
        ],
    })
    return JourneyConfig.model_validate(data)


@pytest.fixture
def recording_renderer():
    return RecordingRenderer()


@pytest.fixture
def registry(recording_renderer):
    """Fresh registry with the input type mapped to a recording renderer"""
    registry = QuestionRendererRegistry()
    registry.register("input", recording_renderer)
    return registry
