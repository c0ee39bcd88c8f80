"""
Console question renderers built on click prompts
"""

from typing import Any, List, Optional

import click
from pydantic import Field

from ..core.journey.journey_models import QuestionDefinition, QuestionPayload
from ..core.registry.renderer_registry import ChangeHandler, QuestionRenderer, QuestionRendererRegistry, Registry


class InputPayload(QuestionPayload):
    """Free text question fields"""
    placeholder: Optional[str] = Field(default=None, description="Prompt hint")
    default: Optional[str] = Field(default=None, description="Suggested answer")
    hide_input: bool = Field(default=False, description="Mask typed characters")


class ChoicePayload(QuestionPayload):
    """Single or multiple choice question fields"""
    options: List[str] = Field(..., min_length=1, description="Choices in display order")


class ConfirmPayload(QuestionPayload):
    """Yes/no question fields"""
    default: bool = Field(default=False, description="Answer when the user just presses enter")


def _echo_question(question: QuestionDefinition, payload: QuestionPayload, error: Optional[str]) -> None:
    click.echo(click.style(question.prompt, bold=True))
    if error:
        click.echo(click.style(f"  {error}", fg="red"))
    elif payload.subheading:
        click.echo(click.style(f"  {payload.subheading}", dim=True))


class InputRenderer(QuestionRenderer):
    payload_model = InputPayload

    def render(self, question: QuestionDefinition, value: Any,
               on_change: ChangeHandler, error: Optional[str] = None) -> str:
        payload = self.parse_payload(question)
        _echo_question(question, payload, error)

        default = value if value is not None else payload.default
        text = click.prompt(
            payload.placeholder or "Answer",
            default=default or "",
            show_default=bool(default),
            hide_input=payload.hide_input,
        )
        on_change(question.name, text)
        return text


class SelectRenderer(QuestionRenderer):
    payload_model = ChoicePayload

    def render(self, question: QuestionDefinition, value: Any,
               on_change: ChangeHandler, error: Optional[str] = None) -> str:
        payload = self.parse_payload(question)
        _echo_question(question, payload, error)

        for number, option in enumerate(payload.options, start=1):
            click.echo(f"  {number}. {option}")

        default = payload.options.index(value) + 1 if value in payload.options else None
        number = click.prompt("Choose one", type=click.IntRange(1, len(payload.options)), default=default)
        choice = payload.options[number - 1]
        on_change(question.name, choice)
        return choice


class MultiSelectRenderer(QuestionRenderer):
    payload_model = ChoicePayload

    def render(self, question: QuestionDefinition, value: Any,
               on_change: ChangeHandler, error: Optional[str] = None) -> List[str]:
        payload = self.parse_payload(question)
        _echo_question(question, payload, error)

        for number, option in enumerate(payload.options, start=1):
            click.echo(f"  {number}. {option}")

        current = [str(payload.options.index(option) + 1) for option in (value or []) if option in payload.options]
        raw = click.prompt("Choose any (comma separated)", default=",".join(current), show_default=bool(current))
        choices = parse_selection(raw, payload.options)
        on_change(question.name, choices)
        return choices


class ConfirmRenderer(QuestionRenderer):
    payload_model = ConfirmPayload

    def render(self, question: QuestionDefinition, value: Any,
               on_change: ChangeHandler, error: Optional[str] = None) -> bool:
        payload = self.parse_payload(question)
        if error:
            click.echo(click.style(f"  {error}", fg="red"))

        default = value if isinstance(value, bool) else payload.default
        answer = click.confirm(question.prompt, default=default)
        on_change(question.name, answer)
        return answer


def parse_selection(raw: str, options: List[str]) -> List[str]:
    """Turn '1, 3' into the matching options; unknown numbers are skipped"""
    selected: List[str] = []
    for token in raw.split(","):
        token = token.strip()
        if not token.isdigit():
            continue
        number = int(token)
        if 1 <= number <= len(options) and options[number - 1] not in selected:
            selected.append(options[number - 1])
    return selected


def register_defaults(registry: QuestionRendererRegistry = Registry) -> QuestionRendererRegistry:
    """Register the built-in console renderers"""
    registry.register("input", InputRenderer())
    registry.register("select", SelectRenderer())
    registry.register("multiselect", MultiSelectRenderer())
    registry.register("confirm", ConfirmRenderer())
    return registry
