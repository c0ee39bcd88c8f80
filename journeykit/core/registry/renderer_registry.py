"""
Question renderer registry - maps question type tags to renderers

Renderers are registered explicitly at startup (see
journeykit.renderers.console.register_defaults). A session builds its
dispatch table from the registry and overlays its own overrides.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional, Type

from loguru import logger
from pydantic import ValidationError

from ..exceptions import ConfigError, UnknownQuestionType
from ..journey.journey_models import JourneyConfig, QuestionDefinition, QuestionPayload


ChangeHandler = Callable[..., Any]


class QuestionRenderer(ABC):
    """
    Capability that presents one question type and reports answers

    Subclasses set payload_model to the pydantic model of their
    type-specific fields and implement render().
    """

    payload_model: Type[QuestionPayload] = QuestionPayload

    @abstractmethod
    def render(self, question: QuestionDefinition, value: Any,
               on_change: ChangeHandler, error: Optional[str] = None) -> Any:
        """
        Present the question

        Args:
            question: Question definition
            value: Read-only copy of the current answer
            on_change: Called as on_change(name, value) with the new answer
            error: Error message to display, if any
        """

    def parse_payload(self, question: QuestionDefinition) -> QuestionPayload:
        return self.payload_model.model_validate(question.payload)


class QuestionRendererRegistry:
    """Mapping from type tag to renderer; later registrations win"""

    def __init__(self):
        self._renderers: Dict[str, QuestionRenderer] = {}
        self.logger = logger

    def register(self, type_tag: str, renderer: QuestionRenderer) -> None:
        if type_tag in self._renderers:
            self.logger.debug(f"Replacing renderer for question type '{type_tag}'")
        self._renderers[type_tag] = renderer

    def get(self, type_tag: str) -> QuestionRenderer:
        renderer = self._renderers.get(type_tag)
        if renderer is None:
            raise UnknownQuestionType(type_tag)
        return renderer

    def get_all(self) -> Dict[str, QuestionRenderer]:
        return dict(self._renderers)

    def is_registered(self, type_tag: str) -> bool:
        return type_tag in self._renderers

    def dispatch_table(self, overrides: Optional[Mapping[str, QuestionRenderer]] = None) -> Dict[str, QuestionRenderer]:
        """Registry defaults with session overrides on top"""
        return {**self._renderers, **(overrides or {})}

    def check_config(self, config: JourneyConfig,
                     overrides: Optional[Mapping[str, QuestionRenderer]] = None) -> None:
        """
        Fail fast on questions no renderer can handle

        Raises:
            UnknownQuestionType: A question's type has no renderer
            ConfigError: A question's payload does not fit its renderer
        """
        table = self.dispatch_table(overrides)
        for question in config.iter_questions():
            renderer = table.get(question.type)
            if renderer is None:
                raise UnknownQuestionType(question.type)

            payload_model = getattr(renderer, "payload_model", None)
            if payload_model is None:
                continue
            try:
                payload_model.model_validate(question.payload)
            except ValidationError as e:
                raise ConfigError(f"Invalid fields for question '{question.name}' ({question.type}): {e}")

        self.logger.debug(f"Checked {len(config.question_names())} questions against {len(table)} renderers")

    def clear(self) -> None:
        self._renderers.clear()


# Process-wide registry shared by sessions
Registry = QuestionRendererRegistry()
