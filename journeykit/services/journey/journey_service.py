"""
Journey Service - Internal API for journey sessions
Composes registry, form state, validation and navigation per render cycle
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import click
from loguru import logger
from pydantic import ValidationError

from ...core.config import ConfigLoader
from ...core.exceptions import ConfigError, UnknownQuestionType
from ...core.journey.journey_models import JourneyConfig, Progress, QuestionDefinition, StepDefinition
from ...core.journey.navigation import (
    BeforeBackGuard,
    BeforeNextGuard,
    CompletedCallback,
    ExitCallback,
    NavigationController,
    StepChangeCallback,
)
from ...core.journey.validation import ValidationResult, validate_step
from ...core.registry.renderer_registry import QuestionRenderer, QuestionRendererRegistry, Registry


QuestionRenderHook = Callable[[QuestionDefinition, Callable[[QuestionDefinition], Any]], Any]

ACTIONS = ["next", "back", "edit", "quit"]


class JourneySession:
    """
    One in-memory run of a journey

    Checks the config against the renderer dispatch table before anything
    else, then owns the navigation controller for the session's lifetime.
    """

    def __init__(self,
                 config: JourneyConfig,
                 on_completed: CompletedCallback,
                 on_step_change: Optional[StepChangeCallback] = None,
                 on_before_next: Optional[BeforeNextGuard] = None,
                 on_before_back: Optional[BeforeBackGuard] = None,
                 on_exit: Optional[ExitCallback] = None,
                 initial_step: int = 0,
                 initial_values: Optional[Mapping[str, Any]] = None,
                 default_exit_target: Optional[str] = None,
                 custom_renderers: Optional[Mapping[str, QuestionRenderer]] = None,
                 render_question: Optional[QuestionRenderHook] = None,
                 registry: Optional[QuestionRendererRegistry] = None):
        self.logger = logger
        self.config = config
        self.registry = registry or Registry
        self.registry.check_config(config, custom_renderers)
        self.renderers = self.registry.dispatch_table(custom_renderers)
        self._render_hook = render_question

        self.controller = NavigationController(
            config,
            on_completed=on_completed,
            on_step_change=on_step_change,
            on_before_next=on_before_next,
            on_before_back=on_before_back,
            on_exit=on_exit,
            initial_step=initial_step,
            initial_values=initial_values,
            default_exit_target=default_exit_target,
        )

    @property
    def current_step(self) -> StepDefinition:
        return self.controller.current_step

    @property
    def validation(self) -> ValidationResult:
        return self.controller.validation

    def progress(self) -> Progress:
        return self.controller.progress()

    def start(self) -> None:
        self.controller.start()

    def close(self) -> None:
        self.controller.teardown()

    async def next(self) -> bool:
        return await self.controller.next()

    async def back(self) -> bool:
        return await self.controller.back()

    def go_to_step(self, index: int) -> bool:
        return self.controller.go_to_step(index)

    def render_step(self) -> List[Any]:
        """Render every question of the current step, in order"""
        rendered = []
        for question in self.current_step.questions:
            if self._render_hook:
                rendered.append(self._render_hook(question, self.default_render))
            else:
                rendered.append(self.default_render(question))
        return rendered

    def default_render(self, question: QuestionDefinition) -> Any:
        """Render one question; a failure renders nothing instead of ending the session"""
        renderer = self.renderers.get(question.type)
        if renderer is None:
            self.logger.error(f"Error rendering question '{question.name}': {UnknownQuestionType(question.type)}")
            return None

        errors = self.controller.visible_errors()
        try:
            return renderer.render(
                question,
                self.controller.store.value_for(question.name),
                self.controller.change_field,
                errors.get(question.name),
            )
        except (click.Abort, click.exceptions.Exit):
            raise
        except Exception as e:
            self.logger.error(f"Error rendering question type {question.type}: {e}")
            return None


class JourneyService:
    """Journey service for loading, checking and running journeys"""

    def __init__(self, registry: Optional[QuestionRendererRegistry] = None):
        self.config_loader = ConfigLoader()
        self.registry = registry or Registry
        self.logger = logger

    async def load_config(self, config_path: Path) -> JourneyConfig:
        """Load and validate journey configuration"""
        config_data = await self.config_loader.load_yaml(config_path)
        if isinstance(config_data, dict):
            await self.config_loader.validate_config_keys(config_data, ["steps"])

        try:
            journey_config = JourneyConfig.model_validate(config_data)
        except ValidationError as e:
            raise ConfigError(f"Failed to load journey config: {e}")

        self.logger.debug(f"Loaded journey config: {journey_config.title or config_path} "
                          f"({journey_config.step_count} steps)")
        return journey_config

    async def load_answers(self, answers_path: Path) -> Dict[str, Any]:
        """Load an answers record (flat mapping of field name to value)"""
        answers = await self.config_loader.load_yaml(answers_path)
        if not isinstance(answers, dict):
            raise ConfigError(f"Answers file must contain a mapping: {answers_path}")
        return answers

    def check_config(self, config: JourneyConfig) -> Dict[str, Any]:
        """Check every question against the registry; raises on the first problem"""
        self.registry.check_config(config)
        return {
            "title": config.title,
            "steps": config.step_count,
            "questions": len(config.question_names()),
            "types": config.question_types(),
        }

    def check_answers(self, config: JourneyConfig, answers: Mapping[str, Any]) -> List[ValidationResult]:
        """Validate an answers record against every step"""
        results = [validate_step(step, answers) for step in config.steps]
        failed = sum(1 for result in results if not result.is_step_valid)
        self.logger.debug(f"Checked answers against {len(results)} steps, {failed} failed")
        return results

    async def run_interactive(self,
                              config: JourneyConfig,
                              initial_step: int = 0,
                              initial_values: Optional[Mapping[str, Any]] = None,
                              custom_renderers: Optional[Mapping[str, QuestionRenderer]] = None) -> Optional[Dict[str, Any]]:
        """
        Run a journey in the terminal

        Returns:
            The answers record, or None if the user quit or left the journey
        """
        answers: Dict[str, Any] = {}
        exited = False

        async def handle_completed(form_data: Dict[str, Any]) -> None:
            answers.update(form_data)

        def handle_exit(target: str) -> None:
            nonlocal exited
            exited = True
            click.echo(f"Leaving journey → {target}")

        def handle_step_change(index: int) -> None:
            self._echo_step_header(session)

        session = JourneySession(
            config,
            on_completed=handle_completed,
            on_step_change=handle_step_change,
            on_exit=handle_exit,
            initial_step=initial_step,
            initial_values=initial_values,
            custom_renderers=custom_renderers,
            registry=self.registry,
        )
        session.start()

        try:
            while not session.controller.is_completed and not exited:
                session.render_step()
                action = click.prompt(
                    "Action",
                    type=click.Choice(ACTIONS),
                    default="next" if session.controller.can_go_next else "edit",
                )

                if action == "quit":
                    self.logger.info(f"Journey abandoned at step {session.controller.step_index}")
                    return None
                if action == "next":
                    moved = await session.next()
                    if not moved and not session.controller.is_completed:
                        self._echo_errors(session.validation)
                elif action == "back":
                    await session.back()
        finally:
            session.close()

        if exited:
            return None
        return answers

    def _echo_step_header(self, session: JourneySession) -> None:
        step = session.current_step
        progress = session.progress()
        click.echo("")
        click.echo(click.style(f"[{progress.current + 1}/{progress.total}] {step.header}", bold=True))
        if step.subheader:
            click.echo(step.subheader)

    def _echo_errors(self, validation: ValidationResult) -> None:
        for name, message in validation.errors.items():
            click.echo(click.style(f"  {name}: {message}", fg="red"), err=True)
