"""
Navigation controller - the journey step state machine

Handles:
- Field changes and synchronous revalidation
- Next/back transitions gated by step validity and optional guard hooks
- Completion on the last step
- Step-change notifications

Guards and the completion callback may be plain or async callables. They are
the only suspension points; while one is pending the controller is busy and
further transitions are ignored.
"""

import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from loguru import logger

from .form_state import FormStateStore
from .journey_models import JourneyConfig, Progress, StepDefinition
from .validation import StepSchema, ValidationResult, build_step_schema, validate
from ..exceptions import CompletionFailure, ConfigError, GuardRejection


MaybeAwaitable = Union[Any, Awaitable[Any]]
CompletedCallback = Callable[[Dict[str, Any]], MaybeAwaitable]
BeforeNextGuard = Callable[[int, Dict[str, Any]], MaybeAwaitable]
BeforeBackGuard = Callable[[int], MaybeAwaitable]
StepChangeCallback = Callable[[int], None]
ExitCallback = Callable[[str], None]


class NavigationState(str, Enum):
    """Controller states"""
    ACTIVE = "active"
    TRANSITIONING_GUARD = "transitioning_guard"
    SUBMITTING = "submitting"
    COMPLETED = "completed"


async def _resolve(result: MaybeAwaitable) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class NavigationController:
    """
    Drives a journey through its steps

    Responsibilities:
    - Own the form state store and its snapshots
    - Keep the current step's validation result up to date
    - Sequence next/back/jump transitions and completion
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
                 default_exit_target: Optional[str] = None):
        """
        Initialize the controller in Active(initial_step)

        Args:
            config: Journey configuration
            on_completed: Receives the full answers record after the last step
            on_step_change: Observer fired after every committed step change
            on_before_next: Guard receiving (step_index, form_data)
            on_before_back: Guard receiving (step_index)
            on_exit: Receives the exit target when back is used on the first step
            initial_step: Starting step index
            initial_values: Seed answers
            default_exit_target: Overrides the config's exit target
        """
        if not 0 <= initial_step < config.step_count:
            raise ConfigError(f"Initial step {initial_step} out of range (0-{config.last_index})")

        self.config = config
        self.on_completed = on_completed
        self.on_step_change = on_step_change
        self.on_before_next = on_before_next
        self.on_before_back = on_before_back
        self.on_exit = on_exit
        self.exit_target = default_exit_target or config.exit_target
        self.logger = logger

        self.store = FormStateStore(initial_values, initial_step)
        self.is_uploading = False

        self._state = NavigationState.ACTIVE
        self._step_index = initial_step
        self._schemas: Dict[int, StepSchema] = {}
        self._validation = ValidationResult()
        self._started = False
        self._disposed = False

        self._revalidate()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def step_index(self) -> int:
        return self._step_index

    @property
    def current_step(self) -> StepDefinition:
        return self.config.get_step(self._step_index)

    @property
    def is_last_step(self) -> bool:
        return self._step_index == self.config.last_index

    @property
    def is_busy(self) -> bool:
        """True while a guard or the completion callback is pending"""
        return self._state in (NavigationState.TRANSITIONING_GUARD, NavigationState.SUBMITTING)

    @property
    def is_completed(self) -> bool:
        return self._state == NavigationState.COMPLETED

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def form_data(self) -> Mapping[str, Any]:
        return self.store.form_data

    @property
    def validation(self) -> ValidationResult:
        return self._validation

    @property
    def is_step_valid(self) -> bool:
        return self._validation.is_step_valid

    @property
    def can_go_next(self) -> bool:
        """Whether the next affordance should be enabled"""
        return (self._state == NavigationState.ACTIVE
                and not self._disposed
                and not self.is_uploading
                and self._validation.is_step_valid)

    @property
    def can_go_back(self) -> bool:
        return self._state == NavigationState.ACTIVE and not self._disposed

    def visible_errors(self) -> Dict[str, str]:
        """Errors for fields the user has edited"""
        return self._validation.visible_errors(self.store.touched)

    def progress(self) -> Progress:
        return Progress(current=self._step_index, total=self.config.step_count)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Mount the journey; fires the step-change notification for the initial step"""
        if self._started:
            return
        self._started = True
        self.logger.debug(f"Journey started at step {self._step_index}")
        self._notify_step_change()

    def teardown(self) -> None:
        """Detach the controller; late guard or completion results are ignored"""
        self._disposed = True
        self.logger.debug(f"Journey torn down at step {self._step_index} ({self._state.value})")

    # =========================================================================
    # Field changes and validation
    # =========================================================================

    def change_field(self, name: str, value: Any, uploading: bool = False) -> ValidationResult:
        """Update one answer and revalidate the current step"""
        if self._disposed or self._state != NavigationState.ACTIVE:
            self.logger.warning(f"Ignoring change to '{name}' while {self._state.value}")
            return self._validation

        self.store.set_field(name, value)
        self.is_uploading = uploading
        return self._revalidate()

    def validate_step(self) -> bool:
        """Revalidate the current step, logging the first error if it fails"""
        result = self._revalidate()
        first = result.first_error()
        if first:
            name, message = first
            self.logger.debug(f"Step {self._step_index} invalid: {name}: {message}")
        return result.is_step_valid

    def schema_for(self, index: int) -> StepSchema:
        if index not in self._schemas:
            self._schemas[index] = build_step_schema(self.config.get_step(index))
        return self._schemas[index]

    def _revalidate(self) -> ValidationResult:
        self._validation = validate(self.schema_for(self._step_index), self.store.form_data)
        return self._validation

    # =========================================================================
    # Transitions
    # =========================================================================

    async def next(self) -> bool:
        """
        Advance to the next step, or complete the journey on the last step

        Returns:
            True if a transition was committed
        """
        if self._disposed or self._state != NavigationState.ACTIVE:
            self.logger.debug(f"Ignoring next while {self._state.value}")
            return False

        if self.is_uploading:
            self.logger.debug("Ignoring next while an upload is in progress")
            return False

        if not self.validate_step():
            return False

        index = self._step_index
        self._state = NavigationState.TRANSITIONING_GUARD
        try:
            await self._run_guard(self.on_before_next, "next", index, index, self.store.to_dict())
        except GuardRejection as e:
            if self._disposed:
                return False
            self.logger.info(str(e))
            self._state = NavigationState.ACTIVE
            return False
        except BaseException:
            self._release("next guard")
            raise

        if self._disposed:
            self.logger.debug("Discarding next guard result after teardown")
            return False

        if index == self.config.last_index:
            return await self._complete()

        self._commit(index + 1)
        return True

    async def back(self) -> bool:
        """
        Return to the previous step; on the first step, signal the exit target

        Returns:
            True if a transition was committed
        """
        if self._disposed or self._state != NavigationState.ACTIVE:
            self.logger.debug(f"Ignoring back while {self._state.value}")
            return False

        index = self._step_index
        if index == 0:
            self._signal_exit()
            return False

        self._state = NavigationState.TRANSITIONING_GUARD
        try:
            await self._run_guard(self.on_before_back, "back", index, index)
        except GuardRejection as e:
            if self._disposed:
                return False
            self.logger.info(str(e))
            self._state = NavigationState.ACTIVE
            return False
        except BaseException:
            self._release("back guard")
            raise

        if self._disposed:
            self.logger.debug("Discarding back guard result after teardown")
            return False

        self._commit(index - 1)
        return True

    def go_to_step(self, index: int) -> bool:
        """
        Jump directly to a step without validation or guards

        Returns:
            True if the journey is at index afterwards
        """
        if self._disposed or self._state != NavigationState.ACTIVE:
            self.logger.debug(f"Ignoring jump to step {index} while {self._state.value}")
            return False

        if index < 0 or index >= self.config.step_count:
            self.logger.error(f"Invalid step index: {index} (valid range: 0-{self.config.last_index})")
            return False

        if index == self._step_index:
            return True

        self._commit(index)
        return True

    async def _run_guard(self, guard: Optional[Callable[..., MaybeAwaitable]],
                         direction: str, index: int, *args: Any) -> None:
        """Raise GuardRejection unless the guard is absent or accepts"""
        if guard is None:
            return
        try:
            accepted = await _resolve(guard(*args))
        except Exception as e:
            raise GuardRejection(index, direction, e) from e
        if not accepted:
            raise GuardRejection(index, direction)

    async def _invoke_completion(self, payload: Dict[str, Any]) -> None:
        try:
            await _resolve(self.on_completed(payload))
        except Exception as e:
            raise CompletionFailure(e) from e

    async def _complete(self) -> bool:
        self._state = NavigationState.SUBMITTING
        self.logger.info(f"Submitting journey answers ({len(self.store.form_data)} fields)")
        try:
            await self._invoke_completion(self.store.to_dict())
        except CompletionFailure as e:
            if self._disposed:
                return False
            self.logger.error(str(e))
            self._state = NavigationState.ACTIVE
            return False
        except BaseException:
            self._release("completion")
            raise

        if self._disposed:
            self.logger.debug("Discarding completion result after teardown")
            return False

        self._state = NavigationState.COMPLETED
        self.store.clear()
        self.logger.info("Journey completed")
        return True

    def _release(self, pending: str) -> None:
        """Return to Active when a pending guard or completion is cancelled"""
        if self._disposed:
            return
        self.logger.warning(f"Pending {pending} cancelled at step {self._step_index}")
        self._state = NavigationState.ACTIVE

    def _commit(self, new_index: int) -> None:
        old_index = self._step_index
        self.logger.debug(f"Navigating: Step {old_index} → {new_index}")

        self.store.snapshot(old_index)
        self._step_index = new_index
        self.store.restore_step(new_index)
        self.is_uploading = False
        self._state = NavigationState.ACTIVE
        self._revalidate()
        self._notify_step_change()

    def _signal_exit(self) -> None:
        self.logger.info(f"Back from first step, leaving journey for {self.exit_target}")
        if self.on_exit:
            self.on_exit(self.exit_target)

    def _notify_step_change(self) -> None:
        if not self.on_step_change:
            return
        try:
            self.on_step_change(self._step_index)
        except Exception as e:
            self.logger.error(f"Step change observer failed for step {self._step_index}: {e}")

