"""
Validation rules - field predicates backed by pydantic types

A rule is a pydantic type annotation plus an optional human message. Step
schemas are assembled from the rules of the questions that declare one, so
every rule also marks its field as required.
"""

from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Sequence
from pydantic import AfterValidator, EmailStr, Field, StringConstraints, TypeAdapter, ValidationError


class Rule:
    """Accepts or rejects a single answer value"""

    def __init__(self, annotation: Any, message: Optional[str] = None, kind: str = "custom"):
        self.annotation = annotation
        self.message = message
        self.kind = kind
        self._adapter: Optional[TypeAdapter] = None

    def __repr__(self) -> str:
        return f"Rule(kind={self.kind!r}, message={self.message!r})"

    def check(self, value: Any) -> Optional[str]:
        """Return the error message for value, or None when it is accepted"""
        if self._adapter is None:
            self._adapter = TypeAdapter(self.annotation)
        try:
            self._adapter.validate_python(value)
        except ValidationError as e:
            return self.message or e.errors()[0]["msg"]
        return None

    def accepts(self, value: Any) -> bool:
        return self.check(value) is None

    @classmethod
    def from_config(cls, data: Any) -> "Rule":
        """
        Build a rule from its YAML form

        Example:
            {"rule": "string", "min_length": 2, "message": "Too short"}
        """
        if isinstance(data, Rule):
            return data
        if not isinstance(data, dict):
            raise ValueError(f"Validation rule must be a mapping, got {type(data).__name__}")

        options = dict(data)
        kind = options.pop("rule", None)
        builder = RULE_BUILDERS.get(kind)
        if builder is None:
            raise ValueError(f"Unknown validation rule '{kind}'. Expected one of: {sorted(RULE_BUILDERS)}")

        try:
            return builder(**options)
        except TypeError as e:
            raise ValueError(f"Invalid options for rule '{kind}': {e}")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def string(min_length: Optional[int] = None, max_length: Optional[int] = None,
           message: Optional[str] = None) -> Rule:
    """Text answer with optional length bounds"""
    annotation = Annotated[str, StringConstraints(min_length=min_length, max_length=max_length)]
    return Rule(annotation, message, kind="string")


def required(message: str = "This field is required") -> Rule:
    """Any non-empty answer"""
    def _not_empty(value: Any) -> Any:
        if _is_empty(value):
            raise ValueError(message)
        return value

    return Rule(Annotated[Any, AfterValidator(_not_empty)], message, kind="required")


def email(message: Optional[str] = None) -> Rule:
    return Rule(EmailStr, message, kind="email")


def pattern(regex: str, message: Optional[str] = None) -> Rule:
    """Text answer matching a regular expression"""
    return Rule(Annotated[str, StringConstraints(pattern=regex)], message, kind="pattern")


def number(ge: Optional[float] = None, le: Optional[float] = None, message: Optional[str] = None) -> Rule:
    """Numeric answer; numeric strings are accepted"""
    return Rule(Annotated[float, Field(ge=ge, le=le)], message, kind="number")


def one_of(options: Sequence[Any], message: Optional[str] = None) -> Rule:
    if not options:
        raise ValueError("one_of requires at least one option")
    return Rule(Literal[tuple(options)], message, kind="one_of")


def accepted(message: Optional[str] = None) -> Rule:
    """Yes/no answer that must be yes"""
    return Rule(Literal[True], message, kind="accepted")


def items(min_items: Optional[int] = None, max_items: Optional[int] = None,
          message: Optional[str] = None) -> Rule:
    """List answer (multi-select) with optional size bounds"""
    annotation = Annotated[List[Any], Field(min_length=min_items, max_length=max_items)]
    return Rule(annotation, message, kind="items")


def predicate(fn: Callable[[Any], bool], message: str = "Invalid value") -> Rule:
    """Arbitrary check; fn returns a truthy value to accept, anything it raises is a failure"""
    def _check(value: Any) -> Any:
        try:
            accepted = fn(value)
        except Exception as e:
            raise ValueError(message) from e
        if not accepted:
            raise ValueError(message)
        return value

    return Rule(Annotated[Any, AfterValidator(_check)], message, kind="predicate")


RULE_BUILDERS: Dict[str, Callable[..., Rule]] = {
    "string": string,
    "required": required,
    "email": email,
    "pattern": pattern,
    "number": number,
    "one_of": one_of,
    "items": items,
    "accepted": accepted,
}
