"""
Validation engine - per-step schemas and their results

Only questions that declare a rule take part in a step's schema. A question
without a rule is always valid, whatever its value.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from .journey_models import StepDefinition
from .rules import Rule
from ..exceptions import FieldValidationError


class ValidationResult(BaseModel):
    """Per-field error messages plus the aggregate step validity"""
    errors: Dict[str, str] = Field(default_factory=dict, description="Field name to error message")
    is_step_valid: bool = Field(default=True, description="True when no ruled field failed")

    def error_for(self, name: str) -> Optional[str]:
        return self.errors.get(name)

    def first_error(self) -> Optional[Tuple[str, str]]:
        """First violated field in question order, as (name, message)"""
        for name, message in self.errors.items():
            return name, message
        return None

    def visible_errors(self, touched: Iterable[str]) -> Dict[str, str]:
        """Errors restricted to fields the user has already edited"""
        touched = set(touched)
        return {name: message for name, message in self.errors.items() if name in touched}

    def raise_for_errors(self) -> None:
        """Raise FieldValidationError for the first violated field"""
        first = self.first_error()
        if first:
            raise FieldValidationError(*first)


class StepSchema:
    """Pydantic model covering the ruled questions of one step"""

    def __init__(self, model: type[BaseModel], rules: Dict[str, Rule], attributes: Dict[str, str]):
        self.model = model
        self.rules = rules
        self._field_by_location = {**attributes, **{name: name for name in rules}}

    @property
    def fields(self) -> list[str]:
        return list(self.rules)

    def field_for(self, location: Any) -> Optional[str]:
        return self._field_by_location.get(location)


def build_step_schema(step: StepDefinition) -> StepSchema:
    """Build the schema for exactly the questions in step that carry a rule"""
    rules: Dict[str, Rule] = {}
    for question in step.questions:
        if question.validation is not None:
            rules[question.name] = question.validation

    # Question names are arbitrary strings, so each field gets a safe
    # attribute name and validates by alias.
    fields = {}
    attributes = {}
    for position, (name, rule) in enumerate(rules.items()):
        attribute = f"field_{position}"
        attributes[attribute] = name
        fields[attribute] = (rule.annotation, Field(..., alias=name))

    model = create_model(
        "StepSchema",
        __config__=ConfigDict(extra="ignore", loc_by_alias=True),
        **fields,
    )
    return StepSchema(model, rules, attributes)


def validate(schema: StepSchema, form_data: Mapping[str, Any]) -> ValidationResult:
    """Evaluate schema against the whole form; unrelated fields are ignored"""
    try:
        schema.model.model_validate(dict(form_data))
    except ValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors():
            location = error.get("loc") or ()
            if not location:
                continue
            name = schema.field_for(location[0])
            if name is None or name in errors:
                continue
            errors[name] = schema.rules[name].message or error["msg"]
        return ValidationResult(errors=errors, is_step_valid=False)

    return ValidationResult(errors={}, is_step_valid=True)


def validate_step(step: StepDefinition, form_data: Mapping[str, Any]) -> ValidationResult:
    return validate(build_step_schema(step), form_data)
