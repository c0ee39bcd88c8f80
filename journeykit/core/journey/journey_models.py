"""
Journey models and types - Core layer
Static description of steps and questions
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .rules import Rule


class QuestionPayload(BaseModel):
    """Type-specific question fields; renderers extend this per type"""
    model_config = ConfigDict(extra="allow")

    subheading: Optional[str] = Field(default=None, description="Helper text shown under the question")


class QuestionDefinition(BaseModel):
    """A single named, typed field with optional validation"""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str = Field(..., description="Unique key in the flat answers record")
    prompt: str = Field(..., validation_alias=AliasChoices("prompt", "question"))
    type: str = Field(..., description="Dispatch tag into the renderer registry")
    validation: Optional[Rule] = Field(default=None, description="Rule the answer must satisfy")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Fields whose shape depends on type")

    @model_validator(mode="before")
    @classmethod
    def collect_payload(cls, data: Any) -> Any:
        """Move type-specific keys (placeholder, options, ...) into payload"""
        if not isinstance(data, dict):
            return data
        known = {"name", "prompt", "question", "type", "validation", "payload"}
        extra = {key: value for key, value in data.items() if key not in known}
        if not extra:
            return data
        collected = {key: value for key, value in data.items() if key in known}
        collected["payload"] = {**(data.get("payload") or {}), **extra}
        return collected

    @field_validator("validation", mode="before")
    @classmethod
    def build_rule(cls, v):
        if v is None:
            return None
        return Rule.from_config(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        """Ensure name is usable as a key"""
        if not v.strip():
            raise ValueError("Question name must not be empty")
        return v


class StepDefinition(BaseModel):
    """One page of questions, shown atomically"""
    model_config = ConfigDict(frozen=True)

    header: str = Field(..., validation_alias=AliasChoices("header", "pageHeader"))
    subheader: Optional[str] = Field(default=None, validation_alias=AliasChoices("subheader", "pageSubheader"))
    questions: Tuple[QuestionDefinition, ...] = Field(..., min_length=1)


class JourneyConfig(BaseModel):
    """Ordered steps of a journey, immutable for the session"""
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    exit_target: str = Field(default="/", description="Where back from the first step routes to")
    steps: Tuple[StepDefinition, ...] = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def accept_step_list(cls, data: Any) -> Any:
        """A bare list of steps is a complete config"""
        if isinstance(data, (list, tuple)):
            return {"steps": list(data)}
        return data

    @model_validator(mode="after")
    def validate_unique_names(self) -> "JourneyConfig":
        """Answers share one flat record, so a repeated name would overwrite another answer"""
        seen = set()
        duplicates = []
        for question in self.iter_questions():
            if question.name in seen:
                duplicates.append(question.name)
            seen.add(question.name)
        if duplicates:
            raise ValueError(f"Duplicate question names: {sorted(set(duplicates))}")
        return self

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1

    def get_step(self, index: int) -> StepDefinition:
        return self.steps[index]

    def iter_questions(self) -> Iterator[QuestionDefinition]:
        for step in self.steps:
            yield from step.questions

    def question_names(self) -> List[str]:
        return [question.name for question in self.iter_questions()]

    def question_types(self) -> List[str]:
        return sorted({question.type for question in self.iter_questions()})


class Progress(BaseModel):
    """Position within the journey for progress indicators"""
    current: int = Field(..., ge=0, description="Current step index")
    total: int = Field(..., ge=1, description="Number of steps")

    @property
    def fraction(self) -> float:
        return self.current / self.total

    @property
    def percentage(self) -> float:
        return self.fraction * 100.0
