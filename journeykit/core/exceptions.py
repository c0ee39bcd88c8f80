"""
Core exceptions for journeykit
"""

from typing import Optional


class JourneyKitError(Exception):
    """Base exception for journeykit"""
    pass

class ConfigError(JourneyKitError):
    """Configuration related errors"""
    pass

class ServiceError(JourneyKitError):
    """Service layer errors"""
    pass


class JourneyError(ServiceError):
    """Journey session errors"""
    pass


class UnknownQuestionType(ConfigError):
    """No renderer registered for a question type tag"""

    def __init__(self, type_tag: str):
        self.type_tag = type_tag
        super().__init__(f"Question type '{type_tag}' is not supported")


class FieldValidationError(JourneyError):
    """A field value failed its declared rule"""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class GuardRejection(JourneyError):
    """A before-next/before-back hook vetoed a transition"""

    def __init__(self, step_index: int, direction: str, cause: Optional[BaseException] = None):
        self.step_index = step_index
        self.direction = direction
        self.cause = cause
        reason = f": {cause}" if cause else ""
        super().__init__(f"{direction} from step {step_index} rejected by guard{reason}")


class CompletionFailure(JourneyError):
    """The completion callback raised"""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Journey completion failed: {cause}")
