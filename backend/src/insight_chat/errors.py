"""
Error taxonomy for the question-answering pipeline.

Every failure raised inside the pipeline derives from ``InsightChatError`` so
the interaction handler can turn it into a textual reply instead of letting it
reach the transport layer.
"""

from typing import Optional


class InsightChatError(Exception):
    """Base class for pipeline errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ServiceError(InsightChatError):
    """Completion service call failed."""

    MODEL_NOT_FOUND = "model_not_found"
    OTHER = "other"

    def __init__(self, message: str, kind: str = OTHER, model: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.model = model

    @property
    def is_model_not_found(self) -> bool:
        return self.kind == self.MODEL_NOT_FOUND


class ServiceUnavailable(InsightChatError):
    """No credential is configured for the completion service."""

    MISSING_CREDENTIAL = "missing_credential"

    def __init__(self, message: str, env_vars: tuple = ()):
        super().__init__(message)
        self.kind = self.MISSING_CREDENTIAL
        self.env_vars = tuple(env_vars)


class TranslationFailure(InsightChatError):
    """The question could not be turned into a query."""

    EMPTY_OUTPUT = "empty_output"
    SERVICE_ERROR = "service_error"

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


class ExecutionFailure(InsightChatError):
    """The analytical store rejected the query."""

    def __init__(self, message: str, query: Optional[str] = None):
        super().__init__(message)
        self.query = query


class CompositionFailure(InsightChatError):
    """The narrative answer could not be produced. Never leaves the composer."""
