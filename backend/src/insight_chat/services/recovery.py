"""Model fallback when the completion service rejects a model identifier."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar

from ..config import Settings
from ..errors import ServiceError
from ..utils.logs import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class FallbackState(str, Enum):
    TRYING = "trying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class ModelFallbackPolicy:
    """Ordered model identifiers tried after the primary model is rejected."""
    models: Tuple[str, ...]

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelFallbackPolicy":
        return cls(tuple(settings.model_fallbacks))

    @classmethod
    def of(cls, models: Sequence[str]) -> "ModelFallbackPolicy":
        return cls(tuple(models))


@dataclass
class FallbackRun:
    """
    One walk through a fallback policy.

    Starts in TRYING(0) and moves to SUCCEEDED on the first successful attempt
    or to EXHAUSTED once every model has failed.
    """
    policy: ModelFallbackPolicy
    original_error: ServiceError
    index: int = 0
    state: FallbackState = FallbackState.TRYING
    succeeded_model: Optional[str] = None
    attempts: List[Tuple[str, str]] = field(default_factory=list)

    def __post_init__(self):
        if not self.policy.models:
            self.state = FallbackState.EXHAUSTED

    @property
    def current_model(self) -> Optional[str]:
        if self.state is not FallbackState.TRYING:
            return None
        return self.policy.models[self.index]

    def record_success(self) -> None:
        self.succeeded_model = self.current_model
        self.attempts.append((self.succeeded_model, "ok"))
        self.state = FallbackState.SUCCEEDED

    def record_failure(self, error: Exception) -> None:
        self.attempts.append((self.current_model, str(error)))
        self.index += 1
        if self.index >= len(self.policy.models):
            self.state = FallbackState.EXHAUSTED


async def run_with_fallback(call: Callable[[Optional[str]], Awaitable[T]],
                            policy: ModelFallbackPolicy,
                            on_success: Optional[Callable[[str], None]] = None) -> T:
    """
    Run ``call(None)`` and, if the model is rejected, retry through ``policy``.

    ``call`` receives the model identifier to use (None = the provider's
    current model). Only model-not-found errors start the fallback walk; any
    other error from the first call propagates unchanged. If every model in the
    policy fails, the ORIGINAL error is raised.
    """
    try:
        return await call(None)
    except ServiceError as e:
        if not e.is_model_not_found:
            raise
        run = FallbackRun(policy=policy, original_error=e)

    logger.info(f"[llm_fallback] model rejected ({run.original_error.message}); trying {list(policy.models)}")
    while run.state is FallbackState.TRYING:
        model = run.current_model
        try:
            result = await call(model)
        except ServiceError as e:
            logger.warning(f"[llm_fallback] {model} also failed: {e.message}")
            run.record_failure(e)
            continue
        run.record_success()
        logger.info(f"[llm_fallback] recovered with {model}")
        if on_success is not None:
            on_success(model)
        return result

    raise run.original_error
