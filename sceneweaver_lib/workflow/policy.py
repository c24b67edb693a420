"""Backend call policy and cancellation for the scene pipeline.

The defaults of ``PipelinePolicy`` make exactly one attempt with no deadline,
so a director built without a policy calls each backend once and propagates
the first failure.
"""

# Standard library imports
import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

# Third party imports
from pydantic import BaseModel, Field

# Local imports
from sceneweaver_lib.core.constants import ConfigDefaults
from sceneweaver_lib.core.exceptions import (
    BackendFailure,
    BackendTimeoutError,
    OperationCancelled,
)
from sceneweaver_lib.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class PipelinePolicy(BaseModel):
    """Retry and deadline settings for backend calls."""

    max_attempts: int = Field(
        default=ConfigDefaults.BACKEND_MAX_ATTEMPTS,
        ge=1,
        description="Total attempts per backend call, including the first",
    )
    backoff_seconds: float = Field(
        default=ConfigDefaults.BACKEND_BACKOFF_SECONDS,
        ge=0.0,
        description="Delay before the second attempt",
    )
    backoff_multiplier: float = Field(
        default=ConfigDefaults.BACKEND_BACKOFF_MULTIPLIER,
        ge=1.0,
        description="Factor applied to the delay after every failed attempt",
    )
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Per-attempt deadline; None waits indefinitely",
    )

    def delay_for(self, attempt: int) -> float:
        """Backoff before attempt number ``attempt + 1`` (attempts count from 1)."""
        return self.backoff_seconds * (self.backoff_multiplier ** (attempt - 1))


class CancellationToken:
    """Cooperative cancellation flag checked between pipeline steps."""

    def __init__(self) -> None:
        self._cancelled = False
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self, step_name: str) -> None:
        if self._cancelled:
            raise OperationCancelled(
                f"Scene generation cancelled before {step_name}: {self.reason}",
                {"step": step_name, "reason": self.reason},
            )


async def call_with_policy(
    step_name: str,
    factory: Callable[[], Awaitable[T]],
    policy: Optional[PipelinePolicy] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> T:
    """
    Await a backend call under a retry/deadline policy.

    Only ``BackendFailure`` errors are retried. Anything else, including
    ``OperationCancelled``, propagates on the first occurrence.

    Args:
        step_name: Pipeline step name used in logs and error details
        factory: Zero-argument callable returning a fresh awaitable per attempt
        policy: Retry and deadline settings (defaults to a single attempt)
        cancel_token: Checked before every attempt

    Returns:
        The backend result

    Raises:
        BackendTimeoutError: If the last attempt exceeded the deadline
        BackendFailure: The error of the last failed attempt
        OperationCancelled: If the token is cancelled between attempts
    """
    policy = policy or PipelinePolicy()
    attempt = 1

    while True:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(step_name)

        try:
            if policy.timeout_seconds is None:
                return await factory()
            try:
                return await asyncio.wait_for(factory(), timeout=policy.timeout_seconds)
            except asyncio.TimeoutError as e:
                raise BackendTimeoutError(
                    f"Step {step_name} exceeded {policy.timeout_seconds}s",
                    backend=step_name,
                    details={"step": step_name, "attempt": attempt},
                ) from e
        except BackendFailure as e:
            if attempt >= policy.max_attempts:
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                f"Step {step_name} attempt {attempt}/{policy.max_attempts} failed: {e}. "
                f"Retrying in {delay:.2f}s"
            )
            if delay > 0:
                await asyncio.sleep(delay)
            attempt += 1
