"""Result of a single poll."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from orderwatch.models.order import OrderSummary


class PollStatus(StrEnum):
    SKIPPED = "skipped"
    NOTIFIED = "notified"
    NO_NEW_ORDER = "no_new_order"
    TRANSIENT_FAILURE = "transient_failure"


class SkipReason(StrEnum):
    OFFLINE = "offline"
    UNCONFIGURED = "unconfigured"
    MISSING_IDENTITY = "missing_identity"


class PollOutcome(BaseModel):
    """What a poll did.

    Use the ``skipped``/``notified``/``no_new_order``/``transient_failure``
    constructors rather than building instances directly.
    """

    model_config = ConfigDict(frozen=True)

    status: PollStatus
    reason: SkipReason | None = None
    order: OrderSummary | None = None
    error: str | None = None

    @classmethod
    def skipped(cls, reason: SkipReason) -> PollOutcome:
        return cls(status=PollStatus.SKIPPED, reason=reason)

    @classmethod
    def notified(cls, order: OrderSummary) -> PollOutcome:
        return cls(status=PollStatus.NOTIFIED, order=order)

    @classmethod
    def no_new_order(cls) -> PollOutcome:
        return cls(status=PollStatus.NO_NEW_ORDER)

    @classmethod
    def transient_failure(cls, error: BaseException | str) -> PollOutcome:
        message = error if isinstance(error, str) else f"{type(error).__name__}: {error}"
        return cls(status=PollStatus.TRANSIENT_FAILURE, error=message)

    @property
    def should_retry(self) -> bool:
        """Only transient failures are retried; everything else is final for this poll."""
        return self.status == PollStatus.TRANSIENT_FAILURE

    def __str__(self) -> str:
        if self.status == PollStatus.SKIPPED:
            return f"skipped ({self.reason})"
        if self.status == PollStatus.NOTIFIED and self.order is not None:
            return f"notified {self.order.display_id}"
        if self.status == PollStatus.TRANSIENT_FAILURE:
            return f"transient failure: {self.error}"
        return str(self.status)
