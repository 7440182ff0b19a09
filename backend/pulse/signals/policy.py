"""Classification policy: the single source of truth for approval and risk thresholds."""

from pydantic import BaseModel, Field

from pulse.config import Settings


class ClassificationPolicy(BaseModel):
    """Policy values injected into every classification pass.

    The auto-approval threshold is 100 (the value the submission-time categorizer
    works with); anything strictly above it needs a human financial decision.
    """

    auto_approval_threshold: float = Field(100.0, ge=0)
    high_risk_amount_threshold: float = Field(200.0, ge=0)

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClassificationPolicy":
        return cls(
            auto_approval_threshold=settings.AUTO_APPROVAL_THRESHOLD,
            high_risk_amount_threshold=settings.HIGH_RISK_AMOUNT_THRESHOLD,
        )


DEFAULT_POLICY = ClassificationPolicy()
