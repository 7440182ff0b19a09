from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Amounts above this need a human financial decision
    AUTO_APPROVAL_THRESHOLD: float = 100.0
    # Flagged signals above this are high risk
    HIGH_RISK_AMOUNT_THRESHOLD: float = 200.0

    # Fraction of the SLA window that counts as "due soon"
    SLA_WARNING_RATIO: float = 0.25

    # JSON file replacing the built-in per-type stage table (empty = built-in)
    STAGE_CONFIG_PATH: str = ""

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: str = "http://localhost:5173"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_policy_values(self):
        """Thresholds are currency amounts; the warning ratio is a fraction of the SLA window."""
        if self.AUTO_APPROVAL_THRESHOLD < 0 or self.HIGH_RISK_AMOUNT_THRESHOLD < 0:
            raise ValueError("approval and risk thresholds must be non-negative")
        if not 0 <= self.SLA_WARNING_RATIO <= 1:
            raise ValueError("SLA_WARNING_RATIO must be between 0 and 1")
        return self


settings = Settings()
