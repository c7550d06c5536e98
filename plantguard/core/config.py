"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, SecretStr

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class TwilioConfig(BaseModel):
    """Twilio REST credentials for SMS and WhatsApp delivery."""

    account_sid: str = ""
    auth_token: SecretStr = SecretStr("")
    from_number: str = ""
    base_url: str = "https://api.twilio.com/2010-04-01"

    @property
    def configured(self) -> bool:
        """True when every credential needed for a live send is present."""
        return bool(
            self.account_sid
            and self.auth_token.get_secret_value()
            and self.from_number
        )


class RetryConfig(BaseModel):
    """Retry strategy applied to failed deliveries."""

    strategy: Literal["none", "fixed", "backoff"] = "none"
    max_retries: int = 2
    delay_secs: float = 1.0
    max_delay_secs: float = 30.0
    multiplier: float = 2.0
    jitter: float = 0.1


class DeliveryConfig(BaseModel):
    """Fan-out and per-send limits."""

    send_timeout_secs: float = 5.0
    max_concurrent_sends: int = 10
    retry: RetryConfig = RetryConfig()


class DomainRulesConfig(BaseModel):
    """Thresholds and severity rule for one telemetry domain."""

    enabled: bool = True
    critical_multiplier: float = 1.2
    thresholds: dict[str, float] = Field(default_factory=dict)


class DomainsConfig(BaseModel):
    """Per-domain rules. Defaults mirror the plant's reference limits."""

    emission: DomainRulesConfig = DomainRulesConfig(
        thresholds={"sox": 200.0, "nox": 300.0, "co2": 950.0, "pm": 30.0, "co": 100.0},
    )
    equipment: DomainRulesConfig = DomainRulesConfig(
        thresholds={
            "temperature": 550.0,
            "vibration": 4.5,
            "pressure": 180.0,
            "efficiency": 85.0,
        },
    )
    load: DomainRulesConfig = DomainRulesConfig(
        critical_multiplier=1.05,
        thresholds={"load_pct": 95.0},
    )
    ash: DomainRulesConfig = DomainRulesConfig(
        critical_multiplier=1.1,
        thresholds={"fly_ash_pct": 90.0, "bottom_ash_pct": 90.0},
    )

    def for_domain(self, domain: str) -> DomainRulesConfig:
        return getattr(self, str(domain))


class SchedulerConfig(BaseModel):
    """Evaluation cycle timing."""

    interval_secs: float = 30.0


class PredictionConfig(BaseModel):
    """Optional advisory prediction service (Gemini generateContent API)."""

    enabled: bool = False
    api_key: SecretStr = SecretStr("")
    base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    model: str = "gemini-pro"
    timeout_secs: float = 10.0


class RecipientConfig(BaseModel):
    """A recipient entry for the configured (in-memory) directory."""

    id: str
    name: str
    phone: str = ""
    sms: bool = False
    whatsapp: bool = False
    primary_channel: Literal["sms", "whatsapp"] | None = None
    active: bool = True
    department: str = ""


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    # JSON-lines file for cycle records; empty keeps them on stderr only.
    cycle_log_file: str = ""


class Settings(BaseModel):
    """Root settings container."""

    twilio: TwilioConfig = TwilioConfig()
    delivery: DeliveryConfig = DeliveryConfig()
    domains: DomainsConfig = DomainsConfig()
    scheduler: SchedulerConfig = SchedulerConfig()
    prediction: PredictionConfig = PredictionConfig()
    recipients: list[RecipientConfig] = Field(default_factory=list)
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
