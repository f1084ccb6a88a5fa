from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseModel):
    name: str = Field("wiki-intel", min_length=1)
    version: str = Field("1.0.0", min_length=1)
    description: str = Field(
        "Wikipedia & Wikidata knowledge intelligence - entity search, summaries, and structured data."
        " B2A optimized for agent knowledge lookups.",
        min_length=1,
    )
    public_base_url: str = Field(
        "https://wiki-intel-production.up.railway.app",
        description="Public URL advertised in manifests when no platform domain is configured.",
    )
    icon_path: Path = Field(Path("icon.png"), description="Location of the icon served at /icon.png.")


class UpstreamSettings(BaseModel):
    wikidata_api_url: str = Field("https://www.wikidata.org/w/api.php")
    wikidata_entity_url: str = Field("https://www.wikidata.org/wiki")
    wikipedia_host_template: str = Field(
        "https://{language}.wikipedia.org",
        description="Wikipedia host; '{language}' is replaced with the requested language code.",
    )
    user_agent: str = Field("wiki-intel/1.0 (https://langoustine69.dev)", min_length=1)
    timeout_seconds: float = Field(10.0, ge=0.1, description="Transport timeout for upstream calls.")


class PaymentSettings(BaseModel):
    enabled: bool = Field(False, description="Require x402 payments for priced entrypoints.")
    pay_to: str | None = Field(default=None, description="Address receiving entrypoint payments.")
    network: str = Field("base", min_length=1)
    asset: str = Field(
        "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        description="Token contract used to price entrypoints (USDC, 6 decimals).",
    )
    facilitator_url: str = Field("https://facilitator.daydreams.systems")
    max_timeout_seconds: int = Field(300, ge=1)
    timeout_seconds: float = Field(10.0, ge=0.1)


class AnalyticsSettings(BaseModel):
    enabled: bool = Field(True, description="Track payments in-process for the analytics entrypoints.")
    max_transactions: int = Field(10_000, ge=1, description="Oldest transactions are dropped beyond this.")


class ObservabilitySettings(BaseModel):
    prometheus_enabled: bool = Field(True)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_logs: bool = Field(True, description="Emit JSON lines; disable for a readable console format.")


class Settings(BaseSettings):
    environment: Literal["local", "test", "production"] = Field("local")

    service: ServiceSettings = Field(default_factory=ServiceSettings)  # type: ignore[arg-type]
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)  # type: ignore[arg-type]
    payments: PaymentSettings = Field(default_factory=PaymentSettings)  # type: ignore[arg-type]
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)  # type: ignore[arg-type]
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)  # type: ignore[arg-type]

    railway_public_domain: str | None = Field(default=None, description="Set by Railway deployments.")
    frontend_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins permitted to access the API via CORS.",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def base_url(self) -> str:
        if self.railway_public_domain:
            return f"https://{self.railway_public_domain}"
        return self.service.public_base_url.rstrip("/")


@lru_cache(maxsize=1)
def _get_cached_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


def get_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Return settings, using cached defaults unless overrides are provided."""
    if overrides:
        return Settings(**dict(overrides))
    return _get_cached_settings()
