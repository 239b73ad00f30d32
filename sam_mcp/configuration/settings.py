"""
Server settings

Typed view of the configuration store:
- Listen address, auth tokens and TLS files
- SAM.gov API credentials and client timeout
- Default parameters for the scheduled prefetch
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from sam_mcp.utility import split_csv

from .inject import ConfigValue

SAM_SEARCH_URL = "https://api.sam.gov/opportunities/v2/search"


class _BlankAsDefault(BaseModel):
    """Unset ${ENV} placeholders arrive as empty strings; treat them as missing"""

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data


class TLSSettings(_BlankAsDefault):
    """Certificate and key files for HTTPS"""

    cert_file: Optional[str] = Field(default=None, description="PEM certificate file")
    key_file: Optional[str] = Field(default=None, description="PEM private key file")

    @property
    def is_configured(self) -> bool:
        return bool(self.cert_file and self.key_file)


class SamSettings(_BlankAsDefault):
    """SAM.gov opportunities API settings"""

    api_key: Optional[str] = Field(default=None, description="SAM.gov API key, mock data is served when missing")
    base_url: str = Field(default=SAM_SEARCH_URL, description="Opportunities search endpoint")
    timeout: float = Field(default=10.0, description="Per-call timeout in seconds", gt=0)
    cache_ttl_hours: float = Field(default=12.0, description="How long search results are cached", gt=0)


class PrefetchSettings(_BlankAsDefault):
    """Static query used by the scheduled prefetch"""

    q: str = Field(default="", description="Free-text query")
    naics: list[str] = Field(default_factory=list, description="NAICS codes (list or comma separated string)")
    days: int = Field(default=7, description="Look-back window in days", ge=0)
    limit: int = Field(default=25, description="Result limit", ge=1, le=100)
    notice_type: str = Field(default="", description="Notice type filter")
    organization: str = Field(default="", description="Organization filter")

    @field_validator("naics", mode="before")
    @classmethod
    def split_naics(cls, value: Any) -> list[str]:
        return split_csv(value)


class ServerSettings(_BlankAsDefault):
    """Process-wide settings, immutable for the lifetime of the server"""

    model_config = {"frozen": True}

    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=3000, description="Listen port", ge=1, le=65535)
    token: Optional[str] = Field(default=None, description="Primary operator bearer token")
    schedule_token: Optional[str] = Field(default=None, description="Scheduler bearer token, valid on /mcp/scheduled only")
    request_timeout: float = Field(default=60.0, description="End-to-end request timeout in seconds", gt=0)
    tls: TLSSettings = Field(default_factory=TLSSettings)
    sam: SamSettings = Field(default_factory=SamSettings)
    prefetch: PrefetchSettings = Field(default_factory=PrefetchSettings)


def load_settings() -> ServerSettings:
    """Build ServerSettings from the current configuration provider"""
    data: dict[str, Any] = dict(ConfigValue("server", default={}).resolve())
    data["sam"] = ConfigValue("sam", default={}).resolve()
    data["prefetch"] = ConfigValue("prefetch", default={}).resolve()
    return ServerSettings.model_validate(data)
