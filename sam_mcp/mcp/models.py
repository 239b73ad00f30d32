"""
MCP data models for the SAM.gov tool server
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SearchQuery(BaseModel):
    """Provider-neutral search query"""

    free_text: str = Field("", description="Free-text query")
    naics_codes: list[str] = Field(default_factory=list, description="NAICS codes, ordered, no duplicates")
    lookback_days: int = Field(0, description="Only opportunities modified within this many days (0 = no filter)", ge=0)
    result_limit: int = Field(0, description="Maximum number of results (0 = provider default)", ge=0)
    notice_type: str = Field("", description="Notice type filter")
    organization: str = Field("", description="Organization filter")

    @field_validator("naics_codes")
    @classmethod
    def dedupe_naics(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class SamSearchArguments(BaseModel):
    """Arguments of the sam_search tool, as sent by callers"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    q: str = ""
    naics: list[str] = Field(default_factory=list)
    # Declared required in the tool schema but not enforced
    days: int = Field(0, ge=0)
    limit: Optional[int] = Field(None, ge=1, le=100)
    notice_type: str = Field("", alias="noticeType")
    organization: str = ""

    @model_validator(mode="before")
    @classmethod
    def null_as_default(cls, data: Any) -> Any:
        """A JSON null leaves the field at its default"""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_query(self) -> SearchQuery:
        return SearchQuery(
            free_text=self.q,
            naics_codes=self.naics,
            lookback_days=self.days,
            result_limit=self.limit or 0,
            notice_type=self.notice_type,
            organization=self.organization,
        )


class Opportunity(BaseModel):
    """A single normalized opportunity"""

    title: str = ""
    agency: str = ""
    modified: Optional[datetime] = Field(None, description="Last modification time, None when absent or unparseable")
    url: str = ""
    raw: Any = Field(None, description="The provider record this was derived from")


class ToolDescriptor(BaseModel):
    """Static description of a registered tool"""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")


class CallEnvelope(BaseModel):
    """Uniform tool invocation request"""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value
