from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ValidationRules(BaseModel):
    throttle_ms: int = Field(default=300, ge=0)
    poll_interval_ms: int = Field(default=5000, gt=0)
    save_before_validate: bool = True

    @property
    def throttle_seconds(self) -> float:
        return self.throttle_ms / 1000

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000


class ReferenceRules(BaseModel):
    unverified_policy: Literal["block", "ignore"] = "block"


class TimezoneRule(BaseModel):
    label: str
    value: str


class SchedulingRules(BaseModel):
    timezones: list[TimezoneRule] = Field(
        default_factory=lambda: [TimezoneRule(label="UTC", value="UTC")]
    )
    jobs_url_template: str = "https://app.contentful.com/spaces/{space}/jobs"
    editor_url_template: str = (
        "https://app.contentful.com/spaces/{space}/environments/{environment}/entries/{record_id}"
    )

    @field_validator("timezones")
    @classmethod
    def at_least_one_timezone(cls, v: list[TimezoneRule]) -> list[TimezoneRule]:
        if not v:
            raise ValueError("at least one timezone is required")
        return v


class CmaRules(BaseModel):
    base_url: str = "https://api.contentful.com"
    timeout_seconds: float = Field(default=10.0, gt=0)


class AppRules(BaseModel):
    content_types: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    validation: ValidationRules = Field(default_factory=ValidationRules)
    references: ReferenceRules = Field(default_factory=ReferenceRules)
    scheduling: SchedulingRules = Field(default_factory=SchedulingRules)
    cma: CmaRules = Field(default_factory=CmaRules)
    app: AppRules = Field(default_factory=AppRules)
