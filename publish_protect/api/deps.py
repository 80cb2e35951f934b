import os
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from publish_protect.adapters.clock import SystemClock
from publish_protect.adapters.cma_client import CmaClient
from publish_protect.components.scheduling import (
    ClockPort,
    SchedulingService,
    TimezoneOption,
)
from publish_protect.core.ports.host import HostIds, NotifierPort
from publish_protect.rules.loader import load_rules
from publish_protect.rules.models import Rules

SchedulingFactory = Callable[[str, NotifierPort], SchedulingService]


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.space_id = os.environ.get("PP_SPACE_ID", "")
        self.environment_id = os.environ.get("PP_ENVIRONMENT_ID", "master")
        self.environment_alias = os.environ.get("PP_ENVIRONMENT_ALIAS") or None
        self.cma_token = os.environ.get("PP_CMA_TOKEN", "")
        self.rules_path = Path(os.environ.get("PP_RULES_PATH", str(self.base_dir / "rules.yaml")))

    def host_ids(self, record_id: str) -> HostIds:
        return HostIds(
            space=self.space_id,
            environment=self.environment_id,
            record_id=record_id,
            environment_alias=self.environment_alias,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Adapters ---
def get_clock() -> ClockPort:
    return SystemClock()


@lru_cache
def get_cma_client() -> CmaClient:
    settings = get_settings()
    rules = get_rules()
    return CmaClient.create(
        base_url=rules.cma.base_url,
        token=settings.cma_token,
        space=settings.space_id,
        environment=settings.environment_alias or settings.environment_id,
        timeout_seconds=rules.cma.timeout_seconds,
    )


# --- Services ---
def get_scheduling_factory(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    client: CmaClient = Depends(get_cma_client),
    clock: ClockPort = Depends(get_clock),
) -> SchedulingFactory:
    """Scheduling services are per record, so routes get a factory."""
    timezones = [TimezoneOption(label=tz.label, value=tz.value) for tz in rules.scheduling.timezones]

    def create(record_id: str, notifier: NotifierPort) -> SchedulingService:
        return SchedulingService(
            client.scheduled_actions,
            settings.host_ids(record_id),
            clock,
            notifier,
            timezones=timezones,
            jobs_url_template=rules.scheduling.jobs_url_template,
        )

    return create
