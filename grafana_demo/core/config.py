from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from grafana_demo import __version__
from grafana_demo.core.paths import ROOT_PATH

from .configs import (
    APIConfiguration,
    ChaosConfiguration,
    LogConfiguration,
    ObservabilityConfiguration,
)


class Configuration(BaseSettings):
    """Application configuration, read once at startup."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=ROOT_PATH / '.env',
        env_file_encoding='utf-8',
        extra='ignore',
        frozen=True,
        populate_by_name=True,
    )

    app_name: str = Field(
        'grafana-demo-app', description='Service name reported in traces'
    )
    app_version: str = __version__
    app_environment: Literal['test', 'local', 'dev', 'qa', 'prod'] = Field(
        'local', description='Application environment', validation_alias='ENVIRONMENT'
    )

    api: APIConfiguration = Field(default_factory=APIConfiguration)
    chaos: ChaosConfiguration = Field(default_factory=ChaosConfiguration)
    log: LogConfiguration = Field(default_factory=LogConfiguration)
    observability: ObservabilityConfiguration = Field(
        default_factory=ObservabilityConfiguration
    )


# noinspection PyArgumentList
@lru_cache
def get_config() -> Configuration:
    """
    Get cached application settings.
    """
    return Configuration()
