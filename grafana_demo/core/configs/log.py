from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from grafana_demo.core.paths import ROOT_PATH


class LogConfiguration(BaseSettings):
    """Logging configuration for the Loguru stdout sink."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=ROOT_PATH / '.env',
        env_file_encoding='utf-8',
        env_prefix='LOG_',
        extra='ignore',
    )

    level: Literal[
        'TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL'
    ] = Field('INFO', description='Minimum log level')

    format: Literal['json', 'console'] = Field(
        'json',
        description=(
            'json: one JSON object per line for the log pipeline; '
            'console: colorized human-readable lines for local development'
        ),
    )
