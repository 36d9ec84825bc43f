from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from grafana_demo.core.paths import ROOT_PATH


# noinspection PyNestedDecorators
class ChaosConfiguration(BaseSettings):
    """Fault injection toggles for the simulated pipeline.

    A toggle is on only when its variable is the string ``true``; any other
    value, or no value, leaves it off.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=ROOT_PATH / '.env',
        env_file_encoding='utf-8',
        env_prefix='CHAOS_',
        extra='ignore',
    )

    error: bool = Field(False, description='Randomly fail the business logic stage')
    error_rate: float = Field(
        0.2, ge=0.0, le=1.0, description='Probability of a business logic failure'
    )
    db_failure: bool = Field(
        False, description='Stall the database stage and mark it as timed out'
    )
    slow_db: bool = Field(False, description='Stall the database stage')

    @field_validator('error', 'db_failure', 'slow_db', mode='before')
    @classmethod
    def parse_toggle(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value

        return str(value).strip().lower() == 'true'
