import re
from ipaddress import AddressValueError, IPv4Address, IPv6Address

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from grafana_demo.core.paths import ROOT_PATH

HOSTNAME_LABEL_PATTERN = re.compile(r'^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$')


# noinspection PyNestedDecorators
class APIConfiguration(BaseSettings):
    """HTTP listener configuration."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=ROOT_PATH / '.env',
        env_file_encoding='utf-8',
        env_prefix='API_',
        extra='ignore',
        populate_by_name=True,
    )

    host: str = Field(
        default='0.0.0.0', description='API server bind address (IP or hostname)'
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description='API server port number',
        validation_alias=AliasChoices('PORT', 'API_PORT'),
    )
    access_log: bool = Field(
        default=False, description='Emit one server access line per request'
    )

    @field_validator('host')
    @classmethod
    def validate_host(cls, value: str) -> str:
        try:
            IPv4Address(value)
            return value
        except AddressValueError:
            pass

        try:
            IPv6Address(value)
            return value
        except AddressValueError:
            pass

        return cls._validate_hostname(value)

    @classmethod
    def _validate_hostname(cls, hostname: str) -> str:
        if not hostname or len(hostname) > 253:
            msg = f'invalid hostname length: {hostname}'
            raise ValueError(msg)

        labels = hostname.split('.')
        invalid_labels = [
            label for label in labels if not HOSTNAME_LABEL_PATTERN.match(label)
        ]

        if invalid_labels:
            msg = f'invalid hostname "{hostname}": invalid labels {invalid_labels}'
            raise ValueError(msg)

        return hostname
