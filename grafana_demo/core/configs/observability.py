from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from grafana_demo.core.paths import ROOT_PATH


class ObservabilityConfiguration(BaseSettings):
    """Tracing pipeline configuration."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=ROOT_PATH / '.env',
        env_file_encoding='utf-8',
        env_prefix='OBSERVABILITY_',
        extra='ignore',
        populate_by_name=True,
    )

    enabled: bool = Field(True, description='Enable trace export')
    traces_endpoint: str = Field(
        'alloy.monitoring.svc.cluster.local:4317',
        description='OTLP gRPC endpoint used by trace exporter.',
        validation_alias=AliasChoices(
            'OTEL_EXPORTER_OTLP_ENDPOINT', 'OBSERVABILITY_TRACES_ENDPOINT'
        ),
    )
    tracing_sample_ratio: float = Field(
        1.0, ge=0.0, le=1.0, description='Tracing sample ratio (0.0 to 1.0)'
    )
    traces_to_console: bool = Field(False, description='Output traces to console')
    excluded_urls: str = Field(
        '/health,/metrics',
        description='Comma-separated paths that are neither traced nor metered.',
    )
    connect_timeout: float = Field(
        0.0,
        ge=0.0,
        description=(
            'Seconds to wait at startup for the collector channel to become ready. '
            '0 skips the check.'
        ),
    )
    shutdown_timeout_millis: int = Field(
        5000, ge=0, description='Grace period for flushing buffered spans on exit'
    )

    @property
    def excluded_paths(self) -> set[str]:
        return {url.strip() for url in self.excluded_urls.split(',') if url.strip()}
