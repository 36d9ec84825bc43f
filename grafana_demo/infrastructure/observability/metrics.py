from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)


class HTTPMetrics:
    """Request counter and latency histogram backed by a single registry.

    The registry is created once per process and shared by reference between
    the recording middleware and the scrape endpoint.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        *,
        runtime_collectors: bool = True,
    ) -> None:
        self.registry = registry or CollectorRegistry()

        self.requests_total = Counter(
            'http_requests_total',
            'Total number of HTTP requests',
            ['path', 'method', 'status'],
            registry=self.registry,
        )
        self.request_duration = Histogram(
            'http_request_duration_seconds',
            'Duration of HTTP requests in seconds',
            ['path', 'method'],
            registry=self.registry,
        )

        if runtime_collectors:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

    def observe_request(
        self, path: str, method: str, status: int, duration_seconds: float
    ) -> None:
        self.requests_total.labels(path, method, str(status)).inc()
        self.request_duration.labels(path, method).observe(duration_seconds)

    def render(self) -> tuple[bytes, str]:
        """Return the exposition payload and its content type."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST
