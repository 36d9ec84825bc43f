from opentelemetry.trace import StatusCode

from grafana_demo.core.configs import ChaosConfiguration

from conftest import parse_lines, spans_named

ALL_CHAOS = ChaosConfiguration(
    error=True, error_rate=1.0, db_failure=True, slow_db=True
)


async def test_health_returns_ok(api_client) -> None:
    resp = await api_client.get('/health')

    assert resp.status_code == 200
    assert resp.text == 'ok'


async def test_health_ignores_chaos(make_app, client_for, span_exporter) -> None:
    async with client_for(make_app(ALL_CHAOS)) as client:
        resp = await client.get('/health')

    assert resp.status_code == 200
    assert resp.text == 'ok'
    assert span_exporter.get_finished_spans() == ()


async def test_root_returns_fixed_payload(api_client, sleeper) -> None:
    resp = await api_client.get('/')

    assert resp.status_code == 200
    assert resp.headers['content-type'] == 'application/json'
    assert resp.content == b'{"message":"hello from grafana demo"}'
    assert sleeper.total >= 0.08


async def test_root_accepts_any_method_and_path(api_client) -> None:
    post = await api_client.post('/', json={'ignored': True})
    other = await api_client.delete('/some/other/path')

    assert post.status_code == 200
    assert other.status_code == 200
    assert other.json() == {'message': 'hello from grafana demo'}


async def test_business_failure_returns_500(
    make_app, client_for, span_exporter
) -> None:
    app = make_app(ChaosConfiguration(error=True, error_rate=1.0))

    async with client_for(app) as client:
        resp = await client.get('/')

    assert resp.status_code == 500
    assert resp.text == 'internal failure'

    (root,) = spans_named(span_exporter, 'handle_root')
    assert root.status.status_code is StatusCode.ERROR
    assert root.status.description == 'business logic failed'


async def test_db_failure_does_not_change_status(make_app, client_for, sleeper) -> None:
    async with client_for(make_app(ChaosConfiguration(db_failure=True))) as client:
        resp = await client.get('/')

    assert resp.status_code == 200
    assert sleeper.total >= 2.0


async def test_stage_spans_are_children_of_handler_span(
    api_client, span_exporter
) -> None:
    await api_client.get('/')

    (root,) = spans_named(span_exporter, 'handle_root')
    assert root.attributes['http.request.method'] == 'GET'
    assert root.attributes['url.path'] == '/'

    for name in ('service_B_business_logic', 'service_C_db_call', 'template_rendering'):
        (span,) = spans_named(span_exporter, name)
        assert span.parent.span_id == root.context.span_id
        assert span.context.trace_id == root.context.trace_id


async def test_incoming_trace_context_is_continued(api_client, span_exporter) -> None:
    trace_id = '4bf92f3577b34da6a3ce929d0e0e4736'
    headers = {'traceparent': f'00-{trace_id}-00f067aa0ba902b7-01'}

    await api_client.get('/', headers=headers)

    (root,) = spans_named(span_exporter, 'handle_root')
    assert f'{root.context.trace_id:032x}' == trace_id


async def test_request_log_line(api_client, log_lines, span_exporter) -> None:
    await api_client.post('/')

    (entry,) = [e for e in parse_lines(log_lines) if e['msg'] == 'handled request']
    (root,) = spans_named(span_exporter, 'handle_root')

    assert entry['level'] == 'info'
    assert entry['path'] == '/'
    assert entry['method'] == 'POST'
    assert entry['status'] == 200
    assert isinstance(entry['latency_ms'], int)
    assert entry['trace_id'] == f'{root.context.trace_id:032x}'
    assert entry['span_id'] == f'{root.context.span_id:016x}'


async def test_failure_log_line(make_app, client_for, log_lines) -> None:
    app = make_app(ChaosConfiguration(error=True, error_rate=1.0))

    async with client_for(app) as c:
        await c.get('/')

    (entry,) = [e for e in parse_lines(log_lines) if e['level'] == 'error']

    assert entry['msg'] == 'business logic failed'
    assert entry['status'] == 500
    assert entry['error'] == 'simulated business logic failure'


async def test_health_answers_any_method_under_chaos(
    make_app, client_for, sleeper, span_exporter
) -> None:
    async with client_for(make_app(ALL_CHAOS)) as client:
        post = await client.post('/health')
        put = await client.put('/health')

    for resp in (post, put):
        assert resp.status_code == 200
        assert resp.text == 'ok'
    assert sleeper.calls == []
    assert span_exporter.get_finished_spans() == ()


async def test_metrics_answers_any_method_under_chaos(
    make_app, client_for, sleeper
) -> None:
    async with client_for(make_app(ALL_CHAOS)) as client:
        resp = await client.post('/metrics')

    assert resp.status_code == 200
    assert resp.headers['content-type'].startswith('text/plain')
    assert sleeper.calls == []


async def test_lookalike_paths_are_traced(api_client, span_exporter) -> None:
    await api_client.get('/healthz')

    (root,) = spans_named(span_exporter, 'handle_root')
    assert root.parent is not None
    assert any(
        span.context.span_id == root.parent.span_id
        for span in span_exporter.get_finished_spans()
    )
