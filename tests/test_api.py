# tests/test_api.py
import pytest
from fastapi.testclient import TestClient

from pageqa.context import AppContext
from pageqa.exceptions import RenderError
from pageqa.main import create_app
from pageqa.settings import Settings

from .fakes import FakeAnswerer, FakeRenderer

TASK_FIELDS = {'id', 'url', 'question', 'status', 'scrapedContent', 'answer', 'error', 'createdAt', 'updatedAt'}


@pytest.fixture()
def client(context):
    return TestClient(create_app(context))


def test_health_reports_ok_with_timestamp(client):
    response = client.get('/health')

    assert response.status_code == 200
    body = response.json()
    assert body['status'] == 'ok'
    assert body['timestamp'].endswith('Z')


def test_create_returns_fresh_queued_task(client):
    response = client.post('/api/tasks', json={'url': 'https://example.com', 'question': 'What is this page about?'})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == TASK_FIELDS
    assert body['status'] == 'queued'
    assert body['scrapedContent'] is None
    assert body['answer'] is None
    assert body['error'] is None


def test_inline_mode_finishes_before_create_returns(client, answerer):
    created = client.post('/api/tasks', json={'url': 'https://example.com', 'question': 'What is this page about?'}).json()

    # No polling needed: the task already reached a terminal state
    response = client.get(f"/api/tasks/{created['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body['status'] == 'completed'
    assert body['answer'] == answerer.text
    assert body['error'] is None
    assert len(answerer.calls) == 1


def test_render_failure_is_reported_through_the_task(settings):
    answerer = FakeAnswerer()
    ctx = AppContext.from_settings(settings, renderer=FakeRenderer(error=RenderError('timeout')), answerer=answerer)
    client = TestClient(create_app(ctx))

    created = client.post('/api/tasks', json={'url': 'https://example.com', 'question': 'q'})
    body = client.get(f"/api/tasks/{created.json()['id']}").json()

    assert created.status_code == 200
    assert body['status'] == 'error'
    assert 'timeout' in body['error']
    assert body['answer'] is None
    assert answerer.calls == []
    ctx.close()


@pytest.mark.parametrize('payload', [
    {'url': 'https://example.com'},
    {'question': 'What is this page about?'},
    {'url': '', 'question': 'q'},
    {'url': 'https://example.com', 'question': '   '},
    {},
])
def test_missing_fields_are_rejected_without_creating_a_task(client, context, payload):
    before = context.store.count()

    response = client.post('/api/tasks', json=payload)

    assert response.status_code == 400
    assert response.json() == {'error': 'URL and Question are required'}
    assert context.store.count() == before


def test_non_json_body_is_a_client_error(client, context):
    response = client.post('/api/tasks', content='not json', headers={'Content-Type': 'application/json'})

    assert response.status_code == 400
    assert context.store.count() == 0


def test_unknown_task_is_not_found(client):
    response = client.get('/api/tasks/424242')

    assert response.status_code == 404
    assert response.json() == {'error': 'Task not found'}


def test_queued_mode_returns_queued_and_leaves_task_for_worker(settings, renderer, answerer):
    enqueued = []
    ctx = AppContext.from_settings(
        Settings(database_url=settings.database_url, redis_host='redis'),
        renderer=renderer,
        answerer=answerer,
        enqueue=lambda *args: enqueued.append(args),
    )
    client = TestClient(create_app(ctx))

    created = client.post('/api/tasks', json={'url': 'https://example.com', 'question': 'q'}).json()

    assert enqueued == [(created['id'], 'https://example.com', 'q')]
    assert client.get(f"/api/tasks/{created['id']}").json()['status'] == 'queued'
    assert renderer.calls == []
    ctx.close()


def test_stats_and_recent(client):
    for i in range(3):
        client.post('/api/tasks', json={'url': f'https://{i}.example', 'question': 'q'})

    stats = client.get('/api/tasks/stats').json()
    recent = client.get('/api/tasks/recent', params={'limit': 2}).json()

    assert stats['total_tasks'] == 3
    assert stats['completed'] == 3
    assert stats['queued'] == 0
    assert recent['count'] == 2
    assert recent['tasks'][0]['url'] == 'https://2.example'


def test_metrics_exposes_task_counters(client):
    client.post('/api/tasks', json={'url': 'https://example.com', 'question': 'q'})

    response = client.get('/metrics')

    assert response.status_code == 200
    assert 'pageqa_tasks_submitted_total' in response.text
    assert 'container_memory_bytes' in response.text


@pytest.mark.parametrize('task_id', ['99999999999999999999', '0', '-5'])
def test_out_of_range_task_id_is_not_found(client, task_id):
    response = client.get(f'/api/tasks/{task_id}')

    assert response.status_code == 404
    assert response.json() == {'error': 'Task not found'}
