import os

import requests

from callpipe.jobs.scheduler import MAP_JOB
from callpipe.models import Recording
from callpipe.services.engines import FallbackEngine, HeuristicEngine, LocalLLMEngine

from conftest import make_record, write_audio

NAME = '1700000000_DEV1_sale_John_5551234.wav'


def test_map_endpoint(client, watch_dir, mapped_dir):
    write_audio(watch_dir, NAME)
    resp = client.post('/records/map?limit=5')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['success'] is True
    assert body['count'] == 1
    assert body['data'][0]['callerId'] == 'DEV1'
    assert body['data'][0]['file'] == os.path.join(mapped_dir, NAME)


def test_map_endpoint_conflicts_while_running(client, pipeline, watch_dir):
    write_audio(watch_dir, NAME)
    with pipeline.scheduler.guard.hold(MAP_JOB):
        resp = client.post('/records/map')
    assert resp.status_code == 409
    assert resp.get_json()['success'] is False
    assert Recording.query.count() == 0


def test_transcribe_endpoint(client, fake_stt, mapped_dir):
    os.makedirs(mapped_dir)
    make_record(write_audio(mapped_dir, NAME))
    resp = client.post('/records/transcribe')
    body = resp.get_json()
    assert resp.status_code == 200
    assert body['count'] == 1
    assert body['data'][0]['transcribed'] is True
    assert body['data'][0]['transcription'] == fake_stt.text


def test_transcribe_file_endpoint(client, fake_stt, watch_dir):
    path = write_audio(watch_dir, '1700000000_USER9_out_[Ana]_[555]_20240101.wav')
    resp = client.post('/records/transcribe-file', json={'path': path})
    assert resp.status_code == 201
    data = resp.get_json()['data']
    assert data['user'] == 'USER9'
    assert data['callerId'] == '555'

    assert client.post('/records/transcribe-file', json={}).status_code == 400
    missing = client.post('/records/transcribe-file',
                          json={'path': os.path.join(watch_dir, '1700000001_U_out_[A]_[1]_20240101.wav')})
    assert missing.status_code == 404


def test_enqueue_runs_inline_without_redis(client, watch_dir):
    write_audio(watch_dir, NAME)
    resp = client.post('/records/map/enqueue?limit=5')
    assert resp.status_code == 200
    assert len(resp.get_json()['data']) == 1
    assert client.post('/records/bogus/enqueue').status_code == 404


def test_files_and_scheduler_state(client, watch_dir):
    write_audio(watch_dir, NAME)
    write_audio(watch_dir, 'notes.txt')
    files = client.get('/records/files').get_json()['data']
    assert files['totalFiles'] == 1
    assert files['files'][0]['name'] == NAME

    state = client.get('/records/scheduler').get_json()['data']
    assert state['running'] is False
    assert state['busy'] == []


def test_analyze_by_id(client, sales_device):
    rec = make_record('/calls/a.wav', transcription='Perfecto, acepto pagar 2 millones', transcribed=True)
    resp = client.post(f'/transcriptions/analyze/{rec.id}')
    assert resp.status_code == 200
    assert resp.get_json()['data'] == {
        'successSell': True,
        'amountToPay': 2000000,
        'reasonFail': None,
        'engine': 'heuristic',
    }


def test_analyze_errors(client, sales_device):
    assert client.post('/transcriptions/analyze/999').status_code == 404
    empty = make_record('/calls/empty.wav')
    assert client.post(f'/transcriptions/analyze/{empty.id}').status_code == 409
    orphan = make_record('/calls/o.wav', caller_id='NOPE', transcription='si')
    assert client.post(f'/transcriptions/analyze/{orphan.id}').status_code == 422


def test_analyze_latest_and_listings(client, sales_device):
    make_record('/calls/a.wav', transcription='Perfecto, acepto pagar 2 millones', transcribed=True)
    make_record('/calls/b.wav', transcription='No me interesa', transcribed=True)
    make_record('/calls/c.wav')

    pending = client.get('/transcriptions/pending').get_json()
    assert pending['count'] == 2

    latest = client.post('/transcriptions/analyze-latest?limit=1').get_json()
    assert latest['count'] == 1
    assert latest['data'][0]['successSell'] is True

    assert client.get('/transcriptions/pending').get_json()['count'] == 1
    assert client.get('/transcriptions/records').get_json()['count'] == 2

    stats = client.get('/transcriptions/stats').get_json()['data']
    assert stats['total'] == 3 and stats['analyzed'] == 1 and stats['success'] == 1


def test_record_by_id(client):
    rec = make_record('/calls/a.wav')
    assert client.get(f'/transcriptions/records/{rec.id}').get_json()['data']['id'] == rec.id
    assert client.get('/transcriptions/records/999').status_code == 404


def test_health(client):
    data = client.get('/transcriptions/health').get_json()['data']
    assert data == {'engine': 'heuristic'}


def test_non_positive_limit_is_rejected(client, watch_dir):
    write_audio(watch_dir, NAME)
    for url in ('/records/map?limit=0', '/records/transcribe?limit=-1',
                '/records/map/enqueue?limit=0', '/transcriptions/analyze-latest?limit=0',
                '/transcriptions/pending?limit=-5'):
        method = client.get if 'pending' in url else client.post
        resp = method(url)
        assert resp.status_code == 400, url
        assert resp.get_json()['success'] is False
    assert Recording.query.count() == 0


def test_pull_model_requires_local_engine(client):
    assert client.post('/transcriptions/model/pull').status_code == 422


def test_pull_model_for_local_engine(client, pipeline, monkeypatch):
    posted = []

    class Reply:
        def __init__(self, payload):
            self.payload = payload

        def raise_for_status(self):
            pass

        def json(self):
            return self.payload

    monkeypatch.setattr(requests, 'post', lambda url, **kw: posted.append(url) or Reply({'status': 'success'}))
    monkeypatch.setattr(requests, 'get', lambda url, **kw: Reply({'models': [{'name': 'deepseek-llm:latest'}]}))
    pipeline.analyzer.engine = FallbackEngine(LocalLLMEngine(model='deepseek-llm'), HeuristicEngine('si', 'no'))

    resp = client.post('/transcriptions/model/pull')

    assert resp.status_code == 200
    assert resp.get_json()['data'] == {'model': 'deepseek-llm', 'modelAvailable': True}
    assert posted == ['http://localhost:11434/api/pull']
