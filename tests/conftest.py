import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from callpipe import create_app
from callpipe.errors import TransportError
from callpipe.extensions import db
from callpipe.models import CallerDevice, Project, Recording
from callpipe.pipeline import get_pipeline

SALES_CONFIG = {
    "instructions": ["Eres un analista de ventas.", "Extrae el resultado de la llamada."],
    "fields": {
        "successSell": "true si el cliente aceptó la compra",
        "amountToPay": "monto acordado o null",
        "reasonFail": "motivo de la venta fallida o null",
    },
    "output_format": {"successSell": "boolean", "amountToPay": "number|null", "reasonFail": "string|null"},
    "example_analysis": {"successSell": True, "amountToPay": 2000000, "reasonFail": None},
    "example_analysis_fail": {"successSell": False, "amountToPay": None, "reasonFail": "No le interesa"},
}


class FakeSTT:
    backend = 'fake'

    def __init__(self, text='Hola, acepto pagar 2 millones', fail_for=()):
        self.text = text
        self.fail_for = set(fail_for)
        self.calls = []

    def transcribe(self, stream, filename=None, language=None):
        self.calls.append(filename)
        stream.read()
        if filename in self.fail_for:
            raise TransportError(f'stt down for {filename}')
        return self.text


def write_audio(directory, name, mtime=None):
    path = os.path.join(directory, name)
    with open(path, 'wb') as f:
        f.write(b'RIFF....WAVE')
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def watch_dir(tmp_path):
    d = tmp_path / 'incoming'
    d.mkdir()
    return str(d)


@pytest.fixture
def mapped_dir(tmp_path):
    return str(tmp_path / 'mapped')


@pytest.fixture
def app(tmp_path, watch_dir, mapped_dir):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.db'}",
        'REDIS_URL': '',
        'RECORDS_PATH': watch_dir,
        'RECORDS_PATH_MAPPED': mapped_dir,
        'ANALYSIS_BACKEND': 'heuristic',
        'SCHEDULER_ENABLED': False,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def pipeline(app):
    return get_pipeline()


@pytest.fixture
def fake_stt(pipeline):
    stt = FakeSTT()
    pipeline.transcriber.stt = stt
    return stt


@pytest.fixture
def sales_device(app):
    project = Project(title='Ventas', config=SALES_CONFIG)
    db.session.add(project)
    db.session.flush()
    device = CallerDevice(imei='DEV1', title='Phone 1', brand='acme', project_id=project.id)
    db.session.add(device)
    db.session.commit()
    return device


def make_record(path, caller_id='DEV1', transcription='', transcribed=None, timestamp=None):
    rec = Recording(file=path, caller_id=caller_id, type='sale', transcription=transcription,
                    transcribed=transcribed, timestamp=timestamp)
    db.session.add(rec)
    db.session.commit()
    return rec
