from flask import current_app

from .extensions import db
from .jobs.analyze import Analyzer
from .jobs.map_files import Mapper
from .jobs.scheduler import Scheduler
from .jobs.transcribe import Transcriber
from .services.engines import build_engine
from .services.project_config import ProjectConfigResolver
from .services.record_store import RecordStore
from .services.stt import build_speech_to_text

EXTENSION_KEY = 'callpipe'


class Pipeline:
    def __init__(self, store, mapper, transcriber, analyzer, scheduler):
        self.store = store
        self.mapper = mapper
        self.transcriber = transcriber
        self.analyzer = analyzer
        self.scheduler = scheduler


def build_pipeline(app) -> Pipeline:
    """Construct every component once, sharing one storage handle."""
    cfg = app.config
    store = RecordStore(db.session)
    mapper = Mapper(store, cfg.get('RECORDS_PATH'), cfg.get('RECORDS_PATH_MAPPED'))
    transcriber = Transcriber(store, build_speech_to_text(cfg), language=cfg.get('STT_LANGUAGE'))
    analyzer = Analyzer(store, build_engine(cfg), ProjectConfigResolver(db.session))
    scheduler = Scheduler(app, mapper, transcriber, analyzer)
    return Pipeline(store, mapper, transcriber, analyzer, scheduler)


def get_pipeline() -> Pipeline:
    return current_app.extensions[EXTENSION_KEY]
