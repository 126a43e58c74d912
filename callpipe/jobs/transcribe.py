import os

from flask import current_app, has_app_context

from ..errors import MissingFileError
from ..models.recording import Recording
from ..services.filename import parse_legacy_filename


class Transcriber:
    """Fills in ``transcription`` for mapped recordings."""

    def __init__(self, store, stt, language=None):
        self.store = store
        self.stt = stt
        self.language = language

    def _transcribe_path(self, path):
        with open(path, 'rb') as fh:
            return self.stt.transcribe(fh, filename=os.path.basename(path), language=self.language)

    def transcribe_mapped_files(self, limit: int = 10):
        log = current_app.logger
        log.info('Transcribing latest %s mapped files (transcribed: false/null/not set)', limit)

        records = self.store.untranscribed(limit)
        log.info('Found %s mapped records to transcribe', len(records))

        transcribed = []
        for record in records:
            if not os.path.exists(record.file):
                # left untouched so the next sweep retries once the file is back
                log.warning('File not found: %s. Skipping record %s.', record.file, record.id)
                continue
            try:
                text = self._transcribe_path(record.file)
            except Exception:
                log.exception('Error transcribing mapped record %s', record.file)
                record.transcribed = False
                try:
                    self.store.save(record)
                except Exception:
                    log.exception('Failed to persist transcription failure for %s', record.file)
                continue

            record.transcription = text or ''
            record.transcribed = True
            try:
                self.store.save(record)
            except Exception:
                log.exception('Failed to persist transcription for %s', record.file)
                continue
            transcribed.append(record)
            log.info('Successfully transcribed mapped record: %s', record.file)

        log.info('Successfully processed %s mapped records', len(transcribed))
        return transcribed

    def transcribe_file(self, path: str):
        """Transcribe one file named with the legacy bracketed grammar.

        Upserts by path. ParseError and MissingFileError reach the caller.
        """
        log = current_app.logger
        log.info('Transcribing specific file: %s', path)
        parsed = parse_legacy_filename(os.path.basename(path))
        if not os.path.exists(path):
            raise MissingFileError(f'File not found: {path}', path=path)
        text = self._transcribe_path(path)

        record = self.store.find_by_file(path)
        if record is None:
            record = Recording(
                user=parsed['userId'] or 'unknown',
                file=path,
                caller_id=parsed['contactPhone'] or 'unknown',
                type=parsed['type'] or 'unknown',
            )
        record.transcription = text or ''
        record.transcribed = True
        return self.store.save(record)


def _run_transcribe(limit):
    from ..pipeline import get_pipeline
    return [r.id for r in get_pipeline().scheduler.trigger_transcribe_mapped_files(limit)]


def transcribe_mapped_files_job(limit: int = 20):
    """RQ entrypoint; returns the ids of the transcribed records."""
    if has_app_context():
        return _run_transcribe(limit)
    from callpipe import create_app
    app = create_app()
    with app.app_context():
        return _run_transcribe(limit)
