import os

from flask import current_app, has_app_context

from ..errors import ConfigurationError, MissingFileError
from ..models.recording import Recording
from ..services.filename import parse_filename_structure
from ..services.scanner import scan_audio_files


def relocate(source_path: str, mapped_dir: str) -> str:
    """Move ``source_path`` into ``mapped_dir`` keeping its base name.

    A file that already sits at the destination (moved by an earlier,
    interrupted sweep) is not an error: the destination path is returned.
    """
    if not mapped_dir:
        raise ConfigurationError("RECORDS_PATH_MAPPED is not set")
    os.makedirs(mapped_dir, exist_ok=True)
    destination = os.path.join(mapped_dir, os.path.basename(source_path))
    if os.path.abspath(source_path) == os.path.abspath(destination):
        return destination
    if not os.path.exists(source_path):
        if os.path.exists(destination):
            current_app.logger.info('File already relocated, skipping move: %s', destination)
            return destination
        raise MissingFileError(f"File not found: {source_path}", path=source_path)
    os.rename(source_path, destination)
    current_app.logger.info('Moved file from %s to %s', source_path, destination)
    return destination


class Mapper:
    """Turns raw recordings in the watch directory into Recording rows."""

    def __init__(self, store, records_path, mapped_path):
        self.store = store
        self.records_path = records_path
        self.mapped_path = mapped_path

    def map_latest_files(self, limit: int = 50):
        log = current_app.logger
        log.info('Mapping latest %s files (without transcription)', limit)

        watermark = self.store.max_timestamp()
        log.info('Last mapped timestamp: %s', watermark)

        candidates = scan_audio_files(self.records_path)[:limit]
        mapped = []
        for scanned in candidates:
            try:
                record = self._map_one(scanned.path, watermark)
            except Exception:
                self.store.session.rollback()
                log.exception('Error mapping record for %s', scanned.path)
                continue
            if record is not None:
                mapped.append(record)

        log.info('Successfully mapped %s files (ready for transcription)', len(mapped))
        return mapped

    def _map_one(self, path, watermark):
        log = current_app.logger
        filename = os.path.basename(path)
        parsed = parse_filename_structure(filename)

        if not parsed["timestamp"] or not parsed["callerId"]:
            log.warning('Skipping file with invalid structure: %s', filename)
            return None

        record = self.store.find_by_file(path)
        # a row already at this path means an earlier move failed; retry it past the watermark
        if record is None and parsed["timestamp"] <= watermark:
            log.info('Skipping file %s - timestamp %s <= last mapped %s', filename, parsed["timestamp"], watermark)
            return None

        if record is not None:
            record.timestamp = parsed["timestamp"]
            record.caller_id = parsed["callerId"] or record.caller_id
            record.type = parsed["type"] or record.type
            record.target_name = parsed["targetName"]
            record.target_number = parsed["targetNumber"]
            log.info('Updated existing record with parsed structure: %s', path)
        else:
            record = Recording(
                user='unknown',
                file=path,
                caller_id=parsed["callerId"],
                type=parsed["type"] or 'unknown',
                transcription='',
                timestamp=parsed["timestamp"],
                target_name=parsed["targetName"],
                target_number=parsed["targetNumber"],
            )
            log.info('Created new record with parsed structure: %s', path)
        self.store.save(record)

        # the row exists before the file moves; a failed move leaves it mapped at the old path
        try:
            new_path = relocate(path, self.mapped_path)
        except Exception:
            log.exception('Failed to move file %s to mapped directory', path)
            return record
        if new_path != record.file:
            record.file = new_path
            self.store.save(record)
        return record


def _run_map(limit):
    from ..pipeline import get_pipeline
    return [r.id for r in get_pipeline().scheduler.trigger_map_latest_files(limit)]


def map_latest_files_job(limit: int = 50):
    """RQ entrypoint; returns the ids of the mapped records."""
    if has_app_context():
        return _run_map(limit)
    from callpipe import create_app
    app = create_app()
    with app.app_context():
        return _run_map(limit)
