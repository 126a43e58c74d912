"""Periodic mapping and transcription sweeps.

Each job type owns a non-blocking lock: a sweep that finds its lock taken
(timer tick or manual trigger landing on a running sweep) does not run. Ticks
just log the skip; manual triggers get JobInProgressError.
"""
import threading
from contextlib import contextmanager

from ..errors import JobInProgressError

MAP_JOB = 'map'
TRANSCRIBE_JOB = 'transcribe'
ANALYZE_JOB = 'analyze'


class SingleFlight:
    def __init__(self):
        self._locks = {}
        self._guard = threading.Lock()

    def _lock(self, name):
        with self._guard:
            return self._locks.setdefault(name, threading.Lock())

    @contextmanager
    def hold(self, name):
        lock = self._lock(name)
        if not lock.acquire(blocking=False):
            raise JobInProgressError(f'{name} sweep already running', job=name)
        try:
            yield
        finally:
            lock.release()

    def is_running(self, name):
        return self._lock(name).locked()


class PeriodicJob(threading.Thread):
    def __init__(self, name, interval, target):
        super().__init__(name=f'callpipe-{name}', daemon=True)
        self.interval = interval
        self.target = target
        self._stop_event = threading.Event()

    def run(self):
        while not self._stop_event.wait(self.interval):
            self.target()

    def stop(self):
        self._stop_event.set()


class Scheduler:
    def __init__(self, app, mapper, transcriber, analyzer, guard=None):
        self.app = app
        self.mapper = mapper
        self.transcriber = transcriber
        self.analyzer = analyzer
        self.guard = guard or SingleFlight()
        self.map_interval = app.config.get('MAP_INTERVAL_SEC', 10)
        self.map_limit = app.config.get('MAP_BATCH_LIMIT', 50)
        self.transcribe_interval = app.config.get('TRANSCRIBE_INTERVAL_SEC', 600)
        self.transcribe_limit = app.config.get('TRANSCRIBE_BATCH_LIMIT', 20)
        self._threads = []

    @property
    def running(self):
        return any(t.is_alive() for t in self._threads)

    def start(self):
        if self.running:
            return
        self._threads = [
            PeriodicJob(MAP_JOB, self.map_interval, self._tick(self.handle_map_latest_files)),
            PeriodicJob(TRANSCRIBE_JOB, self.transcribe_interval, self._tick(self.handle_transcribe_mapped_files)),
        ]
        for t in self._threads:
            t.start()
        self.app.logger.info('Scheduler started (map every %ss, transcribe every %ss)',
                             self.map_interval, self.transcribe_interval)

    def stop(self, timeout=None):
        for t in self._threads:
            t.stop()
        for t in self._threads:
            if t.is_alive():
                t.join(timeout)
        self._threads = []

    def _tick(self, handler):
        def run():
            with self.app.app_context():
                handler()
        return run

    def state(self):
        return {
            'running': self.running,
            'busy': [name for name in (MAP_JOB, TRANSCRIBE_JOB, ANALYZE_JOB) if self.guard.is_running(name)],
            'mapIntervalSec': self.map_interval,
            'transcribeIntervalSec': self.transcribe_interval,
        }

    # timer-driven: log, never raise

    def _handle(self, name, func, limit):
        log = self.app.logger
        log.info('Starting scheduled %s job...', name)
        try:
            with self.guard.hold(name):
                result = func(limit)
        except JobInProgressError:
            log.warning('Scheduled %s job skipped, previous sweep still running', name)
            return None
        except Exception:
            log.exception('Error in scheduled %s job', name)
            return None
        log.info('Scheduled %s job completed successfully. Processed %s files.', name, len(result))
        return result

    def handle_map_latest_files(self):
        return self._handle(MAP_JOB, self.mapper.map_latest_files, self.map_limit)

    def handle_transcribe_mapped_files(self):
        return self._handle(TRANSCRIBE_JOB, self.transcriber.transcribe_mapped_files, self.transcribe_limit)

    # manual: errors reach the caller

    def _trigger(self, name, func, limit):
        self.app.logger.info('Manually triggering %s with limit: %s', name, limit)
        with self.guard.hold(name):
            result = func(limit)
        self.app.logger.info('Manual %s completed. Processed %s items.', name, len(result))
        return result

    def trigger_map_latest_files(self, limit=None):
        return self._trigger(MAP_JOB, self.mapper.map_latest_files,
                             limit if limit is not None else self.map_limit)

    def trigger_transcribe_mapped_files(self, limit=None):
        return self._trigger(TRANSCRIBE_JOB, self.transcriber.transcribe_mapped_files,
                             limit if limit is not None else self.transcribe_limit)

    def trigger_analyze_pending(self, limit=10):
        return self._trigger(ANALYZE_JOB, self.analyzer.analyze_first_records_without_analysis, limit)
