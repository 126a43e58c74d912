import threading

import pytest

from callpipe.errors import JobInProgressError, TransportError
from callpipe.jobs.scheduler import MAP_JOB, TRANSCRIBE_JOB, PeriodicJob, Scheduler, SingleFlight


class StubStage:
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else []
        self.error = error
        self.calls = []
        self.called = threading.Event()

    def __call__(self, limit):
        self.calls.append(limit)
        self.called.set()
        if self.error:
            raise self.error
        return self.result


class StubMapper:
    def __init__(self, stage):
        self.map_latest_files = stage


class StubTranscriber:
    def __init__(self, stage):
        self.transcribe_mapped_files = stage


class StubAnalyzer:
    def __init__(self, stage):
        self.analyze_first_records_without_analysis = stage


def make_scheduler(app, mapper=None, transcriber=None, analyzer=None):
    return Scheduler(
        app,
        StubMapper(mapper or StubStage()),
        StubTranscriber(transcriber or StubStage()),
        StubAnalyzer(analyzer or StubStage()),
    )


def test_single_flight_rejects_overlap():
    guard = SingleFlight()
    with guard.hold(MAP_JOB):
        assert guard.is_running(MAP_JOB)
        with pytest.raises(JobInProgressError):
            with guard.hold(MAP_JOB):
                pass
        # other job types are independent
        with guard.hold(TRANSCRIBE_JOB):
            assert guard.is_running(TRANSCRIBE_JOB)
    assert not guard.is_running(MAP_JOB)


def test_single_flight_releases_on_error():
    guard = SingleFlight()
    with pytest.raises(RuntimeError):
        with guard.hold(MAP_JOB):
            raise RuntimeError('boom')
    assert not guard.is_running(MAP_JOB)


def test_manual_trigger_while_running_is_rejected(app):
    mapper = StubStage(result=['r1'])
    scheduler = make_scheduler(app, mapper=mapper)
    with scheduler.guard.hold(MAP_JOB):
        with pytest.raises(JobInProgressError):
            scheduler.trigger_map_latest_files(5)
    assert mapper.calls == []
    assert scheduler.trigger_map_latest_files(5) == ['r1']
    assert mapper.calls == [5]


def test_tick_while_running_is_skipped(app):
    transcriber = StubStage()
    scheduler = make_scheduler(app, transcriber=transcriber)
    with scheduler.guard.hold(TRANSCRIBE_JOB):
        assert scheduler.handle_transcribe_mapped_files() is None
    assert transcriber.calls == []


def test_tick_swallows_errors(app):
    scheduler = make_scheduler(app, mapper=StubStage(error=TransportError('down')))
    assert scheduler.handle_map_latest_files() is None
    assert not scheduler.guard.is_running(MAP_JOB)


def test_manual_trigger_propagates_errors(app):
    scheduler = make_scheduler(app, analyzer=StubStage(error=TransportError('down')))
    with pytest.raises(TransportError):
        scheduler.trigger_analyze_pending(3)


def test_tick_uses_configured_limits(app):
    app.config.update(MAP_BATCH_LIMIT=7, TRANSCRIBE_BATCH_LIMIT=3)
    mapper, transcriber = StubStage(), StubStage()
    scheduler = make_scheduler(app, mapper=mapper, transcriber=transcriber)
    scheduler.handle_map_latest_files()
    scheduler.handle_transcribe_mapped_files()
    assert mapper.calls == [7]
    assert transcriber.calls == [3]


def test_periodic_job_fires_until_stopped():
    fired = threading.Event()
    job = PeriodicJob('probe', 0.01, fired.set)
    job.start()
    assert fired.wait(2)
    job.stop()
    job.join(2)
    assert not job.is_alive()


def test_scheduler_start_and_stop(app):
    app.config.update(MAP_INTERVAL_SEC=0.01, TRANSCRIBE_INTERVAL_SEC=0.01)
    mapper, transcriber = StubStage(), StubStage()
    scheduler = make_scheduler(app, mapper=mapper, transcriber=transcriber)

    scheduler.start()
    assert scheduler.running
    assert mapper.called.wait(2)
    assert transcriber.called.wait(2)
    scheduler.stop(timeout=2)

    assert not scheduler.running
    assert scheduler.state()['running'] is False


def test_explicit_limit_is_not_replaced_by_default(app):
    app.config.update(MAP_BATCH_LIMIT=50, TRANSCRIBE_BATCH_LIMIT=20)
    mapper, transcriber = StubStage(), StubStage()
    scheduler = make_scheduler(app, mapper=mapper, transcriber=transcriber)
    scheduler.trigger_map_latest_files(0)
    scheduler.trigger_map_latest_files()
    scheduler.trigger_transcribe_mapped_files(0)
    assert mapper.calls == [0, 50]
    assert transcriber.calls == [0]
