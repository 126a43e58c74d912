from flask import current_app, has_app_context

from ..errors import NotFoundError, NotTranscribedError


class Analyzer:
    """Second-stage sale-outcome extraction over transcribed recordings."""

    def __init__(self, store, engine, resolver):
        self.store = store
        self.engine = engine
        self.resolver = resolver

    def _analyze(self, record):
        config = self.resolver.resolve(record.caller_id)
        result = self.engine.analyze(record.transcription, config)
        # the three outcome fields are written together in one commit
        record.apply_outcome(result)
        self.store.save(record)
        current_app.logger.info('Analysis completed for record %s (engine=%s, successSell=%s)',
                                record.id, result.engine, result.success_sell)
        return result

    def analyze_transcription_by_id(self, record_id):
        record = self.store.get(record_id)
        if record is None:
            raise NotFoundError(f'Record with ID {record_id} not found', record_id=record_id)
        if not record.transcription:
            raise NotTranscribedError(f'Record with ID {record_id} has no transcription',
                                      record_id=record_id)
        return self._analyze(record)

    def analyze_first_records_without_analysis(self, limit: int = 10):
        log = current_app.logger
        records = self.store.pending_analysis(limit, resolvable_only=True)
        if not records:
            log.info('No records found without analysis results')
            return []

        results = []
        for record in records:
            try:
                result = self._analyze(record)
            except Exception:
                # only this record is abandoned; it stays pending for the next sweep
                self.store.session.rollback()
                log.exception('Error analyzing record %s', record.id)
                continue
            results.append({'id': record.id, **result.to_dict()})
        log.info('Analyzed %s of %s pending records', len(results), len(records))
        return results

    def get_records_without_analysis(self, limit: int = 10):
        return self.store.pending_analysis(limit)

    def get_records_with_transcriptions(self, limit: int = 10):
        return self.store.with_transcriptions(limit)

    def get_record_by_id(self, record_id):
        record = self.store.get(record_id)
        if record is None:
            raise NotFoundError('Record not found', record_id=record_id)
        return record

    def get_analysis_stats(self):
        return self.store.stats()


def _run_analyze(limit):
    from ..pipeline import get_pipeline
    return get_pipeline().scheduler.trigger_analyze_pending(limit)


def analyze_pending_job(limit: int = 10):
    """RQ entrypoint for a batch analysis sweep."""
    if has_app_context():
        return _run_analyze(limit)
    from callpipe import create_app
    app = create_app()
    with app.app_context():
        return _run_analyze(limit)
