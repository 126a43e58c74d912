from sqlalchemy import func, or_

from ..models.device import CallerDevice, Project
from ..models.recording import Recording


class RecordStore:
    """Queries and writes for the recordings collection.

    Built once by the app factory around the SQLAlchemy session and handed
    to each pipeline component.
    """

    def __init__(self, session):
        self.session = session

    def _query(self):
        return self.session.query(Recording)

    @staticmethod
    def _has_transcription():
        return (Recording.transcription.isnot(None)) & (Recording.transcription != "")

    def max_timestamp(self) -> int:
        value = (
            self.session.query(func.max(Recording.timestamp))
            .filter(Recording.timestamp.isnot(None))
            .scalar()
        )
        return int(value) if value is not None else 0

    def get(self, record_id):
        return self.session.get(Recording, record_id)

    def find_by_file(self, path):
        return self._query().filter(Recording.file == path).first()

    def untranscribed(self, limit):
        return (
            self._query()
            .filter(or_(Recording.transcribed.is_(False), Recording.transcribed.is_(None)))
            .order_by(Recording.created_at.desc(), Recording.id.desc())
            .limit(limit)
            .all()
        )

    def pending_analysis(self, limit, resolvable_only=False):
        """Transcribed, unanalyzed records, oldest first.

        With ``resolvable_only`` records whose callerId does not reach a live
        device and project are left out, so they cannot fill every batch.
        """
        query = (
            self._query()
            .filter(self._has_transcription())
            .filter(Recording.success_sell.is_(None))
        )
        if resolvable_only:
            query = (
                query.join(CallerDevice, CallerDevice.imei == Recording.caller_id)
                .join(Project, Project.id == CallerDevice.project_id)
                .filter(CallerDevice.deleted.is_(False), Project.deleted.is_(False))
            )
        return query.order_by(Recording.id.asc()).limit(limit).all()

    def with_transcriptions(self, limit):
        return (
            self._query()
            .filter(self._has_transcription())
            .order_by(Recording.created_at.desc(), Recording.id.desc())
            .limit(limit)
            .all()
        )

    def count(self):
        return self._query().count()

    def save(self, record):
        try:
            self.session.add(record)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return record

    def stats(self):
        transcribed = self._query().filter(self._has_transcription())
        total_transcribed = transcribed.count()
        analyzed = transcribed.filter(Recording.success_sell.isnot(None)).count()
        return {
            "total": self.count(),
            "transcribed": total_transcribed,
            "analyzed": analyzed,
            "pending": total_transcribed - analyzed,
            "success": self._query().filter(Recording.success_sell.is_(True)).count(),
            "fail": self._query().filter(Recording.success_sell.is_(False)).count(),
        }
