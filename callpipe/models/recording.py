from ..extensions import db
from .base import TimestampMixin


def _iso(value):
    return value.isoformat() if value else None


class Recording(db.Model, TimestampMixin):
    __tablename__ = "records"
    id = db.Column(db.Integer, primary_key=True)
    # file path at time of creation; updated after relocation
    file = db.Column(db.String(1024), nullable=False, unique=True, index=True)
    user = db.Column(db.String(120), nullable=False, default="unknown")
    caller_id = db.Column(db.String(120), nullable=False, index=True)
    type = db.Column(db.String(60), nullable=False, default="unknown")
    # parsed filename timestamp, the mapping watermark
    timestamp = db.Column(db.BigInteger, nullable=True, index=True)
    target_name = db.Column(db.String(255))
    target_number = db.Column(db.String(60))

    transcription = db.Column(db.Text, nullable=False, default="")
    # None and False both mean "not transcribed yet"
    transcribed = db.Column(db.Boolean, nullable=True)

    # outcome group: all null or all written by one analysis pass
    success_sell = db.Column(db.Boolean, nullable=True)
    amount_to_pay = db.Column(db.Float, nullable=True)
    reason_fail = db.Column(db.Text, nullable=True)

    @property
    def is_analyzed(self):
        return self.success_sell is not None

    def apply_outcome(self, result):
        self.success_sell = result.success_sell
        self.amount_to_pay = result.amount_to_pay
        self.reason_fail = result.reason_fail

    def to_dict(self):
        return {
            "id": self.id,
            "user": self.user,
            "file": self.file,
            "callerId": self.caller_id,
            "type": self.type,
            "timestamp": self.timestamp,
            "targetName": self.target_name,
            "targetNumber": self.target_number,
            "transcription": self.transcription,
            "transcribed": self.transcribed,
            "successSell": self.success_sell,
            "amountToPay": self.amount_to_pay,
            "reasonFail": self.reason_fail,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Recording id={self.id} file={self.file}>"
