from ..extensions import db
from .base import TimestampMixin


class Project(db.Model, TimestampMixin):
    __tablename__ = "projects"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    # AnalysisConfig: instructions, fields, output_format, example_analysis, example_analysis_fail
    config = db.Column(db.JSON, nullable=False, default=dict)
    deleted = db.Column(db.Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Project id={self.id} title={self.title}>"


class CallerDevice(db.Model, TimestampMixin):
    __tablename__ = "caller_devices"
    id = db.Column(db.Integer, primary_key=True)
    # recordings carry the device imei as their callerId
    imei = db.Column(db.String(120), nullable=False, unique=True, index=True)
    title = db.Column(db.String(255), nullable=False)
    brand = db.Column(db.String(120), nullable=False)
    model = db.Column(db.String(120))
    phone_number = db.Column(db.String(60))
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id"), nullable=True)
    deleted = db.Column(db.Boolean, nullable=False, default=False)

    project = db.relationship("Project", lazy="joined")

    def __repr__(self) -> str:
        return f"<CallerDevice id={self.id} imei={self.imei}>"
