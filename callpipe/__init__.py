from flask import Flask, jsonify
from .extensions import db, migrate, rq
from .errors import PipelineError


def create_app(overrides=None):
    """App factory.

    ``overrides`` is applied on top of ``config.Config`` (tests pass a temp
    database and temp watch directories here). The pipeline components are
    built once and stored under ``app.extensions['callpipe']``.
    """
    app = Flask(__name__)
    app.config.from_object('config.Config')
    if overrides:
        app.config.update(overrides)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    migrate.init_app(app, db)
    rq.init_app(app)

    from . import models  # noqa: F401  register tables on the metadata
    from .pipeline import EXTENSION_KEY, build_pipeline

    with app.app_context():
        if not app.config.get('SKIP_CREATE_ALL'):
            db.create_all()
        app.extensions[EXTENSION_KEY] = build_pipeline(app)

    from .blueprints.records import bp as records_bp
    from .blueprints.transcriptions import bp as transcriptions_bp
    app.register_blueprint(records_bp, url_prefix="/records")
    app.register_blueprint(transcriptions_bp, url_prefix="/transcriptions")

    @app.errorhandler(PipelineError)
    def handle_pipeline_error(e):
        return jsonify({"success": False, "message": e.message}), e.status_code

    return app
