from callpipe import create_app
from callpipe.pipeline import get_pipeline

app = create_app()

if app.config.get("SCHEDULER_ENABLED"):
    with app.app_context():
        get_pipeline().scheduler.start()
