import os
import sys
import tempfile

# ensure project root is on sys.path so `import callpipe` works when running this script
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from callpipe import create_app
from callpipe.extensions import db
from callpipe.models import CallerDevice, Project
from callpipe.pipeline import get_pipeline

# Simple synchronous run of map -> transcribe -> analyze against a throwaway
# directory. Transcription uses the configured STT backend, so without
# credentials the record stays untranscribed and analysis finds nothing.

work = tempfile.mkdtemp(prefix="callpipe-smoke-")
watch = os.path.join(work, "incoming")
mapped = os.path.join(work, "mapped")
os.makedirs(watch)
sample = os.path.join(watch, "1700000000_SMOKE1_sale_John_5551234.wav")
with open(sample, "wb") as f:
    f.write(b"RIFF....WAVE")

app = create_app({
    "SQLALCHEMY_DATABASE_URI": f"sqlite:///{os.path.join(work, 'smoke.db')}",
    "RECORDS_PATH": watch,
    "RECORDS_PATH_MAPPED": mapped,
    "REDIS_URL": "",
})
with app.app_context():
    project = Project(title="Smoke", config={"instructions": ["Analiza la llamada."]})
    db.session.add(project)
    db.session.flush()
    db.session.add(CallerDevice(imei="SMOKE1", title="smoke", brand="test", project_id=project.id))
    db.session.commit()

    pipeline = get_pipeline()
    mapped_records = pipeline.scheduler.trigger_map_latest_files(10)
    print("Mapped:", [(r.id, r.file) for r in mapped_records])
    transcribed = pipeline.scheduler.trigger_transcribe_mapped_files(10)
    print("Transcribed:", [r.id for r in transcribed])
    print("Analysis:", pipeline.scheduler.trigger_analyze_pending(10))
    print("Stats:", pipeline.analyzer.get_analysis_stats())
