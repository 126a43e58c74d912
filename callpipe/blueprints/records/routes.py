from flask import current_app, jsonify, request

from . import bp
from .. import query_limit
from ...extensions import rq
from ...jobs.analyze import analyze_pending_job
from ...jobs.map_files import map_latest_files_job
from ...jobs.transcribe import transcribe_mapped_files_job
from ...pipeline import get_pipeline
from ...services.scanner import scan_audio_files

SWEEP_JOBS = {
    'map': (map_latest_files_job, 50),
    'transcribe': (transcribe_mapped_files_job, 20),
    'analyze': (analyze_pending_job, 10),
}


def _records_response(records, message):
    data = [r.to_dict() for r in records]
    return jsonify({"success": True, "data": data, "count": len(data), "message": message})


@bp.post("/map")
def map_latest_files():
    limit = query_limit(50)
    records = get_pipeline().scheduler.trigger_map_latest_files(limit)
    return _records_response(records, f"Mapped {len(records)} files")


@bp.post("/transcribe")
def transcribe_mapped_files():
    limit = query_limit(20)
    records = get_pipeline().scheduler.trigger_transcribe_mapped_files(limit)
    return _records_response(records, f"Transcribed {len(records)} files")


@bp.post("/transcribe-file")
def transcribe_file():
    payload = request.get_json(silent=True) or {}
    path = payload.get('path')
    if not path:
        return jsonify({"success": False, "message": "path is required"}), 400
    record = get_pipeline().transcriber.transcribe_file(path)
    return jsonify({"success": True, "data": record.to_dict(), "message": "File transcribed"}), 201


@bp.post("/<sweep>/enqueue")
def enqueue_sweep(sweep):
    if sweep not in SWEEP_JOBS:
        return jsonify({"success": False, "message": f"unknown sweep: {sweep}"}), 404
    func, default_limit = SWEEP_JOBS[sweep]
    limit = query_limit(default_limit)
    job = rq.enqueue(func, limit)
    job_id = getattr(job, 'id', None)
    if job_id is not None:
        return jsonify({"success": True, "data": {"job_id": job_id}, "message": f"{sweep} sweep queued"}), 202
    # no queue available: rq ran the job inline and returned its result
    return jsonify({"success": True, "data": job, "message": f"{sweep} sweep ran synchronously"})


@bp.get("/files")
def list_record_files():
    directory = current_app.config.get('RECORDS_PATH')
    files = scan_audio_files(directory, extended=True)
    return jsonify({
        "success": True,
        "data": {
            "files": [f.to_dict() for f in files],
            "directory": directory,
            "totalFiles": len(files),
        },
    })


@bp.get("/scheduler")
def scheduler_state():
    return jsonify({"success": True, "data": get_pipeline().scheduler.state()})
