from datetime import datetime, timezone

from flask import jsonify

from . import bp
from .. import query_limit
from ...errors import ConfigurationError
from ...pipeline import get_pipeline
from ...services.engines import LocalLLMEngine


@bp.post("/analyze/<int:record_id>")
def analyze_transcription_by_id(record_id):
    result = get_pipeline().analyzer.analyze_transcription_by_id(record_id)
    return jsonify({
        "success": True,
        "data": result.to_dict(),
        "message": "Transcription analysis completed successfully",
    })


@bp.post("/analyze-latest")
def analyze_latest_transcriptions():
    limit = query_limit(10)
    results = get_pipeline().scheduler.trigger_analyze_pending(limit)
    return jsonify({
        "success": True,
        "data": results,
        "count": len(results),
        "message": f"Analysis completed for {len(results)} transcriptions",
    })


@bp.get("/pending")
def pending_analysis():
    limit = query_limit(10)
    records = get_pipeline().analyzer.get_records_without_analysis(limit)
    return jsonify({
        "success": True,
        "data": [r.to_dict() for r in records],
        "count": len(records),
        "message": f"Found {len(records)} records pending analysis",
    })


@bp.get("/records")
def records_with_transcriptions():
    limit = query_limit(10)
    records = get_pipeline().analyzer.get_records_with_transcriptions(limit)
    return jsonify({
        "success": True,
        "data": [r.to_dict() for r in records],
        "count": len(records),
        "message": f"Found {len(records)} records with transcriptions",
    })


@bp.get("/records/<int:record_id>")
def record_by_id(record_id):
    record = get_pipeline().analyzer.get_record_by_id(record_id)
    return jsonify({"success": True, "data": record.to_dict(), "message": "Record retrieved successfully"})


@bp.get("/stats")
def analysis_stats():
    return jsonify({
        "success": True,
        "data": get_pipeline().analyzer.get_analysis_stats(),
        "message": "Analysis statistics retrieved successfully",
    })


@bp.get("/health")
def health():
    engine = get_pipeline().analyzer.engine
    data = {"engine": engine.name}
    # the local engine is the only one whose model can be missing at runtime
    local = getattr(engine, 'primary', engine)
    if isinstance(local, LocalLLMEngine):
        data["modelAvailable"] = local.check_model_availability()
    return jsonify({
        "success": True,
        "data": data,
        "message": "Transcription analysis service is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@bp.post("/model/pull")
def pull_model():
    engine = get_pipeline().analyzer.engine
    local = getattr(engine, 'primary', engine)
    if not isinstance(local, LocalLLMEngine):
        raise ConfigurationError(f'Engine {engine.name} has no local model to pull')
    local.pull_model()
    return jsonify({
        "success": True,
        "data": {"model": local.model, "modelAvailable": local.check_model_availability()},
        "message": f"{local.model} model pulled successfully",
    })
