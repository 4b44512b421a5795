import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from .ai_processor import classify
from .classifier import ClassifierContext
from .config import settings
from .device_profiles import DEVICE_PROFILES, SUGGESTED_DEVICE_TYPES, lookup_profile
from .models import AnalyzeRequest
from .services.image_loader import ImageDecodeError, decode_base64_image
from .services.scan_history import ScanHistoryStore

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

APP_DIR = Path(__file__).resolve().parent
ROOT_DIR = APP_DIR.parent
DATA_DIR = ROOT_DIR / settings.DATA_DIR
HISTORY_DIR = DATA_DIR / "scan_history"

app = FastAPI(title="EcoScan", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.classifier = ClassifierContext()
app.state.history = ScanHistoryStore(HISTORY_DIR)


def _analyze(request: Request, image, device_type: Optional[str], device_name: Optional[str]):
    context: ClassifierContext = request.app.state.classifier
    history: ScanHistoryStore = request.app.state.history
    verdict = classify(image, device_type or None, context=context)
    record = history.add(verdict, device_name=device_name, device_type=device_type)
    logger.info("Scan %s: recyclable=%s confidence=%.2f", record.id, verdict.recyclable, verdict.confidence)
    return {"scan_id": record.id, "device_name": record.device_name, "result": verdict}


@app.get("/api/config")
def get_config(request: Request):
    return {
        "classifier_backend": settings.CLASSIFIER_BACKEND,
        "model_loaded": request.app.state.classifier.loaded,
    }


@app.get("/api/device-types")
def list_device_types():
    return {
        "profiled": [t.value for t in DEVICE_PROFILES],
        "suggested": list(SUGGESTED_DEVICE_TYPES),
    }


@app.get("/api/device-types/{device_type}")
def get_device_profile(device_type: str):
    profile = lookup_profile(device_type)
    if profile is None:
        raise HTTPException(status_code=404, detail="Unknown device type")
    return {"device_type": device_type, **profile.model_dump(by_alias=True)}


@app.post("/api/analyze")
def analyze_upload(
    request: Request,
    file: UploadFile = File(...),
    device_type: Optional[str] = Form(None),
    device_name: Optional[str] = Form(None),
):
    """
    Classify an uploaded image. Content that is not a decodable image still gets
    a verdict (the fallback one); only an empty upload is rejected.
    """
    img_bytes = file.file.read()
    if not img_bytes:
        raise HTTPException(status_code=400, detail="Empty file provided")
    return _analyze(request, img_bytes, device_type, device_name)


@app.post("/api/analyze/base64")
def analyze_base64(request: Request, payload: AnalyzeRequest):
    # accepts data URLs straight from a browser FileReader
    try:
        img_bytes = decode_base64_image(payload.image)
    except ImageDecodeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not img_bytes:
        raise HTTPException(status_code=400, detail="Empty image provided")
    return _analyze(request, img_bytes, payload.device_type, payload.device_name)


@app.get("/api/history")
def list_history(request: Request):
    return {"scans": request.app.state.history.list_scans()}


@app.get("/api/history/{scan_id}")
def get_history(request: Request, scan_id: str):
    record = request.app.state.history.get(scan_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Scan not found")
    return record


@app.delete("/api/history/{scan_id}")
def delete_history(request: Request, scan_id: str):
    if not request.app.state.history.delete(scan_id):
        raise HTTPException(status_code=404, detail="Scan not found")
    return {"message": "deleted", "scan_id": scan_id}
