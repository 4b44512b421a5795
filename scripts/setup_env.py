from pathlib import Path

from ecoscan.classifier import ModelLoadError, load_mobilenet
from ecoscan.config import settings

ROOT = Path(__file__).resolve().parents[1]
DATA = ROOT / settings.DATA_DIR
HISTORY = DATA / "scan_history"

for d in (DATA, HISTORY):
    d.mkdir(parents=True, exist_ok=True)

# warm the torchvision weights cache so the first scan does not download them
try:
    load_mobilenet(settings.MODEL_WEIGHTS_PATH)
    print("MobileNetV2 weights available.")
except ModelLoadError as e:
    print(f"Classifier not available ({e}); scans will use the fallback verdict.")

print("Environment ready. Data directories created.")
