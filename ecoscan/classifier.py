import logging
import random
import threading
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from PIL import Image

from .config import settings
from .services.image_loader import ImageDecodeError, ImagePayload, decode_image

# Optional torch import guarded; a missing install surfaces as a model load failure
try:
    import torch
    from torchvision import transforms
    from torchvision.models import MobileNet_V2_Weights, mobilenet_v2
except Exception:  # pragma: no cover
    torch = None  # type: ignore

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    MODEL_LOAD = "model_load"
    IMAGE_PREPROCESSING = "image_preprocessing"
    INFERENCE = "inference"


class ClassifierError(Exception):
    kind: FailureKind = FailureKind.INFERENCE


class ModelLoadError(ClassifierError):
    kind = FailureKind.MODEL_LOAD


class ImagePreprocessingError(ClassifierError):
    kind = FailureKind.IMAGE_PREPROCESSING


class InferenceError(ClassifierError):
    kind = FailureKind.INFERENCE


class ImageClassifier(ABC):
    """Interface of a pretrained multi-class image classifier.

    ``preprocess`` turns a decoded image into whatever ``predict`` consumes;
    ``predict`` returns one probability per class of its fixed taxonomy.
    """

    @abstractmethod
    def preprocess(self, image: Image.Image) -> Any:
        ...

    @abstractmethod
    def predict(self, inputs: Any) -> Sequence[float]:
        ...


class MobileNetClassifier(ImageClassifier):
    """MobileNetV2 with ImageNet-1k weights."""

    def __init__(self, model, transform):
        self.model = model
        self.transform = transform

    def preprocess(self, image: Image.Image):
        return self.transform(image.convert("RGB")).unsqueeze(0)

    def predict(self, inputs) -> Sequence[float]:
        with torch.no_grad():
            logits = self.model(inputs)
            probs = torch.softmax(logits, dim=1)[0]
        return probs.tolist()


def imagenet_transform():
    return transforms.Compose([
        transforms.Resize(256),
        transforms.CenterCrop(224),
        transforms.ToTensor(),
        transforms.Normalize([0.485, 0.456, 0.406],
                             [0.229, 0.224, 0.225]),
    ])


def load_mobilenet(weights_path: str = "") -> MobileNetClassifier:
    if torch is None:
        raise ModelLoadError("torch/torchvision are not installed")
    try:
        if weights_path:
            model = mobilenet_v2(weights=None)
            model.load_state_dict(torch.load(Path(weights_path), map_location="cpu"))
        else:
            model = mobilenet_v2(weights=MobileNet_V2_Weights.IMAGENET1K_V1)
        model.eval()
    except Exception as e:
        raise ModelLoadError(f"Failed to load MobileNetV2: {e}") from e

    logger.info("MobileNetV2 classifier loaded")
    return MobileNetClassifier(model, imagenet_transform())


def _unavailable() -> ImageClassifier:
    raise ModelLoadError("Image classification is disabled (CLASSIFIER_BACKEND=none)")


def default_loader() -> Callable[[], ImageClassifier]:
    backend = settings.CLASSIFIER_BACKEND.strip().lower()
    if backend == "mobilenet":
        return lambda: load_mobilenet(settings.MODEL_WEIGHTS_PATH)
    if backend != "none":
        logger.warning("Unknown CLASSIFIER_BACKEND %r; image classification disabled",
                       settings.CLASSIFIER_BACKEND)
    return _unavailable


class ClassifierContext:
    """
    Everything a classification call needs besides its input: the lazily loaded
    classifier handle and the randomness source for synthesized confidence.

    The handle is loaded at most once. Concurrent first callers block on the same
    lock and reuse whatever the first one loaded. A failed load is not cached, so
    a later call tries again.
    """

    def __init__(self, loader: Optional[Callable[[], ImageClassifier]] = None,
                 rng: Optional[random.Random] = None):
        self._loader = loader or default_loader()
        self._lock = threading.Lock()
        self._handle: Optional[ImageClassifier] = None
        self.rng = rng or random.Random()

    @property
    def loaded(self) -> bool:
        return self._handle is not None

    def get_classifier(self) -> ImageClassifier:
        if self._handle is not None:
            return self._handle
        with self._lock:
            if self._handle is None:
                try:
                    handle = self._loader()
                except ClassifierError:
                    raise
                except Exception as e:
                    raise ModelLoadError(str(e)) from e
                self._handle = handle
        return self._handle

    def prepare(self, image: ImagePayload):
        """Decode and preprocess an image for the loaded classifier."""
        classifier = self.get_classifier()
        try:
            decoded = decode_image(image)
            return classifier.preprocess(decoded)
        except ImageDecodeError as e:
            raise ImagePreprocessingError(str(e)) from e
        except Exception as e:
            raise ImagePreprocessingError(f"Could not preprocess image: {e}") from e

    def predict(self, inputs) -> Sequence[float]:
        classifier = self.get_classifier()
        try:
            return classifier.predict(inputs)
        except Exception as e:
            raise InferenceError(f"Prediction failed: {e}") from e
