import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .classifier import ClassifierContext, ClassifierError, FailureKind, InferenceError
from .device_profiles import (
    DEFAULT_RECYCLABLE_MATERIALS,
    ELECTRONIC_DEVICE_INDICES,
    default_materials,
    generic_guidance,
    lookup_profile,
)
from .models import DeviceMaterialsProfile, RecyclabilityVerdict
from .services.image_loader import ImagePayload

logger = logging.getLogger(__name__)

TOP_K = 3

# Confidence bands. The values are sampled, not measured: a user-asserted device
# type is reported with higher confidence than anything inferred from the image.
DEVICE_TYPE_CONFIDENCE = (0.85, 1.0)
IMAGE_CONFIDENCE = (0.70, 1.0)


@dataclass
class ClassificationAttempt:
    verdict: Optional[RecyclabilityVerdict] = None
    failure: Optional[FailureKind] = None
    detail: str = ""


def _sample_confidence(rng: random.Random, band) -> float:
    low, high = band
    value = low + rng.random() * (high - low)
    # keep the upper bound exclusive under float rounding
    return min(value, math.nextafter(high, low))


def top_k_indices(probabilities: Sequence[float], k: int = TOP_K) -> List[int]:
    """Indices of the k highest probabilities; ties go to the lower index."""
    return sorted(range(len(probabilities)), key=lambda i: (-probabilities[i], i))[:k]


def _check_probabilities(probabilities) -> List[float]:
    try:
        values = [float(p) for p in probabilities]
    except (TypeError, ValueError) as e:
        raise InferenceError(f"Malformed prediction output: {e}") from e
    if not values:
        raise InferenceError("Empty prediction output")
    if not all(math.isfinite(p) for p in values):
        raise InferenceError("Prediction output contains non-finite values")
    return values


def verdict_from_profile(profile: DeviceMaterialsProfile, rng: random.Random) -> RecyclabilityVerdict:
    return RecyclabilityVerdict(
        recyclable=profile.recyclable,
        confidence=_sample_confidence(rng, DEVICE_TYPE_CONFIDENCE),
        materials=list(profile.materials),
        disposal_instructions=profile.disposal_instructions,
        environmental_impact=profile.environmental_impact,
    )


def verdict_from_probabilities(probabilities: Sequence[float], rng: random.Random) -> RecyclabilityVerdict:
    """
    Interpret a probability vector over the ImageNet taxonomy.

    The device counts as recyclable when any of the top 3 classes is in the
    electronics allow-list. Confidence is sampled from [0.70, 1.00) and does
    not depend on the probabilities themselves.
    """
    top = top_k_indices(probabilities)
    recyclable = any(i in ELECTRONIC_DEVICE_INDICES for i in top)
    instructions, impact = generic_guidance(recyclable)
    return RecyclabilityVerdict(
        recyclable=recyclable,
        confidence=_sample_confidence(rng, IMAGE_CONFIDENCE),
        materials=list(default_materials(recyclable)),
        disposal_instructions=instructions,
        environmental_impact=impact,
    )


def fallback_verdict(rng: random.Random) -> RecyclabilityVerdict:
    # Total classifier failure still reports a recyclable device.
    instructions, impact = generic_guidance(True)
    return RecyclabilityVerdict(
        recyclable=True,
        confidence=_sample_confidence(rng, IMAGE_CONFIDENCE),
        materials=list(DEFAULT_RECYCLABLE_MATERIALS),
        disposal_instructions=instructions,
        environmental_impact=impact,
    )


def attempt_classification(image: ImagePayload, device_type: Optional[str],
                           context: ClassifierContext) -> ClassificationAttempt:
    profile = lookup_profile(device_type)
    if profile is not None:
        return ClassificationAttempt(verdict=verdict_from_profile(profile, context.rng))

    try:
        inputs = context.prepare(image)
        probabilities = _check_probabilities(context.predict(inputs))
        return ClassificationAttempt(verdict=verdict_from_probabilities(probabilities, context.rng))
    except ClassifierError as e:
        return ClassificationAttempt(failure=e.kind, detail=str(e))
    except Exception as e:
        logger.exception("Unexpected error during image classification")
        return ClassificationAttempt(failure=FailureKind.INFERENCE, detail=str(e))


def classify(image: ImagePayload, device_type: Optional[str] = None, *,
             context: ClassifierContext) -> RecyclabilityVerdict:
    """
    Produce a recyclability verdict for an image and an optional device-type label.

    Never raises: any failure of the image classifier yields the fallback verdict.
    """
    attempt = attempt_classification(image, device_type, context)
    if attempt.failure is not None:
        logger.warning("Classification failed (%s): %s; using fallback verdict",
                       attempt.failure.value, attempt.detail)
        return fallback_verdict(context.rng)
    return attempt.verdict
