import pytest

from ecoscan.ai_processor import attempt_classification, classify, top_k_indices, verdict_from_probabilities
from ecoscan.classifier import FailureKind, ModelLoadError
from ecoscan.device_profiles import (
    DEFAULT_NON_RECYCLABLE_MATERIALS,
    DEFAULT_RECYCLABLE_MATERIALS,
    DEVICE_PROFILES,
    DeviceType,
    NON_RECYCLABLE_INSTRUCTIONS,
    RECYCLABLE_IMPACT,
    RECYCLABLE_INSTRUCTIONS,
)

from helpers import FakeClassifier, FixedRandom, make_context, probabilities_with


def test_laptop_scenario(png_bytes):
    ctx, _ = make_context()
    v = classify(png_bytes, "Laptop", context=ctx)
    assert v.recyclable is True
    assert len(v.materials) == 5
    assert sum(m.percentage for m in v.materials) == 100
    assert v.disposal_instructions == DEVICE_PROFILES[DeviceType.LAPTOP].disposal_instructions
    assert 0.85 <= v.confidence < 1.0


@pytest.mark.parametrize("device_type", list(DeviceType))
def test_profile_path_matches_table(device_type):
    ctx, loader = make_context()
    v = classify(b"not an image at all", device_type.value, context=ctx)
    profile = DEVICE_PROFILES[device_type]
    assert v.recyclable == profile.recyclable
    assert tuple(v.materials) == profile.materials
    assert 0.85 <= v.confidence < 1.0
    # the image classifier is never consulted for a known device type
    assert loader.calls == 0


def test_profile_path_is_idempotent_except_confidence():
    ctx, _ = make_context()
    a = classify(b"", "Smartphone", context=ctx)
    b = classify(b"", "Smartphone", context=ctx)
    assert a.model_dump(exclude={"confidence"}) == b.model_dump(exclude={"confidence"})


def test_device_type_lookup_is_case_sensitive(png_bytes):
    ctx, loader = make_context(FakeClassifier(probabilities_with({10: 0.8})))
    v = classify(png_bytes, "laptop", context=ctx)
    assert loader.calls == 1
    assert tuple(v.materials) == DEFAULT_NON_RECYCLABLE_MATERIALS


def test_unknown_device_uses_one_of_default_lists(png_bytes):
    ctx, _ = make_context()
    v = classify(png_bytes, "UnknownGadgetXYZ", context=ctx)
    assert tuple(v.materials) in (DEFAULT_RECYCLABLE_MATERIALS, DEFAULT_NON_RECYCLABLE_MATERIALS)
    assert [m.percentage for m in v.materials] in ([40, 30, 20, 10], [60, 25, 15])
    assert 0.70 <= v.confidence < 1.0


def test_electronic_top_class_is_recyclable(png_bytes):
    ctx, _ = make_context(FakeClassifier(probabilities_with({3: 0.5, 7: 0.3, 490: 0.1})))
    v = classify(png_bytes, context=ctx)
    assert v.recyclable is True
    assert tuple(v.materials) == DEFAULT_RECYCLABLE_MATERIALS
    assert v.disposal_instructions == RECYCLABLE_INSTRUCTIONS


def test_electronic_class_outside_top3_is_not_recyclable(png_bytes):
    ctx, _ = make_context(FakeClassifier(probabilities_with({3: 0.5, 7: 0.3, 9: 0.15, 490: 0.05})))
    v = classify(png_bytes, context=ctx)
    assert v.recyclable is False
    assert tuple(v.materials) == DEFAULT_NON_RECYCLABLE_MATERIALS
    assert v.disposal_instructions == NON_RECYCLABLE_INSTRUCTIONS


def test_top_k_breaks_ties_by_index():
    assert top_k_indices([0.2, 0.5, 0.2, 0.5, 0.2]) == [1, 3, 0]
    assert top_k_indices([0.1] * 10) == [0, 1, 2]


def test_confidence_ignores_top_probability():
    low = verdict_from_probabilities(probabilities_with({481: 0.99}), FixedRandom(0.0))
    high = verdict_from_probabilities(probabilities_with({481: 0.34}), FixedRandom(0.0))
    assert low.confidence == high.confidence == pytest.approx(0.70)


def test_confidence_upper_bound_is_exclusive():
    v = verdict_from_probabilities(probabilities_with({481: 0.9}), FixedRandom(1.0))
    assert v.confidence < 1.0


def test_predict_failure_returns_fallback(png_bytes):
    ctx, _ = make_context(FakeClassifier(fail_predict=True))
    v = classify(png_bytes, context=ctx)
    assert v.recyclable is True
    assert tuple(v.materials) == DEFAULT_RECYCLABLE_MATERIALS
    assert v.disposal_instructions == RECYCLABLE_INSTRUCTIONS
    assert v.environmental_impact == RECYCLABLE_IMPACT
    assert 0.70 <= v.confidence < 1.0


def test_load_failure_returns_fallback(png_bytes):
    ctx, _ = make_context(error=ModelLoadError("weights unreachable"))
    v = classify(png_bytes, "UnknownGadgetXYZ", context=ctx)
    assert v.recyclable is True
    assert tuple(v.materials) == DEFAULT_RECYCLABLE_MATERIALS


def test_undecodable_image_returns_fallback():
    ctx, _ = make_context(FakeClassifier(probabilities_with({10: 0.9})))
    v = classify(b"\x00\x01garbage", context=ctx)
    assert v.recyclable is True
    assert tuple(v.materials) == DEFAULT_RECYCLABLE_MATERIALS


def test_attempt_reports_failure_kind(png_bytes):
    ctx, _ = make_context(error=ModelLoadError("offline"))
    assert attempt_classification(png_bytes, None, ctx).failure == FailureKind.MODEL_LOAD

    ctx, _ = make_context()
    assert attempt_classification(b"junk", None, ctx).failure == FailureKind.IMAGE_PREPROCESSING

    ctx, _ = make_context(FakeClassifier(fail_predict=True))
    assert attempt_classification(png_bytes, None, ctx).failure == FailureKind.INFERENCE


@pytest.mark.parametrize("output", [[], [0.5, float("nan")], ["x", "y"]])
def test_malformed_prediction_is_inference_failure(png_bytes, output):
    ctx, _ = make_context(FakeClassifier(probabilities=None))
    ctx.get_classifier().probabilities = output
    attempt = attempt_classification(png_bytes, None, ctx)
    assert attempt.failure == FailureKind.INFERENCE
    assert attempt.verdict is None
    assert classify(png_bytes, context=ctx).recyclable is True
