import random

from ecoscan.classifier import ClassifierContext, ImageClassifier

NUM_CLASSES = 1000


def probabilities_with(peaks):
    """A 1000-class probability vector with the given {index: prob} peaks."""
    probs = [0.0] * NUM_CLASSES
    for idx, p in peaks.items():
        probs[idx] = p
    return probs


class FakeClassifier(ImageClassifier):
    def __init__(self, probabilities=None, fail_predict=False):
        self.probabilities = probabilities or probabilities_with({481: 0.9})
        self.fail_predict = fail_predict
        self.predict_calls = 0

    def preprocess(self, image):
        return image

    def predict(self, inputs):
        self.predict_calls += 1
        if self.fail_predict:
            raise RuntimeError("inference backend crashed")
        return self.probabilities


class CountingLoader:
    def __init__(self, classifier=None, error=None):
        self.classifier = classifier or FakeClassifier()
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.classifier


class FixedRandom(random.Random):
    def __init__(self, value):
        super().__init__()
        self.value = value

    def random(self):
        return self.value


def make_context(classifier=None, error=None, seed=1234):
    loader = CountingLoader(classifier, error)
    return ClassifierContext(loader=loader, rng=random.Random(seed)), loader
