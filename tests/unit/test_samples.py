import numpy as np
import pytest

from glyphnet.core.labels import Glyph
from glyphnet.core.network import SigmoidNetwork
from glyphnet.data.samples import Sample, SampleSet


def test_sample_targets_follow_true_class():
    sample = Sample([0.1, 0.2], num_classes=3, true_class=Glyph.W)
    assert sample.target.tolist() == [0.0, 0.0, 1.0]
    assert sample.predicted_class is Glyph.UNKNOWN
    assert sample.output is None and sample.error is None
    assert sample.estimated_error() == 0.0

    unlabeled = Sample([0.1, 0.2], num_classes=3)
    assert unlabeled.true_class is Glyph.UNKNOWN
    assert unlabeled.target.tolist() == [0.0, 0.0, 0.0]


def test_sample_copies_its_input():
    features = np.array([0.3, 0.4])
    sample = Sample(features, num_classes=2)
    features[0] = 9.0
    assert sample.input.tolist() == [0.3, 0.4]


def test_argmax_tie_prefers_first_index():
    sample = Sample([0.0], num_classes=2, true_class=Glyph.B)
    assert sample.record_prediction(np.array([0.5, 0.5])) is Glyph.A
    assert not sample.is_correct()


def test_prediction_error_is_output_minus_one_hot():
    sample = Sample([0.0, 0.0], num_classes=3, true_class=Glyph.B)
    predicted = sample.record_prediction(np.array([0.2, 0.7, 0.1]))
    assert predicted is Glyph.B
    assert sample.is_correct()
    np.testing.assert_allclose(sample.error, [0.2, -0.3, 0.1])
    assert sample.estimated_error() == pytest.approx(0.04 + 0.09 + 0.01)

    unknown = Sample([0.0, 0.0], num_classes=3)
    unknown.record_prediction(np.array([0.2, 0.7, 0.1]))
    np.testing.assert_allclose(unknown.error, [0.2, 0.7, 0.1])


def test_predict_does_not_touch_parameters():
    network = SigmoidNetwork([2, 3], seed=4)
    before = network.params.flatten()
    sample = Sample([0.5, 0.5], num_classes=3, true_class=Glyph.A)
    predicted = network.predict(sample)
    assert predicted is sample.predicted_class
    np.testing.assert_array_equal(sample.output, network.compute([0.5, 0.5]))
    np.testing.assert_array_equal(network.params.buffer, before)


def test_sample_set_collection_behaviour():
    samples = SampleSet()
    for idx in range(5):
        samples.add(Sample([idx / 10.0], num_classes=2, true_class=Glyph.from_index(idx % 2)))
    assert len(samples) == 5
    assert samples[3].input.tolist() == [0.3]
    assert [s.true_class for s in samples] == samples.labels()

    replacement = Sample([0.9], num_classes=2, true_class=Glyph.B)
    samples[0] = replacement
    assert samples[0] is replacement


def test_shuffle_is_a_seeded_permutation():
    samples = SampleSet(Sample([i / 10.0], num_classes=2) for i in range(10))
    original = list(samples)
    samples.shuffle(np.random.default_rng(0))
    assert sorted(map(id, samples)) == sorted(map(id, original))
    assert list(samples) != original

    again = SampleSet(original)
    again.shuffle(np.random.default_rng(0))
    assert list(again) == list(samples)


def test_accuracy_counts_matching_predictions():
    network = SigmoidNetwork([1, 2], seed=0)
    # output[0] > output[1] for every input >= 0
    network.params.assign([1.0, -1.0, 0.5, -0.5])
    samples = SampleSet(
        [
            Sample([0.1], 2, Glyph.A),
            Sample([0.4], 2, Glyph.A),
            Sample([0.7], 2, Glyph.B),
            Sample([0.9], 2, Glyph.UNKNOWN),
        ]
    )
    assert samples.accuracy(network) == 0.5
    assert all(s.predicted_class is Glyph.A for s in samples)
    assert SampleSet().accuracy(network) == 0.0


def test_from_arrays_validates_shapes():
    built = SampleSet.from_arrays(np.eye(3), ["A", 1, Glyph.W], num_classes=3)
    assert built.labels() == [Glyph.A, Glyph.B, Glyph.W]
    with pytest.raises(ValueError):
        SampleSet.from_arrays(np.eye(3), ["A", "B"], num_classes=3)
