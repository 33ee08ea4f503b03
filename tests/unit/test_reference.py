"""Tests for the single-rate reference filters."""

import numpy as np
import pytest

from ffafir.dsp.reference import direct_parallel_filter, reference_filter


class TestReferenceFilter:
    def test_known_values(self):
        np.testing.assert_array_equal(reference_filter([1, 2, 3, 4], [5, 6, 7, 8]), [5, 16, 34, 60])

    def test_truncated_to_input_length(self):
        y = reference_filter(np.arange(1, 50), [1, 1, 1])
        np.testing.assert_array_equal(y, [1, 3, 6])

    def test_integer_path_is_int64(self, int_taps, int_signal):
        y = reference_filter(int_taps(16), int_signal(64))
        assert y.dtype == np.int64

    def test_float_path_uses_lfilter(self, rng, float_signal):
        h = rng.standard_normal(9)
        x = float_signal(100)
        np.testing.assert_allclose(reference_filter(h, x), np.convolve(x, h)[:100], rtol=1e-12, atol=1e-12)

    def test_empty_input_returns_empty(self):
        y = reference_filter([1, 2], [])
        assert y.size == 0

    def test_empty_taps_rejected(self):
        with pytest.raises(ValueError):
            reference_filter([], [1, 2, 3])


class TestDirectParallelFilter:
    @pytest.mark.parametrize("n_taps", [1, 2, 5, 32])
    @pytest.mark.parametrize("n_samples", [1, 2, 7, 100])
    def test_matches_reference(self, int_taps, int_signal, n_taps, n_samples):
        h = int_taps(n_taps)
        x = int_signal(n_samples)
        np.testing.assert_array_equal(direct_parallel_filter(h, x), reference_filter(h, x))

    def test_empty_input(self):
        assert direct_parallel_filter([1, 2, 3], []).size == 0
