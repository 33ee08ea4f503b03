"""Unit tests for lane splitting and reassembly."""

import numpy as np
import pytest

from ffafir.dsp.lanes import LaneSplitter, lane_length, merge, split
from ffafir.errors import LengthMismatchError


class TestSplit:
    def test_split_assigns_index_mod_lanes(self):
        lanes = split(np.arange(10), 3)
        np.testing.assert_array_equal(lanes[0], [0, 3, 6, 9])
        np.testing.assert_array_equal(lanes[1], [1, 4, 7])
        np.testing.assert_array_equal(lanes[2], [2, 5, 8])

    def test_split_even_odd(self):
        h0, h1 = split([1, 2, 3, 4], 2)
        np.testing.assert_array_equal(h0, [1, 3])
        np.testing.assert_array_equal(h1, [2, 4])

    def test_split_odd_length_lanes_differ_by_one(self):
        x0, x1 = split(np.arange(7), 2)
        assert x0.size == 4
        assert x1.size == 3

    def test_split_more_lanes_than_samples(self):
        lanes = split([7, 8], 4)
        assert [lane.size for lane in lanes] == [1, 1, 0, 0]

    def test_split_returns_copies(self):
        x = np.arange(6)
        lanes = split(x, 2)
        lanes[0][0] = 100
        assert x[0] == 0

    def test_split_invalid_lane_count(self):
        with pytest.raises(ValueError):
            split([1, 2, 3], 0)

    def test_split_rejects_2d(self):
        with pytest.raises(ValueError):
            split(np.zeros((2, 2)), 2)


class TestMerge:
    @pytest.mark.parametrize("lanes", [1, 2, 3, 4, 7])
    @pytest.mark.parametrize("length", [0, 1, 2, 5, 12, 13])
    def test_merge_inverts_split(self, lanes, length):
        x = np.arange(length) * 3 - 5
        np.testing.assert_array_equal(merge(split(x, lanes)), x)

    def test_merge_valid_uneven_lanes(self):
        np.testing.assert_array_equal(merge([[0, 3], [1], [2]]), [0, 1, 2, 3])

    def test_merge_later_lane_longer_rejected(self):
        with pytest.raises(LengthMismatchError):
            merge([[0, 2], [1, 3, 5]])

    def test_merge_lanes_too_far_apart_rejected(self):
        with pytest.raises(LengthMismatchError):
            merge([[1, 2, 3], [4]])

    def test_merge_last_lane_longer_rejected(self):
        with pytest.raises(LengthMismatchError):
            merge([[0], [1], [2, 3]])

    def test_merge_empty_list_rejected(self):
        with pytest.raises(ValueError):
            merge([])

    def test_merge_promotes_dtype(self):
        out = merge([np.array([1, 3]), np.array([2.5, 4.5])])
        assert out.dtype == np.float64
        np.testing.assert_array_equal(out, [1.0, 2.5, 3.0, 4.5])


class TestLaneLength:
    def test_lane_lengths_sum_to_total(self):
        for total in range(0, 20):
            for lanes in range(1, 6):
                assert sum(lane_length(total, lanes, p) for p in range(lanes)) == total


class TestLaneSplitter:
    def test_round_trip(self):
        splitter = LaneSplitter(4)
        x = np.arange(11)
        np.testing.assert_array_equal(splitter.merge(splitter.split(x)), x)

    def test_merge_wrong_lane_count(self):
        splitter = LaneSplitter(2)
        with pytest.raises(LengthMismatchError):
            splitter.merge([[1], [2], [3]])

    def test_invalid_lane_count(self):
        with pytest.raises(ValueError):
            LaneSplitter(0)
