import random

import pytest

from vtt_thumbnails.schedule import expected_thumbnail_count, pick_poster_time, plan_sampling


class TestPlanSampling:
    def test_stride_from_interval_and_rate(self):
        plan = plan_sampling(125, 24, 10, 120)
        assert plan.frame_stride == 240
        assert plan.interval_seconds == 10
        assert plan.thumb_width == 120

    def test_stride_rounded(self):
        assert plan_sampling(60, 29.97, 10, 120).frame_stride == 300
        assert plan_sampling(60, 23.976, 1, 120).frame_stride == 24

    def test_stride_never_below_one(self):
        assert plan_sampling(60, 0.2, 1, 120).frame_stride == 1

    @pytest.mark.parametrize("rate", [0.5, 1, 12.5, 24, 25, 29.97, 50, 59.94, 120])
    @pytest.mark.parametrize("interval", [1, 2, 5, 10, 60])
    def test_stride_at_least_one(self, rate, interval):
        assert plan_sampling(600, rate, interval, 120).frame_stride >= 1

    def test_expected_count(self):
        plan = plan_sampling(125, 24, 10, 120)
        assert plan.expected_count(125) == 12

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"interval_seconds": 0},
            {"interval_seconds": -5},
            {"frame_rate": 0},
            {"thumb_width": 0},
            {"duration": -1},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        args = {"duration": 60, "frame_rate": 25, "interval_seconds": 10, "thumb_width": 120}
        args.update(kwargs)
        with pytest.raises(ValueError):
            plan_sampling(**args)


class TestExpectedThumbnailCount:
    def test_floor(self):
        assert expected_thumbnail_count(125, 10) == 12

    def test_exact_multiple(self):
        assert expected_thumbnail_count(120, 10) == 12

    def test_interval_longer_than_video(self):
        assert expected_thumbnail_count(5, 10) == 0


class TestPickPosterTime:
    def test_within_bounds(self):
        rng = random.Random(1234)
        for _ in range(200):
            assert 1 <= pick_poster_time(125, rng) <= 124

    def test_deterministic_with_seeded_rng(self):
        assert pick_poster_time(125, random.Random(7)) == pick_poster_time(125, random.Random(7))

    def test_two_second_video(self):
        assert pick_poster_time(2, random.Random(0)) == 1

    def test_very_short_video(self):
        assert pick_poster_time(1) == 0
        assert pick_poster_time(0) == 0
