# backend/tests/unit/test_interval_matcher.py
"""Unit tests for the pure block-matching functions."""

from datetime import date, time

import pytest

from rehome_ops.domain.city_scope import CityScope
from rehome_ops.models.schedule import DateBlock, TimeSlotBlock
from rehome_ops.services.interval_matcher import (
    blocked_cities_for_date,
    intervals_overlap,
    is_date_blocked,
    is_time_slot_blocked,
    parse_time_of_day,
)

DAY = date(2025, 6, 10)


def day_block(cities, is_full_day=True, reason=None):
    return DateBlock(date=DAY, cities=cities, is_full_day=is_full_day, reason=reason)


def slot_block(start, end, cities):
    return TimeSlotBlock(
        date=DAY,
        start_time=parse_time_of_day(start),
        end_time=parse_time_of_day(end),
        cities=cities,
    )


class TestIsDateBlocked:
    def test_no_blocks_means_open(self):
        assert is_date_blocked([], "Amsterdam") is False
        assert is_date_blocked([]) is False

    def test_empty_city_list_blocks_every_city(self):
        blocks = [day_block([])]
        for city in ("Amsterdam", "Utrecht", "Groningen", None):
            assert is_date_blocked(blocks, city) is True

    def test_named_cities_only_block_those_cities(self):
        blocks = [day_block(["Amsterdam", "Utrecht"])]
        assert is_date_blocked(blocks, "Amsterdam") is True
        assert is_date_blocked(blocks, "Utrecht") is True
        assert is_date_blocked(blocks, "Rotterdam") is False

    def test_without_city_any_full_day_block_counts(self):
        assert is_date_blocked([day_block(["Utrecht"])]) is True

    def test_partial_day_blocks_are_ignored(self):
        blocks = [day_block([], is_full_day=False)]
        assert is_date_blocked(blocks, "Amsterdam") is False
        assert is_date_blocked(blocks) is False


class TestIsTimeSlotBlocked:
    def test_overlapping_window_is_blocked(self):
        blocks = [slot_block("09:00", "12:00", ["Utrecht"])]
        assert is_time_slot_blocked(blocks, "11:00", "13:00", "Utrecht") is True

    def test_touching_boundary_is_not_blocked(self):
        blocks = [slot_block("09:00", "12:00", ["Utrecht"])]
        assert is_time_slot_blocked(blocks, "12:00", "13:00", "Utrecht") is False
        assert is_time_slot_blocked(blocks, "08:00", "09:00", "Utrecht") is False

    def test_other_city_is_not_affected(self):
        blocks = [slot_block("09:00", "12:00", ["Utrecht"])]
        assert is_time_slot_blocked(blocks, "10:00", "11:00", "Amsterdam") is False

    def test_no_city_considers_every_block(self):
        blocks = [slot_block("09:00", "12:00", ["Utrecht"])]
        assert is_time_slot_blocked(blocks, "10:00", "11:00") is True

    def test_all_cities_block_applies_to_any_city(self):
        blocks = [slot_block("14:00", "16:00", [])]
        assert is_time_slot_blocked(blocks, "15:30", "17:00", "Amsterdam") is True

    def test_containing_and_contained_windows(self):
        blocks = [slot_block("10:00", "11:00", [])]
        assert is_time_slot_blocked(blocks, "09:00", "12:00") is True
        assert is_time_slot_blocked(blocks, time(10, 15), time(10, 45)) is True

    def test_multiple_blocks_are_checked_independently(self):
        blocks = [
            slot_block("08:00", "09:00", ["Amsterdam"]),
            slot_block("13:00", "14:00", ["Rotterdam"]),
        ]
        assert is_time_slot_blocked(blocks, "12:30", "13:30", "Rotterdam") is True
        assert is_time_slot_blocked(blocks, "12:30", "13:30", "Amsterdam") is False


class TestTimeHelpers:
    def test_parse_accepts_strings_and_times(self):
        assert parse_time_of_day("09:30") == time(9, 30)
        assert parse_time_of_day("09:30:45") == time(9, 30)
        assert parse_time_of_day(time(9, 30, 12)) == time(9, 30)

    @pytest.mark.parametrize(
        "value", ["9h30", "25:00", "", "noon", "9:30", "09:30abc", "09:3", "09:30:4x"]
    )
    def test_parse_rejects_malformed_strings(self, value):
        with pytest.raises(ValueError):
            parse_time_of_day(value)

    def test_parse_rejects_other_types(self):
        with pytest.raises(TypeError):
            parse_time_of_day(930)  # type: ignore[arg-type]

    def test_intervals_overlap_is_half_open(self):
        assert intervals_overlap(time(9), time(10), time(9, 30), time(11)) is True
        assert intervals_overlap(time(9), time(10), time(10), time(11)) is False


class TestBlockedCitiesForDate:
    def test_none_when_nothing_blocked(self):
        assert blocked_cities_for_date([]) is None
        assert blocked_cities_for_date([day_block(["Amsterdam"], is_full_day=False)]) is None

    def test_all_cities_wins(self):
        scope = blocked_cities_for_date([day_block(["Amsterdam"]), day_block([])])
        assert scope == CityScope.everywhere()

    def test_named_cities_are_unioned(self):
        scope = blocked_cities_for_date([day_block(["Amsterdam"]), day_block(["Utrecht"])])
        assert scope == CityScope.only({"Amsterdam", "Utrecht"})
