"""
Tests for rental date, conflict and pricing helpers.
"""

import pytest
from datetime import date, datetime

from utils.rental_calculations import (
    add_hours_to_time,
    calculate_daily_rate,
    calculate_end_date,
    days_between,
    find_available_window,
    find_consecutive_periods,
    get_available_days,
    has_booking_conflict_with_time,
    has_time_buffer,
    is_blocking,
    is_day_available,
    is_same_day_return,
    is_sunday,
    iter_days,
    normalize_time,
    parse_date,
    ranges_overlap,
    same_day_available_from,
)


class TestDateHelpers:
    """Tests for date parsing and arithmetic."""

    def test_parse_date_accepts_strings_dates_and_datetimes(self):
        assert parse_date('2026-03-15') == date(2026, 3, 15)
        assert parse_date(date(2026, 3, 15)) == date(2026, 3, 15)
        assert parse_date(datetime(2026, 3, 15, 23, 30)) == date(2026, 3, 15)

    def test_parse_date_ignores_time_suffix(self):
        """Timestamps stored by SQLite keep their calendar day."""
        assert parse_date('2026-03-15 23:59:59') == date(2026, 3, 15)

    def test_parse_date_rejects_other_formats(self):
        with pytest.raises(ValueError):
            parse_date('15/03/2026')

    def test_days_between(self):
        assert days_between('2026-03-10', '2026-03-15') == 5
        assert days_between('2026-03-10', '2026-03-10') == 0
        assert days_between('2026-03-15', '2026-03-10') == -5

    def test_days_between_across_month_and_dst_change(self):
        assert days_between('2026-03-28', '2026-04-02') == 5
        assert days_between('2026-10-24', '2026-10-27') == 3

    @pytest.mark.parametrize('days', [0, 1, 7, 31, 365])
    def test_end_date_and_days_between_agree(self, days):
        end = calculate_end_date('2026-02-20', days)
        assert days_between('2026-02-20', end) == days

    def test_iter_days_is_inclusive(self):
        days = list(iter_days('2026-03-30', '2026-04-02'))
        assert days == [date(2026, 3, 30), date(2026, 3, 31), date(2026, 4, 1), date(2026, 4, 2)]

    def test_is_sunday(self):
        assert is_sunday('2026-03-15') is True
        assert is_sunday('2026-03-16') is False
        assert is_sunday(None) is False


class TestConflictTests:
    """Tests for inclusive overlap and single-day availability."""

    def test_shared_boundary_day_overlaps(self):
        assert ranges_overlap('2026-03-10', '2026-03-12', '2026-03-12', '2026-03-14') is True

    def test_adjacent_ranges_do_not_overlap(self):
        assert ranges_overlap('2026-03-10', '2026-03-11', '2026-03-12', '2026-03-14') is False

    def test_contained_range_overlaps(self):
        assert ranges_overlap('2026-03-01', '2026-03-31', '2026-03-10', '2026-03-11') is True

    def test_day_availability_around_booking(self):
        start, end = '2026-03-12', '2026-03-14'
        assert is_day_available('2026-03-11', start, end) is True
        assert is_day_available('2026-03-12', start, end) is False
        assert is_day_available('2026-03-13', start, end) is False
        assert is_day_available('2026-03-14', start, end) is False
        assert is_day_available('2026-03-15', start, end) is True

    def test_days_inside_non_overlapping_bookings(self):
        bookings = [('2026-03-02', '2026-03-04'), ('2026-03-08', '2026-03-09')]
        covered = {'2026-03-02', '2026-03-03', '2026-03-04', '2026-03-08', '2026-03-09'}

        for day in iter_days('2026-03-01', '2026-03-10'):
            free = all(is_day_available(day, s, e) for s, e in bookings)
            assert free is (day.isoformat() not in covered)

    def test_is_blocking(self):
        assert is_blocking({'status': 'pending'}) is True
        assert is_blocking({'status': 'active'}) is True
        assert is_blocking({'status': 'completed'}) is False


class TestTimeHelpers:
    """Tests for HH:MM handling and the same-day turnaround rule."""

    def test_normalize_time(self):
        assert normalize_time('9:05', '09:00') == '09:05'
        assert normalize_time('14:00', '09:00') == '14:00'
        assert normalize_time(None, '18:00') == '18:00'
        assert normalize_time('', '18:00') == '18:00'

    def test_add_hours_caps_at_end_of_day(self):
        assert add_hours_to_time('14:00', 2) == '16:00'
        assert add_hours_to_time('23:00', 2) == '23:59'

    def test_has_time_buffer(self):
        assert has_time_buffer('14:00', '16:00') is True
        assert has_time_buffer('14:00', '15:59') is False

    def test_same_day_return_cutoff(self):
        assert is_same_day_return('14:00') is True
        assert is_same_day_return('15:59') is True
        assert is_same_day_return('16:00') is False
        assert is_same_day_return('17:00') is False
        # No return time means the default 18:00
        assert is_same_day_return(None) is False

    def test_same_day_return_uses_configured_cutoff(self):
        assert is_same_day_return('17:00', cutoff_time='18:00') is True

    def test_same_day_available_from(self):
        assert same_day_available_from('14:00') == '16:00'
        assert same_day_available_from('10:30', buffer_hours=3) == '13:30'


class TestBookingConflictWithTime:
    """Tests for the time-aware conflict check."""

    def test_pickup_after_return_with_buffer(self):
        assert has_booking_conflict_with_time(
            '2026-03-15', '2026-03-17', '09:00', '18:00',
            '2026-03-10', '2026-03-15', '09:00', '06:00'
        ) is False

    def test_pickup_too_soon_after_return(self):
        assert has_booking_conflict_with_time(
            '2026-03-15', '2026-03-17', '09:00', '18:00',
            '2026-03-10', '2026-03-15', '09:00', '08:00'
        ) is True

    def test_return_before_existing_pickup(self):
        assert has_booking_conflict_with_time(
            '2026-03-05', '2026-03-10', '09:00', '06:00',
            '2026-03-10', '2026-03-12', '09:00', '18:00'
        ) is False

    def test_default_times_on_shared_day_conflict(self):
        """Returned at 18:00, picked up at 09:00: no handover possible."""
        assert has_booking_conflict_with_time(
            '2026-03-15', '2026-03-17', None, None,
            '2026-03-10', '2026-03-15', None, None
        ) is True

    def test_separate_ranges_never_conflict(self):
        assert has_booking_conflict_with_time(
            '2026-03-20', '2026-03-22', None, None,
            '2026-03-10', '2026-03-15', None, None
        ) is False

    def test_overlapping_ranges_conflict(self):
        assert has_booking_conflict_with_time(
            '2026-03-12', '2026-03-20', None, None,
            '2026-03-10', '2026-03-15', None, None
        ) is True


class TestWindowsAndPeriods:
    """Tests for gap finding and period grouping."""

    def test_window_between_rentals(self):
        window = find_available_window('2026-03-10', '2026-03-15')
        assert window == {'start_date': '2026-03-11', 'end_date': '2026-03-14', 'days': 3}

    def test_no_window_when_rentals_are_close(self):
        assert find_available_window('2026-03-10', '2026-03-12') is None

    def test_available_days_skip_blocking_rentals(self):
        rentals = [
            {'start_date': '2026-03-12', 'end_date': '2026-03-13', 'status': 'active'},
            {'start_date': '2026-03-14', 'end_date': '2026-03-15', 'status': 'completed'},
        ]
        days = get_available_days(rentals, '2026-03-10', '2026-03-15')
        assert days == ['2026-03-10', '2026-03-11', '2026-03-14', '2026-03-15']

    def test_consecutive_periods(self):
        periods = find_consecutive_periods(['2026-03-10', '2026-03-11', '2026-03-14'])
        assert periods == [
            {'start_date': '2026-03-10', 'end_date': '2026-03-11', 'length_days': 2, 'rental_days': 1},
            {'start_date': '2026-03-14', 'end_date': '2026-03-14', 'length_days': 1, 'rental_days': 0},
        ]

    def test_consecutive_periods_empty(self):
        assert find_consecutive_periods([]) == []


class TestDailyRate:
    """Tests for tiered pricing."""

    @pytest.mark.parametrize('days,rate', [
        (1, 1200), (4, 1200), (5, 1000), (6, 1000), (7, 900),
        (13, 900), (14, 800), (29, 800), (30, 700), (60, 700),
    ])
    def test_rate_tiers(self, days, rate):
        assert calculate_daily_rate(days)['daily_rate'] == rate

    def test_total_and_discount_flag(self):
        assert calculate_daily_rate(30) == {'daily_rate': 700, 'total': 21000, 'has_discount': True}
        assert calculate_daily_rate(3) == {'daily_rate': 1200, 'total': 3600, 'has_discount': False}

    def test_custom_base_rate_for_short_rentals(self):
        assert calculate_daily_rate(2, base_rate=1500)['daily_rate'] == 1500
