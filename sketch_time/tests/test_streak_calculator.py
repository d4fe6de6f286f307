from datetime import date, datetime, timezone

from sketch_time.core.dates import day_difference, is_today, is_yesterday, to_day, today
from sketch_time.features.streaks.calculator import calculate_streaks
from sketch_time.models.streak import StreakResult
from sketch_time.tests.mocks import FixedClock, days_ago

TODAY = date(2024, 3, 15)
clock = FixedClock(datetime(2024, 3, 15, 23, 59, tzinfo=timezone.utc))


def ago(n: int) -> date:
    return days_ago(n, TODAY)


def test_empty_history_is_all_zero():
    assert calculate_streaks([], clock=clock) == StreakResult(0, 0, False)


def test_single_upload_today():
    assert calculate_streaks([TODAY], clock=clock) == StreakResult(1, 1, True)


def test_three_consecutive_days_ending_today():
    assert calculate_streaks([TODAY, ago(1), ago(2)], clock=clock) == StreakResult(3, 3, True)


def test_streak_ending_yesterday_still_counts():
    assert calculate_streaks([ago(1), ago(2)], clock=clock) == StreakResult(2, 2, False)


def test_gap_breaks_current_but_not_longest():
    assert calculate_streaks([TODAY, ago(5)], clock=clock) == StreakResult(1, 1, True)


def test_stale_history_has_no_current_streak():
    result = calculate_streaks([ago(2), ago(3), ago(4)], clock=clock)
    assert result.current_streak == 0
    assert result.longest_streak == 3
    assert result.has_uploaded_today is False


def test_single_stale_upload_keeps_longest_of_one():
    assert calculate_streaks([ago(10)], clock=clock) == StreakResult(0, 1, False)


def test_longest_streak_can_be_entirely_in_the_past():
    days = [TODAY, ago(1)] + [ago(n) for n in range(5, 10)]
    result = calculate_streaks(days, clock=clock)
    assert result.current_streak == 2
    assert result.longest_streak == 5


def test_duplicate_days_collapse():
    result = calculate_streaks([TODAY, TODAY, ago(1), ago(1)], clock=clock)
    assert result == StreakResult(2, 2, True)


def test_input_order_does_not_matter():
    days = [ago(2), TODAY, ago(1)]
    assert calculate_streaks(days, clock=clock) == calculate_streaks(sorted(days), clock=clock)


def test_current_never_exceeds_longest_for_anchored_runs():
    histories = [
        [TODAY],
        [ago(1)],
        [TODAY, ago(1), ago(3)],
        [TODAY] + [ago(n) for n in range(2, 9)],
        [ago(n) for n in range(0, 12)],
    ]
    for days in histories:
        result = calculate_streaks(days, clock=clock)
        assert result.longest_streak >= 1
        assert result.current_streak <= result.longest_streak


def test_streak_spans_month_and_leap_day():
    leap_clock = FixedClock(datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc))
    days = [date(2024, 3, 1), date(2024, 2, 29), date(2024, 2, 28)]
    assert calculate_streaks(days, clock=leap_clock) == StreakResult(3, 3, True)


def test_day_helpers():
    assert day_difference(TODAY, ago(3)) == 3
    assert day_difference(ago(3), TODAY) == -3
    assert is_today(TODAY, TODAY)
    assert is_yesterday(ago(1), TODAY)
    assert not is_yesterday(TODAY, TODAY)
    assert today(clock) == TODAY


def test_to_day_uses_utc_boundary():
    late_evening_elsewhere = datetime.fromisoformat("2024-03-15T22:30:00-05:00")
    assert to_day(late_evening_elsewhere) == date(2024, 3, 16)
    assert to_day(datetime(2024, 3, 15, 23, 0)) == date(2024, 3, 15)
