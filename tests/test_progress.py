"""Unit tests for the progress calculator, one class per requirement variant."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

import config
from badges import BADGE_DEFINITIONS, get_badge
from models import (
    Action,
    ActionCountRequirement,
    AgeGroup,
    Badge,
    BadgeCategory,
    ComboRequirement,
    Pet,
    PointsTotalRequirement,
    Rarity,
    SpecificActionRequirement,
    StreakRequirement,
    StreakVariant,
    TimeBasedRequirement,
    TimeFrame,
    UnknownRequirement,
)
from progress import calculate_all_progress, calculate_progress


def make_badge(requirement, badge_id: str = "test_badge") -> Badge:
    """Build a throwaway badge around a single requirement."""
    return Badge(
        id=badge_id,
        name="Test",
        description="",
        icon="",
        color="",
        rarity=Rarity.COMMON,
        category=BadgeCategory.SPECIAL,
        requirement=requirement,
    )


# =============================================================================
# action_count
# =============================================================================


class TestActionCount:
    """Windowed counts of matching action ids."""

    def test_day_window_ignores_yesterday(self, puppy, make_action, now) -> None:
        badge = make_badge(ActionCountRequirement(frozenset({101}), 1, TimeFrame.DAY))
        log = [make_action(101, days_ago=1)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 0
        assert progress.is_completed is False
        assert progress.next_milestone == "1 more action today"

    def test_day_window_counts_since_midnight(self, puppy, make_action, now) -> None:
        badge = make_badge(ActionCountRequirement(frozenset({101}), 1, TimeFrame.DAY))
        log = [make_action(101, hour=0)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.is_completed is True
        assert progress.next_milestone is None

    def test_week_window_is_trailing_seven_days(self, puppy, make_action, now) -> None:
        badge = make_badge(ActionCountRequirement(frozenset({101}), 5, TimeFrame.WEEK))
        log = [make_action(101, days_ago=d) for d in (0, 3, 6, 8)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 3
        assert progress.next_milestone == "2 more actions this week"

    def test_month_window_is_trailing_thirty_days(self, puppy, make_action, now) -> None:
        badge = make_badge(ActionCountRequirement(frozenset({105}), 5, TimeFrame.MONTH))
        log = [make_action(105, days_ago=d) for d in (1, 29, 31)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 2

    def test_no_window_means_all_time(self, puppy, make_action, now) -> None:
        badge = make_badge(ActionCountRequirement(frozenset({1, 101}), 3))
        log = [make_action(101, days_ago=200), make_action(1, days_ago=40), make_action(101)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 3
        assert progress.is_completed is True

    def test_other_pets_and_other_actions_ignored(self, puppy, make_action, now) -> None:
        badge = get_badge("potty_champion")
        log = [
            make_action(101),
            make_action(101, pet_id=99),
            make_action(102),
        ]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 1
        assert progress.max_progress == 10
        assert progress.percentage == pytest.approx(10.0)
        assert progress.next_milestone == "9 more actions"

    def test_percentage_clamped_at_100(self, puppy, make_action, now) -> None:
        badge = make_badge(ActionCountRequirement(frozenset({101}), 2))
        log = [make_action(101, days_ago=d) for d in range(5)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 5
        assert progress.percentage == 100.0

    def test_zero_target_defaults_to_one(self, puppy, now) -> None:
        badge = make_badge(ActionCountRequirement(frozenset({101}), 0))

        progress = calculate_progress(puppy, badge, [], now)

        assert progress.max_progress == 1
        assert progress.percentage == 0.0


# =============================================================================
# points_total
# =============================================================================


class TestPointsTotal:
    """Windowed point sums, floored at zero."""

    def test_sums_points(self, adult, make_action, now) -> None:
        badge = make_badge(PointsTotalRequirement(20))
        log = [make_action(5, pet_id=1), make_action(3, pet_id=1, days_ago=2), make_action(4, pet_id=1)]

        progress = calculate_progress(adult, badge, log, now)

        assert progress.current_progress == 16
        assert progress.next_milestone == "4 more points"

    def test_negative_total_reported_as_zero(self, adult, make_action, now) -> None:
        badge = make_badge(PointsTotalRequirement(20))
        log = [make_action(214, pet_id=1), make_action(1, pet_id=1)]

        progress = calculate_progress(adult, badge, log, now)

        assert progress.current_progress == 0
        assert progress.percentage == 0.0

    def test_day_window(self, adult, make_action, now) -> None:
        badge = get_badge("daily_champion")
        log = [make_action(5, pet_id=1, days_ago=1), make_action(5, pet_id=1), make_action(3, pet_id=1)]

        progress = calculate_progress(adult, badge, log, now)

        assert progress.current_progress == 18
        assert progress.next_milestone == "2 more points today"

    def test_target_reached(self, adult, make_action, now) -> None:
        badge = get_badge("daily_champion")
        log = [make_action(5, pet_id=1), make_action(5, pet_id=1)]

        progress = calculate_progress(adult, badge, log, now)

        assert progress.is_completed is True

    def test_single_point_remaining_is_singular(self, adult, make_action, now) -> None:
        badge = make_badge(PointsTotalRequirement(11, TimeFrame.WEEK))
        log = [make_action(5, pet_id=1)]

        progress = calculate_progress(adult, badge, log, now)

        assert progress.next_milestone == "1 more point this week"


# =============================================================================
# streak
# =============================================================================


class TestStreak:
    """Backward day walk with break conditions."""

    CLEAN_WEEK = StreakRequirement(7, frozenset({101, 1}), StreakVariant.CLEAN)

    def test_accident_today_breaks_clean_streak(self, puppy, make_action, now) -> None:
        badge = make_badge(self.CLEAN_WEEK)
        log = [make_action(101, days_ago=d) for d in range(1, 7)]
        log.append(make_action(104))

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 0
        assert progress.is_completed is False

    def test_seven_clean_days_complete(self, puppy, make_action, now) -> None:
        badge = make_badge(self.CLEAN_WEEK)
        log = [make_action(101, days_ago=d) for d in range(7)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 7
        assert progress.is_completed is True

    def test_clean_streak_counts_default_clean_actions(self, puppy, make_action, now) -> None:
        badge = make_badge(self.CLEAN_WEEK)
        log = [make_action(103, days_ago=d) for d in range(3)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 3

    def test_age_related_accident_breaks_clean_streak_only(self, senior, make_action, now) -> None:
        clean = make_badge(StreakRequirement(3, variant=StreakVariant.CLEAN))
        generic = make_badge(StreakRequirement(3))
        log = [make_action(310, pet_id=3, days_ago=d) for d in range(3)]
        log.append(make_action(314, pet_id=3, days_ago=1))

        assert calculate_progress(senior, clean, log, now).current_progress == 1
        assert calculate_progress(senior, generic, log, now).current_progress == 3

    def test_accident_yesterday_stops_walk(self, puppy, make_action, now) -> None:
        badge = get_badge("daily_warrior")
        log = [make_action(101), make_action(102, days_ago=1), make_action(2, days_ago=1)]
        log += [make_action(101, days_ago=d) for d in (2, 3)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 1
        assert progress.next_milestone == "2 more days in a row"

    def test_gap_day_ends_streak(self, puppy, make_action, now) -> None:
        badge = get_badge("daily_warrior")
        log = [make_action(101, days_ago=d) for d in (0, 2, 3)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 1

    def test_empty_today_does_not_break(self, puppy, make_action, now) -> None:
        badge = get_badge("daily_warrior")
        log = [make_action(101, days_ago=d) for d in (1, 2, 3)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 3
        assert progress.is_completed is True

    def test_today_counts_with_any_activity(self, adult, make_action, now) -> None:
        badge = get_badge("daily_warrior")
        log = [make_action(4, pet_id=1)]
        log += [make_action(5, pet_id=1, days_ago=d) for d in (1, 2)]

        progress = calculate_progress(adult, badge, log, now)

        assert progress.current_progress == 3

    def test_negative_only_day_breaks_after_today(self, adult, make_action, now) -> None:
        badge = get_badge("daily_warrior")
        log = [make_action(5, pet_id=1), make_action(4, pet_id=1, days_ago=1), make_action(5, pet_id=1, days_ago=2)]

        progress = calculate_progress(adult, badge, log, now)

        assert progress.current_progress == 1

    def test_listed_ids_restrict_qualifying_actions(self, puppy, make_action, now) -> None:
        badge = make_badge(StreakRequirement(2, frozenset({111})))
        log = [make_action(111), make_action(101, days_ago=1)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 1

    def test_custom_accident_set(self, adult, make_action, now) -> None:
        badge = make_badge(StreakRequirement(3, accident_action_ids=frozenset({4})))
        log = [make_action(5, pet_id=1, days_ago=d) for d in range(3)]
        log.append(make_action(4, pet_id=1, days_ago=1))

        progress = calculate_progress(adult, badge, log, now)

        assert progress.current_progress == 1

    def test_walk_bounded_at_thirty_days(self, puppy, make_action, now) -> None:
        badge = make_badge(StreakRequirement(35))
        log = [make_action(101, days_ago=d) for d in range(40)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 30
        assert progress.is_completed is False


# =============================================================================
# specific_action
# =============================================================================


class TestSpecificAction:
    """Binary first-occurrence checks with age gating."""

    def test_age_group_mismatch_blocks_progress(self, make_action, now) -> None:
        young_adult = Pet(id=2, name="Arthas", age_in_months=20)
        badge = get_badge("first_sit")
        log = [make_action(111)]

        progress = calculate_progress(young_adult, badge, log, now)

        assert progress.current_progress == 0
        assert progress.next_milestone == "Only for chiot pets"

    def test_matching_age_group_completes(self, puppy, make_action, now) -> None:
        badge = get_badge("first_sit")

        progress = calculate_progress(puppy, badge, [make_action(111, days_ago=40)], now)

        assert progress.is_completed is True
        assert progress.percentage == 100.0

    def test_not_performed_hints_action_name(self, puppy, make_action, now) -> None:
        badge = get_badge("first_sit")

        progress = calculate_progress(puppy, badge, [make_action(101)], now)

        assert progress.current_progress == 0
        assert progress.next_milestone == 'Log "Assis sur commande"'

    def test_no_age_condition(self, adult, make_action, now) -> None:
        badge = get_badge("night_owl")

        progress = calculate_progress(adult, badge, [make_action(103, pet_id=1)], now)

        assert progress.is_completed is True

    def test_min_points_condition(self, puppy, make_action, now) -> None:
        badge = make_badge(SpecificActionRequirement(101, AgeGroup.CHIOT, min_points=7))

        low = calculate_progress(puppy, badge, [make_action(101)], now)
        boosted = calculate_progress(puppy, badge, [make_action(101, 8)], now)

        assert low.current_progress == 0
        assert low.next_milestone == 'Log "Pipi/caca dehors" worth 7+ points'
        assert boosted.is_completed is True


# =============================================================================
# combo
# =============================================================================


class TestCombo:
    """Positive actions on the same local day."""

    def test_three_positive_actions_today(self, puppy, make_action, now) -> None:
        badge = get_badge("combo_master")
        log = [make_action(101, hour=8), make_action(111, hour=9), make_action(105, hour=11)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.is_completed is True

    def test_one_moved_to_previous_day(self, puppy, make_action, now) -> None:
        badge = get_badge("combo_master")
        log = [make_action(101, hour=8), make_action(111, hour=9), make_action(105, days_ago=1, hour=23)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.is_completed is False
        assert progress.current_progress == 2
        assert progress.next_milestone == "1 more positive action today"

    def test_negative_and_zero_points_ignored(self, senior, make_action, now) -> None:
        badge = get_badge("combo_master")
        log = [make_action(301, pet_id=3), make_action(314, pet_id=3), make_action(315, pet_id=3)]

        progress = calculate_progress(senior, badge, log, now)

        assert progress.current_progress == 1

    def test_combo_action_ids_restrict(self, puppy, make_action, now) -> None:
        badge = make_badge(ComboRequirement(2, frozenset({110, 111})))
        log = [make_action(110), make_action(101), make_action(111)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.current_progress == 2
        assert progress.is_completed is True


# =============================================================================
# time_based
# =============================================================================


class TestTimeBased:
    """First-week window anchored on the pet's first action."""

    def test_within_first_week(self, puppy, make_action, now) -> None:
        badge = get_badge("first_day")

        progress = calculate_progress(puppy, badge, [make_action(101, days_ago=3)], now)

        assert progress.is_completed is True

    def test_after_first_week(self, puppy, make_action, now) -> None:
        badge = get_badge("first_day")
        log = [make_action(101, days_ago=10), make_action(101)]

        progress = calculate_progress(puppy, badge, log, now)

        assert progress.is_completed is False
        assert progress.next_milestone == "The first week is over"

    def test_no_actions(self, puppy, now) -> None:
        badge = make_badge(TimeBasedRequirement())

        progress = calculate_progress(puppy, badge, [], now)

        assert progress.current_progress == 0
        assert progress.next_milestone == "Log a first action"


# =============================================================================
# Degenerate input and cross-cutting properties
# =============================================================================


def test_unknown_requirement_is_degenerate(puppy, make_action, now) -> None:
    badge = make_badge(UnknownRequirement("leaderboard_rank"))

    progress = calculate_progress(puppy, badge, [make_action(101)], now)

    assert progress.current_progress == 0
    assert progress.max_progress == 1
    assert progress.is_completed is False
    assert progress.next_milestone is None


def test_unparseable_timestamp_is_skipped(puppy, make_action, now) -> None:
    badge = make_badge(ActionCountRequirement(frozenset({101}), 5))
    log = [make_action(101), Action(2, 101, 5, "not-a-date")]

    progress = calculate_progress(puppy, badge, log, now)

    assert progress.current_progress == 1


def test_calculate_all_progress_follows_catalog(puppy, make_action, now) -> None:
    progress = calculate_all_progress(puppy, [make_action(101)], now=now)

    assert [p.badge_id for p in progress] == [b.id for b in BADGE_DEFINITIONS]
    assert all(p.pet_id == puppy.id for p in progress)


def test_appending_qualifying_action_never_regresses(puppy, make_action, now) -> None:
    """Adding a positive action keeps every badge's progress and completion."""
    log = [
        make_action(101, days_ago=3),
        make_action(2, days_ago=2),
        make_action(111, days_ago=1),
        make_action(101, days_ago=1),
        make_action(104, days_ago=5),
        make_action(103),
    ]
    extended = log + [make_action(101, hour=11)]

    before = calculate_all_progress(puppy, log, now=now)
    after = calculate_all_progress(puppy, extended, now=now)

    for old, new in zip(before, after):
        assert new.current_progress >= old.current_progress, old.badge_id
        if old.is_completed:
            assert new.is_completed, old.badge_id


def test_monotonic_over_growing_log(adult, make_action, now) -> None:
    log = []
    previous = calculate_all_progress(adult, log, now=now)
    for days_ago in range(6, -1, -1):
        log = log + [make_action(5, pet_id=1, days_ago=days_ago)]
        current = calculate_all_progress(adult, log, now=now)
        for old, new in zip(previous, current):
            assert new.current_progress >= old.current_progress, old.badge_id
        previous = current


def test_now_defaults_to_clock(puppy) -> None:
    badge = make_badge(ActionCountRequirement(frozenset({101}), 1, TimeFrame.DAY))
    log = [Action(2, 101, 5, "2026-10-18T07:00:00+00:00")]

    with freeze_time("2026-10-18 09:00:00"):
        assert calculate_progress(puppy, badge, log).is_completed is True
    with freeze_time("2026-10-19 09:00:00"):
        assert calculate_progress(puppy, badge, log).is_completed is False


def test_window_respects_configured_timezone(monkeypatch, puppy, now) -> None:
    """Day boundaries follow the configured zone, not UTC string prefixes."""
    monkeypatch.setattr(config, "TIMEZONE", "Europe/Paris")
    badge = make_badge(ActionCountRequirement(frozenset({101}), 1, TimeFrame.DAY))
    # 23:30 UTC on the 17th is 01:30 on the 18th in Paris
    log = [Action(2, 101, 5, (now - timedelta(hours=12, minutes=30)).isoformat())]

    progress = calculate_progress(puppy, badge, log, now)

    assert progress.is_completed is True


def _evening_walks_around_dst_end():
    """Walks at 23:30 Paris time from Oct 20 to Nov 1; DST ends on Oct 25."""
    log = []
    for day in range(20, 33):
        month, dom = (10, day) if day <= 31 else (11, day - 31)
        utc_hour = 21 if (month, dom) < (10, 25) else 22
        stamp = datetime(2026, month, dom, utc_hour, 30, tzinfo=timezone.utc)
        log.append(Action(1, 3, 8, stamp.isoformat().replace("+00:00", "Z")))
    return log


def test_device_zone_streak_across_dst_change(paris_device, adult) -> None:
    """Each walk lands on its own Paris day on both sides of the DST change."""
    badge = make_badge(StreakRequirement(10))
    now = datetime(2026, 11, 1, 22, 45, tzinfo=timezone.utc)

    progress = calculate_progress(adult, badge, _evening_walks_around_dst_end(), now)

    assert progress.current_progress == 13
    assert progress.is_completed is True


def test_device_zone_matches_configured_zone(paris_device, monkeypatch, adult) -> None:
    badge = make_badge(StreakRequirement(10))
    now = datetime(2026, 11, 1, 22, 45, tzinfo=timezone.utc)
    log = _evening_walks_around_dst_end()

    device = calculate_progress(adult, badge, log, now)
    monkeypatch.setattr(config, "TIMEZONE", "Europe/Paris")
    configured = calculate_progress(adult, badge, log, now)

    assert device == configured
