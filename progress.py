"""Badge progress calculation.

One handler per requirement variant. Each handler measures how far a pet
is from satisfying the rule and returns (current, maximum, hint); the
shared post-processing turns that into a BadgeProgress.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import actions as action_catalog
import clock
import config
from badges import BADGE_DEFINITIONS
from models import (
    Action,
    ActionCountRequirement,
    Badge,
    BadgeProgress,
    ComboRequirement,
    Pet,
    PointsTotalRequirement,
    Requirement,
    SpecificActionRequirement,
    StreakRequirement,
    StreakVariant,
    TimeBasedRequirement,
    TimeCondition,
    TimeFrame,
)

logger = logging.getLogger(__name__)

# (action, moment in the configured zone)
TimedAction = Tuple[Action, datetime]
Measure = Tuple[int, int, Optional[str]]
Handler = Callable[[Pet, Requirement, List[TimedAction], datetime], Measure]

_WINDOW_SUFFIX = {
    TimeFrame.DAY: " today",
    TimeFrame.WEEK: " this week",
    TimeFrame.MONTH: " this month",
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def calculate_progress(
    pet: Pet,
    badge: Badge,
    actions: Iterable[Action],
    now: Optional[datetime] = None,
) -> BadgeProgress:
    """Measure `pet`'s progress toward `badge` from its action log."""
    current_time = clock.to_local(now) if now else clock.now()
    return _calculate(pet, badge, _timed_actions(pet, actions), current_time)


def calculate_all_progress(
    pet: Pet,
    actions: Iterable[Action],
    catalog: Optional[List[Badge]] = None,
    now: Optional[datetime] = None,
) -> List[BadgeProgress]:
    """Progress for every badge of `catalog` (the release catalog by default)."""
    current_time = clock.to_local(now) if now else clock.now()
    timed = _timed_actions(pet, actions)
    badges = BADGE_DEFINITIONS if catalog is None else catalog
    return [_calculate(pet, badge, timed, current_time) for badge in badges]


# ---------------------------------------------------------------------------
# Shared plumbing
# ---------------------------------------------------------------------------

def _timed_actions(pet: Pet, actions: Iterable[Action]) -> List[TimedAction]:
    """The pet's actions paired with their parsed timestamps."""
    timed = []
    for action in actions:
        if action.pet_id != pet.id:
            continue
        moment = clock.parse_timestamp(action.timestamp)
        if moment is not None:
            timed.append((action, moment))
    return timed


def _calculate(
    pet: Pet,
    badge: Badge,
    timed: List[TimedAction],
    current_time: datetime,
) -> BadgeProgress:
    handler = _HANDLERS.get(type(badge.requirement))
    if handler is None:
        logger.debug(
            "Badge %s has unsupported requirement type %r",
            badge.id, getattr(badge.requirement, "type", None),
        )
        return BadgeProgress(badge_id=badge.id, pet_id=pet.id)

    current, maximum, hint = handler(pet, badge.requirement, timed, current_time)
    current = max(0, current)
    maximum = max(1, maximum or 1)
    is_completed = current >= maximum

    return BadgeProgress(
        badge_id=badge.id,
        pet_id=pet.id,
        current_progress=current,
        max_progress=maximum,
        percentage=min(100.0, current * 100.0 / maximum),
        is_completed=is_completed,
        next_milestone=None if is_completed else hint,
    )


def _in_window(
    timed: List[TimedAction],
    timeframe: Optional[TimeFrame],
    current_time: datetime,
) -> List[Action]:
    start = clock.window_start(timeframe, current_time)
    if start is None:
        return [action for action, _ in timed]
    return [action for action, moment in timed if moment >= start]


def _by_day(timed: List[TimedAction]) -> Dict[date, List[Action]]:
    days: Dict[date, List[Action]] = defaultdict(list)
    for action, moment in timed:
        days[moment.date()].append(action)
    return days


def _plural(count: int, word: str) -> str:
    return f"{count} more {word}{'' if count == 1 else 's'}"


# ---------------------------------------------------------------------------
# Requirement handlers
# ---------------------------------------------------------------------------

def _action_count(pet, requirement: ActionCountRequirement, timed, current_time) -> Measure:
    in_window = _in_window(timed, requirement.timeframe, current_time)
    current = sum(1 for a in in_window if a.action_id in requirement.action_ids)
    remaining = requirement.count - current
    suffix = _WINDOW_SUFFIX.get(requirement.timeframe, "")
    return current, requirement.count, _plural(remaining, "action") + suffix


def _points_total(pet, requirement: PointsTotalRequirement, timed, current_time) -> Measure:
    in_window = _in_window(timed, requirement.timeframe, current_time)
    # Penalties lower the total, but progress never goes below zero
    current = max(0, sum(a.points for a in in_window))
    remaining = requirement.min_points - current
    suffix = _WINDOW_SUFFIX.get(requirement.timeframe, "")
    return current, requirement.min_points, _plural(remaining, "point") + suffix


def _streak(pet, requirement: StreakRequirement, timed, current_time) -> Measure:
    if requirement.variant == StreakVariant.CLEAN:
        qualifying_ids = requirement.streak_action_ids | config.CLEAN_STREAK_CLEAN_ACTION_IDS
        default_accidents = config.CLEAN_STREAK_ACCIDENT_ACTION_IDS
    else:
        qualifying_ids = requirement.streak_action_ids
        default_accidents = config.STREAK_ACCIDENT_ACTION_IDS
    accident_ids = (
        requirement.accident_action_ids
        if requirement.accident_action_ids is not None
        else default_accidents
    )

    def qualifies(action: Action) -> bool:
        if action.points <= 0:
            return False
        return not qualifying_ids or action.action_id in qualifying_ids

    days = _by_day(timed)
    today = clock.local_date(current_time)
    streak = 0

    for offset in range(config.STREAK_LOOKBACK_DAYS):
        day_actions = days.get(today - timedelta(days=offset), [])
        if any(a.action_id in accident_ids for a in day_actions):
            break
        if any(qualifies(a) for a in day_actions):
            streak += 1
            continue
        if offset == 0:
            # Today is not over yet: an empty day does not break the streak
            if day_actions:
                streak += 1
            continue
        break

    remaining = requirement.consecutive_days - streak
    return streak, requirement.consecutive_days, _plural(remaining, "day") + " in a row"


def _specific_action(pet, requirement: SpecificActionRequirement, timed, current_time) -> Measure:
    if requirement.age_group is not None:
        if action_catalog.get_age_group(pet.age_in_months) != requirement.age_group:
            return 0, 1, f"Only for {requirement.age_group.value} pets"

    min_points = requirement.min_points
    performed = any(
        action.action_id == requirement.specific_action_id
        and (min_points is None or action.points >= min_points)
        for action, _ in timed
    )

    action_def = action_catalog.get_action(requirement.specific_action_id)
    label = action_def.text if action_def else f"action #{requirement.specific_action_id}"
    hint = f'Log "{label}"'
    if min_points is not None:
        hint += f" worth {min_points}+ points"
    return (1 if performed else 0), 1, hint


def _combo(pet, requirement: ComboRequirement, timed, current_time) -> Measure:
    today = clock.local_date(current_time)
    current = sum(
        1 for action, moment in timed
        if moment.date() == today
        and action.points > 0
        and (not requirement.combo_action_ids or action.action_id in requirement.combo_action_ids)
    )
    remaining = requirement.count - current
    return current, requirement.count, _plural(remaining, "positive action") + " today"


def _time_based(pet, requirement: TimeBasedRequirement, timed, current_time) -> Measure:
    if requirement.condition != TimeCondition.FIRST_WEEK:
        return 0, 1, None
    if not timed:
        return 0, 1, "Log a first action"
    first = min(moment for _, moment in timed)
    if current_time - first <= timedelta(days=config.FIRST_WEEK_DAYS):
        return 1, 1, None
    return 0, 1, "The first week is over"


_HANDLERS: Dict[type, Handler] = {
    ActionCountRequirement: _action_count,
    PointsTotalRequirement: _points_total,
    StreakRequirement: _streak,
    SpecificActionRequirement: _specific_action,
    ComboRequirement: _combo,
    TimeBasedRequirement: _time_based,
}
