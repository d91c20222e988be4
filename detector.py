"""New-badge detection with an at-most-once guard per (pet, badge)."""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple

import clock
from badges import BADGE_DEFINITIONS
from models import Action, Badge, EarnedBadge, Pet, TriggeredBy
from progress import calculate_all_progress

logger = logging.getLogger(__name__)


def earned_badge_keys(earned_badges: Iterable[EarnedBadge]) -> Set[Tuple[int, str]]:
    return {(eb.pet_id, eb.badge_id) for eb in earned_badges}


def describe_trigger(action: Action) -> TriggeredBy:
    sign = "+" if action.points >= 0 else ""
    label = action.action_text or f"action #{action.action_id}"
    return TriggeredBy(
        action_id=action.action_id,
        points=action.points,
        context=f"{label} ({sign}{action.points} pts)",
    )


def detect_new_badges(
    pet: Pet,
    actions: Iterable[Action],
    earned_badges: Iterable[EarnedBadge],
    triggering_action: Optional[Action] = None,
    catalog: Optional[List[Badge]] = None,
    now: Optional[datetime] = None,
) -> List[EarnedBadge]:
    """Return the badges `pet` has just completed and not yet earned.

    Badges already present in `earned_badges` for this pet are never
    returned again, whatever the log now contains.
    """
    current_time = clock.to_local(now) if now else clock.now()
    already_earned = earned_badge_keys(earned_badges)
    badges = BADGE_DEFINITIONS if catalog is None else catalog
    pending = [b for b in badges if (pet.id, b.id) not in already_earned]
    if not pending:
        return []

    triggered_by = describe_trigger(triggering_action) if triggering_action else None
    earned_at = current_time.isoformat()

    new_badges = []
    for progress in calculate_all_progress(pet, actions, pending, current_time):
        if not progress.is_completed:
            continue
        logger.debug("Pet %s earned badge %s", pet.id, progress.badge_id)
        new_badges.append(EarnedBadge(
            badge_id=progress.badge_id,
            pet_id=pet.id,
            earned_at=earned_at,
            triggered_by=triggered_by,
        ))
    return new_badges
