"""Badge engine: progress, detection and stats over one data snapshot."""

from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional

import clock
import config
import detector
from badges import BADGE_DEFINITIONS, sort_badges
from models import (
    Action,
    Badge,
    BadgeCategory,
    BadgeProgress,
    BadgeStats,
    EarnedBadge,
    Pet,
    Rarity,
)
from progress import calculate_all_progress, calculate_progress


class BadgeFilter(str, Enum):
    ALL = "all"
    EARNED = "earned"
    PROGRESS = "progress"
    LOCKED = "locked"


class BadgeEngine:
    """Read-only view over earned badges and the action log.

    The engine copies its inputs at construction and never mutates them.
    Build a new one whenever the log or the earned set changes.
    """

    def __init__(
        self,
        earned_badges: Iterable[EarnedBadge],
        actions: Iterable[Action],
        catalog: Optional[List[Badge]] = None,
        now: Optional[datetime] = None,
    ):
        self.earned_badges = tuple(earned_badges)
        self.actions = tuple(actions)
        self.catalog = tuple(BADGE_DEFINITIONS if catalog is None else catalog)
        self._now = now

    def _current_time(self) -> datetime:
        return clock.to_local(self._now) if self._now else clock.now()

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def get_all_progress(self, pet: Pet) -> List[BadgeProgress]:
        return calculate_all_progress(pet, self.actions, list(self.catalog), self._current_time())

    def get_progress(self, pet: Pet, badge_id: str) -> Optional[BadgeProgress]:
        badge = next((b for b in self.catalog if b.id == badge_id), None)
        if badge is None:
            return None
        return calculate_progress(pet, badge, self.actions, self._current_time())

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def detect_new_badges(
        self,
        pet: Pet,
        triggering_action: Optional[Action] = None,
    ) -> List[EarnedBadge]:
        return detector.detect_new_badges(
            pet,
            self.actions,
            self.earned_badges,
            triggering_action=triggering_action,
            catalog=list(self.catalog),
            now=self._current_time(),
        )

    # ------------------------------------------------------------------
    # Earned badges and stats
    # ------------------------------------------------------------------

    def get_earned_badges(self, pet_id: int) -> List[EarnedBadge]:
        """Earned badges of one pet, most recent first."""
        earned = [eb for eb in self.earned_badges if eb.pet_id == pet_id]
        return sorted(earned, key=_earned_sort_key, reverse=True)

    def get_badge_stats(
        self,
        pet_id: int,
        progress: Optional[List[BadgeProgress]] = None,
    ) -> BadgeStats:
        """Aggregate counts for the stats screen.

        `progress` (from get_all_progress) is only needed for the
        in-progress count; it is left at 0 otherwise.
        """
        by_id = {b.id: b for b in self.catalog}
        # Retired badges and duplicate records are not counted
        earned: List[EarnedBadge] = []
        for eb in self.get_earned_badges(pet_id):
            if eb.badge_id in by_id and all(e.badge_id != eb.badge_id for e in earned):
                earned.append(eb)
        known = [by_id[eb.badge_id] for eb in earned]

        rarity_counts = Counter(b.rarity for b in known)
        category_counts = Counter(b.category for b in known)
        total_possible = len(self.catalog)

        in_progress = 0
        if progress:
            in_progress = sum(
                1 for p in progress
                if p.pet_id == pet_id and p.percentage > 0 and not p.is_completed
            )

        return BadgeStats(
            pet_id=pet_id,
            total_earned=len(earned),
            total_possible=total_possible,
            percentage=round(len(earned) * 100 / total_possible) if total_possible else 0,
            in_progress=in_progress,
            by_rarity={r.value: rarity_counts.get(r, 0) for r in Rarity},
            by_category={c.value: category_counts.get(c, 0) for c in BadgeCategory},
            recent=earned[:config.RECENT_BADGES_LIMIT],
        )

    def filter_badges(
        self,
        pet: Pet,
        status: BadgeFilter = BadgeFilter.ALL,
        category: Optional[BadgeCategory] = None,
        rarity: Optional[Rarity] = None,
    ) -> List[Badge]:
        """Catalog subset for the badge screen, rarest first."""
        badges = list(self.catalog)
        if category is not None:
            badges = [b for b in badges if b.category == category]
        if rarity is not None:
            badges = [b for b in badges if b.rarity == rarity]

        earned_ids = {eb.badge_id for eb in self.earned_badges if eb.pet_id == pet.id}
        if status == BadgeFilter.EARNED:
            badges = [b for b in badges if b.id in earned_ids]
        elif status == BadgeFilter.LOCKED:
            badges = [b for b in badges if b.id not in earned_ids]
        elif status == BadgeFilter.PROGRESS:
            progress = {p.badge_id: p for p in self.get_all_progress(pet)}
            badges = [
                b for b in badges
                if b.id in progress
                and progress[b.id].percentage > 0
                and not progress[b.id].is_completed
            ]

        return sort_badges(badges)


def _earned_sort_key(earned: EarnedBadge) -> datetime:
    moment = clock.parse_timestamp(earned.earned_at, kind="earned badge")
    if moment is None:
        return datetime(1970, 1, 1, tzinfo=timezone.utc)
    return moment
