from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, FrozenSet, List, Optional, Union


class Rarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def rank(self) -> int:
        return _RARITY_RANKS[self]


_RARITY_RANKS = {
    Rarity.COMMON: 1,
    Rarity.RARE: 2,
    Rarity.EPIC: 3,
    Rarity.LEGENDARY: 4,
}


class BadgeCategory(str, Enum):
    PROPRETE = "propreté"       # hygiene / house training
    COMPORTEMENT = "comportement"
    EDUCATION = "éducation"
    SOCIAL = "social"
    STREAK = "streak"
    SPECIAL = "special"


class AgeGroup(str, Enum):
    CHIOT = "chiot"
    ADULTE = "adulte"
    SENIOR = "senior"


class TimeFrame(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL_TIME = "all_time"


class StreakVariant(str, Enum):
    POSITIVE = "positive"
    CLEAN = "clean"


class TimeCondition(str, Enum):
    FIRST_WEEK = "first_week"


class RequirementType(str, Enum):
    ACTION_COUNT = "action_count"
    STREAK = "streak"
    POINTS_TOTAL = "points_total"
    SPECIFIC_ACTION = "specific_action"
    COMBO = "combo"
    TIME_BASED = "time_based"


@dataclass
class Pet:
    id: int
    name: str = ""
    age_in_months: int = 0
    breed: Optional[str] = None


@dataclass(frozen=True)
class Action:
    """One entry of a pet's append-only action log."""
    pet_id: int
    action_id: int
    points: int
    timestamp: str            # ISO-8601
    action_text: str = ""


# ---------------------------------------------------------------------------
# Badge requirements (one variant per badge)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ActionCountRequirement:
    type: ClassVar[str] = RequirementType.ACTION_COUNT.value
    action_ids: FrozenSet[int]
    count: int
    timeframe: Optional[TimeFrame] = None   # None = all time


@dataclass(frozen=True)
class StreakRequirement:
    """Consecutive days with a qualifying action.

    POSITIVE: any listed action (any action when empty) with positive points;
    the generic accident set breaks it.
    CLEAN: clean actions only; the clean-streak accident set breaks it.
    `accident_action_ids` overrides the variant's default accident set.
    """
    type: ClassVar[str] = RequirementType.STREAK.value
    consecutive_days: int
    streak_action_ids: FrozenSet[int] = frozenset()
    variant: StreakVariant = StreakVariant.POSITIVE
    accident_action_ids: Optional[FrozenSet[int]] = None


@dataclass(frozen=True)
class PointsTotalRequirement:
    type: ClassVar[str] = RequirementType.POINTS_TOTAL.value
    min_points: int
    timeframe: Optional[TimeFrame] = None


@dataclass(frozen=True)
class SpecificActionRequirement:
    type: ClassVar[str] = RequirementType.SPECIFIC_ACTION.value
    specific_action_id: int
    age_group: Optional[AgeGroup] = None
    min_points: Optional[int] = None


@dataclass(frozen=True)
class ComboRequirement:
    """Several positive actions on the same local day."""
    type: ClassVar[str] = RequirementType.COMBO.value
    count: int
    combo_action_ids: FrozenSet[int] = frozenset()   # empty = any positive action


@dataclass(frozen=True)
class TimeBasedRequirement:
    type: ClassVar[str] = RequirementType.TIME_BASED.value
    condition: TimeCondition = TimeCondition.FIRST_WEEK


@dataclass(frozen=True)
class UnknownRequirement:
    """Requirement type this build does not know how to evaluate."""
    type: str


Requirement = Union[
    ActionCountRequirement,
    StreakRequirement,
    PointsTotalRequirement,
    SpecificActionRequirement,
    ComboRequirement,
    TimeBasedRequirement,
    UnknownRequirement,
]


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    icon: str
    color: str
    rarity: Rarity
    category: BadgeCategory
    requirement: Requirement


@dataclass
class BadgeProgress:
    badge_id: str
    pet_id: int
    current_progress: int = 0
    max_progress: int = 1
    percentage: float = 0.0
    is_completed: bool = False
    next_milestone: Optional[str] = None


@dataclass(frozen=True)
class TriggeredBy:
    action_id: Optional[int] = None
    points: Optional[int] = None
    context: Optional[str] = None


@dataclass(frozen=True)
class EarnedBadge:
    badge_id: str
    pet_id: int
    earned_at: str            # ISO-8601
    triggered_by: Optional[TriggeredBy] = None


@dataclass
class BadgeStats:
    pet_id: int
    total_earned: int = 0
    total_possible: int = 0
    percentage: int = 0
    in_progress: int = 0
    by_rarity: Dict[str, int] = field(default_factory=dict)
    by_category: Dict[str, int] = field(default_factory=dict)
    recent: List[EarnedBadge] = field(default_factory=list)
