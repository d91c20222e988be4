"""Badge definitions: the static catalog shipped with each release.

Ids are referenced by persisted EarnedBadge records and must stay stable.
"""

from typing import Dict, Iterable, List, Optional

from models import (
    ActionCountRequirement,
    AgeGroup,
    Badge,
    BadgeCategory,
    ComboRequirement,
    PointsTotalRequirement,
    Rarity,
    SpecificActionRequirement,
    StreakRequirement,
    StreakVariant,
    TimeBasedRequirement,
    TimeCondition,
    TimeFrame,
)


BADGE_DEFINITIONS: List[Badge] = [
    # Propreté
    Badge(
        "first_outdoor_pee", "Premier pipi dehors",
        "A fait son premier pipi à l'extérieur !", "🎯", "#10b981",
        Rarity.COMMON, BadgeCategory.PROPRETE,
        SpecificActionRequirement(101, age_group=AgeGroup.CHIOT),
    ),
    Badge(
        "potty_champion", "Champion Pipi",
        "A fait ses besoins dehors 10 fois !", "🏆", "#f59e0b",
        Rarity.RARE, BadgeCategory.PROPRETE,
        ActionCountRequirement(frozenset({101, 1}), 10, TimeFrame.ALL_TIME),
    ),
    Badge(
        "clean_week", "Semaine Propre",
        "7 jours consécutifs sans accident !", "✨", "#8b5cf6",
        Rarity.EPIC, BadgeCategory.PROPRETE,
        StreakRequirement(7, frozenset({101, 1}), StreakVariant.CLEAN),
    ),
    Badge(
        "night_owl", "Chouette de Nuit",
        "Nuit complète sans accident !", "🦉", "#6366f1",
        Rarity.RARE, BadgeCategory.PROPRETE,
        SpecificActionRequirement(103),
    ),

    # Éducation
    Badge(
        "first_sit", "Premier Assis",
        "A obéi à l'ordre \"assis\" pour la première fois !", "🎓", "#3b82f6",
        Rarity.COMMON, BadgeCategory.EDUCATION,
        SpecificActionRequirement(111, age_group=AgeGroup.CHIOT),
    ),
    Badge(
        "obedience_master", "Maître de l'Obéissance",
        "A obéi aux ordres 25 fois !", "👨‍🏫", "#f59e0b",
        Rarity.RARE, BadgeCategory.EDUCATION,
        ActionCountRequirement(frozenset({5, 110, 111, 112, 114}), 25, TimeFrame.ALL_TIME),
    ),
    Badge(
        "trick_master", "Roi des Tours",
        "A maîtrisé un nouveau tour !", "🎪", "#ef4444",
        Rarity.EPIC, BadgeCategory.EDUCATION,
        SpecificActionRequirement(210, age_group=AgeGroup.ADULTE),
    ),

    # Social
    Badge(
        "social_butterfly", "Papillon Social",
        "A rencontré 5 nouveaux chiens !", "🦋", "#ec4899",
        Rarity.RARE, BadgeCategory.SOCIAL,
        ActionCountRequirement(frozenset({105}), 5, TimeFrame.MONTH),
    ),
    Badge(
        "peacekeeper", "Gardien de la Paix",
        "A calmé un autre chien énervé !", "☮️", "#8b5cf6",
        Rarity.EPIC, BadgeCategory.SOCIAL,
        SpecificActionRequirement(305, age_group=AgeGroup.SENIOR),
    ),

    # Streaks
    Badge(
        "daily_warrior", "Guerrier Quotidien",
        "3 jours consécutifs avec des points positifs !", "🔥", "#f97316",
        Rarity.COMMON, BadgeCategory.STREAK,
        StreakRequirement(3),
    ),
    Badge(
        "perfect_week", "Semaine Parfaite",
        "50 points gagnés en une semaine !", "🌟", "#fbbf24",
        Rarity.LEGENDARY, BadgeCategory.STREAK,
        PointsTotalRequirement(50, TimeFrame.WEEK),
    ),

    # Spéciaux
    Badge(
        "first_day", "Bienvenue !",
        "Première semaine dans Pet of the Day !", "🎉", "#06b6d4",
        Rarity.COMMON, BadgeCategory.SPECIAL,
        TimeBasedRequirement(TimeCondition.FIRST_WEEK),
    ),
    Badge(
        "combo_master", "Maître Combo",
        "A réalisé 3 actions positives en une journée !", "⚡", "#f59e0b",
        Rarity.RARE, BadgeCategory.SPECIAL,
        ComboRequirement(3),
    ),
    Badge(
        "point_collector", "Collectionneur de Points",
        "A accumulé 100 points au total !", "💎", "#84cc16",
        Rarity.EPIC, BadgeCategory.SPECIAL,
        PointsTotalRequirement(100, TimeFrame.ALL_TIME),
    ),
    Badge(
        "daily_champion", "Champion du Jour",
        "A gagné 20 points en une journée !", "👑", "#fbbf24",
        Rarity.EPIC, BadgeCategory.SPECIAL,
        PointsTotalRequirement(20, TimeFrame.DAY),
    ),
]

_BADGES_BY_ID: Dict[str, Badge] = {b.id: b for b in BADGE_DEFINITIONS}

RARITY_COLORS: Dict[Rarity, str] = {
    Rarity.COMMON: "#6b7280",
    Rarity.RARE: "#3b82f6",
    Rarity.EPIC: "#8b5cf6",
    Rarity.LEGENDARY: "#f59e0b",
}

RARITY_ORDER: Dict[Rarity, int] = {r: r.rank for r in Rarity}


def get_badge(badge_id: str) -> Optional[Badge]:
    return _BADGES_BY_ID.get(badge_id)


def get_badges_by_category(category: BadgeCategory) -> List[Badge]:
    return [b for b in BADGE_DEFINITIONS if b.category == category]


def get_badges_by_rarity(rarity: Rarity) -> List[Badge]:
    return [b for b in BADGE_DEFINITIONS if b.rarity == rarity]


def sort_badges(badges: Iterable[Badge]) -> List[Badge]:
    """Rarest first, then alphabetically by name."""
    return sorted(badges, key=lambda b: (-RARITY_ORDER[b.rarity], b.name.casefold()))
