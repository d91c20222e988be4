"""Plain-dict conversion for pets, action logs, earned badges and badges.

The state layer hands the engine JSON-compatible dicts (camelCase keys,
as stored by the mobile app). Everything here is a pure conversion;
`load_snapshot` is the only function that touches the filesystem.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from models import (
    Action,
    ActionCountRequirement,
    AgeGroup,
    Badge,
    BadgeCategory,
    ComboRequirement,
    EarnedBadge,
    Pet,
    PointsTotalRequirement,
    Rarity,
    Requirement,
    RequirementType,
    SpecificActionRequirement,
    StreakRequirement,
    StreakVariant,
    TimeBasedRequirement,
    TimeCondition,
    TimeFrame,
    TriggeredBy,
    UnknownRequirement,
)


class SnapshotError(Exception):
    """Raised when snapshot data is unreadable or missing required fields."""


@dataclass
class Snapshot:
    pets: List[Pet] = field(default_factory=list)
    actions: List[Action] = field(default_factory=list)
    earned_badges: List[EarnedBadge] = field(default_factory=list)
    badges: Optional[List[Badge]] = None   # catalog override; None = release catalog


def _require(data: Dict[str, Any], key: str, kind: str) -> Any:
    try:
        return data[key]
    except (KeyError, TypeError) as e:
        raise SnapshotError(f"{kind} is missing required field '{key}': {data!r}") from e


def _ids(values: Optional[List[Any]]) -> frozenset:
    return frozenset(int(v) for v in (values or []))


def _records(raw: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    records = raw.get(key) or []
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise SnapshotError(f"Snapshot field '{key}' must be a list of objects")
    return records


# ---------------------------------------------------------------------------
# Pets and actions
# ---------------------------------------------------------------------------

def pet_from_dict(data: Dict[str, Any]) -> Pet:
    pet_id = _require(data, "id", "Pet")
    try:
        age_in_months = int(data.get("ageInMonths") or 0)
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid pet {data!r}: {e}") from e
    return Pet(
        id=pet_id,
        name=data.get("name", ""),
        age_in_months=age_in_months,
        breed=data.get("breed"),
    )


def action_from_dict(data: Dict[str, Any]) -> Action:
    try:
        action_id = int(_require(data, "actionId", "Action"))
        points = int(_require(data, "points", "Action"))
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid action {data!r}: {e}") from e
    return Action(
        pet_id=_require(data, "petId", "Action"),
        action_id=action_id,
        points=points,
        timestamp=_require(data, "timestamp", "Action"),
        action_text=data.get("actionText", ""),
    )


def action_to_dict(action: Action) -> Dict[str, Any]:
    return {
        "petId": action.pet_id,
        "actionId": action.action_id,
        "points": action.points,
        "timestamp": action.timestamp,
        "actionText": action.action_text,
    }


# ---------------------------------------------------------------------------
# Earned badges
# ---------------------------------------------------------------------------

def earned_badge_from_dict(data: Dict[str, Any]) -> EarnedBadge:
    triggered = data.get("triggeredBy")
    if triggered is not None and not isinstance(triggered, dict):
        raise SnapshotError(f"EarnedBadge field 'triggeredBy' must be an object: {data!r}")
    return EarnedBadge(
        badge_id=_require(data, "badgeId", "EarnedBadge"),
        pet_id=_require(data, "petId", "EarnedBadge"),
        earned_at=_require(data, "earnedAt", "EarnedBadge"),
        triggered_by=TriggeredBy(
            action_id=triggered.get("actionId"),
            points=triggered.get("points"),
            context=triggered.get("context"),
        ) if triggered else None,
    )


def earned_badge_to_dict(earned: EarnedBadge) -> Dict[str, Any]:
    """Serialize an EarnedBadge; absent optional fields are omitted."""
    data: Dict[str, Any] = {
        "badgeId": earned.badge_id,
        "petId": earned.pet_id,
        "earnedAt": earned.earned_at,
    }
    if earned.triggered_by:
        triggered = {
            "actionId": earned.triggered_by.action_id,
            "points": earned.triggered_by.points,
            "context": earned.triggered_by.context,
        }
        data["triggeredBy"] = {k: v for k, v in triggered.items() if v is not None}
    return data


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------

def requirement_from_dict(data: Dict[str, Any]) -> Requirement:
    """Build the requirement variant named by data["type"].

    Unknown types become UnknownRequirement so an older build can still
    load a newer catalog; the calculator treats them as never completing.
    """
    req_type = _require(data, "type", "Requirement")
    try:
        timeframe = TimeFrame(data["timeframe"]) if data.get("timeframe") else None
        if req_type == RequirementType.ACTION_COUNT:
            return ActionCountRequirement(
                action_ids=_ids(data.get("actionIds")),
                count=int(_require(data, "count", "Requirement")),
                timeframe=timeframe,
            )
        if req_type == RequirementType.STREAK:
            accidents = data.get("accidentActionIds")
            return StreakRequirement(
                consecutive_days=int(_require(data, "consecutiveDays", "Requirement")),
                streak_action_ids=_ids(data.get("streakActionIds")),
                variant=StreakVariant(data.get("variant", StreakVariant.POSITIVE.value)),
                accident_action_ids=_ids(accidents) if accidents is not None else None,
            )
        if req_type == RequirementType.POINTS_TOTAL:
            return PointsTotalRequirement(
                min_points=int(_require(data, "minPoints", "Requirement")),
                timeframe=timeframe,
            )
        if req_type == RequirementType.SPECIFIC_ACTION:
            conditions = data.get("conditions") or {}
            age_group = conditions.get("ageGroup")
            min_points = conditions.get("minPoints")
            return SpecificActionRequirement(
                specific_action_id=int(_require(data, "specificActionId", "Requirement")),
                age_group=AgeGroup(age_group) if age_group else None,
                min_points=int(min_points) if min_points is not None else None,
            )
        if req_type == RequirementType.COMBO:
            return ComboRequirement(
                count=int(_require(data, "count", "Requirement")),
                combo_action_ids=_ids(data.get("comboActionIds")),
            )
        if req_type == RequirementType.TIME_BASED:
            condition = (data.get("timeCondition") or {}).get("type", TimeCondition.FIRST_WEEK.value)
            if condition not in {c.value for c in TimeCondition}:
                return UnknownRequirement(f"{req_type}:{condition}")
            return TimeBasedRequirement(TimeCondition(condition))
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid requirement {data!r}: {e}") from e
    return UnknownRequirement(str(req_type))


def badge_from_dict(data: Dict[str, Any]) -> Badge:
    try:
        rarity = Rarity(_require(data, "rarity", "Badge"))
        category = BadgeCategory(_require(data, "category", "Badge"))
    except ValueError as e:
        raise SnapshotError(f"Invalid badge {data.get('id')!r}: {e}") from e
    return Badge(
        id=_require(data, "id", "Badge"),
        name=data.get("name", ""),
        description=data.get("description", ""),
        icon=data.get("icon", ""),
        color=data.get("color", ""),
        rarity=rarity,
        category=category,
        requirement=requirement_from_dict(_require(data, "requirements", "Badge")),
    )


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def load_snapshot(path: Union[str, Path]) -> Snapshot:
    """Read {"pets": [...], "actions": [...], "earnedBadges": [...]} from JSON.

    An optional "badges" list replaces the release catalog.
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise SnapshotError(f"Snapshot file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Could not read snapshot {path}: {e}") from e

    if not isinstance(raw, dict):
        raise SnapshotError(f"Snapshot {path} must contain a JSON object")

    return Snapshot(
        pets=[pet_from_dict(p) for p in _records(raw, "pets")],
        actions=[action_from_dict(a) for a in _records(raw, "actions")],
        earned_badges=[earned_badge_from_dict(e) for e in _records(raw, "earnedBadges")],
        badges=[badge_from_dict(b) for b in _records(raw, "badges")] if "badges" in raw else None,
    )


def dump_earned_badges(earned_badges: List[EarnedBadge]) -> str:
    return json.dumps(
        [earned_badge_to_dict(eb) for eb in earned_badges],
        ensure_ascii=False,
        indent=2,
    )
