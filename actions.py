"""Loggable actions: point table, age groups and contextual multipliers."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import clock
import config
from models import Action, AgeGroup, Pet


@dataclass(frozen=True)
class ActionDef:
    id: int
    text: str
    points: int
    icon: str
    category: str
    age_group: Optional[AgeGroup] = None   # None = every age


@dataclass(frozen=True)
class Multiplier:
    name: str
    factor: float
    description: str


BASE_ACTIONS: List[ActionDef] = [
    ActionDef(1, "Pipi dehors", 5, "✅", "propreté"),
    ActionDef(2, "Accident dedans", -3, "❌", "propreté"),
    ActionDef(3, "Sage en promenade", 8, "🚶", "comportement"),
    ActionDef(4, "Tire en laisse", -2, "➰", "comportement"),
    ActionDef(5, "Obéit aux ordres", 10, "👂", "éducation"),
    ActionDef(6, "Socialise bien", 6, "🐕‍🦺", "social"),
]

# Puppies (0-12 months): house training and socialisation
CHIOT_ACTIONS: List[ActionDef] = [
    ActionDef(101, "Pipi/caca dehors", 5, "✅", "propreté", AgeGroup.CHIOT),
    ActionDef(102, "Demande pour sortir", 8, "🚪", "propreté", AgeGroup.CHIOT),
    ActionDef(103, "Nuit propre complète", 10, "🌙", "propreté", AgeGroup.CHIOT),
    ActionDef(104, "Accident dedans", -1, "❌", "propreté", AgeGroup.CHIOT),
    ActionDef(105, "Rencontre nouveau chien calmement", 6, "🐕", "social", AgeGroup.CHIOT),
    ActionDef(106, "Rencontre nouvel humain", 4, "👋", "social", AgeGroup.CHIOT),
    ActionDef(107, "Découverte nouveau lieu", 8, "🗺️", "social", AgeGroup.CHIOT),
    ActionDef(108, "Première fois transport", 10, "🚗", "social", AgeGroup.CHIOT),
    ActionDef(109, "Reste calme bruits forts", 12, "🔊", "social", AgeGroup.CHIOT),
    ActionDef(110, "Répond à son nom", 3, "📢", "éducation", AgeGroup.CHIOT),
    ActionDef(111, "Assis sur commande", 4, "⬇️", "éducation", AgeGroup.CHIOT),
    ActionDef(112, "Reste/attendre", 5, "✋", "éducation", AgeGroup.CHIOT),
    ActionDef(113, "Marche en laisse 5 min", 6, "🚶‍♂️", "éducation", AgeGroup.CHIOT),
    ActionDef(114, "Rappel réussi", 8, "↩️", "éducation", AgeGroup.CHIOT),
    ActionDef(115, "Mordille/détruit", -2, "🦷", "comportement", AgeGroup.CHIOT),
    ActionDef(116, "Aboie excessivement", -2, "🔊", "comportement", AgeGroup.CHIOT),
]

# Adults (1-7 years): obedience and performance
ADULTE_ACTIONS: List[ActionDef] = [
    ActionDef(201, "Rappel immédiat", 4, "⚡", "comportement", AgeGroup.ADULTE),
    ActionDef(202, "Marche parfaite en laisse", 3, "🎯", "comportement", AgeGroup.ADULTE),
    ActionDef(203, "Reste calme visites", 4, "🏠", "comportement", AgeGroup.ADULTE),
    ActionDef(204, "Ordres complexes", 6, "🧠", "comportement", AgeGroup.ADULTE),
    ActionDef(205, "Ignore distractions", 5, "🎯", "comportement", AgeGroup.ADULTE),
    ActionDef(206, "Jeu équilibré autres chiens", 4, "⚖️", "social", AgeGroup.ADULTE),
    ActionDef(207, "Protège/aide faible", 8, "🛡️", "social", AgeGroup.ADULTE),
    ActionDef(208, "Calme avec enfants", 5, "👶", "social", AgeGroup.ADULTE),
    ActionDef(209, "Comportement exemplaire public", 6, "⭐", "social", AgeGroup.ADULTE),
    ActionDef(210, "Nouveau trick maîtrisé", 10, "🎪", "éducation", AgeGroup.ADULTE),
    ActionDef(211, "Amélioration comportement", 8, "📈", "éducation", AgeGroup.ADULTE),
    ActionDef(212, "Aide à l'éducation autre chien", 12, "👨‍🏫", "éducation", AgeGroup.ADULTE),
    ActionDef(213, "Désobéissance", -3, "🚫", "comportement", AgeGroup.ADULTE),
    ActionDef(214, "Agressivité", -8, "⚠️", "comportement", AgeGroup.ADULTE),
    ActionDef(215, "Destruction volontaire", -4, "💥", "comportement", AgeGroup.ADULTE),
    ActionDef(216, "Fugue", -6, "🏃‍♂️", "comportement", AgeGroup.ADULTE),
]

# Seniors (7+ years): comfort and wisdom
SENIOR_ACTIONS: List[ActionDef] = [
    ActionDef(301, "Accepte nouveaux soins", 6, "💊", "comportement", AgeGroup.SENIOR),
    ActionDef(302, "Reste actif malgré âge", 5, "💪", "comportement", AgeGroup.SENIOR),
    ActionDef(303, "Surmonte douleur/gêne", 8, "🦴", "comportement", AgeGroup.SENIOR),
    ActionDef(304, "S'adapte aux changements", 7, "🔄", "comportement", AgeGroup.SENIOR),
    ActionDef(305, "Calme avec chiots énervés", 6, "🧘‍♂️", "comportement", AgeGroup.SENIOR),
    ActionDef(306, "Guide/rassure autres chiens", 8, "🧭", "comportement", AgeGroup.SENIOR),
    ActionDef(307, "Comportement zen", 4, "☯️", "comportement", AgeGroup.SENIOR),
    ActionDef(308, "Accepte limitations", 5, "🤝", "comportement", AgeGroup.SENIOR),
    ActionDef(309, "Prend médicaments sans souci", 4, "💊", "comportement", AgeGroup.SENIOR),
    ActionDef(310, "Reste propre malgré âge", 6, "✨", "comportement", AgeGroup.SENIOR),
    ActionDef(311, "Garde appétit/joie", 5, "😊", "comportement", AgeGroup.SENIOR),
    ActionDef(312, "Journée particulièrement active", 10, "🌟", "bonus", AgeGroup.SENIOR),
    ActionDef(313, "Moment de tendresse exceptionnel", 8, "💝", "bonus", AgeGroup.SENIOR),
    ActionDef(314, "Accidents liés à l'âge", -1, "💧", "propreté", AgeGroup.SENIOR),
    ActionDef(315, "Grognements douleur", 0, "😣", "comportement", AgeGroup.SENIOR),
]

ALL_ACTIONS: List[ActionDef] = BASE_ACTIONS + CHIOT_ACTIONS + ADULTE_ACTIONS + SENIOR_ACTIONS

_ACTIONS_BY_ID: Dict[int, ActionDef] = {a.id: a for a in ALL_ACTIONS}

_ACTIONS_BY_AGE: Dict[AgeGroup, List[ActionDef]] = {
    AgeGroup.CHIOT: CHIOT_ACTIONS,
    AgeGroup.ADULTE: ADULTE_ACTIONS,
    AgeGroup.SENIOR: SENIOR_ACTIONS,
}

MULTIPLIERS: List[Multiplier] = [
    Multiplier("Premier essai", 1.5, "Première fois que le chien réalise cette action"),
    Multiplier("Progrès constant", 1.2, "Action répétée avec succès pendant 3 jours ou plus"),
    Multiplier("Après maladie/stress", 1.3, "Action réalisée après une période difficile"),
    Multiplier("En public/témoins", 1.1, "Action réalisée devant des témoins"),
]

_MULTIPLIERS_BY_NAME: Dict[str, Multiplier] = {m.name: m for m in MULTIPLIERS}


def get_age_group(age_in_months: int) -> AgeGroup:
    if age_in_months <= config.CHIOT_MAX_MONTHS:
        return AgeGroup.CHIOT
    if age_in_months <= config.ADULTE_MAX_MONTHS:
        return AgeGroup.ADULTE
    return AgeGroup.SENIOR


def get_actions_by_age(age_group: AgeGroup) -> List[ActionDef]:
    """Base actions plus the ones specific to `age_group`."""
    return BASE_ACTIONS + _ACTIONS_BY_AGE.get(age_group, [])


def get_action(action_id: int) -> Optional[ActionDef]:
    return _ACTIONS_BY_ID.get(action_id)


def calculate_points(base_points: int, multiplier_names: Iterable[str] = ()) -> int:
    """Apply the named multipliers to `base_points`, rounding half up.

    Unknown multiplier names are ignored.
    """
    final_points = float(base_points)
    for name in multiplier_names:
        multiplier = _MULTIPLIERS_BY_NAME.get(name)
        if multiplier:
            final_points *= multiplier.factor
    return math.floor(final_points + 0.5)


def build_action(
    pet: Pet,
    action_def: ActionDef,
    multiplier_names: Iterable[str] = (),
    now: Optional[datetime] = None,
) -> Action:
    """Create the log entry for `pet` performing `action_def`."""
    now = now or clock.now()
    return Action(
        pet_id=pet.id,
        action_id=action_def.id,
        points=calculate_points(action_def.points, multiplier_names),
        timestamp=now.isoformat(),
        action_text=action_def.text,
    )
