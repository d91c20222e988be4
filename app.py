#!/usr/bin/env python3
"""Pet of the Day badge sandbox: entry point and menu system.

Loads a snapshot (pets, action log, earned badges), then lets you log
actions and watch badges unlock. Changes stay in memory.
"""

import logging
import sys
from typing import List, Optional

from rich.logging import RichHandler

import actions as action_catalog
import config
import display
from badges import BADGE_DEFINITIONS
from engine import BadgeEngine, BadgeFilter
from models import Action, Badge, EarnedBadge, Pet, UnknownRequirement
from snapshot import Snapshot, SnapshotError, dump_earned_badges, load_snapshot


class Session:
    """In-memory copy of the snapshot that the menus append to."""

    def __init__(self, snapshot: Snapshot):
        self.pets: List[Pet] = list(snapshot.pets)
        self.actions: List[Action] = list(snapshot.actions)
        self.earned_badges: List[EarnedBadge] = list(snapshot.earned_badges)
        self.catalog: List[Badge] = list(snapshot.badges or BADGE_DEFINITIONS)
        self.logged_count = 0

    def engine(self) -> BadgeEngine:
        return BadgeEngine(self.earned_badges, self.actions, self.catalog)

    def log_action(self, action: Action, pet: Pet) -> List[EarnedBadge]:
        """Append `action` and record any badge it unlocks."""
        self.actions.append(action)
        self.logged_count += 1
        new_badges = self.engine().detect_new_badges(pet, triggering_action=action)
        self.earned_badges.extend(new_badges)
        return new_badges


def configure_logging() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=display.console, rich_tracebacks=True)],
    )


def select_pet(session: Session) -> Optional[Pet]:
    if not session.pets:
        display.show_error("The snapshot contains no pets.")
        return None
    options = [
        f"{p.name} ({p.age_in_months} months, {action_catalog.get_age_group(p.age_in_months).value})"
        for p in session.pets
    ]
    choice = display.show_menu("Select Pet", options)
    return session.pets[choice - 1]


def view_progress(session: Session, pet: Pet) -> None:
    filters = list(BadgeFilter)
    choice = display.show_menu("Show", [f.value.title() for f in filters])
    engine = session.engine()
    badges = engine.filter_badges(pet, filters[choice - 1])
    if not badges:
        display.show_info("No badges match this filter.")
        return
    earned_ids = {eb.badge_id for eb in engine.get_earned_badges(pet.id)}
    display.show_badge_progress(pet, badges, engine.get_all_progress(pet), earned_ids)


def choose_multipliers() -> List[str]:
    selected: List[str] = []
    while True:
        options = [
            f"{'(*)' if m.name in selected else '( )'} {m.name} (x{m.factor}) - {m.description}"
            for m in action_catalog.MULTIPLIERS
        ]
        options.append("Done")
        choice = display.show_menu("Multipliers", options)
        if choice == len(options):
            return selected
        name = action_catalog.MULTIPLIERS[choice - 1].name
        if name in selected:
            selected.remove(name)
        else:
            selected.append(name)


def log_action_menu(session: Session, pet: Pet) -> None:
    age_group = action_catalog.get_age_group(pet.age_in_months)
    available = action_catalog.get_actions_by_age(age_group)
    options = [f"{a.icon} {a.text} ({a.points:+d})" for a in available]
    options.append("Cancel")

    choice = display.show_menu(f"Log action for {pet.name}", options)
    if choice == len(options):
        return

    action_def = available[choice - 1]
    multipliers = choose_multipliers() if action_def.points > 0 else []
    action = action_catalog.build_action(pet, action_def, multipliers)
    new_badges = session.log_action(action, pet)

    display.show_success(f"Logged \"{action.action_text}\" ({action.points:+d} pts)")
    if new_badges:
        display.show_new_badges(pet, new_badges, session.catalog)
    else:
        display.show_info("No new badge this time.")


def view_stats(session: Session, pet: Pet) -> None:
    engine = session.engine()
    stats = engine.get_badge_stats(pet.id, engine.get_all_progress(pet))
    display.show_badge_stats(pet, stats, session.catalog)


def main_menu_loop(session: Session, pet: Pet) -> None:
    """Main menu loop."""
    while True:
        display.clear_screen()
        display.show_banner()
        display.show_info(f"Pet: {pet.name} | {pet.age_in_months} months")
        display.console.print()

        options = [
            "View badge progress",
            "Log an action",
            "Badge stats",
            "Export earned badges (JSON)",
            "Switch pet",
            "Exit",
        ]

        choice = display.show_menu("Main Menu", options)

        try:
            if choice == 1:
                view_progress(session, pet)
                display.press_enter_to_continue()

            elif choice == 2:
                log_action_menu(session, pet)
                display.press_enter_to_continue()

            elif choice == 3:
                view_stats(session, pet)
                display.press_enter_to_continue()

            elif choice == 4:
                display.console.print(dump_earned_badges(session.earned_badges), markup=False)
                display.press_enter_to_continue()

            elif choice == 5:
                new_pet = select_pet(session)
                if new_pet:
                    pet = new_pet

            elif choice == 6:
                if session.logged_count and not display.confirm(
                    f"Discard the {session.logged_count} action(s) logged this session?"
                ):
                    continue
                display.show_info("Goodbye!")
                break

        except KeyboardInterrupt:
            display.console.print("\n")
            display.show_info("Returning to main menu...")
            continue


def main() -> None:
    """Entry point."""
    configure_logging()
    display.clear_screen()
    display.show_banner()

    path = sys.argv[1] if len(sys.argv) > 1 else config.SNAPSHOT_PATH
    try:
        session = Session(load_snapshot(path))
    except SnapshotError as e:
        display.show_error(str(e))
        sys.exit(1)

    unknown = [b.name for b in session.catalog if isinstance(b.requirement, UnknownRequirement)]
    if unknown:
        display.show_warning(f"These badges cannot be evaluated by this version: {', '.join(unknown)}")

    try:
        pet = select_pet(session)
        if not pet:
            sys.exit(1)
        main_menu_loop(session, pet)
    except KeyboardInterrupt:
        display.console.print("\n")
        display.show_info("Goodbye!")


if __name__ == "__main__":
    main()
