import os
from typing import Dict, List, Optional

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from badges import get_badge
from models import Badge, BadgeProgress, BadgeStats, EarnedBadge, Pet, Rarity

custom_theme = Theme({
    "correct": "bold green",
    "wrong": "bold red",
    "info": "bold cyan",
    "header": "bold magenta",
    "needs_work": "bold yellow",
    "common": "grey62",
    "rare": "bold blue",
    "epic": "bold magenta",
    "legendary": "bold yellow",
})

console = Console(theme=custom_theme)

RARITY_BORDERS = {
    Rarity.COMMON: "grey62",
    Rarity.RARE: "blue",
    Rarity.EPIC: "magenta",
    Rarity.LEGENDARY: "yellow",
}


# ---------------------------------------------------------------------------
# General UI
# ---------------------------------------------------------------------------

def clear_screen() -> None:
    os.system("cls" if os.name == "nt" else "clear")


def show_banner() -> None:
    banner = Text()
    banner.append("  Pet of the Day  ", style="bold white on blue")
    console.print()
    console.print(Align.center(banner))
    console.print(Align.center(Text("Badges & achievements sandbox", style="dim")))
    console.print()


def show_menu(title: str, options: List[str]) -> int:
    """Show a numbered menu and return 1-indexed selection."""
    console.print(Rule(title, style="header"))
    console.print()
    for i, option in enumerate(options, 1):
        console.print(f"  [bold cyan]{i}.[/bold cyan] {option}")
    console.print()

    while True:
        try:
            raw = console.input("[bold]Choose an option: [/bold]").strip()
            choice = int(raw)
            if 1 <= choice <= len(options):
                return choice
            console.print(f"  Please enter a number between 1 and {len(options)}.", style="wrong")
        except (ValueError, EOFError):
            console.print(f"  Please enter a number between 1 and {len(options)}.", style="wrong")


def show_error(message: str) -> None:
    console.print(f"  [wrong]Error:[/wrong] {message}")


def show_success(message: str) -> None:
    console.print(f"  [correct]{message}[/correct]")


def show_info(message: str) -> None:
    console.print(f"  [info]{message}[/info]")


def show_warning(message: str) -> None:
    console.print(f"  [needs_work]Warning:[/needs_work] {message}")


def confirm(prompt: str) -> bool:
    while True:
        raw = console.input(f"  {prompt} [bold](y/n)[/bold]: ").strip().lower()
        if raw in ("y", "yes"):
            return True
        if raw in ("n", "no"):
            return False
        console.print("  Please enter y or n.", style="dim")


def press_enter_to_continue() -> None:
    try:
        console.input("  [dim]Press Enter to continue...[/dim]")
    except EOFError:
        pass


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------

def progress_bar(percentage: float, width: int = 20) -> str:
    filled = int(round(width * max(0.0, min(100.0, percentage)) / 100))
    return "█" * filled + "░" * (width - filled)


def show_badge_progress(
    pet: Pet,
    badges: List[Badge],
    progress: List[BadgeProgress],
    earned_ids: Optional[set] = None,
) -> None:
    """Table of badges with their progress bars and next milestones."""
    earned_ids = earned_ids or set()
    by_badge: Dict[str, BadgeProgress] = {p.badge_id: p for p in progress}

    table = Table(title=f"Badges - {pet.name}", border_style="blue")
    table.add_column("", no_wrap=True)
    table.add_column("Badge", style="bold")
    table.add_column("Rarity")
    table.add_column("Progress", no_wrap=True)
    table.add_column("Next", style="dim")

    for badge in badges:
        p = by_badge.get(badge.id)
        rarity = badge.rarity.value
        if badge.id in earned_ids:
            status = "[correct]Earned[/correct]"
            hint = ""
        elif p is None:
            status = ""
            hint = ""
        else:
            status = f"{progress_bar(p.percentage)} {p.current_progress}/{p.max_progress}"
            hint = p.next_milestone or ""
        table.add_row(badge.icon, badge.name, f"[{rarity}]{rarity}[/{rarity}]", status, hint)

    console.print(table)
    console.print()


def show_badge_celebration(pet: Pet, badge: Badge, earned: EarnedBadge) -> None:
    body = f"[bold]{badge.icon}  {badge.name}[/bold]\n\n{badge.description}"
    if earned.triggered_by and earned.triggered_by.context:
        body += f"\n\n[dim]Unlocked by: {earned.triggered_by.context}[/dim]"
    console.print()
    console.print(Panel(
        body,
        title=f"{pet.name} earned a {badge.rarity.value} badge!",
        border_style=RARITY_BORDERS.get(badge.rarity, "green"),
        padding=(1, 2),
    ))
    console.print()


def show_new_badges(pet: Pet, new_badges: List[EarnedBadge], catalog: List[Badge]) -> None:
    by_id = {b.id: b for b in catalog}
    for earned in new_badges:
        badge = by_id.get(earned.badge_id) or get_badge(earned.badge_id)
        if badge:
            show_badge_celebration(pet, badge, earned)


def show_badge_stats(pet: Pet, stats: BadgeStats, catalog: List[Badge]) -> None:
    console.print()
    console.print(Rule(f"[bold]Badge Stats - {pet.name}[/bold]", style="header"))
    console.print(
        f"  Earned: [bold]{stats.total_earned}[/bold]/{stats.total_possible} "
        f"({stats.percentage}%)  |  In progress: [bold]{stats.in_progress}[/bold]"
    )
    console.print()

    table = Table(border_style="dim", show_header=True)
    table.add_column("Rarity", style="bold")
    table.add_column("Earned", justify="right")
    for rarity, count in stats.by_rarity.items():
        table.add_row(f"[{rarity}]{rarity}[/{rarity}]", str(count))
    console.print(table)

    categories = [f"{name}: {count}" for name, count in stats.by_category.items() if count]
    if categories:
        console.print(f"  Categories: {', '.join(categories)}")

    if stats.recent:
        by_id = {b.id: b for b in catalog}
        console.print()
        console.print("  [bold]Most recent:[/bold]")
        for earned in stats.recent:
            badge = by_id.get(earned.badge_id)
            name = f"{badge.icon} {badge.name}" if badge else earned.badge_id
            console.print(f"  - {name} [dim]({earned.earned_at[:10]})[/dim]")
    console.print()
