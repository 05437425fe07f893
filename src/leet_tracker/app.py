"""Interactive CLI application."""
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from leet_tracker.actions import KeyedLoaders, Notifier, ProblemStore, handle_api_call
from leet_tracker.api import ProblemsApi
from leet_tracker.config import configure_logging, settings
from leet_tracker.dashboard import (
    calculate_streak, difficulty_breakdown, due_problems, get_mastery_color,
    get_mastery_label, in_progress_count, mastery_rate, pattern_stats,
    pattern_tags, status_breakdown, upcoming_reviews,
)
from leet_tracker.db import init_db
from leet_tracker.errors import ValidationError
from leet_tracker.importer import export_problems, import_problems
from leet_tracker.models import Difficulty, Problem, ProblemStats, Status
from leet_tracker.pipeline import ALL, SORT_FIELDS, SORT_ORDERS, distinct_patterns
from leet_tracker.preferences import THEMES, Preferences, load_preferences, save_preferences
from leet_tracker.schedule import next_review_date, review_state

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    Status.NEW: "blue",
    Status.FIRST_REVIEW: "yellow",
    Status.SECOND_REVIEW: "dark_orange",
    Status.MASTERED: "green",
}
DIFFICULTY_COLORS = {
    Difficulty.EASY: "green",
    Difficulty.MEDIUM: "yellow",
    Difficulty.HARD: "red",
}


@dataclass
class ViewState:
    """Everything a view needs, passed in rather than held in module globals."""
    store: ProblemStore
    prefs: Preferences
    prefs_db: str
    console: Console

    @property
    def api(self):
        return self.store.api

    @property
    def notifier(self) -> Notifier:
        return self.store.notifier


def format_date(value) -> str:
    if not value:
        return "Not set"
    return f"{value:%b} {value.day}, {value.year}"


def status_badge(status: Status) -> str:
    color = STATUS_COLORS[status]
    return f"[{color}]{status.label}[/{color}]"


def difficulty_badge(difficulty: Difficulty) -> str:
    color = DIFFICULTY_COLORS[difficulty]
    return f"[{color}]{difficulty.label}[/{color}]"


def show_notifications(state: ViewState) -> None:
    for note in state.notifier.drain():
        style = "green" if note.level == "success" else "red"
        state.console.print(f"[{style}]{note.message}[/{style}]")


def show_welcome(state: ViewState):
    state.console.print(Panel(
        "[bold]Coding Interview Practice[/bold]\n[dim]Spaced Review Tracker[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu(state: ViewState):
    state.console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("dashboard", "Review queue + quick stats"),
        ("problems", "Search, filter and sort all problems"),
        ("add", "Track a new problem"),
        ("view", "Problem details and actions"),
        ("analytics", "Progress breakdown"),
        ("export", "Save problems to a file"),
        ("import", "Add problems from a file"),
        ("settings", "Theme and list defaults"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        state.console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def render_problem_table(problems, title: str = "Problems", today: date | None = None) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("#", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Difficulty")
    table.add_column("Status")
    table.add_column("Pattern")
    table.add_column("Attempted")
    table.add_column("Next Review")
    for p in problems:
        state = review_state(p, today)
        due = format_date(next_review_date(p)) if state != "Mastered" else "-"
        if state == "Due":
            due = f"[bold red]{due}[/bold red]"
        table.add_row(
            str(p.id),
            str(p.problem_number),
            p.title,
            difficulty_badge(p.difficulty),
            status_badge(p.status),
            " ".join(pattern_tags(p.pattern)),
            format_date(p.date_attempted),
            due,
        )
    return table


def render_problem_details(problem: Problem, today: date | None = None) -> Panel:
    lines = [
        f"[bold]#{problem.problem_number}[/bold] {problem.title}",
        f"Difficulty: {difficulty_badge(problem.difficulty)}   Status: {status_badge(problem.status)}",
        f"Pattern: {problem.pattern}",
        "",
        f"Attempted:      {format_date(problem.date_attempted)}",
        f"First review:   {format_date(problem.first_review_date)}",
        f"Second review:  {format_date(problem.second_review_date)}",
        f"Final review:   {format_date(problem.final_review_date)}",
        f"Next review:    {format_date(next_review_date(problem))} ({review_state(problem, today)})",
    ]
    if problem.notes:
        lines += ["", f"[dim]Notes:[/dim] {problem.notes}"]
    return Panel("\n".join(lines), title=f"Problem {problem.id}", border_style="cyan")


def parse_list_command(text: str) -> tuple[str, list[str]]:
    parts = text.strip().split()
    if not parts:
        return "", []
    return parts[0].lower(), parts[1:]


def apply_list_command(store: ProblemStore, text: str) -> bool:
    """Apply one problems-view command to the store. Returns False to leave the view."""
    cmd, args = parse_list_command(text)
    value = " ".join(args)
    if cmd in ("", "back", "q"):
        return False
    if cmd == "search":
        store.update_config(search_term=value)
    elif cmd == "difficulty":
        store.update_config(difficulty=ALL if not value else Difficulty.parse(value).label)
    elif cmd == "status":
        store.update_config(status=ALL if not value else Status.parse(value).wire_name)
    elif cmd == "pattern":
        store.update_config(pattern=value or ALL)
    elif cmd == "sort":
        sort_by = args[0] if args else store.config.sort_by
        sort_order = args[1] if len(args) > 1 else store.config.sort_order
        if sort_by not in SORT_FIELDS or sort_order not in SORT_ORDERS:
            raise ValueError(f"Sort by one of {', '.join(SORT_FIELDS)} and asc|desc")
        store.update_config(sort_by=sort_by, sort_order=sort_order)
    elif cmd == "clear":
        store.config = store.config.cleared()
    elif cmd == "next":
        store.update_config(current_page=store.config.current_page + 1)
    elif cmd == "prev":
        store.update_config(current_page=store.config.current_page - 1)
    elif cmd == "page":
        store.update_config(current_page=int(value))
    elif cmd == "delete":
        store.delete(int(value))
    elif cmd == "reviewed":
        store.mark_reviewed(int(value))
    elif cmd == "again":
        store.needs_more_review(int(value))
    else:
        raise ValueError(f"Unknown command: {cmd}")
    return True


def cmd_problems(state: ViewState):
    store = state.store
    while True:
        page = store.page()
        config = store.config
        state.console.print(
            f"\nShowing {page.filtered_count} of {page.total_items} problems"
            f"  [dim](page {page.current_page}/{page.total_pages},"
            f" sort {config.sort_by} {config.sort_order})[/dim]"
        )
        if page.filtered_count == 0:
            state.console.print("[yellow]No problems found. Try adjusting your filters or search term.[/yellow]")
        else:
            state.console.print(render_problem_table(page.items, title="All Problems"))
        state.console.print(
            "[dim]search <text> | difficulty <x> | status <x> | pattern <x> | sort <field> <asc|desc>"
            " | clear | next | prev | page <n> | reviewed <id> | again <id> | delete <id> | back[/dim]"
        )
        patterns = distinct_patterns(store.problems)
        if patterns:
            state.console.print(f"[dim]Patterns: {', '.join(patterns)}[/dim]")
        choice = Prompt.ask("[bold]problems>[/bold]", default="back", console=state.console)
        try:
            keep_going = apply_list_command(store, choice)
        except (ValueError, KeyError) as e:
            state.console.print(f"[red]{e}[/red]")
            continue
        show_notifications(state)
        if not keep_going:
            return


def cmd_dashboard(state: ViewState, today: date | None = None):
    stats = {}
    queue = []
    handle_api_call(
        state.api.get_stats, "load stats", state.notifier,
        on_success=lambda s: stats.update(value=s), announce=False,
    )
    handle_api_call(
        state.api.list_reviews, "load review queue", state.notifier,
        on_success=queue.extend, announce=False,
    )
    show_notifications(state)
    summary = stats.get("value") or ProblemStats.from_problems(state.store.problems, today)

    rate = mastery_rate(summary.total_problems, summary.mastered_count)
    color = get_mastery_color(rate)
    state.console.print(Panel(
        f"You have [bold]{summary.reviews_due_today}[/bold] problems due for review today.",
        title="Welcome Back!", border_style="blue",
    ))
    state.console.print(
        f"  Total: [bold]{summary.total_problems}[/bold]  |  "
        f"Mastered: [bold]{summary.mastered_count}[/bold] [{color}]({rate}%)[/{color}]  |  "
        f"Due Today: [bold]{summary.reviews_due_today}[/bold]  |  "
        f"Streak: [bold]{calculate_streak(state.store.problems, today)}[/bold] days"
    )

    if not queue:
        state.console.print("\n[green]All caught up! No problems due for review today.[/green]")
        return
    for problem in queue:
        state.store.track(problem)
    state.console.print(render_problem_table(queue, title=f"Today's Review Queue ({len(queue)})", today=today))
    while True:
        choice = Prompt.ask(
            "[dim]reviewed <id> | again <id> | back[/dim]", default="back", console=state.console,
        )
        cmd, args = parse_list_command(choice)
        if cmd in ("", "back", "q"):
            return
        try:
            if cmd == "reviewed":
                state.store.mark_reviewed(int(args[0]))
            elif cmd == "again":
                state.store.needs_more_review(int(args[0]))
            else:
                state.console.print(f"[red]Unknown command: {cmd}[/red]")
        except (IndexError, ValueError, KeyError):
            state.console.print("[red]Give the problem ID, e.g. 'reviewed 12'.[/red]")
        show_notifications(state)


def prompt_problem_form(state: ViewState) -> dict:
    console = state.console
    return {
        "problem_number": Prompt.ask("Problem number", console=console),
        "title": Prompt.ask("Title", console=console),
        "difficulty": Prompt.ask(
            "Difficulty", choices=[d.label for d in Difficulty], default="Medium", console=console,
        ),
        "pattern": Prompt.ask("Pattern", console=console),
        "notes": Prompt.ask("Notes", default="", console=console),
    }


def cmd_add(state: ViewState):
    state.console.print("\n[bold]Add New Problem[/bold]")
    form = prompt_problem_form(state)
    try:
        new_id = state.store.create(form)
    except ValidationError as e:
        for name, message in e.errors.items():
            state.console.print(f"  [red]{name}:[/red] {message}")
        return None
    show_notifications(state)
    return new_id


def cmd_view(state: ViewState, problem_id: int, today: date | None = None):
    result = {}
    handle_api_call(
        lambda: state.api.get(problem_id), "load problem", state.notifier,
        on_success=lambda p: result.update(problem=p), announce=False,
    )
    show_notifications(state)
    problem = result.get("problem")
    if problem is None:
        state.console.print(f"[yellow]Problem {problem_id} not found.[/yellow]")
        return
    state.store.track(problem)
    while True:
        problem = state.store.find(problem_id)
        if problem is None:
            return
        state.console.print(render_problem_details(problem, today))
        choice = Prompt.ask(
            "[dim]reviewed | again | notes | delete | back[/dim]", default="back", console=state.console,
        ).strip().lower()
        if choice in ("", "back", "q"):
            return
        if choice == "reviewed":
            state.store.mark_reviewed(problem_id)
        elif choice == "again":
            state.store.needs_more_review(problem_id)
        elif choice == "notes":
            notes = Prompt.ask("Notes", default=problem.notes, console=state.console)
            try:
                state.store.update_notes(problem_id, notes)
            except ValidationError as e:
                state.console.print(f"[red]{e.errors['notes']}[/red]")
        elif choice == "delete":
            if Confirm.ask(f"Delete problem {problem_id}?", console=state.console):
                state.store.delete(problem_id)
        else:
            state.console.print("[red]Unknown command. Try again.[/red]")
        show_notifications(state)


def cmd_analytics(state: ViewState, today: date | None = None):
    problems = state.store.problems
    stats = ProblemStats.from_problems(problems, today)
    rate = mastery_rate(stats.total_problems, stats.mastered_count)
    color = get_mastery_color(rate)
    console = state.console
    console.print(Panel("[bold]Analytics Dashboard[/bold]", border_style="blue"))
    console.print(
        f"\n  Mastery Rate: [{color}]{rate}% {get_mastery_label(rate)}[/{color}]  |  "
        f"In Progress: [bold]{in_progress_count(stats)}[/bold]  |  "
        f"Due Today: [bold]{stats.reviews_due_today}[/bold]\n"
    )

    table = Table(title="Difficulty Breakdown")
    table.add_column("Difficulty")
    table.add_column("Count", justify="right")
    table.add_column("%", justify="right")
    for row in difficulty_breakdown(stats):
        table.add_row(row["difficulty"], str(row["count"]), f"{row['percentage']}%")
    console.print(table)

    table = Table(title="Status Breakdown")
    table.add_column("Status")
    table.add_column("Count", justify="right")
    table.add_column("%", justify="right")
    for row in status_breakdown(stats):
        table.add_row(row["status"], str(row["count"]), f"{row['percentage']}%")
    console.print(table)

    table = Table(title="Patterns")
    table.add_column("Pattern", style="cyan")
    table.add_column("Problems", justify="right")
    table.add_column("Mastered", justify="right")
    table.add_column("Mastery", justify="right")
    for ps in pattern_stats(problems):
        pc = get_mastery_color(ps.mastery_percentage)
        table.add_row(ps.pattern, str(ps.count), str(ps.mastered), f"[{pc}]{ps.mastery_percentage}%[/{pc}]")
    console.print(table)

    upcoming = upcoming_reviews(problems, today)
    if upcoming:
        console.print("\n[bold]Coming up this week:[/bold]")
        for row in upcoming:
            p = row["problem"]
            console.print(f"  {format_date(row['due'])} (in {row['in_days']}d) #{p.problem_number} {p.title}")
    overdue = due_problems(problems, today)
    if overdue:
        console.print(f"\n  [yellow]{len(overdue)} problems waiting for review[/yellow]")


def cmd_export(state: ViewState):
    file_path = Prompt.ask("Export to", default="leet-tracker-export.json", console=state.console)
    result = export_problems(state.store.problems, file_path)
    state.console.print(f"[green]Exported {result['count']} problems to {result['filename']}[/green]")


def cmd_import(state: ViewState):
    file_path = Prompt.ask("File path", console=state.console)
    if not Path(file_path).exists():
        state.console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_problems(state.api, file_path)
    state.console.print(
        f"[green]Imported {result['imported']} problems from {result['filename']}[/green]"
        + (f" [yellow]({result['skipped']} skipped)[/yellow]" if result["skipped"] else "")
    )
    for err in result["errors"]:
        details = ", ".join(f"{k}: {v}" for k, v in err["errors"].items())
        state.console.print(f"  [dim]record {err['record']}:[/dim] {details}")
    state.store.refresh()
    show_notifications(state)


def cmd_settings(state: ViewState):
    prefs = state.prefs
    state.console.print(
        f"\nTheme: [cyan]{prefs.theme}[/cyan]  Sort: [cyan]{prefs.sort_by} {prefs.sort_order}[/cyan]"
        f"  Page size: [cyan]{prefs.page_size}[/cyan]"
    )
    updated = Preferences(
        theme=Prompt.ask("Theme", choices=list(THEMES), default=prefs.theme, console=state.console),
        sort_by=Prompt.ask("Default sort", choices=list(SORT_FIELDS), default=prefs.sort_by, console=state.console),
        sort_order=Prompt.ask("Sort order", choices=list(SORT_ORDERS), default=prefs.sort_order, console=state.console),
        page_size=int(Prompt.ask("Page size", default=str(prefs.page_size), console=state.console)),
    )
    save_preferences(state.prefs_db, updated)
    state.prefs = updated
    state.store.config = state.store.config.with_filters(
        sort_by=updated.sort_by, sort_order=updated.sort_order, page_size=updated.page_size,
    )
    state.console.print("[green]Settings saved.[/green]")


def build_state(prefs_db: str = settings.prefs_db, api=None, console=None) -> ViewState:
    init_db(prefs_db)
    prefs = load_preferences(prefs_db)
    if api is None:
        api = ProblemsApi(settings.api_url, settings.timeout)
    store = ProblemStore(api, Notifier(), KeyedLoaders(), prefs.list_config())
    return ViewState(store=store, prefs=prefs, prefs_db=prefs_db, console=console or Console())


def main():
    state = build_state()
    configure_logging(settings.log_level, state.console)
    show_welcome(state)
    state.store.refresh()
    show_notifications(state)
    console = state.console

    while True:
        show_menu(state)
        choice = Prompt.ask("\n[bold]>[/bold]", default="dashboard", console=console).strip().lower()
        cmd, args = parse_list_command(choice)
        try:
            if cmd == "dashboard":
                cmd_dashboard(state)
            elif cmd == "problems":
                cmd_problems(state)
            elif cmd == "add":
                cmd_add(state)
            elif cmd == "view":
                problem_id = int(args[0]) if args else int(Prompt.ask("Problem ID", console=console))
                cmd_view(state, problem_id)
            elif cmd == "analytics":
                cmd_analytics(state)
            elif cmd == "export":
                cmd_export(state)
            elif cmd == "import":
                cmd_import(state)
            elif cmd == "settings":
                cmd_settings(state)
            elif cmd in ("quit", "exit", "q"):
                console.print("[dim]Keep practising![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.exception("Command %s failed", cmd)
            console.print(f"[red]Error: {e}[/red]")
    state.api.close()


if __name__ == "__main__":
    main()
