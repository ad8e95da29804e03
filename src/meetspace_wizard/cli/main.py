"""CLI application for the MeetSpace event wizard."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from meetspace_wizard.core.config import Config
from meetspace_wizard.core.exceptions import WizardError
from meetspace_wizard.drafts.storage import FileDraftStore, MemoryDraftStore
from meetspace_wizard.models.event import EventDraft
from meetspace_wizard.models.results import Outcome
from meetspace_wizard.services.base import EventCreator
from meetspace_wizard.services.creators import HttpEventCreator, OutboxEventCreator
from meetspace_wizard.state_machine.checkpoint import DraftPersistence
from meetspace_wizard.state_machine.machine import EventWizard
from meetspace_wizard.state_machine.orchestrator import StepValidator
from meetspace_wizard.state_machine.payload import assemble_payload
from meetspace_wizard.state_machine.steps import STEP_TABLE, get_step
from meetspace_wizard.validation.fields import validate_record
from meetspace_wizard.validation.rules import RuleContext

app = typer.Typer(
    name="meetspace-wizard",
    help="MeetSpace event wizard - validate, preview and submit event records",
    no_args_is_help=True,
)
draft_app = typer.Typer(help="Inspect or discard saved wizard drafts", no_args_is_help=True)
app.add_typer(draft_app, name="draft")

console = Console()


def get_config() -> Config:
    """Load and validate configuration from the environment."""
    try:
        config = Config.from_env()
        config.validate()
        return config
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


def load_draft(path: Path) -> EventDraft:
    """Read an event record from a JSON file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read {path}:[/red] {e}")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        console.print(f"[red]Cannot read {path}:[/red] expected a JSON object")
        raise typer.Exit(1)
    return EventDraft.from_dict(data)


def get_creator(config: Config, outbox: Optional[Path]) -> EventCreator:
    """Pick the create operation: the events API when configured, else an outbox."""
    if outbox is None and config.api_base_url:
        return HttpEventCreator.from_config(config)
    return OutboxEventCreator(outbox or Path("outbox"))


def print_result(result: dict, title: str = "Result", style: str = "green") -> None:
    """Print result as formatted JSON."""
    console.print(Panel(
        json.dumps(result, indent=2, default=str),
        title=title,
        border_style=style,
    ))


def print_errors(errors: dict[str, str]) -> None:
    table = Table(title="Validation errors")
    table.add_column("Field", style="cyan")
    table.add_column("Message", style="red")
    for key, message in errors.items():
        table.add_row(key, message)
    console.print(table)


@app.command("steps")
def show_steps() -> None:
    """List the wizard steps and the fields each one owns."""
    table = Table(title="Event Wizard Steps")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Fields", style="green")

    for index, definition in enumerate(STEP_TABLE, start=1):
        table.add_row(
            str(index),
            definition.id.value,
            definition.display_name,
            ", ".join(definition.owned_fields) or "-",
        )

    console.print(table)


@app.command("validate")
def validate(
    file: Path = typer.Argument(..., help="JSON file with the event record"),
    step: Optional[str] = typer.Option(None, "--step", "-s", help="Validate only this step"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Validate an event record, whole or one step at a time."""
    config = get_config()
    draft = load_draft(file)
    context = RuleContext.from_config(config)

    if step:
        try:
            check = StepValidator(context=context).check_step(get_step(step), draft)
        except WizardError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        errors: dict[str, Any] = check.errors
        label = f"Step '{check.step.value}'"
    else:
        errors = dict(validate_record(draft, context))
        label = "Event record"

    if json_output:
        console.print(json.dumps({"valid": not errors, "errors": errors}, indent=2))
    elif errors:
        print_errors(errors)
    else:
        console.print(f"[green]{label} is valid[/green]")

    if errors:
        raise typer.Exit(1)


@app.command("payload")
def show_payload(
    file: Path = typer.Argument(..., help="JSON file with the event record"),
) -> None:
    """Show the submission payload an event record would produce."""
    config = get_config()
    payload = assemble_payload(load_draft(file), config)
    print_result(payload.describe(), "Submission Payload")


@draft_app.command("show")
def draft_show(
    user: str = typer.Option(..., "--user", "-u", help="User id owning the draft"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show a user's saved draft."""
    config = get_config()
    try:
        snapshot = DraftPersistence(FileDraftStore(config.draft_dir), user).load()
    except WizardError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if snapshot is None:
        console.print(f"[yellow]No saved draft for {user}[/yellow]")
        raise typer.Exit(1)

    if json_output:
        console.print(json.dumps(snapshot.to_dict(), indent=2, default=str))
        return

    console.print(f"[green]Draft:[/green] {snapshot}")
    console.print(f"[dim]Last modified: {snapshot.last_modified.isoformat()}[/dim]")
    print_result(snapshot.data, "Saved Record")


@draft_app.command("clear")
def draft_clear(
    user: str = typer.Option(..., "--user", "-u", help="User id owning the draft"),
) -> None:
    """Delete a user's saved draft."""
    config = get_config()
    try:
        DraftPersistence(FileDraftStore(config.draft_dir), user).clear()
    except WizardError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]Draft cleared for {user}[/green]")


@app.command("submit")
def submit(
    file: Path = typer.Argument(..., help="JSON file with the event record"),
    user: str = typer.Option(..., "--user", "-u", help="Submitting user id"),
    outbox: Optional[Path] = typer.Option(
        None,
        "--outbox",
        "-o",
        help="Directory receiving submitted events (default: events API if configured, else ./outbox)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Validate an event record and submit it."""
    config = get_config()
    draft = load_draft(file)

    # The file is the whole record; the user's saved draft is left alone
    try:
        wizard = EventWizard(
            user_id=user,
            config=config,
            store=MemoryDraftStore(),
            creator=get_creator(config, outbox),
        )
        wizard.mount()
        wizard.draft = draft
        result = wizard.submit()
    except WizardError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        console.print(json.dumps(
            {**result.to_dict(), "errors": dict(wizard.errors)}, indent=2, default=str
        ))
    elif result.outcome is Outcome.SUBMITTED:
        print_result(result.to_dict(), "Event Submitted")
    else:
        console.print(f"[red]{result.message}[/red] (step: {result.step})")
        if wizard.errors:
            print_errors(dict(wizard.errors))

    if result.outcome is not Outcome.SUBMITTED:
        raise typer.Exit(1)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from meetspace_wizard import __version__
    console.print(f"MeetSpace Wizard v{__version__}")


def main() -> None:
    """Main entry point."""
    config = Config.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app()


if __name__ == "__main__":
    main()
