"""
Scenario commands.
"""

from pathlib import Path
from typing import Optional

import click

from clicktoplay.cli.utils import async_command, display_table, handle_error, pass_context
from clicktoplay.core.errors import ClickToPlayError
from clicktoplay.core.wait import WaitSettings


@click.group(name="scenario")
@click.pass_context
def scenario_group(ctx):
    """List and run click-to-play scenarios."""
    pass


@scenario_group.command("list")
@pass_context
@handle_error
def list_scenarios(ctx):
    """List available scenarios."""
    scenarios = ctx.scenario_manager.list_scenarios()

    if not scenarios:
        click.echo("No scenarios found.")
        return

    table_data = []
    for sc in scenarios:
        description = sc["description"]
        if len(description) > 50:
            description = description[:47] + "..."
        table_data.append([sc["name"], description, sc["step_count"], sc["source"]])

    display_table(table_data, ["Name", "Description", "Steps", "Source"])

    for path, error in ctx.scenario_manager.load_errors.items():
        click.secho(f"Skipped {path}: {error}", fg="yellow", err=True)


@scenario_group.command("show")
@click.argument("name")
@pass_context
@handle_error
def show_scenario(ctx, name: str):
    """Show the steps of a scenario."""
    scenario = ctx.scenario_manager.resolve(name)

    click.secho(f"{scenario.name}", bold=True)
    if scenario.description:
        click.echo(scenario.description)

    table_data = [
        [i + 1, step.action.value, step.label]
        for i, step in enumerate(scenario.steps)
    ]
    display_table(table_data, ["#", "Action", "Step"])


@scenario_group.command("run")
@click.argument("name")
@click.option("--click-to-play/--no-click-to-play", default=None,
              help="Override the configured click-to-play flag")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True),
              help="Seconds to wait for each expectation")
@click.option("--report", "report_path", type=click.Path(dir_okay=False),
              help="Write a JSON report to this file")
@pass_context
@handle_error
@async_command
async def run_scenario(ctx, name: str, click_to_play: Optional[bool],
                       timeout: Optional[float], report_path: Optional[str]):
    """Run a scenario by name or from a YAML/JSON file."""
    scenario = ctx.scenario_manager.resolve(name)
    session = ctx.new_session(click_to_play=click_to_play)

    wait_settings = ctx.settings.wait
    if timeout is not None:
        wait_settings = WaitSettings.model_validate({**wait_settings.model_dump(), "timeout": timeout})

    click.echo(f"Running scenario {scenario.name}...")

    failure = None
    try:
        await scenario.run(session, wait_settings)
    except ClickToPlayError as e:
        failure = e

    for i, step in enumerate(scenario.steps):
        status_color = {
            "completed": "green",
            "failed": "red",
            "pending": "white"
        }.get(step.status.value, "white")
        click.secho(f"{i + 1:>3}. [{step.status.value}] {step.label}", fg=status_color)
        if step.error:
            click.secho(f"     Error: {step.error.get('message', 'Unknown error')}", fg="red")

    if report_path:
        scenario.save_report(Path(report_path))
        click.echo(f"Report written to {report_path}")

    if failure:
        click.secho(f"\nScenario {scenario.name} failed: {failure}", fg="red", err=True)
        raise click.exceptions.Exit(1)

    click.secho(f"\nScenario {scenario.name} passed", fg="green")
