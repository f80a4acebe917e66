"""
Main CLI application using Typer

Entry point for the n8n-backup CLI.
"""

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape

from n8n_backup.cli import utils
from n8n_backup.cli.utils import console
from n8n_backup.errors import BackupError, ConfigError
from n8n_backup.helpers.config import Config, create_default_config
from n8n_backup.helpers.constants import VERSION
from n8n_backup.helpers.docker_runtime import DockerRuntime
from n8n_backup.helpers.logging import log_manager
from n8n_backup.helpers.settings import BackupSettings
from n8n_backup.helpers.system_utils import SystemUtils
from n8n_backup.types import BackupRunReport, ContainerState, ExportCategory

# Create Typer app
app = typer.Typer(
    name="n8n-backup",
    help="n8n-backup - export n8n workflows and credentials from Docker containers",
    add_completion=False,
)


# -------------------------
# Application Context
# -------------------------

@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to configuration file."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."
    ),
    debug: bool = typer.Option(False, "--debug", help="Show tracebacks on errors."),
):
    """
    n8n-backup - Docker export tool for n8n

    Use 'n8n-backup new-config' to create a configuration file.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["log_level"] = log_level
    ctx.obj["debug"] = debug

    try:
        log_manager.configure(level=log_level or "INFO")
    except ValueError as e:
        utils.print_error(str(e))
        raise typer.Exit(1)


# -------------------------
# Helper Functions
# -------------------------

def ensure_config(ctx: typer.Context) -> Config:
    """Load the configuration once per invocation."""
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = Config(ctx.obj.get("config_path"))
        except ConfigError as e:
            utils.print_error(str(e))
            raise typer.Exit(1)
    return ctx.obj["config"]


def ensure_settings(ctx: typer.Context) -> BackupSettings:
    """Validated settings; the config file's log level applies unless --log-level was given."""
    cfg = ensure_config(ctx)
    try:
        settings = cfg.to_settings()
    except ConfigError as e:
        utils.print_error(str(e))
        raise typer.Exit(1)

    if not ctx.obj.get("log_level"):
        log_manager.configure(level=settings.log_level)
    return settings


def prompt_password() -> str:
    return utils.prompt_secret("Enter password for backup encryption")


def print_run_summary(report: BackupRunReport) -> None:
    """Final human-readable summary of a run."""
    utils.print_separator()
    table = utils.create_table(
        "Backup Summary",
        [
            ("Property", "cyan", 34),
            ("Value", "white", None),
        ]
    )
    table.add_row("Containers processed", str(report.total))
    table.add_row("Containers backed up successfully", str(report.success_count))
    table.add_row("Overall status", report.overall_status.value)
    if report.archive is not None:
        table.add_row("Backup file", str(report.archive.path))
        table.add_row("Encrypted", "yes" if report.archive.encrypted else "no")
        table.add_row("Backup file size", SystemUtils.format_bytes(report.archive.size_bytes))
    else:
        table.add_row("Backup file", "not created")
    table.add_row("Log file", str(report.log_file))
    console.print(table)

    for error in report.errors:
        utils.print_warning(error)


# -------------------------
# Commands
# -------------------------

@app.command()
def run(
    ctx: typer.Context,
    containers: Optional[List[str]] = typer.Argument(
        None, help="Additional container names to back up."
    ),
):
    """
    Export workflows and credentials and pack them into a ZIP archive.

    Containers come from the configured list, auto-detection and the
    names given here.
    """
    from n8n_backup.cores.backup_manager import BackupManager

    settings = ensure_settings(ctx)
    manager = BackupManager(settings, password_prompt=prompt_password)

    try:
        report = manager.run(containers or [])
    except BackupError as e:
        utils.print_error(f"Backup failed: {e}")
        raise typer.Exit(1)

    if not report.containers:
        utils.print_error("No n8n containers found running")
        utils.print_info(f"Log file: {report.log_file}")
        raise typer.Exit(1)

    print_run_summary(report)
    raise typer.Exit(report.exit_code)


@app.command(name="list")
def list_containers(
    ctx: typer.Context,
    containers: Optional[List[str]] = typer.Argument(
        None, help="Additional container names to include."
    ),
):
    """Show the containers a run would back up."""
    from n8n_backup.cores.container_selector import ContainerSelector

    settings = ensure_settings(ctx)
    runtime = DockerRuntime(timeout=settings.docker.timeout)

    try:
        selected = ContainerSelector(runtime).resolve(
            settings.containers.manual,
            settings.containers.auto_detect,
            settings.containers.name_filter,
            containers or [],
        )
    except BackupError as e:
        utils.print_error(str(e))
        raise typer.Exit(1)

    if not selected:
        utils.print_warning("No n8n containers found")
        raise typer.Exit(1)

    table = utils.create_table(
        "Containers",
        [
            ("Name", "cyan", 30),
            ("State", "white", 12),
            ("Exports", "green", 30),
        ]
    )
    categories = ", ".join(c.value for c in ExportCategory)
    for name in selected:
        state = runtime.container_state(name)
        marker = "🟢 running" if state is ContainerState.RUNNING else f"🔴 {state.value}"
        table.add_row(name, marker, categories if state is ContainerState.RUNNING else "-")
    console.print(table)
    utils.print_info(f"Total: {len(selected)} container(s)")


@app.command()
def version():
    """Show version information"""
    console.print(f"[cyan]n8n-backup[/cyan] v{VERSION}")


@app.command(name="show-config")
def show_config(ctx: typer.Context):
    """Show the configuration with secrets masked."""
    cfg = ensure_config(ctx)
    utils.print_header("n8n-backup Configuration", str(cfg.config_file))
    for section, options in cfg.masked_items().items():
        console.print(f"\n[bold]\\[{escape(section)}][/bold]")
        for option, value in options.items():
            console.print(f"  {escape(option)} = {escape(value)}")

    problems = cfg.validate()
    if problems:
        utils.print_separator()
        for problem in problems:
            utils.print_warning(problem)
        raise typer.Exit(1)


@app.command(name="new-config")
def new_config(
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Where to write the file."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
):
    """Create a configuration file from the default template."""
    if path is not None and path.exists() and not force:
        utils.print_warning(f"Configuration already exists: {path} (use --force to overwrite)")
        raise typer.Exit(1)
    try:
        created = create_default_config(path, force=force)
    except (ConfigError, OSError) as e:
        utils.print_error(f"Could not create configuration: {e}")
        raise typer.Exit(1)
    utils.print_success(f"Configuration created: {created}")
    utils.print_info("Edit [encryption], [email] and [webhook] before the first run")


def cli_main():
    """
    Entry point for CLI

    This function is called by the console script entry point.
    """
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if "--debug" in sys.argv:
            raise
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
