"""Command line interface for lectio."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
import typer
from loguru import logger
from pydantic import ValidationError

from .config import AppConfig, load_config
from .config.inspector import check_config, explain_config
from .display import DisplaySettings, render_day
from .errors import LectioError, RetrievalError, UnsupportedDateError
from .extraction import ReadingExtractor
from .liturgy import CalendarResolver, parse_date
from .models import ReadingType
from .remote import UsccbClient
from .retrieval import RefreshSummary, RetrievalCoordinator
from .storage import ReadingStore

DEFAULT_CONFIG_PATH = Path("~/.config/lectio-diei/config.toml")

_sink_ids: list[int] = []


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    explicit_config: bool = False
    verbose: bool = False
    _config: AppConfig | None = None
    _coordinators: list[RetrievalCoordinator] = field(default_factory=list)

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            if self.explicit_config or self.config_path.exists():
                logger.debug("Loading configuration from {}", self.config_path)
                self._config = load_config(AppConfig, self.config_path)
            else:
                logger.debug("No configuration at {}; using defaults", self.config_path)
                self._config = AppConfig()
        return self._config

    def coordinator(self, *, preserve_newlines: bool | None = None) -> RetrievalCoordinator:
        config = _config_or_exit(self)
        retrieval = config.retrieval
        if preserve_newlines is not None:
            retrieval = retrieval.model_copy(update={"preserve_newlines": preserve_newlines})
        try:
            reading_store = ReadingStore(
                config.storage.resolved_path(self.config_path.parent),
                busy_timeout=config.storage.busy_timeout,
            )
        except LectioError as exc:
            logger.error("Cannot open the reading cache: {}", exc)
            _exit(1)
        coordinator = RetrievalCoordinator(
            CalendarResolver.from_config(config.calendar),
            UsccbClient(
                config.remote.base_url,
                connect_timeout=config.remote.connect_timeout,
                read_timeout=config.remote.read_timeout,
                user_agent=config.remote.user_agent,
            ),
            ReadingExtractor(),
            reading_store,
            retrieval,
            retention_count=config.storage.retention_count,
        )
        self._coordinators.append(coordinator)
        return coordinator

    def close(self) -> None:
        while self._coordinators:
            self._coordinators.pop().close()


app = typer.Typer(help="Daily Mass readings from the USCCB, cached locally")
db_app = typer.Typer(help="Inspect and maintain the local reading cache")
app.add_typer(db_app, name="db")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")


def _normalize_format(value: str) -> str:
    return value.lower()


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> NoReturn:
    raise typer.Exit(code)


def _config_or_exit(state: CLIState) -> AppConfig:
    try:
        return state.ensure_config()
    except (FileNotFoundError, ValidationError, ValueError) as exc:
        logger.error("Cannot load configuration {}: {}", state.config_path, exc)
        _exit(2)


def _parse_day(value: str | None) -> date:
    if value is None:
        today = date.today()
        logger.debug("No date specified; using {}", today.isoformat())
        return today
    try:
        return parse_date(value)
    except UnsupportedDateError as exc:
        logger.error("{}", exc)
        _exit(2)


def _fail(exc: RetrievalError) -> NoReturn:
    logger.error("{} [{}]", exc, exc.kind)
    _exit(1)


def _configure_logging(level: str, log_file: Path | None) -> None:
    """Install the CLI's sinks, replacing any installed by a previous invocation."""

    try:
        logger.remove(0)
    except ValueError:
        pass
    while _sink_ids:
        try:
            logger.remove(_sink_ids.pop())
        except ValueError:
            pass
    _sink_ids.append(logger.add(sys.stderr, level=level))
    if log_file is not None:
        _sink_ids.append(logger.add(log_file.expanduser(), level="DEBUG", rotation="1 MB"))


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        envvar="LECTIO_CONFIG",
        help=f"Path to the TOML configuration file [default: {DEFAULT_CONFIG_PATH}]",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Initialise CLI state and logging."""

    config_path = (config or DEFAULT_CONFIG_PATH).expanduser().resolve()
    state = CLIState(config_path=config_path, explicit_config=config is not None, verbose=verbose)
    ctx.obj = state
    ctx.call_on_close(state.close)

    level = "INFO"
    log_file = None
    try:
        loaded = state.ensure_config()
        level = loaded.logging_level.upper()
        log_file = loaded.log_file
    except (FileNotFoundError, ValidationError, ValueError):
        # Reported by the command that needs the configuration.
        pass
    _configure_logging("DEBUG" if verbose else level, log_file)

    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'display' or 'db update'.")
        _exit(0)


@app.command(help="Print the readings for a day (today by default)")
def display(
    ctx: typer.Context,
    day: Optional[str] = typer.Argument(None, help="Date as YYYY-MM-DD or MMDDYY"),
    reading: Optional[list[ReadingType]] = typer.Option(
        None,
        "--reading",
        "-r",
        case_sensitive=False,
        help="Reading to show (repeatable, in order); defaults to display.reading_order",
    ),
    day_only: bool = typer.Option(False, "--day-only", help="Only print the name of the day"),
    original_linebreaks: Optional[bool] = typer.Option(
        None,
        "--original-linebreaks/--wrap",
        help="Keep the source's line breaks instead of wrapping",
    ),
    width: Optional[int] = typer.Option(None, "--width", min=0, help="Wrap width; 0 disables wrapping"),
) -> None:
    state = _get_state(ctx)
    config = _config_or_exit(state)
    target = _parse_day(day)
    settings = DisplaySettings.from_config(
        config.display,
        readings=reading,
        original_linebreaks=original_linebreaks,
        max_width=width,
        day_only=day_only,
    )

    coordinator = state.coordinator(preserve_newlines=settings.original_linebreaks)
    try:
        readings = coordinator.get(target)
        title = coordinator.name(target)
    except RetrievalError as exc:
        _fail(exc)
        return

    typer.echo(render_day(title, readings, settings))


@app.command(help="Show the liturgical identifier of a day")
def resolve(
    ctx: typer.Context,
    day: Optional[str] = typer.Argument(None, help="Date as YYYY-MM-DD or MMDDYY"),
) -> None:
    state = _get_state(ctx)
    config = _config_or_exit(state)
    target = _parse_day(day)
    identifier = CalendarResolver.from_config(config.calendar).resolve(target)
    typer.echo(f"{identifier.key}\t{identifier.describe()}")


@db_app.command("show", help="List cached days")
def db_show(ctx: typer.Context) -> None:
    coordinator = _get_state(ctx).coordinator()
    try:
        days = coordinator.list()
    except RetrievalError as exc:
        _fail(exc)
        return
    for entry in days:
        typer.echo(f"{entry.id} {entry.name or ''}".rstrip())


@db_app.command("count", help="Print the number of cached days")
def db_count(ctx: typer.Context) -> None:
    coordinator = _get_state(ctx).coordinator()
    try:
        typer.echo(coordinator.count())
    except RetrievalError as exc:
        _fail(exc)


@db_app.command("remove", help="Remove days from the cache; prints the number removed")
def db_remove(
    ctx: typer.Context,
    days: list[str] = typer.Argument(..., help="Dates as YYYY-MM-DD or MMDDYY"),
) -> None:
    coordinator = _get_state(ctx).coordinator()
    removed = 0
    for value in days:
        try:
            target = parse_date(value)
        except UnsupportedDateError as exc:
            logger.warning("Skipping '{}': {}", value, exc)
            continue
        try:
            removed += int(coordinator.delete(target))
        except RetrievalError as exc:
            logger.error("Failed to remove {}: {}", exc.identifier, exc)
    typer.echo(removed)


@db_app.command("purge", help="Remove every cached day; prints the number removed")
def db_purge(ctx: typer.Context) -> None:
    coordinator = _get_state(ctx).coordinator()
    try:
        typer.echo(coordinator.purge())
    except RetrievalError as exc:
        _fail(exc)


@db_app.command("clean", help="Keep only the most recently stored days; prints the number removed")
def db_clean(
    ctx: typer.Context,
    retention: Optional[int] = typer.Option(
        None, "--retention", min=0, help="Days to keep (defaults to storage.retention_count)"
    ),
) -> None:
    state = _get_state(ctx)
    config = _config_or_exit(state)
    coordinator = state.coordinator()
    try:
        typer.echo(coordinator.prune(config.storage.retention_count if retention is None else retention))
    except RetrievalError as exc:
        _fail(exc)


@db_app.command("update", help="Fetch the configured window of days; prints the number added")
def db_update(ctx: typer.Context) -> None:
    coordinator = _get_state(ctx).coordinator()
    summary = coordinator.update()
    typer.echo(summary.added)
    _report_failures(summary)


@db_app.command("refresh", help="Fetch the configured window, then clean; prints removed and added counts")
def db_refresh(
    ctx: typer.Context,
    retention: Optional[int] = typer.Option(
        None, "--retention", min=0, help="Days to keep (defaults to storage.retention_count)"
    ),
) -> None:
    coordinator = _get_state(ctx).coordinator()
    try:
        summary = coordinator.refresh(retention)
    except RetrievalError as exc:
        _fail(exc)
        return
    typer.echo(summary.pruned)
    typer.echo(summary.added)
    _report_failures(summary)


@db_app.command("store", help="Fetch and cache a single day")
def db_store(
    ctx: typer.Context,
    day: Optional[str] = typer.Argument(None, help="Date as YYYY-MM-DD or MMDDYY"),
    force: bool = typer.Option(False, "--force", help="Re-fetch even when the day is cached"),
) -> None:
    state = _get_state(ctx)
    target = _parse_day(day)
    coordinator = state.coordinator()
    try:
        added = coordinator.store(target, force=force)
    except RetrievalError as exc:
        _fail(exc)
        return
    typer.echo("stored" if added else "cached")


def _report_failures(summary: RefreshSummary) -> None:
    if summary.ok:
        return
    for key, kind in sorted(summary.failed.items()):
        logger.error("  - {}: {}", key, kind)
    _exit(1)


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for validation results",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, _ = check_config(state.config_path)

    if format == "json":
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        _exit(exit_code)

    if result["status"] == "ok":
        logger.info("Configuration OK: {}", result["config_path"])
        for warning in result["warnings"]:
            logger.warning(warning)
    else:
        error: dict[str, Any] = result["error"]
        logger.error(
            "Configuration error ({}) for {}: {}",
            error["type"],
            result["config_path"],
            error["message"],
        )
        for detail in error.get("details", []):
            location = detail["loc"] or "<root>"
            logger.error("  - {}: {} ({})", location, detail["message"], detail["type"])

    _exit(exit_code)


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for configuration schema",
        callback=_normalize_format,
    ),
) -> None:
    fields = explain_config()

    if format == "json":
        print(json.dumps({"fields": fields}, indent=2, ensure_ascii=False, default=str))
        return

    logger.info("Configuration schema ({} fields):", len(fields))
    for entry in fields:
        default_value = entry["default"]
        if isinstance(default_value, (dict, list)):
            default_repr = json.dumps(default_value, ensure_ascii=False, default=str)
        elif default_value is None:
            default_repr = "None"
        else:
            default_repr = str(default_value)
        logger.info(
            "  - {name}: type={type}, required={required}, default={default}, description={description}",
            name=entry["name"],
            type=entry["type"],
            required="yes" if entry["required"] else "no",
            default=default_repr,
            description=entry["description"] or "(no description)",
        )


@config_app.command(help="Print the effective configuration")
def show(ctx: typer.Context) -> None:
    config = _config_or_exit(_get_state(ctx))
    print(json.dumps(config.model_dump(mode="json"), indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with setuptools console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
