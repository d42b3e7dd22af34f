from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click
from tabulate import tabulate

import wslib.config as config
from wslib.config import IconMappings
from wslib.errors import format_config_error


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--json-output",
    "json_output",
    is_flag=True,
    help="Output JSON instead of tables (pretty-printed)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging to stderr (what the CLI is doing)",
)
@click.pass_context
def cli(ctx: click.Context, json_output: bool, verbose: bool) -> None:
    """workstyle icon configuration.

    Inspect the icon mapping and fallback icon workstyle resolves from
    <config dir>/workstyle/config.toml, or from the built-in defaults when that
    file is missing or broken. JSON output is always pretty-printed.
    """
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj["verbose"] = verbose

    # Configure logging once per process
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _locate(log: logging.Logger) -> Optional[Path]:
    try:
        log.info("Locating config...")
        location = config.locate_config()
    except OSError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(2)
    log.info("Using config at %s", location or "<built-in defaults>")
    return location


def _render_mappings(mappings: IconMappings) -> str:
    rows = [[i, pattern, icon] for i, (pattern, icon) in enumerate(mappings, start=1)]
    return tabulate(rows, headers=["#", "PATTERN", "ICON"])


@cli.command("path")
@click.pass_context
def show_path(ctx: click.Context) -> None:
    """Print the config file location, creating it from the defaults if absent."""
    log = logging.getLogger("wsctl.path")
    location = _locate(log)
    if ctx.obj.get("json"):
        click.echo(json.dumps({"path": str(location) if location else None}, indent=2))
        return
    if location is None:
        click.echo(format_config_error(config.MissingConfigDir()), err=True)
        raise SystemExit(2)
    click.echo(str(location))


@cli.command("mappings")
@click.pass_context
def show_mappings(ctx: click.Context) -> None:
    """List icon mappings in the order they are matched."""
    log = logging.getLogger("wsctl.mappings")
    mappings = config.get_icon_mappings(_locate(log))

    if ctx.obj.get("json"):
        out = {"mappings": [{"pattern": k, "icon": v} for k, v in mappings]}
        click.echo(json.dumps(out, indent=2, ensure_ascii=False))
        return

    log.info("Rendering table output for %d mappings", len(mappings))
    click.echo(_render_mappings(mappings))


@cli.command("fallback-icon")
@click.pass_context
def show_fallback_icon(ctx: click.Context) -> None:
    """Print the icon used when no mapping matches."""
    log = logging.getLogger("wsctl.fallback")
    icon = config.get_fallback_icon(_locate(log))
    if ctx.obj.get("json"):
        click.echo(json.dumps({"fallback_icon": icon}, indent=2, ensure_ascii=False))
        return
    click.echo(repr(icon))


@cli.command("show")
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show the fully resolved configuration."""
    log = logging.getLogger("wsctl.show")
    try:
        resolved = config.load_icon_config()
    except OSError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(2)
    log.info("Resolved %d mappings", len(resolved.mappings))

    if ctx.obj.get("json"):
        click.echo(resolved.to_json())
        return

    rows = [
        ["path", str(resolved.source_path) if resolved.source_path else "—"],
        ["fallback_icon", repr(resolved.fallback_icon)],
        ["mappings", len(resolved.mappings)],
    ]
    click.echo(tabulate(rows, headers=["PROPERTY", "VALUE"]))
    click.echo()
    click.echo(_render_mappings(resolved.mappings))


@cli.command("defaults")
@click.pass_context
def show_defaults(ctx: click.Context) -> None:
    """Show the built-in default configuration without touching the config file."""
    mappings = config.default_icon_mappings()
    icon = config.default_fallback_icon()

    if ctx.obj.get("json"):
        click.echo(config.IconConfig(mappings=mappings, fallback_icon=icon).to_json())
        return

    click.echo(f"fallback_icon: {icon!r}")
    click.echo(_render_mappings(mappings))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
