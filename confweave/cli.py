from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from confweave.core.config.settings import EngineSettings, SettingsError, load_and_merge
from confweave.core.engine import Engine
from confweave.core.errors import ConfigLoadError, ConfweaveError, ExpansionError
from confweave.core.expand.expand_document import dump_document_yaml, expand_document
from confweave.core.io.load_config import load_config
from confweave.core.observability import setup_logging

logger = logging.getLogger("confweave.cli")

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level for engine diagnostics"),
    log_format: str = typer.Option("text", "--log-format", help="Log format: text|json"),
) -> None:
    """confweave CLI: expand setup documents into host forms."""
    setup_logging(log_level, log_format)


@app.command("expand")
def expand(
    path: str = typer.Argument(..., help="Path to a setup document (.yaml/.yml/.json)"),
    out: str = typer.Option(..., "--out", help="Path to write expanded YAML"),
    settings_file: str | None = typer.Option(
        None,
        "--settings",
        help="Optional YAML file overriding engine settings",
    ),
) -> None:
    """Expand every setup in a document, in order."""
    settings = _load_settings(settings_file)

    try:
        doc = load_config(path)
    except ConfigLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    engine = Engine.default(settings)
    try:
        expanded = expand_document(doc, engine)
    except ExpansionError as e:
        _print_errors([replace(e, file=doc.get("__file__"))])
        raise typer.Exit(code=2)

    p = Path(out)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    dump_document_yaml(expanded, str(p))
    typer.echo(f"OK: wrote {len(expanded['forms'])} expanded setup(s) to {out}")


@app.command("rules")
def rules() -> None:
    """List the built-in rules."""
    engine = Engine.default()
    table = Table(title="Rules")
    table.add_column("name", no_wrap=True)
    table.add_column("signature")
    table.add_column("flags")
    for rule in engine.registry:
        flags = []
        if rule.repeatable:
            flags.append(f"repeatable/{rule.arity}")
        if rule.deferred:
            flags.append("after-loaded")
        if rule.shorthand is not None:
            flags.append("shorthand")
        table.add_row(rule.name, rule.options.signature or "", ", ".join(flags))
    Console().print(table)


@app.command("describe")
def describe(name: str = typer.Argument(..., help="Rule name, e.g. :bind")) -> None:
    """Show a rule's signature and documentation."""
    engine = Engine.default()
    rule = engine.registry.lookup(name)
    if rule is None:
        _print_errors(
            [
                ExpansionError(
                    code="E_UNKNOWN_RULE",
                    message=f"unknown rule: {name}",
                    path="name",
                )
            ]
        )
        raise typer.Exit(code=2)

    typer.echo(f"{rule.name} {rule.options.signature or ''}".rstrip())
    if rule.options.documentation:
        typer.echo("")
        typer.echo(rule.options.documentation)


def _load_settings(settings_file: str | None) -> EngineSettings:
    try:
        return load_and_merge(settings_file)
    except FileNotFoundError:
        _print_errors(
            [
                ConfigLoadError(
                    code="E_SETTINGS_FILE_NOT_FOUND",
                    message=f"settings file not found: {settings_file}",
                    path="settings",
                )
            ]
        )
        raise typer.Exit(code=1)
    except SettingsError as e:
        _print_errors(
            [
                ConfigLoadError(
                    code="E_SETTINGS_FILE_INVALID",
                    message=str(e),
                    file=settings_file,
                    path="settings",
                )
            ]
        )
        raise typer.Exit(code=2)


def _print_errors(errors: list[ConfweaveError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        logger.info("reporting %s", e.code, extra={"error_code": e.code})
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="confweave")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
