"""
jinspect CLI -- Java Class File Inspector
==========================================

Click-based command-line interface for decoding and printing a compiled
JVM class file.

Usage::

    # Everything, for the configured default path
    jinspect

    # Only the constant pool and methods
    jinspect build/App.class -v pool,method

    # Machine-readable output
    jinspect build/App.class --json
    jinspect build/App.class --output reports/App.json

    # Debug logging, tracebacks on failure
    jinspect build/App.class --debug

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys
from typing import Iterable

import click
from rich.markup import escape

from shared.config import InspectConfig
from shared.console import InspectConsole
from shared.logger import InspectLogger

from jinspect import __version__
from jinspect.core.engine import InspectEngine
from jinspect.core.errors import ClassFileError, FileUnavailable
from jinspect.output.console import ClassFileConsoleOutput
from jinspect.output.report import ClassFileReportGenerator
from jinspect.output.verbosity import CHOICES, VerboseMode


def _split_sections(values: Iterable[str]) -> list[str]:
    """Flatten repeated and comma-separated ``--verbose`` values."""
    return [name for value in values for name in value.split(",")]


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@click.command("jinspect")
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.option(
    "--verbose", "-v",
    "sections",
    multiple=True,
    metavar="SECTION[,SECTION...]",
    help=f"Sections to display: {', '.join(CHOICES)}.  Default: all.",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the decoded class file as JSON to stdout.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a JSON report to this path.",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug logging and print tracebacks on failure.",
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file.  Default: config.toml in the project root.",
)
@click.version_option(__version__, prog_name="jinspect")
def jinspect_cli(
    path: str | None,
    sections: tuple[str, ...],
    json_output: bool,
    output_path: str | None,
    debug: bool,
    config_path: str | None,
) -> None:
    """jinspect -- Java class file inspector.

    Decode PATH (a compiled .class file) and print its header, constant
    pool, class linkage, interfaces, fields, methods and attributes.
    When PATH is omitted the configured default path is used.

    Examples:

    \b
        # Constant pool only
        jinspect App.class -v pool

    \b
        # Header and fields
        jinspect App.class -v header -v field
    """
    console = InspectConsole()

    try:
        config = InspectConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Could not load configuration: {escape(str(exc))}")
        sys.exit(1)

    try:
        mode = VerboseMode.build(_split_sections(sections))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="'--verbose'") from exc

    logger = InspectLogger.from_config("cli", config.global_settings, debug=debug)
    engine = InspectEngine(config=config, logger=logger)
    target = path or config.decoder.default_path

    try:
        class_file = engine.inspect(target)
    except KeyboardInterrupt:
        console.warning("Decoding interrupted by user.")
        sys.exit(130)
    except (FileUnavailable, ClassFileError) as exc:
        console.error(escape(str(exc)))
        if debug:
            logger.exception("Decoding %s failed", target)
        sys.exit(1)

    report_gen = ClassFileReportGenerator()

    if json_output:
        click.echo(report_gen.render_json(class_file, source=target))
    else:
        ClassFileConsoleOutput(console=console).display(class_file, mode, path=target)
        console.blank()
        console.info(
            f"{escape(class_file.name)}: {len(class_file.fields)} field(s), "
            f"{len(class_file.methods)} method(s), "
            f"{len(class_file.diagnostics)} diagnostic(s)"
        )

    if output_path:
        report_path = report_gen.generate_json(class_file, output_path, source=target)
        if not json_output:
            console.success(f"JSON report saved: {escape(str(report_path))}")


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for the ``jinspect`` console script."""
    jinspect_cli()


if __name__ == "__main__":
    main()
