"""promodsl CLI entry point."""

import click

from promodsl.settings import Settings, configure_logging


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Logging level (default: $PROMODSL_LOG_LEVEL or WARNING).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """promodsl: promotion DSL parser and evaluator."""
    settings = Settings.from_env()
    if log_level:
        settings.log_level = log_level.upper()
    configure_logging(settings.log_level)
    ctx.obj = settings


# Register commands
from promodsl.cli.promotion_cmd import apply_cmd, functions_cmd, parse_cmd, tokens_cmd  # noqa: E402

cli.add_command(parse_cmd)
cli.add_command(tokens_cmd)
cli.add_command(apply_cmd)
cli.add_command(functions_cmd)
