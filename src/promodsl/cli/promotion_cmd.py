"""Promotion CLI commands: parse, tokens, apply, functions."""

import json
from pathlib import Path

import click

from promodsl.domain.types import PromotionDefinition
from promodsl.dsl.lexer import Lexer
from promodsl.engine.evaluator import CONDITION_FUNCTION_TABLE
from promodsl.engine.promotion import PromotionEngine
from promodsl.engine.rewards import REWARD_TYPE_TABLE
from promodsl.errors import ContextLoadError, LexError, ParseError
from promodsl.loader import load_context, load_promotion, sample_context
from promodsl.settings import Settings

_SOURCE = click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))


def _load_or_exit(source: Path) -> PromotionDefinition:
    try:
        return load_promotion(source)
    except (LexError, ParseError) as e:
        click.echo(click.style(f"Error parsing promotion: {e}", fg="red"), err=True)
        raise SystemExit(1)


@click.command("parse")
@_SOURCE
def parse_cmd(source: Path):
    """Parse a promotion file and show its conditions and rewards."""
    definition = _load_or_exit(source)

    click.echo(f"Promotion: {definition.name}")
    click.echo(f"  Conditions: {len(definition.conditions)}")
    for condition in definition.conditions:
        marker = "✓" if condition.is_valid() else click.style("✗", fg="red")
        click.echo(f"    {marker} {condition.name}: {condition.function_name}")
        if condition.parameters:
            click.echo(f"      Parameters: {', '.join(condition.parameters)}")
        if condition.expression is not None:
            click.echo(f"      Expression: {condition.expression}")

    click.echo(f"  Rewards: {len(definition.rewards)}")
    for reward in definition.rewards:
        marker = "✓" if reward.is_valid() else click.style("✗", fg="red")
        click.echo(f"    {marker} {reward.condition_name}: {reward.reward_type}")
        if reward.parameters:
            click.echo(f"      Parameters: {', '.join(reward.parameters)}")

    click.echo(click.style("\nPromotion parsed successfully.", fg="green", bold=True))


@click.command("tokens")
@_SOURCE
def tokens_cmd(source: Path):
    """Print the token stream of a promotion file."""
    try:
        tokens = Lexer(source.read_text(encoding="utf-8")).tokenize()
    except LexError as e:
        click.echo(click.style(f"Error tokenizing promotion: {e}", fg="red"), err=True)
        raise SystemExit(1)

    for token in tokens:
        click.echo(f"{token.line}:{token.column}\t{token.type.name}\t{token.value!r}")


@click.command("apply")
@_SOURCE
@click.option(
    "--context",
    "context_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML cart/config document (default: $PROMODSL_CONTEXT or a sample cart).",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@click.pass_obj
def apply_cmd(settings: Settings | None, source: Path, context_path: Path | None, as_json: bool):
    """Evaluate a promotion against a cart and print the result."""
    definition = _load_or_exit(source)

    context_path = context_path or (settings.context_path if settings else None)
    try:
        context = load_context(context_path) if context_path else sample_context()
    except ContextLoadError as e:
        click.echo(click.style(f"Error loading context: {e}", fg="red"), err=True)
        raise SystemExit(1)

    result = PromotionEngine().apply(definition, context)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo(f"Promotion: {result.promotion_name}")
    click.echo(f"  Applicable: {result.is_applicable}")
    if result.is_applicable:
        click.echo(f"  Triggered Conditions: {', '.join(result.triggered_conditions)}")
        click.echo(f"  Applied Rewards: {len(result.applied_rewards)}")
        for applied in result.applied_rewards:
            click.echo(f"    - {applied.description} (Value: {applied.value})")
        click.echo(f"  Total Value: {result.total_value}")

    if result.errors:
        click.echo(click.style(f"  Errors: {'; '.join(result.errors)}", fg="yellow"))


@click.command("functions")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the documentation as JSON.")
def functions_cmd(as_json: bool):
    """List builtin condition functions and reward types."""
    if as_json:
        click.echo(json.dumps({
            "conditions": CONDITION_FUNCTION_TABLE.export_documentation(),
            "rewards": REWARD_TYPE_TABLE.export_documentation(),
        }, indent=2))
        return

    click.echo("Condition functions:")
    for definition in CONDITION_FUNCTION_TABLE.list_all():
        click.echo(f"  {definition.name:<20} {definition.description}")

    click.echo("\nReward types:")
    for definition in REWARD_TYPE_TABLE.list_all():
        keys = [p.default_key for p in definition.parameters if p.default_key]
        keys.extend(definition.config_keys)
        suffix = f" [config: {', '.join(keys)}]" if keys else ""
        click.echo(f"  {definition.name:<20} {definition.description}{suffix}")
