import json
import logging
import sys
import traceback

import click

from .cli_utils import PROGRAM_NAME
from .pipeline import GeneratorConfig, GeneratorError, generate


def load_config(path) -> GeneratorConfig:
    """Load a generator configuration from a JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise GeneratorError(f"Could not load config {path}: {e}") from e

    if not isinstance(data, dict):
        raise GeneratorError(f"Config {path} must contain a JSON object")
    try:
        return GeneratorConfig.from_dict(data)
    except TypeError as e:
        raise GeneratorError(f"Invalid config {path}: {e}") from e


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--schema",
    "-s",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON Schema file to generate validators from",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False),
    help="Python module to write",
)
@click.option(
    "--target",
    "-t",
    multiple=True,
    help='Schema pointer to export, either "#/definitions/User" or "path=<pointer>,name=<Name>". '
    "Repeatable, defaults to the root schema.",
)
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False))
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def json_schema_validator_gen(schema, output, target, config, verbose):
    """Generate typed validators for a JSON Schema."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    try:
        generator_config = load_config(config) if config is not None else GeneratorConfig()
        generate(schema, output, list(target) or None, generator_config)
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e


def main(args=None) -> int:
    """
    Console entry point.

    Exits 0 on success or help, 1 on any usage or generation failure.
    """
    try:
        json_schema_validator_gen.main(args=args, prog_name=PROGRAM_NAME, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return 1
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except Exception:
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
