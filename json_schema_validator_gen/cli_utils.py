"""
CLI utilities for command line reconstruction and introspection.
"""

import shlex
from pathlib import Path

import click

PROGRAM_NAME = "json_schema_validator_gen"


def _format_value(value) -> str:
    """Render one parameter value, showing existing files by name only."""
    if isinstance(value, (str, Path)):
        path_obj = Path(str(value))
        text = path_obj.name if path_obj.exists() else str(value)
    else:
        text = str(value)
    return shlex.quote(text)


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct the command line from the current Click context.

    Options repeated on the command line (such as --target) are emitted
    once per value, flags are emitted without a value, and values that
    equal the option default are left out.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        return PROGRAM_NAME

    if not cli_args:
        return PROGRAM_NAME

    cmd_parts = [PROGRAM_NAME]
    for param in click_command.params:
        if not isinstance(param, click.Option) or param.name not in cli_args:
            continue

        value = cli_args[param.name]
        if not value or value == param.default:
            continue

        flag = param.opts[0] if param.opts else f"--{param.name}"
        if param.is_flag:
            cmd_parts.append(flag)
        elif param.multiple:
            for item in value:
                cmd_parts.extend([flag, _format_value(item)])
        else:
            cmd_parts.extend([flag, _format_value(value)])

    return " ".join(cmd_parts)
