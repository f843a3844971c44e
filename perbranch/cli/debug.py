"""The ``--debug`` flag shared by the perbranch group and all its subcommands."""

import click

from .utils.logging import configure_logging

DEBUG_KEY = "DEBUG"


def _debug_callback(ctx: click.Context, param, value: bool) -> bool:
    state = ctx.find_root().ensure_object(dict)

    # any level may switch debug on, only the top level switches it off
    if value or ctx.parent is None:
        state[DEBUG_KEY] = value
    else:
        state.setdefault(DEBUG_KEY, False)

    configure_logging(state[DEBUG_KEY])
    return state[DEBUG_KEY]


def add_debug_option(cmd: click.Command) -> click.Command:
    """Attach ``--debug/--no-debug`` to *cmd* and, for groups, to every subcommand."""
    if not any(param.name == "debug" for param in cmd.params):
        cmd.params.insert(
            0,
            click.Option(
                ["--debug/--no-debug"],
                is_eager=True,
                expose_value=False,
                callback=_debug_callback,
                help="Show git commands and the underlying errors",
            ),
        )

    if isinstance(cmd, click.Group):
        for subcommand in cmd.commands.values():
            add_debug_option(subcommand)

    return cmd


def is_debug(ctx: click.Context) -> bool:
    state = ctx.find_root().obj or {}
    return bool(state.get(DEBUG_KEY, False))
