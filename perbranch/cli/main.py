"""perbranch CLI"""

import click

from perbranch import __version__
from perbranch.cli.add import add
from perbranch.cli.cache import cache
from perbranch.cli.init import init
from perbranch.cli.ls import ls
from perbranch.cli.rm import rm

from .debug import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="perbranch")
@click.pass_context
def cli(ctx):
    """
    One working directory per git branch.

    Checkouts live under <root>/<owner>/<repo>/<branch>; the root is the
    nearest directory holding .perbranch (see "perbranch init") or
    $PERBRANCH_ROOT.
    """
    ctx.ensure_object(dict)


for command in (add, cache, init, ls, rm):
    cli.add_command(command)

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
