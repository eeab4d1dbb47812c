"""Main CLI entry point for doc-search."""

import click

from doc_search import __version__
from .commands.index import index_commands


@click.group()
@click.version_option(version=__version__)
def cli():
    """Documentation index builder and section-level retrieval."""
    pass


# Register command groups
cli.add_command(index_commands)


if __name__ == "__main__":
    cli()
