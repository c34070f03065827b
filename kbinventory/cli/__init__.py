"""kbinventory command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kbinventory`` script).
"""

from kbinventory.cli.main import cli

__all__ = ["cli"]
