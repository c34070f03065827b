"""Entry point for `python -m kbinventory`.

Usage:
    python -m kbinventory list
    python -m kbinventory teardown --namespace kb-system
"""

from __future__ import annotations

from kbinventory.cli import cli

cli()
