"""scmt command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``scmt`` script).
"""

from scmt.cli.main import cli

__all__ = ["cli"]
