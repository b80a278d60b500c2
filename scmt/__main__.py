"""Entry point for `python -m scmt`.

Usage:
    python -m scmt dump
    python -m scmt set TIMEZONE Europe/Berlin -M "moved"
"""

from __future__ import annotations

from scmt.cli import cli

cli(prog_name="scmt")
