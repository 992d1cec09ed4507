"""Entry point for `python -m kubedeps`.

Usage:
    python -m kubedeps discover deployment.yaml
    uv run python -m kubedeps kinds
"""

from __future__ import annotations

from kubedeps.cli import cli

cli()
