"""kubedeps command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kubedeps`` script).
"""

from kubedeps.cli.main import cli

__all__ = ["cli"]
