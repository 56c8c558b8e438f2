"""
Uninstall command implementation.

Removes installed versions. Failures on one version are reported and do
not stop the others.
"""

from evm.cli.utils import create_operator, print_lines


def run(args) -> int:
    """Run the uninstall command."""
    print_lines(create_operator(args).uninstall(args.versions))
    return 0
