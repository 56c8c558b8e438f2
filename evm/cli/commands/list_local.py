"""
List command implementation.

Lists installed versions, marking the active one.
"""

from evm.cli.utils import create_operator, print_lines


def run(args) -> int:
    """Run the list command."""
    print_lines(create_operator(args).list_local())
    return 0
