"""
Command handlers for the evm CLI.

Each module exposes run(args) -> int.
"""
