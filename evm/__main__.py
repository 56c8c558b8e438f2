"""
Entry point for running evm as a module.

Usage: python -m evm [options] TOOLCHAIN COMMAND [args]
"""

from evm.cli.parser import main

if __name__ == "__main__":
    main()
