"""
Entry point for running evm CLI as a module.

Usage: python -m evm.cli [options] TOOLCHAIN COMMAND [args]
"""

from .parser import main

if __name__ == "__main__":
    main()
