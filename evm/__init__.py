"""
evm - a per-user runtime version manager.

Resolves toolchain releases from a remote catalog, downloads and verifies
them, installs them side by side and switches the active one.
"""

__version__ = "0.1.0"
