"""Toolchain Provisioner — build a fixed catalog of native build tools into a prefix."""

__version__ = "0.1.0"
