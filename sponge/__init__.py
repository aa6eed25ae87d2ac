# sponge/__init__.py
"""
Sponge package initializer.
Defines package version; the CLI lives in :mod:`sponge.cli`.
"""
__version__ = "0.1.0"
