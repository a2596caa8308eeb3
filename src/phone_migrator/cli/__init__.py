"""
phone-migrator CLI Module

Contains the command-line interface:
- main: CLI entry point with typer
- output: rich rendering of wizard screens, plans and settings
- Commands: wizard, convert, plan, analyze, config, version
"""

from .main import app, main
from .output import OutputManager

__all__ = [
    "app",
    "main",
    "OutputManager",
]
