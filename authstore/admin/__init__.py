"""Command line administration of an authstore security model."""

from .commands import COMMANDS, CommandError, build_parser, run_command

__all__ = ["COMMANDS", "CommandError", "build_parser", "run_command"]
