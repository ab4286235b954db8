"""
Click command implementations for enroll CLI.

Commands are registered with the main CLI group via the
register_commands() function in enroll.cli.
"""

from .register import register

COMMANDS = [
    register,
]

__all__ = [
    "COMMANDS",
    "register",
]
