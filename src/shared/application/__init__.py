"""
Shared Application Layer
Commands, handlers and the Mediator
"""
from shared.application.base_command import BaseCommand
from shared.application.command_handler import CommandHandler
from shared.application.mediator import Mediator, UnknownCommandError

__all__ = [
    "BaseCommand",
    "CommandHandler",
    "Mediator",
    "UnknownCommandError",
]
