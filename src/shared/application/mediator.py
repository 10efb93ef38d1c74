"""
Mediator
Dispatches commands to the handler registered for their type
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

from shared.application.base_command import BaseCommand
from shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)

TCommand = TypeVar("TCommand", bound=BaseCommand)

Handler = Callable[[Any], Awaitable[Any]]


class UnknownCommandError(LookupError):
    """No handler was registered for the dispatched command type."""


class Mediator:
    """
    Explicit command registry populated at startup.

    Each command type maps to exactly one async callable (usually a
    ``CommandHandler`` instance). Modules talk to each other only through
    ``send``, so a caller never imports the module that answers it.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[BaseCommand], Handler] = {}

    def register(self, command_type: type[TCommand], handler: Callable[[TCommand], Awaitable[Any]]) -> None:
        if command_type in self._handlers:
            raise ValueError(f"Handler already registered for {command_type.__name__}")
        self._handlers[command_type] = handler
        logger.debug("command_handler_registered", command=command_type.__name__)

    def is_registered(self, command_type: type[BaseCommand]) -> bool:
        return command_type in self._handlers

    async def send(self, command: BaseCommand) -> Any:
        """
        Dispatch a command to its handler and return the handler's result.

        Errors raised by the handler propagate unchanged.

        Raises:
            UnknownCommandError: If no handler is registered for the command type
        """
        handler = self._handlers.get(type(command))
        if handler is None:
            raise UnknownCommandError(f"No handler registered for {type(command).__name__}")
        return await handler(command)
