"""
Base Command Handler
Abstract base for all command handlers
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from shared.application.base_command import BaseCommand
from shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)

TCommand = TypeVar("TCommand", bound=BaseCommand)
TResult = TypeVar("TResult")


class CommandHandler(ABC, Generic[TCommand, TResult]):
    """
    Abstract base class for command handlers.

    Type Parameters:
        TCommand: Command type this handler processes
        TResult: Return type of the handler
    """

    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        """
        Handle the command and return result.

        Raises:
            NotFoundError: If a referenced entity does not exist
            DomainError: If a business rule is violated
        """

    async def __call__(self, command: TCommand) -> TResult:
        """Run ``handle`` with logging around the execution."""
        command_name = command.__class__.__name__
        logger.info("command_executing", command=command_name, command_id=str(command.command_id))

        try:
            result = await self.handle(command)
        except Exception as e:
            logger.error(
                "command_failed",
                command=command_name,
                command_id=str(command.command_id),
                error=str(e),
                error_type=e.__class__.__name__,
            )
            raise

        logger.info("command_executed", command=command_name, command_id=str(command.command_id))
        return result
