"""
Cross-cutting wrappers for command and query handlers.

Handlers are plain objects exposing `async handle(cmd)`; decorators wrap them
by delegation so logging never leaks into the business code.
"""
import logging
from typing import Any, Protocol


class CommandHandler(Protocol):
    async def handle(self, cmd: Any) -> Any: ...


class QueryHandler(Protocol):
    async def handle(self, query: Any) -> Any: ...


def action_name(action: Any) -> str:
    return type(action).__name__


class CommandLoggingDecorator:
    def __init__(self, base: CommandHandler, logger: logging.Logger):
        self.base = base
        self.logger = logger

    async def handle(self, cmd):
        name = action_name(cmd)
        self.logger.debug("Executing command %s body=%r", name, cmd)
        try:
            result = await self.base.handle(cmd)
        except Exception as e:
            self.logger.debug("Failed to execute command %s: %s", name, e)
            raise
        self.logger.debug("Command %s executed successfully", name)
        return result


class QueryLoggingDecorator:
    def __init__(self, base: QueryHandler, logger: logging.Logger):
        self.base = base
        self.logger = logger

    async def handle(self, query):
        name = action_name(query)
        self.logger.debug("Executing query %s body=%r", name, query)
        try:
            result = await self.base.handle(query)
        except Exception as e:
            self.logger.debug("Failed to execute query %s: %s", name, e)
            raise
        self.logger.debug("Query %s executed successfully", name)
        return result


def apply_command_decorators(handler: CommandHandler, logger: logging.Logger) -> CommandHandler:
    return CommandLoggingDecorator(handler, logger)


def apply_query_decorators(handler: QueryHandler, logger: logging.Logger) -> QueryHandler:
    return QueryLoggingDecorator(handler, logger)
