"""Application layer: console bootstrap and session context."""

from .bootstrap import ConsoleContext, create_console, parse_api_token  # noqa: F401

__all__ = ["ConsoleContext", "create_console", "parse_api_token"]
