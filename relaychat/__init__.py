"""Terminal chat: an asyncio relay server, a curses client and their wire protocol."""

__version__ = "0.1.0"
__all__ = ["__version__"]