"""Terminal feedback package."""

from .notifier import SimpleNotifier, notifier
from .prompt import ask

__all__ = ["SimpleNotifier", "notifier", "ask"]
