"""Simple notification system with audio feedback."""

import sys
import subprocess

from ..utils.log import get_logger


class SimpleNotifier:
    """Beep when a row lands in the ledger."""

    def __init__(self, enabled: bool = True):
        self.logger = get_logger(__name__)
        self.enabled = enabled

    def beep(self) -> bool:
        """Play system beep sound."""
        if not self.enabled:
            return False
        try:
            if sys.platform == "darwin":  # macOS
                subprocess.run(["afplay", "/System/Library/Sounds/Glass.aiff"],
                               capture_output=True, check=False)
            else:
                print("\a", end="", flush=True)
            return True
        except OSError as e:
            self.logger.debug("Error playing beep", error=str(e))
            return False


# Global singleton
notifier = SimpleNotifier()
