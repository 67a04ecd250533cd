"""User-facing notifications emitted by the engine.

The engine only decides *when* to notify; how the message is shown is up
to whoever implements the notifier.
"""

import logging

logger = logging.getLogger("ReelMCP.core.notify")


class Notifier:
    """No-op notifier. Subclass and override what you need."""

    def export_completed(self, title: str) -> None:
        pass

    def export_failed(self, title: str, reason: str) -> None:
        pass

    def playback_finished(self) -> None:
        pass

    def error(self, message: str) -> None:
        pass


class LoggingNotifier(Notifier):
    """Writes each notification as one log line."""

    def export_completed(self, title: str) -> None:
        logger.info(f"Export complete: '{title}'")

    def export_failed(self, title: str, reason: str) -> None:
        logger.error(f"Export of '{title}' failed: {reason}")

    def playback_finished(self) -> None:
        logger.info("Playback finished: all slides shown")

    def error(self, message: str) -> None:
        logger.warning(message)


class RecordingNotifier(Notifier):
    """Keeps notifications as (event, payload) tuples."""

    def __init__(self):
        self.events: list[tuple[str, tuple]] = []

    def export_completed(self, title: str) -> None:
        self.events.append(("export_completed", (title,)))

    def export_failed(self, title: str, reason: str) -> None:
        self.events.append(("export_failed", (title, reason)))

    def playback_finished(self) -> None:
        self.events.append(("playback_finished", ()))

    def error(self, message: str) -> None:
        self.events.append(("error", (message,)))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]
