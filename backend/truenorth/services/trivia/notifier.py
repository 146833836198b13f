"""Live update notifier.

The core calls ``publish(topic)`` after each committed mutation that can
change the leaderboard. Delivery is best effort: a failure is logged and
never propagates into the operation that triggered it.
"""

import logging

logger = logging.getLogger(__name__)

LEADERBOARD_TOPIC = 'leaderboard'
SOCKET_NAMESPACE = '/ws'


def update_event(topic: str) -> str:
    return f"{topic}:update"


class SocketIONotifier:
    """Fan-out to every socket that joined the topic's room."""

    def __init__(self, socketio, namespace: str = SOCKET_NAMESPACE):
        self.socketio = socketio
        self.namespace = namespace

    def publish(self, topic: str) -> None:
        try:
            self.socketio.emit(update_event(topic), to=topic, namespace=self.namespace)
        except Exception as exc:
            logger.warning(f"[notify-failed] topic={topic} error={exc}")
            return
        logger.info(f"[notify] topic={topic}")


class RecordingNotifier:
    """Keeps published topics in memory; used by scripts and tests."""

    def __init__(self):
        self.published = []

    def publish(self, topic: str) -> None:
        self.published.append(topic)

    def count(self, topic: str = LEADERBOARD_TOPIC) -> int:
        return sum(1 for t in self.published if t == topic)
