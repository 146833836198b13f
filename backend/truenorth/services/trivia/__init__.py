"""Trivia domain services: deck, sessions, scoring and leaderboard.

Everything here talks to persistence through an injected store and to
subscribers through an injected notifier, so HTTP routes and socket
handlers stay thin and the services can run against the in-memory store
in unit tests.
"""

from .admin import AdminConsole
from .deck import DeckAssembler
from .leaderboard import Leaderboard
from .locks import KeyedLocks
from .notifier import LEADERBOARD_TOPIC
from .players import PlayerRegistry
from .sessions import SessionManager


class Engine:
    """Bundle of the services one application instance uses."""

    def __init__(self, store, notifier, clock=None, rng=None, tz='UTC',
                 share_text=None, admin_check=None):
        self.store = store
        self.notifier = notifier
        self.players = PlayerRegistry(store, clock=clock)
        self.assembler = DeckAssembler(store, rng=rng)
        # device, session and day locks live in one registry shared by all services
        self.locks = KeyedLocks()
        self.leaderboard = Leaderboard(store, notifier, clock=clock, tz=tz, locks=self.locks)
        self.sessions = SessionManager(
            store, self.assembler, self.leaderboard, notifier,
            clock=clock, share_text=share_text, locks=self.locks,
        )
        self.admin = AdminConsole(store, self.leaderboard, notifier, check=admin_check)


__all__ = [
    'AdminConsole',
    'DeckAssembler',
    'Engine',
    'LEADERBOARD_TOPIC',
    'Leaderboard',
    'PlayerRegistry',
    'SessionManager',
]
