import logging
import uuid

from .errors import ValidationError
from .leaderboard import now_ms
from .records import Player

logger = logging.getLogger(__name__)

NICKNAME_MAX = 30


class PlayerRegistry:
    """Minimal player identity: one player per device, nickname editable."""

    def __init__(self, store, clock=None):
        self.store = store
        self.clock = clock or now_ms

    def register(self, nickname: str, device_id: str) -> str:
        nickname = (nickname or '').strip()
        if not 1 <= len(nickname) <= NICKNAME_MAX:
            raise ValidationError(f'nickname must be 1-{NICKNAME_MAX} characters', field='nickname')
        with self.store.transaction():
            existing = self.store.find_player_by_device(device_id)
            if existing is not None:
                if existing.nickname != nickname:
                    self.store.rename_player(existing.id, nickname)
                return existing.id
            player = Player(
                id=str(uuid.uuid4()),
                nickname=nickname,
                device_id=device_id,
                created_at=self.clock(),
            )
            self.store.add_player(player)
        logger.info(f"[player-new] player={player.id} device={device_id}")
        return player.id
