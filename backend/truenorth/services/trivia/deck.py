import logging
import random
from typing import List

from .errors import InsufficientContent
from .records import LABELS, PER_LABEL, DeckCard

logger = logging.getLogger(__name__)


class DeckAssembler:
    """Builds the balanced, shuffled deck for one session.

    PER_LABEL questions are drawn for each label so a deck can never come
    out lopsided, then the combined deck is shuffled so presentation order
    gives nothing away.
    """

    def __init__(self, store, rng=None):
        self.store = store
        self.rng = rng or random.SystemRandom()

    def assemble(self) -> List[DeckCard]:
        drawn = []
        for label in LABELS:
            pool = self.store.active_questions(label)
            if len(pool) < PER_LABEL:
                logger.warning(f"[deck-short] label={label} available={len(pool)} required={PER_LABEL}")
                raise InsufficientContent(label, len(pool), PER_LABEL)
            pool.sort(key=lambda q: q.id)
            drawn.extend(self.rng.sample(pool, PER_LABEL))
        self.rng.shuffle(drawn)
        return [
            DeckCard(id=q.id, prompt=q.prompt, image_url=q.image_url, order_index=i)
            for i, q in enumerate(drawn)
        ]
