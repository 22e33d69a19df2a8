"""
In-memory study session over one deck's cards.

A StudySession walks a fixed set of cards: it tracks which card is shown,
which face is up and how many answers were marked correct or incorrect.
Nothing is persisted; the session is discarded with the view that owns it.
Operations whose precondition does not hold are silent no-ops.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .models import Card, Deck

logger = logging.getLogger(__name__)


class StudyIntent(str, Enum):
    """
    A discrete user action forwarded by the presentation layer.
    """

    FLIP = "flip"
    PREVIOUS = "previous"
    NEXT = "next"
    MARK_CORRECT = "mark_correct"
    MARK_INCORRECT = "mark_incorrect"
    SHUFFLE = "shuffle"
    RESTART = "restart"


# Keyboard codes handled by the study view.
KEY_BINDINGS: Dict[str, StudyIntent] = {
    "Space": StudyIntent.FLIP,
    "ArrowLeft": StudyIntent.PREVIOUS,
    "ArrowRight": StudyIntent.NEXT,
}


@dataclass(frozen=True)
class StudyState:
    """
    Snapshot of a session, emitted to listeners after every transition.
    """

    card: Optional[Card]
    cursor: int
    total: int
    flipped: bool
    correct_count: int
    incorrect_count: int

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @property
    def is_complete(self) -> bool:
        """True once the last card has been flipped."""
        return (
            not self.is_empty
            and self.cursor == self.total - 1
            and self.flipped
        )

    @property
    def progress(self) -> float:
        """Fraction of the deck reached, counting the current card."""
        if self.is_empty:
            return 0.0
        return (self.cursor + 1) / self.total

    @property
    def face_label(self) -> str:
        return "Back" if self.flipped else "Front"

    @property
    def face_text(self) -> Optional[str]:
        if self.card is None:
            return None
        return self.card.back if self.flipped else self.card.front


StateListener = Callable[[StudyState], None]


class StudySession:
    """
    State machine for studying a deck.

    Holds the working card order (initially the store order, possibly
    replaced by a shuffle), the cursor, the flip state and the running
    correct/incorrect counts. The working order is always a permutation of
    the cards passed in; the cursor always indexes into it.
    """

    def __init__(
        self,
        deck: Deck,
        cards: Sequence[Card],
        rng: Optional[random.Random] = None,
    ):
        """
        Parameters:
            deck (Deck): The deck being studied; never modified.
            cards (Sequence[Card]): The deck's cards in store order. An empty
                sequence yields a session on which every operation is a
                no-op.
            rng (Optional[random.Random]): Random source used by shuffle().
                Defaults to a fresh, OS-seeded generator.
        """
        self._deck = deck
        self._order: List[Card] = list(cards)
        self._rng = rng or random.Random()
        self._cursor = 0
        self._flipped = False
        self._correct_count = 0
        self._incorrect_count = 0
        self._listeners: List[StateListener] = []

    # --- Read access ---

    @property
    def deck(self) -> Deck:
        return self._deck

    @property
    def order(self) -> Tuple[Card, ...]:
        return tuple(self._order)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def flipped(self) -> bool:
        return self._flipped

    @property
    def correct_count(self) -> int:
        return self._correct_count

    @property
    def incorrect_count(self) -> int:
        return self._incorrect_count

    @property
    def is_empty(self) -> bool:
        return not self._order

    @property
    def current_card(self) -> Optional[Card]:
        if self.is_empty:
            return None
        return self._order[self._cursor]

    @property
    def is_complete(self) -> bool:
        return self.state.is_complete

    @property
    def state(self) -> StudyState:
        return StudyState(
            card=self.current_card,
            cursor=self._cursor,
            total=len(self._order),
            flipped=self._flipped,
            correct_count=self._correct_count,
            incorrect_count=self._incorrect_count,
        )

    # --- Subscription ---

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register `listener` to be called with the new StudyState after every
        applied transition.

        Returns:
            A callable that removes the listener; calling it more than once
            is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            listener(state)

    # --- Transitions ---

    def _advance(self) -> bool:
        if self._cursor < len(self._order) - 1:
            self._cursor += 1
            self._flipped = False
            return True
        return False

    def _reset_progress(self) -> None:
        self._cursor = 0
        self._flipped = False
        self._correct_count = 0
        self._incorrect_count = 0

    def next(self) -> None:
        """Move to the next card and show its front. No-op on the last card."""
        if self._advance():
            self._emit()

    def previous(self) -> None:
        """Move to the previous card and show its front. No-op on the first."""
        if self._cursor > 0:
            self._cursor -= 1
            self._flipped = False
            self._emit()

    def flip(self) -> None:
        if self.is_empty:
            return
        self._flipped = not self._flipped
        self._emit()

    def mark_correct(self) -> None:
        """
        Count the current card as answered correctly, then advance.

        On the last card the count still increases and the cursor stays put.
        """
        if self.is_empty:
            return
        self._correct_count += 1
        self._advance()
        self._emit()

    def mark_incorrect(self) -> None:
        """Count the current card as missed, then advance (see mark_correct)."""
        if self.is_empty:
            return
        self._incorrect_count += 1
        self._advance()
        self._emit()

    def shuffle(self) -> None:
        """
        Reorder the cards uniformly at random and start over.

        Uses an in-place Fisher-Yates shuffle; every permutation, including
        the current order, is equally likely. Cursor, flip state and both
        counts are reset.
        """
        if self.is_empty:
            return
        cards = self._order
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randrange(i + 1)
            cards[i], cards[j] = cards[j], cards[i]
        self._reset_progress()
        logger.debug(
            f"Shuffled {len(cards)} cards of deck {self._deck.id}"
        )
        self._emit()

    def restart(self) -> None:
        """Go back to the first card and clear the counts, keeping the order."""
        if self.is_empty:
            return
        self._reset_progress()
        self._emit()

    # --- Presentation-layer events ---

    def dispatch(self, intent: Union[StudyIntent, str]) -> None:
        """
        Apply one user intent, given as a StudyIntent or its string value.
        Marking an answer is only accepted while the back of the card is
        showing; unknown intents are ignored.
        """
        try:
            intent = StudyIntent(intent)
        except ValueError:
            logger.debug(f"Ignoring unknown study intent {intent!r}")
            return
        if intent is StudyIntent.FLIP:
            self.flip()
        elif intent is StudyIntent.PREVIOUS:
            self.previous()
        elif intent is StudyIntent.NEXT:
            self.next()
        elif intent is StudyIntent.MARK_CORRECT:
            if self._flipped:
                self.mark_correct()
        elif intent is StudyIntent.MARK_INCORRECT:
            if self._flipped:
                self.mark_incorrect()
        elif intent is StudyIntent.SHUFFLE:
            self.shuffle()
        elif intent is StudyIntent.RESTART:
            self.restart()

    def handle_key(self, key: str) -> None:
        """Apply the intent bound to a keyboard code; other keys are ignored."""
        intent = KEY_BINDINGS.get(key)
        if intent is not None:
            self.dispatch(intent)
