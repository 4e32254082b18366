"""Immutable, append-only conversation context."""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Tuple, Type

from .models import BaseMessage, SystemMessage


@dataclass(frozen=True)
class ConversationContext:
    """Ordered sequence of turns forming the session context.

    The context is never mutated: :meth:`append` returns a new context that
    shares the previous turns.
    """

    turns: Tuple[BaseMessage, ...] = ()

    @classmethod
    def from_turns(cls, turns: Iterable[BaseMessage]) -> "ConversationContext":
        return cls(turns=tuple(turns))

    def append(self, *turns: BaseMessage) -> "ConversationContext":
        return ConversationContext(turns=self.turns + tuple(turns))

    @property
    def system_instruction(self) -> Optional[str]:
        """All system turns joined, or None when the context has none."""
        parts = [turn.content for turn in self.turns if isinstance(turn, SystemMessage)]
        return "\n\n".join(parts) if parts else None

    @property
    def last(self) -> Optional[BaseMessage]:
        return self.turns[-1] if self.turns else None

    def of_type(self, message_type: Type[BaseMessage]) -> Sequence[BaseMessage]:
        return [turn for turn in self.turns if isinstance(turn, message_type)]

    def __iter__(self) -> Iterator[BaseMessage]:
        return iter(self.turns)

    def __len__(self) -> int:
        return len(self.turns)


def truncate_history(history: Sequence[BaseMessage], max_turns: int) -> Tuple[BaseMessage, ...]:
    """Keep only the most recent ``max_turns`` turns; older ones are dropped."""
    if max_turns <= 0:
        return ()
    return tuple(history[-max_turns:])
