"""Append-only transcript storage.

Hides how entries are stored and how observers are notified.
"""

from collections.abc import Callable, Iterator
from typing import overload

from .models import Message

MessageListener = Callable[[Message], None]


class TranscriptSnapshot:
    """Read-only view of the first ``len(self)`` transcript entries.

    The view is lazy (nothing is copied) and restartable (every iteration
    starts from the first entry). Because the log only ever grows, the entries
    it covers never change.
    """

    def __init__(self, entries: list[Message], length: int) -> None:
        self._entries = entries
        self._length = length

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[Message]:
        for index in range(self._length):
            yield self._entries[index]

    @overload
    def __getitem__(self, index: int) -> Message: ...

    @overload
    def __getitem__(self, index: slice) -> list[Message]: ...

    def __getitem__(self, index: int | slice) -> Message | list[Message]:
        if isinstance(index, slice):
            return [self._entries[i] for i in range(*index.indices(self._length))]
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError("snapshot index out of range")
        return self._entries[index]

    def is_prefix_of(self, other: "TranscriptSnapshot") -> bool:
        """True when every entry here appears, in order, at the start of ``other``."""
        if len(self) > len(other):
            return False
        return all(mine is theirs for mine, theirs in zip(self, other))

    def __repr__(self) -> str:
        return f"TranscriptSnapshot(length={self._length})"


class MessageLog:
    """Ordered, append-only record of the conversation.

    Insertion order is display order is conversational order. There is no
    way to remove or reorder entries.
    """

    def __init__(self) -> None:
        self._entries: list[Message] = []
        self._listeners: list[MessageListener] = []

    def append(self, message: Message) -> None:
        """Append ``message`` and notify listeners synchronously, in order."""
        self._entries.append(message)
        for listener in list(self._listeners):
            listener(message)

    def snapshot(self) -> TranscriptSnapshot:
        """View of every entry appended so far."""
        return TranscriptSnapshot(self._entries, len(self._entries))

    def subscribe(self, listener: MessageListener) -> Callable[[], None]:
        """Register ``listener`` for future appends. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def last(self) -> Message | None:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)
