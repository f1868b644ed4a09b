"""Accumulate streamed text chunks into GeneratedContent snapshots."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .._logging import scoped_logger
from .generated import GeneratedContent, GenerationID

__all__ = ["ContentStream"]

log = scoped_logger("stream")


class ContentStream:
    """
    Append-only text buffer that hands out immutable content snapshots.

    Every :meth:`feed` builds a new buffer string; snapshots already handed
    out keep the text they were created with.

    Parameters
    ----------
    id : GenerationID, optional
        Identifier attached to every snapshot. A fresh one is created when
        omitted.

    Examples
    --------
    >>> stream = ContentStream()
    >>> stream.feed('{"name": "A').value(str, for_property="name")
    'A'
    >>> stream.feed('da"}').is_complete
    True
    """

    def __init__(self, id: GenerationID | None = None) -> None:
        self._id = id if id is not None else GenerationID()
        self._text = ""
        self._chunks = 0

    @property
    def id(self) -> GenerationID:
        return self._id

    @property
    def text(self) -> str:
        """All text fed so far."""
        return self._text

    @property
    def is_complete(self) -> bool:
        """Whether the accumulated text is a closed document."""
        return self.snapshot().is_complete

    def feed(self, chunk: str) -> GeneratedContent:
        """Append ``chunk`` and return a snapshot of the accumulated text."""
        self._text = self._text + chunk
        self._chunks += 1
        return self.snapshot()

    def snapshot(self) -> GeneratedContent:
        """Streaming content over the text accumulated so far."""
        return GeneratedContent.streaming(self._text, id=self._id)

    def reset(self) -> None:
        """Discard the accumulated text. The stream keeps its id."""
        log.debug("Stream reset", extra={"chunks": self._chunks, "length": len(self._text)})
        self._text = ""
        self._chunks = 0

    @classmethod
    def iter_snapshots(
        cls, chunks: Iterable[str], id: GenerationID | None = None
    ) -> Iterator[GeneratedContent]:
        """
        Yield one snapshot per chunk of ``chunks``.

        Examples
        --------
        >>> [s.json_string for s in ContentStream.iter_snapshots(["[1", ",2]"])]
        ['[1', '[1,2]']
        """
        stream = cls(id)
        for chunk in chunks:
            yield stream.feed(chunk)

    def __repr__(self) -> str:
        return f"ContentStream(id={self._id.value!r}, chunks={self._chunks}, length={len(self._text)})"
