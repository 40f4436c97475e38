"""
Streaming adapter - Apply a Redactor to a sequence of text chunks.

Each chunk is redacted on its own, in arrival order, with nothing carried
over between chunks. A secret whose characters straddle a chunk boundary is
therefore not detected; feed whole lines (see ``pipe``) for best results.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from typing import TYPE_CHECKING, TextIO


if TYPE_CHECKING:
    from .redactor import Redactor


__all__ = ["RedactionStream"]

logger = logging.getLogger(__name__)


class RedactionStream:
    """
    Transform stage mapping text chunks to redacted text chunks.

    Usable as a plain function over an iterable::

        stream = redactor.create_stream()
        for cleaned in stream(lines):
            sink.write(cleaned)

    Attributes:
        chunks: Number of chunks processed so far.
        redactions: Total replacements made across those chunks.
        matched: Distinct labels hit across those chunks, first-seen order.
    """

    def __init__(self, redactor: Redactor, encoding: str = "utf-8") -> None:
        self._redactor = redactor
        # Holds back only an incomplete trailing character, never text
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self.chunks = 0
        self.redactions = 0
        self.matched: list[str] = []

    @property
    def redactor(self) -> Redactor:
        return self._redactor

    def transform(self, chunk: str | bytes) -> str:
        """
        Redact a single chunk.

        Bytes are decoded with a per-stream incremental decoder, so a
        multi-byte character split across two chunks is emitted whole with
        the second chunk.
        """
        if isinstance(chunk, (bytes, bytearray)):
            chunk = self._decoder.decode(bytes(chunk))
        result = self._redactor.redact(chunk)
        self.chunks += 1
        self.redactions += result.count
        self.matched.extend(label for label in result.matched if label not in self.matched)
        return result.text

    def __call__(self, chunks: Iterable[str | bytes]) -> Iterator[str]:
        """Lazily redact each chunk of an iterable."""
        for chunk in chunks:
            yield self.transform(chunk)

    async def atransform(self, chunks: AsyncIterable[str | bytes]) -> AsyncIterator[str]:
        """Lazily redact each chunk of an async iterable."""
        async for chunk in chunks:
            yield self.transform(chunk)

    def pipe(self, source: TextIO, sink: TextIO) -> int:
        """
        Copy a text stream to another line by line, redacting each line.

        Args:
            source: Readable text stream.
            sink: Writable text stream. Flushed after every line so
                downstream readers see output as soon as it is clean.

        Returns:
            Number of replacements made while piping.
        """
        before = self.redactions
        for cleaned in self(source):
            sink.write(cleaned)
            sink.flush()
        found = self.redactions - before
        logger.debug("Piped %d chunk(s), %d redaction(s)", self.chunks, found)
        return found
