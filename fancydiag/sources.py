"""Reading spans out of in-memory sources, and sources that carry a name."""

from __future__ import annotations

from collections import deque
from typing import Any, Iterator, Optional, Tuple, Union

from .protocol import OutOfBoundsError, SourceCode, SourceSpan, SpanContents

_CR = 0x0D
_LF = 0x0A

RawSource = Union[str, bytes, bytearray, memoryview, SourceCode]


def _line_units(data: bytes) -> Iterator[Tuple[int, bool]]:
    """Yield each byte, folding a CR LF pair into one CR flagged as a pair."""
    pending_cr = False
    for byte in data:
        if pending_cr:
            pending_cr = False
            if byte == _LF:
                yield _CR, True
                continue
            yield _CR, False
        if byte == _CR:
            pending_cr = True
            continue
        yield byte, False
    if pending_cr:
        yield _CR, False


def context_info(
    data: bytes,
    span: Any,
    context_lines_before: int,
    context_lines_after: int,
) -> SpanContents:
    """Find the bytes covering ``span`` plus the requested lines of context.

    Raises OutOfBoundsError when the span reaches past the end of ``data``.
    """
    data = bytes(data)
    span = SourceSpan.from_value(span)
    span_start = span.offset
    span_length = span.length
    last_of_span = span_start + max(span_length - 1, 0)
    end_of_span = max(span_start + span_length - 1, 0)

    offset = 0
    line_count = 0
    start_line = 0
    start_column = 0
    before_line_starts: deque = deque()
    current_line_start = 0
    end_lines = 0
    post_span = False
    post_span_got_newline = False

    for byte, is_crlf in _line_units(data):
        if byte in (_CR, _LF):
            line_count += 1
            if is_crlf:
                offset += 1
            if offset < span_start:
                # Still before the span: remember where this line started.
                start_column = 0
                before_line_starts.append(current_line_start)
                if len(before_line_starts) > context_lines_before:
                    start_line += 1
                    before_line_starts.popleft()
            elif offset >= last_of_span and post_span:
                # Past the span; count trailing context lines.
                start_column = 0
                if post_span_got_newline:
                    end_lines += 1
                else:
                    post_span_got_newline = True
                if end_lines >= context_lines_after:
                    offset += 1
                    break
            current_line_start = offset + 1
        elif offset < span_start:
            start_column += 1

        if offset >= end_of_span:
            post_span = True
            if end_lines >= context_lines_after:
                offset += 1
                break

        offset += 1

    if offset < end_of_span:
        raise OutOfBoundsError()

    if before_line_starts:
        starting_offset = before_line_starts[0]
    elif context_lines_before == 0:
        starting_offset = span_start
    else:
        starting_offset = 0
    if starting_offset > offset:
        raise OutOfBoundsError()

    return SpanContents(
        data=data[starting_offset:offset],
        span=SourceSpan(starting_offset, offset - starting_offset),
        line=start_line,
        column=start_column if context_lines_before == 0 else 0,
        line_count=line_count,
    )


def read_span(
    source: RawSource,
    span: Any,
    context_lines_before: int,
    context_lines_after: int,
) -> SpanContents:
    """Read ``span`` from text, bytes or any SourceCode object."""
    if isinstance(source, SourceCode):
        return source.read_span(
            SourceSpan.from_value(span), context_lines_before, context_lines_after
        )
    if isinstance(source, str):
        data = source.encode("utf-8")
    elif isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
    else:
        raise TypeError(f"cannot read spans from {type(source).__name__}")
    return context_info(data, span, context_lines_before, context_lines_after)


class NamedSource(SourceCode):
    """A source with a name (and optionally a language) attached to what it reads."""

    def __init__(self, name: str, source: RawSource) -> None:
        self.name = str(name)
        self._source = source
        self.language: Optional[str] = None

    def inner(self) -> RawSource:
        """The wrapped source."""
        return self._source

    def with_language(self, language: str) -> "NamedSource":
        """Return a copy of this source that reports the given language."""
        copy = NamedSource(self.name, self._source)
        copy.language = str(language)
        return copy

    def read_span(
        self, span: Any, context_lines_before: int, context_lines_after: int
    ) -> SpanContents:
        inner = read_span(self._source, span, context_lines_before, context_lines_after)
        contents = SpanContents(
            data=inner.data,
            span=inner.span,
            line=inner.line,
            column=inner.column,
            line_count=inner.line_count,
            name=self.name,
        )
        if self.language is not None:
            contents = contents.with_language(self.language)
        return contents

    def _key(self) -> tuple:
        return (self._source, self.name, self.language)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamedSource):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"NamedSource(name={self.name!r}, source='<redacted>', "
            f"language={self.language!r})"
        )