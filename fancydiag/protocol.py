"""Core diagnostic protocol: severities, spans, labels and source contents."""

from __future__ import annotations

import dataclasses
import enum
import inspect
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, Tuple


class OutOfBoundsError(IndexError):
    """Raised when a span reaches past the end of its source."""

    def __init__(self, message: str = "The given offset is outside the bounds of its Source") -> None:
        super().__init__(message)


class Severity(enum.IntEnum):
    """How serious a diagnostic is. Reporters treat a missing severity as ERROR."""

    ADVICE = 0
    WARNING = 1
    ERROR = 2

    def to_json(self) -> str:
        """Return the JSON form of this severity, e.g. ``"Warning"``."""
        return self.name.capitalize()

    @classmethod
    def from_json(cls, value: Any) -> "Severity":
        """Parse a severity from its JSON form."""
        if isinstance(value, str):
            for member in cls:
                if member.name.capitalize() == value:
                    return member
        raise ValueError(f"unknown severity: {value!r}")


class Diagnostic(Exception):
    """An error carrying rich metadata for human-friendly reports.

    Metadata may be given as keyword arguments; every accessor returns None
    when nothing was given. Subclasses may override any accessor.
    """

    def __init__(
        self,
        *args: Any,
        code: Any = None,
        severity: Optional[Severity] = None,
        help: Any = None,
        url: Any = None,
        source_code: Optional["SourceCode"] = None,
        labels: Optional[Iterable["LabeledSpan"]] = None,
        related: Optional[Iterable["Diagnostic"]] = None,
        diagnostic_source: Optional["Diagnostic"] = None,
    ) -> None:
        super().__init__(*args)
        self._diag_code = code
        self._diag_severity = severity
        self._diag_help = help
        self._diag_url = url
        self._diag_source_code = source_code
        self._diag_labels = None if labels is None else tuple(labels)
        self._diag_related = None if related is None else tuple(related)
        self._diag_source = diagnostic_source

    def code(self) -> Optional[str]:
        """Unique code identifying this kind of diagnostic."""
        value = getattr(self, "_diag_code", None)
        return None if value is None else str(value)

    def severity(self) -> Optional[Severity]:
        """Severity of the diagnostic; None means ``Severity.ERROR``."""
        value = getattr(self, "_diag_severity", None)
        return None if value is None else Severity(value)

    def help(self) -> Optional[str]:
        """Advice on how to resolve the problem."""
        value = getattr(self, "_diag_help", None)
        return None if value is None else str(value)

    def url(self) -> Optional[str]:
        """Where to read more about this diagnostic."""
        value = getattr(self, "_diag_url", None)
        return None if value is None else str(value)

    def source_code(self) -> Optional["SourceCode"]:
        """Source the labels apply to."""
        return getattr(self, "_diag_source_code", None)

    def labels(self) -> Optional[Iterator["LabeledSpan"]]:
        """Labelled spans within the source code."""
        value = getattr(self, "_diag_labels", None)
        return None if value is None else iter(value)

    def related(self) -> Optional[Iterator["Diagnostic"]]:
        """Additional related diagnostics."""
        value = getattr(self, "_diag_related", None)
        return None if value is None else iter(value)

    def diagnostic_source(self) -> Optional["Diagnostic"]:
        """The diagnostic that caused this one."""
        return getattr(self, "_diag_source", None)


class MessageDiagnostic(Diagnostic):
    """A diagnostic that is nothing but a message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return repr(self.message)


def diagnostic_from_message(message: str) -> MessageDiagnostic:
    """Wrap a plain message in a diagnostic."""
    return MessageDiagnostic(str(message))


class SourceCode:
    """Readable source text of some sort."""

    def read_span(
        self, span: "SourceSpan", context_lines_before: int, context_lines_after: int
    ) -> "SpanContents":
        """Read the contents of ``span`` with surrounding context lines."""
        raise NotImplementedError


def _check_size(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, not {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must not be negative: {value}")
    return value


@dataclass(frozen=True, order=True)
class SourceOffset:
    """A byte offset from the beginning of a source."""

    offset: int

    def __post_init__(self) -> None:
        _check_size("offset", self.offset)

    def __int__(self) -> int:
        return self.offset

    @classmethod
    def from_location(cls, source: str, loc_line: int, loc_col: int) -> "SourceOffset":
        """Convert a 1-based line/column location into a byte offset.

        An out-of-range location gives the offset of the end of the source.
        """
        line = 0
        col = 0
        offset = 0
        for char in source:
            if line + 1 >= loc_line and col + 1 >= loc_col:
                break
            if char == "\n":
                col = 0
                line += 1
            else:
                col += 1
            offset += len(char.encode("utf-8"))
        return cls(offset)

    @classmethod
    def from_current_location(cls) -> Tuple[str, "SourceOffset"]:
        """Return the caller's file name and the offset of the call within it.

        Raises OSError when the caller's file cannot be read.
        """
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        try:
            if caller is None:
                raise RuntimeError("no caller frame available")
            info = inspect.getframeinfo(caller, context=0)
        finally:
            del frame
            del caller
        filename = info.filename
        line = info.lineno
        column = 1
        positions = getattr(info, "positions", None)
        if positions is not None and positions.col_offset is not None:
            column = positions.col_offset + 1
        with open(filename, encoding="utf-8") as handle:
            text = handle.read()
        return filename, cls.from_location(text, line, column)

    def to_json(self) -> int:
        """Return the JSON form: the bare offset."""
        return self.offset

    @classmethod
    def from_json(cls, value: Any) -> "SourceOffset":
        """Parse an offset from its JSON form."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"invalid source offset: {value!r}")
        return cls(value)


@dataclass(frozen=True, order=True)
class SourceSpan:
    """A span of bytes within a source."""

    offset: int
    length: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.offset, SourceOffset):
            object.__setattr__(self, "offset", self.offset.offset)
        _check_size("offset", self.offset)
        _check_size("length", self.length)

    @classmethod
    def from_value(cls, value: Any) -> "SourceSpan":
        """Build a span from a span, offset, ``(start, length)`` pair or range."""
        if isinstance(value, SourceSpan):
            return value
        if isinstance(value, SourceOffset):
            return cls(value.offset, 0)
        if isinstance(value, range):
            if value.step != 1:
                raise ValueError("only ranges with a step of 1 can be spans")
            return cls(value.start, len(value))
        if isinstance(value, tuple):
            if len(value) != 2:
                raise ValueError(f"a span tuple needs (start, length), got {value!r}")
            start, length = value
            if isinstance(start, SourceOffset):
                start = start.offset
            return cls(start, length)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value, 0)
        raise TypeError(f"cannot make a span from {type(value).__name__}")

    def is_empty(self) -> bool:
        """True if the span has zero length."""
        return self.length == 0

    def __len__(self) -> int:
        return self.length

    def to_json(self) -> dict:
        """Return the JSON form of this span."""
        return {"offset": self.offset, "length": self.length}

    @classmethod
    def from_json(cls, value: Any) -> "SourceSpan":
        """Parse a span from its JSON form."""
        if not isinstance(value, dict) or "offset" not in value or "length" not in value:
            raise ValueError(f"invalid source span: {value!r}")
        offset = SourceOffset.from_json(value["offset"])
        length = value["length"]
        if isinstance(length, bool) or not isinstance(length, int):
            raise ValueError(f"invalid span length: {length!r}")
        return cls(offset.offset, length)


@dataclass
class LabeledSpan:
    """A span with optional label text."""

    label: Optional[str]
    span: SourceSpan
    primary: bool = False

    def __post_init__(self) -> None:
        self.span = SourceSpan.from_value(self.span)

    @classmethod
    def new(cls, label: Optional[str], offset: int, length: int) -> "LabeledSpan":
        """Make a labelled span from an offset and a length."""
        return cls(label, SourceSpan(offset, length))

    @classmethod
    def with_span(cls, label: Optional[str], span: Any) -> "LabeledSpan":
        """Make a labelled span from anything convertible to a span."""
        return cls(label, SourceSpan.from_value(span))

    @classmethod
    def primary_with_span(cls, label: Optional[str], span: Any) -> "LabeledSpan":
        """Make a primary labelled span."""
        return cls(label, SourceSpan.from_value(span), primary=True)

    @classmethod
    def at(cls, span: Any, label: str) -> "LabeledSpan":
        """Make a label at the given span."""
        return cls.with_span(str(label), span)

    @classmethod
    def at_offset(cls, offset: int, label: str) -> "LabeledSpan":
        """Make a label pointing at a single offset."""
        return cls.new(str(label), offset, 0)

    @classmethod
    def underline(cls, span: Any) -> "LabeledSpan":
        """Make an unlabelled span that only underlines."""
        return cls.with_span(None, span)

    def offset(self) -> int:
        """The 0-based starting byte offset."""
        return self.span.offset

    def __len__(self) -> int:
        return self.span.length

    def is_empty(self) -> bool:
        """True if the span has zero length."""
        return self.span.is_empty()

    def to_json(self) -> dict:
        """Return the JSON form; the label is left out when absent."""
        result: dict = {}
        if self.label is not None:
            result["label"] = self.label
        result["span"] = self.span.to_json()
        result["primary"] = self.primary
        return result

    @classmethod
    def from_json(cls, value: Any) -> "LabeledSpan":
        """Parse a labelled span from its JSON form."""
        if not isinstance(value, dict) or "span" not in value or "primary" not in value:
            raise ValueError(f"invalid labeled span: {value!r}")
        label = value.get("label")
        if label is not None and not isinstance(label, str):
            raise ValueError(f"invalid label: {label!r}")
        primary = value["primary"]
        if not isinstance(primary, bool):
            raise ValueError(f"invalid primary flag: {primary!r}")
        return cls(label, SourceSpan.from_json(value["span"]), primary)


@dataclass(frozen=True)
class SpanContents:
    """Bytes read from a source for a span, with line and column information."""

    data: bytes
    span: SourceSpan
    line: int
    column: int
    line_count: int
    name: Optional[str] = None
    language: Optional[str] = None

    def with_language(self, language: str) -> "SpanContents":
        """Return a copy carrying the given language name."""
        return dataclasses.replace(self, language=str(language))