# fancydiag

Building blocks for rich diagnostic reporting: severities, byte-offset spans
into source code, labeled spans, and reading a span out of a piece of source
code together with surrounding context lines.

## Installation

```
pip install fancydiag
```

## The protocol

`fancydiag.protocol` defines:

- `Severity`: `ADVICE`, `WARNING` and `ERROR`, ordered in that way, with
  `to_json()` (giving `"Advice"`, `"Warning"`, `"Error"`) and `from_json()`,
  which raises `ValueError` for anything else.
- `SourceOffset`: a byte offset. `SourceOffset.from_location(source, line, col)`
  turns a 1-based line/column pair into a UTF-8 byte offset; out-of-range
  positions give the end of the source. `SourceOffset.from_current_location()`
  returns the caller's file name and the offset of the call within that file.
- `SourceSpan`: an offset and a length. `SourceSpan.from_value(...)` accepts a
  span, an int, an `(offset, length)` tuple, a `range` with step 1, or a
  `SourceOffset`. `len(span)` is its length; `is_empty()` tells whether it is
  zero.
- `LabeledSpan`: a span with an optional label and a primary flag, built with
  `LabeledSpan.new`, `at`, `at_offset`, `underline`, `with_span` or
  `primary_with_span`. Its `to_json()` leaves the label out when there is none.
- `Diagnostic`: an exception class whose `code()`, `severity()`, `help()`,
  `url()`, `source_code()`, `labels()`, `related()` and `diagnostic_source()`
  return what was passed as the keyword argument of the same name, or `None`.
  Subclasses may override any of them.
- `MessageDiagnostic` and `diagnostic_from_message(message)`: a diagnostic that
  is only a message.
- `SourceCode`: the base for anything that can be read by span, through
  `read_span(span, context_lines_before, context_lines_after)`.
- `SpanContents`: what reading a span returns: `data`, `span`, `line`, `column`,
  `line_count`, and optionally `name` and `language` (`with_language()` returns
  a copy with a language set).
- `OutOfBoundsError`: raised when a span reaches past the end of its source.

```python
from fancydiag.protocol import LabeledSpan, SourceOffset, SourceSpan

label = LabeledSpan.at(range(0, 3), "should be something else")
assert label == LabeledSpan.new("should be something else", 0, 3)

offset = SourceOffset.from_location("f\n\noo\r\nbar", 3, 2)
assert offset.to_json() == 4

span = SourceSpan.from_value((4, 4))
assert len(span) == 4
```

## Reading spans

`fancydiag.sources` provides `read_span(source, span, before, after)`, which
reads a span from `str`, `bytes` or any `SourceCode`, and `context_info(data,
span, before, after)`, which works on bytes directly. Lines may end in `\n`,
`\r` or `\r\n`. Both raise `OutOfBoundsError` when the span lies outside the
source.

`NamedSource(name, source)` wraps a source so that what it reads carries the
name; `with_language(language)` returns a copy that also carries a language,
and `inner()` returns the wrapped source.

```python
from fancydiag.sources import NamedSource, read_span

contents = read_span("foo\nbarbar\nbaz\n", (7, 4), 0, 0)
assert contents.data == b"bar\n"
assert (contents.line, contents.column) == (1, 3)

named = NamedSource("bad_file.rs", "source\n  text\n    here").with_language("Rust")
contents = named.read_span((9, 4), 1, 1)
assert contents.name == "bad_file.rs"
assert contents.language == "Rust"
```

## What this package does not do

It provides the data types and span reading only. It does not render
diagnostics: there is no graphical, narrated or JSON report output, no
error-wrapping or cause-chain helpers, and no hook that installs itself for
uncaught exceptions.

## Running the tests

```
pip install -e ".[test]"
pytest
```