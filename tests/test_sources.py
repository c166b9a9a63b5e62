import pytest

from fancydiag.protocol import OutOfBoundsError, SourceCode, SourceSpan, SpanContents
from fancydiag.sources import NamedSource, context_info, read_span


def test_basic():
    contents = read_span("foo\n", (0, 4), 0, 0)
    assert contents.data == b"foo\n"
    assert contents.line == 0
    assert contents.column == 0


def test_shifted():
    contents = read_span("foobar", (3, 3), 1, 1)
    assert contents.data == b"foobar"
    assert contents.line == 0
    assert contents.column == 0


def test_middle():
    contents = read_span("foo\nbar\nbaz\n", (4, 4), 0, 0)
    assert contents.data == b"bar\n"
    assert contents.line == 1
    assert contents.column == 0


def test_middle_of_line():
    contents = read_span("foo\nbarbar\nbaz\n", (7, 4), 0, 0)
    assert contents.data == b"bar\n"
    assert contents.line == 1
    assert contents.column == 3


def test_with_crlf():
    contents = read_span("foo\r\nbar\r\nbaz\r\n", (5, 5), 0, 0)
    assert contents.data == b"bar\r\n"
    assert contents.line == 1
    assert contents.column == 0


def test_with_context():
    contents = read_span("xxx\nfoo\nbar\nbaz\n\nyyy\n", (8, 3), 1, 1)
    assert contents.data == b"foo\nbar\nbaz\n"
    assert contents.line == 1
    assert contents.column == 0


def test_multiline_with_context():
    src = "aaa\nxxx\n\nfoo\nbar\nbaz\n\nyyy\nbbb\n"
    contents = read_span(src, (9, 11), 1, 1)
    assert contents.data == b"\nfoo\nbar\nbaz\n\n"
    assert contents.line == 2
    assert contents.column == 0
    assert contents.span == SourceSpan(8, 14)


def test_multiline_with_context_line_start():
    src = "one\ntwo\n\nthree\nfour\nfive\n\nsix\nseven\n"
    contents = read_span(src, (2, 0), 2, 2)
    assert contents.data == b"one\ntwo\n\n"
    assert contents.line == 0
    assert contents.column == 0
    assert contents.span == SourceSpan(0, 9)


@pytest.mark.parametrize("source", [b"foo\nbar\nbaz\n", bytearray(b"foo\nbar\nbaz\n")])
def test_bytes_sources_match_text(source):
    from_bytes = read_span(source, (4, 4), 0, 0)
    from_text = read_span("foo\nbar\nbaz\n", (4, 4), 0, 0)
    assert from_bytes == from_text


def test_context_info_accepts_span_object():
    contents = context_info(b"foo\nbarbar\nbaz\n", SourceSpan(7, 4), 0, 0)
    assert contents.data == b"bar\n"
    assert contents.span == SourceSpan(7, 4)
    assert contents.name is None


def test_out_of_bounds():
    with pytest.raises(OutOfBoundsError):
        read_span("foo", (10, 2), 0, 0)


def test_unsupported_source_type():
    with pytest.raises(TypeError):
        read_span(12345, (0, 1), 0, 0)


class _UpperSource(SourceCode):
    def read_span(self, span, context_lines_before, context_lines_after):
        return SpanContents(b"UP", span, 7, 3, 1)


def test_read_span_delegates_to_source_code():
    contents = read_span(_UpperSource(), (1, 2), 0, 0)
    assert contents.data == b"UP"
    assert contents.span == SourceSpan(1, 2)
    assert contents.line == 7


SNIPPET = "source\n  text\n    here"


def test_named_source_attaches_name():
    named = NamedSource("bad_file.rs", SNIPPET)
    contents = named.read_span(SourceSpan(9, 4), 0, 0)
    assert contents.name == "bad_file.rs"
    assert contents.data == b"text"
    assert contents.line == 1
    assert contents.column == 2
    assert contents.language is None


def test_named_source_inner_and_name():
    named = NamedSource("bad_file.rs", SNIPPET)
    assert named.inner() == SNIPPET
    assert named.name == "bad_file.rs"


def test_named_source_with_language():
    named = NamedSource("main.rs", SNIPPET).with_language("Rust")
    contents = named.read_span((0, 6), 0, 0)
    assert contents.language == "Rust"
    assert contents.data == b"source"


def test_with_language_leaves_original_unchanged():
    named = NamedSource("main.rs", SNIPPET)
    named.with_language("Rust")
    assert named.language is None


def test_nested_named_source_uses_outer_name():
    named = NamedSource("outer.txt", NamedSource("inner.txt", SNIPPET))
    contents = named.read_span((0, 6), 0, 0)
    assert contents.name == "outer.txt"


def test_named_source_out_of_bounds():
    with pytest.raises(OutOfBoundsError):
        NamedSource("f", "abc").read_span((5, 5), 0, 0)


def test_named_source_repr_redacts_source():
    text = repr(NamedSource("secret_file.rs", "hidden contents"))
    assert "hidden contents" not in text
    assert "<redacted>" in text
    assert "secret_file.rs" in text


def test_named_source_equality_and_hash():
    a = NamedSource("a.rs", "x")
    b = NamedSource("a.rs", "x")
    c = NamedSource("a.rs", "x").with_language("Rust")
    assert a == b
    assert hash(a) == hash(b)
    assert a != c