"""Tests for the tokenizer and whitespace stripping."""

import pytest

from plate.compiler import Tokenizer
from plate.compiler.spec import Segment, Tag
from plate.compiler.tokenizer import strip_leading, strip_trailing
from plate.exceptions import TemplateSyntaxError


def test_plain_text_is_one_segment():
    assert list(Tokenizer("plain text\nsecond line")) == [
        Segment(text="plain text\nsecond line", line=1)
    ]


def test_tag_splits_text():
    segments = list(Tokenizer("a [[ x = 1 ]] b"))

    assert len(segments) == 2
    first, rest = segments
    assert first.text == "a "
    assert first.tag == Tag(
        strip_pre="", is_comment=False, body="x = 1", strip_post="", line=1
    )
    assert rest == Segment(text=" b", line=1)


def test_tag_body_may_span_lines():
    (segment,) = list(Tokenizer("[[\nx = 1\ny = 2\n]]"))

    assert segment.tag.body == "x = 1\ny = 2"
    assert segment.tag.lead == "\n"
    assert segment.tag.trail == "\n"


def test_comment_tag():
    segments = list(Tokenizer("[[# ignore me ]]X"))

    assert segments[0].tag.is_comment
    assert segments[0].tag.body == "ignore me"
    assert segments[1].text == "X"


def test_strip_markers_are_parsed():
    (segment, _) = list(Tokenizer("[[-- pass +]]x"))

    assert segment.tag.strip_pre == "--"
    assert segment.tag.strip_post == "+"
    assert segment.tag.body == "pass"


def test_single_minus_keeps_final_newline():
    (segment, rest) = list(Tokenizer("A\n  \n[[- pass ]]B"))

    assert segment.text == "A\n"
    assert segment.stripped_pre == "\n  "
    assert rest.text == "B"


@pytest.mark.parametrize(
    "text, marker, kept, stripped",
    [
        ("A\n  \n", "-", "A\n", "\n  "),
        ("A\n \n \n", "--", "A\n", "\n \n "),
        ("A\n \n \n", "+", "A", "\n \n \n"),
        ("A\nB\n", "-", "A\nB", "\n"),
        ("A  ", "-", "A  ", ""),
    ],
)
def test_strip_trailing(text, marker, kept, stripped):
    assert strip_trailing(text, marker) == (kept, stripped)


def test_plus_strips_all_blank_line_groups():
    (segment, _) = list(Tokenizer("A\n  \n\t\n[[+ pass ]]B"))

    assert segment.text == "A"
    assert segment.stripped_pre == "\n  \n\t\n"


def test_strip_stops_at_nonblank_line():
    (segment,) = list(Tokenizer("A\nB\n[[--- pass ]]"))

    assert segment.text == "A\nB"


def test_post_strip_consumes_following_blank_lines():
    segments = list(Tokenizer("[[ pass -]]  \n\nB"))

    assert segments[0].stripped_post == "  \n"
    assert segments[1] == Segment(text="\nB", line=2)


def test_post_strip_all():
    segments = list(Tokenizer("[[ pass +]]\n \n\nB"))

    assert segments[0].stripped_post == "\n \n\n"
    assert segments[1].text == "B"
    assert segments[1].line == 4


def test_strip_helpers():
    assert strip_trailing("x\n\n", "") == ("x\n\n", "")
    assert strip_trailing("x\n\n", "-") == ("x\n", "\n")
    assert strip_trailing("x\r\n\t", "+") == ("x", "\r\n\t")
    assert strip_leading("\n\nx", 0, "-") == 1
    assert strip_leading("\n\nx", 0, "+") == 2
    assert strip_leading("x\n", 0, "+") == 0


def test_tag_lines_are_tracked():
    segments = list(Tokenizer("one\ntwo [[ a = 1 ]]\nthree\n[[ b = 2 ]]"))

    assert segments[0].tag.line == 2
    assert segments[1].tag.line == 4
    assert segments[1].line == 2


def test_missing_space_after_start_marker():
    with pytest.raises(TemplateSyntaxError) as excinfo:
        list(Tokenizer("[[missing space]]"))

    assert "missing space after start marker [[" in str(excinfo.value)
    assert excinfo.value.line == 1


def test_missing_space_before_end_marker():
    with pytest.raises(TemplateSyntaxError) as excinfo:
        list(Tokenizer("x\n[[ foo]]"))

    assert "missing space before end marker ]]" in str(excinfo.value)
    assert excinfo.value.line == 2


def test_end_marker_inside_body():
    with pytest.raises(TemplateSyntaxError, match="missing space before end marker"):
        list(Tokenizer("[[ a]] b ]]"))


def test_missing_end_marker():
    with pytest.raises(TemplateSyntaxError, match="missing ending marker"):
        list(Tokenizer("x [[ foo"))


def test_start_marker_inside_body():
    with pytest.raises(TemplateSyntaxError, match="missing ending marker"):
        list(Tokenizer("[[ a [[ b ]]"))


def test_extraneous_end_marker():
    with pytest.raises(TemplateSyntaxError) as excinfo:
        list(Tokenizer("a\nb ]] c"))

    assert "extraneous end marker ]]" in str(excinfo.value)
    assert excinfo.value.line == 2


def test_single_space_tag_is_rejected():
    with pytest.raises(TemplateSyntaxError, match="missing space before end marker"):
        list(Tokenizer("[[ ]]"))
