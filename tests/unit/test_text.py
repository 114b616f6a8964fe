"""Tests for title text helpers."""

import pytest

from cinegoods.utils.text import contains_keyword, css_attribute_value, strip_bracket_prefix


@pytest.mark.parametrize(
    "title, expected",
    [
        ("[스페셜] 웡카 아트카드 증정", "웡카 아트카드 증정"),
        ("[CGV] [스페셜]  듄: 파트 2", "듄: 파트 2"),
        ("웡카 [IMAX] 포스터", "웡카 [IMAX] 포스터"),
        ("[공지]", "[공지]"),
        ("  파묘  ", "파묘"),
    ],
)
def test_strip_bracket_prefix(title, expected):
    assert strip_bracket_prefix(title) == expected


class TestContainsKeyword:
    def test_substring_match(self):
        assert contains_keyword("웡카 시그니처아트카드 증정", ("아트카드",))

    def test_no_match(self):
        assert not contains_keyword("L.POINT 적립 이벤트", ("증정", "스페셜"))

    def test_case_sensitive(self):
        assert not contains_keyword("ttt 이벤트", ("TTT",))

    def test_empty_keywords_never_match(self):
        assert not contains_keyword("아무 이벤트", ("",))


def test_css_attribute_value_escapes_quotes_and_backslashes():
    assert css_attribute_value('a "b" \\c') == 'a \\"b\\" \\\\c'
