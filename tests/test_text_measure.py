from __future__ import annotations

from fps_keys_trainer.text_measure import (
    ELLIPSIS,
    RESET,
    Segment,
    display_width,
    fit,
    pad,
    parse,
    strip_styles,
    truncate,
)

BOLD_GREEN = "\x1b[1m\x1b[32m"


def test_parse_splits_styles_from_text() -> None:
    text = f"{BOLD_GREEN}ok{RESET} plain \x1b[4mu\x1b[24m"

    assert parse(text) == [
        Segment(BOLD_GREEN, "ok"),
        Segment(RESET, " plain "),
        Segment("\x1b[4m", "u"),
        Segment("\x1b[24m", ""),
    ]
    assert strip_styles(text) == "ok plain u"
    assert parse(text)[0].style == BOLD_GREEN


def test_width_ignores_control_sequences() -> None:
    assert display_width(f"{BOLD_GREEN}hello{RESET}") == 5
    assert display_width("\x1b]8;;https://example.com\x1b\\link\x1b]8;;\x1b\\") == 4
    assert display_width("") == 0


def test_wide_characters_take_two_cells() -> None:
    assert display_width("日本") == 4


def test_pad_counts_printable_width_only() -> None:
    padded = pad(f"{BOLD_GREEN}abc{RESET}", 6)

    assert padded == f"{BOLD_GREEN}abc{RESET}   "
    assert display_width(padded) == 6
    assert pad("toolong", 3) == "toolong"


def test_truncate_styled_line_keeps_prefix_and_width() -> None:
    text = f"{BOLD_GREEN}abcdefghijklmno{RESET}"
    assert display_width(text) == 15

    out = truncate(text, 10)

    assert out.startswith(BOLD_GREEN)
    assert strip_styles(out) == "abcdefghi" + ELLIPSIS
    assert display_width(out) == 10
    assert out.endswith(RESET)


def test_truncate_leaves_fitting_text_alone() -> None:
    text = f"{BOLD_GREEN}short{RESET}"

    assert truncate(text, 5) is text
    assert truncate(text, 20) is text


def test_truncate_plain_text_adds_no_reset() -> None:
    assert truncate("abcdefgh", 5) == "abcd" + ELLIPSIS


def test_truncate_keeps_inner_styles_of_kept_part() -> None:
    text = f"a\x1b[31mbc\x1b[0mdefgh"

    out = truncate(text, 5)

    assert out == f"a\x1b[31mbc\x1b[0md{ELLIPSIS}{RESET}"
    assert display_width(out) == 5


def test_truncate_wide_character_boundary_keeps_exact_width() -> None:
    out = truncate("ab日本語", 5)

    assert display_width(out) == 5
    assert strip_styles(out) == "ab日" + ELLIPSIS

    out = truncate("a日本語", 3)
    assert strip_styles(out) == "a " + ELLIPSIS
    assert display_width(out) == 3


def test_truncate_degenerate_widths() -> None:
    assert truncate(f"{BOLD_GREEN}abc{RESET}", 1) == f"{BOLD_GREEN}{ELLIPSIS}{RESET}"
    assert truncate("abc", 0) == ""


def test_fit_is_exact_width() -> None:
    for text in ("", "abc", f"{BOLD_GREEN}{'x' * 80}{RESET}"):
        assert display_width(fit(text, 12)) == 12
