"""Character-level diff between captured and expected output

Spans are tagged from the point of view of the program being graded:
"deleted" text was printed but not expected, "added" text was expected but
never printed, "common" text matches.
"""

import difflib
import html
from dataclasses import dataclass
from typing import List

COMMON = "common"
ADDED = "added"
DELETED = "deleted"

HTML_COLORS = {
    ADDED: "LightGreen",
    DELETED: "LightCoral",
    COMMON: "LightGray",
}


@dataclass(frozen=True)
class DiffSpan:
    """A maximal run of characters with the same edit kind"""
    kind: str
    text: str


def compute_diff(output: str, expected: str) -> List[DiffSpan]:
    """
    Edit script turning output into expected, as merged spans.

    Concatenating the common and deleted spans gives back output; the common
    and added spans give back expected.
    """
    matcher = difflib.SequenceMatcher(None, output, expected, autojunk=False)
    spans: List[DiffSpan] = []

    def push(kind: str, text: str):
        if not text:
            return
        if spans and spans[-1].kind == kind:
            spans[-1] = DiffSpan(kind, spans[-1].text + text)
        else:
            spans.append(DiffSpan(kind, text))

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            push(COMMON, output[i1:i2])
        else:
            # "replace" is a delete followed by an insert.
            push(DELETED, output[i1:i2])
            push(ADDED, expected[j1:j2])
    return spans


def make_visible(text: str) -> str:
    """Show NUL and other control characters (except newline and tab)."""
    out = []
    for char in text:
        if char == "\0":
            out.append("[NULL]")
        elif char in "\n\t":
            out.append(char)
        elif ord(char) < 32 or ord(char) == 127:
            out.append(f"\\x{ord(char):02X}")
        else:
            out.append(char)
    return "".join(out)


def render_text(spans: List[DiffSpan]) -> str:
    out = []
    for span in spans:
        text = make_visible(span.text)
        if span.kind == ADDED:
            out.append("{+" + text + "+}")
        elif span.kind == DELETED:
            out.append("[-" + text + "-]")
        else:
            out.append(text)
    return "".join(out)


def render_html(spans: List[DiffSpan]) -> str:
    return "".join(
        f"<span style=\"background-color:{HTML_COLORS[span.kind]}\">"
        f"{html.escape(make_visible(span.text))}</span>"
        for span in spans
    )
