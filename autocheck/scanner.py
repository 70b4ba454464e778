"""Quote- and bracket-aware scanning of free-form text

Everything in autocheck that picks apart loosely structured text goes through
here: splitting check bodies into arguments, searching for comparators,
locating CHECK(...) markers in test code, ${name} substitution, key=value
setting lists, and string-literal escaping.

The core is `tokenize()`, a pure function from text to a flat token list in
which quoted literals are opaque and every token knows its bracket depth.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from autocheck.errors import ConfigurationError, ParseError

OPEN_BRACKETS = "({["
CLOSE_BRACKETS = ")}]"
QUOTES = "\"'"

ESCAPES = {
    "\0": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "'": "\\'",
    "\"": "\\\"",
    "\\": "\\\\",
}
UNESCAPES = {value[1]: key for key, value in ESCAPES.items()}

_VARIABLE_START = "${"
_IDENTIFIER_CHARS = re.compile(r"[A-Za-z0-9_]")


@dataclass(frozen=True)
class Token:
    """One lexical unit of scanned text"""
    kind: str    # "quote", "open", "close", "comma", "text"
    text: str
    start: int   # Offset of the token in the scanned text
    depth: int   # Bracket depth the token sits at


@dataclass(frozen=True)
class MarkerMatch:
    """A NAME(...) macro call found in source code"""
    name: str
    start: int   # Offset of the first character of NAME
    end: int     # Offset just past the closing paren
    body: str    # Text between the parens
    line: int    # 1-based line number of NAME


def _starts_quote(text: str, pos: int) -> bool:
    """Is there a string or char literal opening at pos?"""
    char = text[pos]
    if char == "\"":
        return True
    if char == "'":
        # 1'000'000 uses ' as a digit separator, not a char literal.
        return pos == 0 or not _IDENTIFIER_CHARS.match(text[pos - 1])
    return False


def _skip_quote(text: str, pos: int) -> int:
    """Return the offset just past the literal that opens at pos."""
    quote = text[pos]
    pos += 1
    while pos < len(text):
        if text[pos] == "\\":
            pos += 2
            continue
        if text[pos] == quote:
            return pos + 1
        pos += 1
    return len(text)  # Unterminated; the rest of the text is quoted.


def tokenize(text: str) -> List[Token]:
    """
    Split text into quote, bracket, comma and plain-text tokens.

    Quoted literals (with backslash escapes) are single opaque tokens, so no
    delimiter inside them is ever seen by later passes.
    """
    tokens: List[Token] = []
    depth = 0
    pos = 0
    text_start = None

    def flush_text(end: int):
        nonlocal text_start
        if text_start is not None:
            tokens.append(Token("text", text[text_start:end], text_start, depth))
            text_start = None

    while pos < len(text):
        char = text[pos]
        if char in QUOTES and _starts_quote(text, pos):
            flush_text(pos)
            end = _skip_quote(text, pos)
            tokens.append(Token("quote", text[pos:end], pos, depth))
            pos = end
            continue
        if char in OPEN_BRACKETS:
            flush_text(pos)
            tokens.append(Token("open", char, pos, depth))
            depth += 1
        elif char in CLOSE_BRACKETS:
            flush_text(pos)
            depth = max(0, depth - 1)
            tokens.append(Token("close", char, pos, depth))
        elif char == ",":
            flush_text(pos)
            tokens.append(Token("comma", char, pos, depth))
        elif text_start is None:
            text_start = pos
        pos += 1

    flush_text(len(text))
    return tokens


def split_arguments(text: str) -> List[str]:
    """
    Split text on top-level commas and trim each piece.

    Commas nested in brackets or inside quotes do not split. Blank text yields
    an empty list.
    """
    if not text.strip():
        return []

    args: List[str] = []
    current: List[str] = []
    for token in tokenize(text):
        if token.kind == "comma" and token.depth == 0:
            args.append("".join(current).strip())
            current = []
        else:
            current.append(token.text)
    args.append("".join(current).strip())
    return args


def find_operators(text: str, operators: Sequence[str],
                   top_level_only: bool = False,
                   ignore: Sequence[str] = ()) -> List[Tuple[int, str]]:
    """
    Find every occurrence of the given operators outside quoted literals.

    Matching is longest-first at each position and occurrences never overlap.
    Operators listed in `ignore` are consumed without being reported (so "->"
    never yields ">"). With top_level_only, only depth-0 text is searched.

    Returns:
        List of (offset, operator) in left-to-right order
    """
    candidates = sorted(set(operators) | set(ignore), key=len, reverse=True)
    found = []
    for token in tokenize(text):
        if token.kind != "text":
            continue
        if top_level_only and token.depth > 0:
            continue
        pos = 0
        while pos < len(token.text):
            for op in candidates:
                if token.text.startswith(op, pos):
                    if op not in ignore:
                        found.append((token.start + pos, op))
                    pos += len(op)
                    break
            else:
                pos += 1
    return found


def _skip_comment(code: str, pos: int) -> int:
    """If a comment opens at pos, return the offset past it; else pos."""
    if code.startswith("//", pos):
        end = code.find("\n", pos)
        return len(code) if end == -1 else end
    if code.startswith("/*", pos):
        end = code.find("*/", pos + 2)
        return len(code) if end == -1 else end + 2
    return pos


def _find_close_paren(code: str, open_pos: int) -> Optional[int]:
    """Offset of the paren matching the one at open_pos, or None."""
    depth = 0
    pos = open_pos
    while pos < len(code):
        char = code[pos]
        if char in QUOTES and _starts_quote(code, pos):
            pos = _skip_quote(code, pos)
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    return None


def find_markers(code: str, names: Iterable[str]) -> List[MarkerMatch]:
    """
    Locate NAME(...) macro calls in C++ source, in source order.

    Names must stand alone as identifiers (so MY_CHECK( is not CHECK(), and
    occurrences inside string literals or comments are ignored.
    """
    names = set(names)
    matches = []
    pos = 0
    while pos < len(code):
        char = code[pos]
        after_comment = _skip_comment(code, pos)
        if after_comment != pos:
            pos = after_comment
            continue
        if char in QUOTES and _starts_quote(code, pos):
            pos = _skip_quote(code, pos)
            continue
        if not _IDENTIFIER_CHARS.match(char):
            pos += 1
            continue

        # Read a whole identifier.
        end = pos
        while end < len(code) and _IDENTIFIER_CHARS.match(code[end]):
            end += 1
        word = code[pos:end]
        if word in names and code.startswith("(", end):
            line = code.count("\n", 0, pos) + 1
            close = _find_close_paren(code, end)
            if close is None:
                raise ParseError(f"{word}( has no matching ')'", f"Line {line}")
            matches.append(MarkerMatch(word, pos, close + 1, code[end + 1:close], line))
            pos = close + 1
        else:
            pos = end
    return matches


def apply_vars(line: str, variables: Mapping[str, str]) -> str:
    """Replace each ${name} in line with its value (names are case-insensitive)."""
    out = []
    next_pos = 0
    while True:
        var_start = line.find(_VARIABLE_START, next_pos)
        if var_start == -1:
            break
        out.append(line[next_pos:var_start])

        var_end = line.find("}", var_start)
        if var_end == -1:
            raise ConfigurationError(f"No end to variable on line: {line}")
        name = line[var_start + len(_VARIABLE_START):var_end].strip().lower()
        if name not in variables:
            raise ConfigurationError(f"Unknown variable used: {name}")
        out.append(variables[name])
        next_pos = var_end + 1

    out.append(line[next_pos:])
    return "".join(out)


def parse_assignments(text: str) -> Dict[str, str]:
    """
    Parse comma-separated key=value settings.

    Keys are lower-cased; quoted values are unescaped. Order is preserved.
    """
    settings: Dict[str, str] = {}
    for item in split_arguments(text):
        if not item:
            continue
        if "=" not in item:
            raise ConfigurationError(f"Expected key=value setting, found '{item}'")
        key, value = item.split("=", 1)
        key = key.strip().lower()
        value = value.strip()
        if value.startswith("\""):
            try:
                value = from_literal(value)
            except ValueError as e:
                raise ConfigurationError(f"Bad value for setting '{key}': {e}")
        settings[key] = value
    return settings


def escape(text: str) -> str:
    """Backslash-escape quotes, backslashes and line-breaking control characters."""
    return "".join(ESCAPES.get(char, char) for char in text)


def to_literal(text: str) -> str:
    """Render text as a double-quoted literal (valid in both C++ and the result log)."""
    return "\"" + escape(text) + "\""


def from_literal(literal: str) -> str:
    """
    Decode a quoted literal produced by to_literal().

    Raises:
        ValueError: if the literal is not quoted or has a bad escape
    """
    literal = literal.strip()
    if len(literal) < 2 or literal[0] not in QUOTES or literal[-1] != literal[0]:
        raise ValueError(f"not a quoted literal: {literal}")

    body = literal[1:-1]
    out = []
    pos = 0
    while pos < len(body):
        char = body[pos]
        if char != "\\":
            out.append(char)
            pos += 1
            continue
        if pos + 1 >= len(body):
            raise ValueError(f"dangling backslash in literal: {literal}")
        code = body[pos + 1]
        if code in UNESCAPES:
            out.append(UNESCAPES[code])
            pos += 2
        elif code == "x" and re.fullmatch(r"[0-9A-Fa-f]{2}", body[pos + 2:pos + 4]):
            out.append(chr(int(body[pos + 2:pos + 4], 16)))
            pos += 4
        else:
            raise ValueError(f"unknown escape '\\{code}' in literal: {literal}")
    return "".join(out)
