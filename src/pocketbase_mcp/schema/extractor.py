"""Interface extractor for pocketbase-mcp.

Pulls type blocks out of TypeScript-like source text. This is a best-effort
scanner, not a TypeScript parser: it recognizes the name/kind/optional/array
signals of each member and silently skips anything else.

Recognized block headers:
  interface Product {          # optionally exported / with extends clause
  type Product = {
  Product {                    # bare diagram-style block

Recognized members (separated by ';', ',' or newlines):
  name: string                 # required
  name?: number                # optional
  tags: string[]               # array
  tags?: Array<string>         # array
  meta: { nested: string }     # object
"""

import re
from dataclasses import dataclass
from typing import Iterator


# --- Data Model ---


@dataclass(frozen=True)
class FieldDescription:
    """A member extracted from a type block."""

    name: str
    kind: str  # string, number, boolean, date, array, object
    optional: bool
    is_array: bool = False
    type_token: str = ""  # The raw kind token as written (e.g. "Date", "Author")


@dataclass(frozen=True)
class ExtractedType:
    """One type block with its members in declaration order."""

    name: str
    fields: tuple[FieldDescription, ...]


# --- Kind normalization ---
# Tokens not listed here are references to other types. They are stored as
# their id, so they normalize to "string".

KIND_TOKENS = {
    "string": "string",
    "String": "string",
    "number": "number",
    "Number": "number",
    "bigint": "number",
    "boolean": "boolean",
    "Boolean": "boolean",
    "Date": "date",
    "date": "date",
    "object": "object",
    "Object": "object",
    "Record": "object",
    "any": "object",
    "unknown": "object",
}


def normalize_kind(type_token: str) -> str:
    """Map a written type token onto a primitive kind."""
    return KIND_TOKENS.get(type_token, "string")


# --- Scanning patterns ---

_HEADER_RE = re.compile(
    r"(?:\bexport\s+)?(?:\b(?:interface|type)\s+)?"
    r"\b(?P<name>[A-Za-z_]\w*)"
    r"(?:\s*<[^<>{}]*>)?"  # generic parameters
    r"(?:\s+extends\s+[^{}=;]+?)?"
    r"\s*=?\s*\{"
)

_MEMBER_RE = re.compile(
    r"^(?:readonly\s+)?"
    r"(?P<name>[A-Za-z_$][\w$]*)(?P<optional>\?)?\s*:\s*"
    r"(?:(?P<generic>Array|ReadonlyArray)\s*<\s*(?P<inner>[A-Za-z_]\w*)\s*>"
    r"|(?P<kind>[A-Za-z_]\w*)(?:\s*<[^{}]*>)?(?P<array>(?:\s*\[\s*\])+)?)$"
)

_NESTED_OBJECT_RE = re.compile(
    r"^(?:readonly\s+)?(?P<name>[A-Za-z_$][\w$]*)(?P<optional>\?)?\s*:\s*\{.*\}(?P<array>\s*\[\s*\])?$",
    re.DOTALL,
)

_COMMENT_RE = re.compile(r"//[^\n]*|/\*.*?\*/", re.DOTALL)

# Keywords that can precede "{" but never name a type block.
_NON_TYPE_WORDS = frozenset(
    {"if", "else", "for", "while", "do", "switch", "try", "catch", "finally", "return"}
)


# --- Block scanning ---


def _find_block_end(text: str, open_pos: int) -> int:
    """Return the index of the brace closing the block opened at open_pos, or -1."""
    depth = 0
    for pos in range(open_pos, len(text)):
        char = text[pos]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return pos
    return -1


def _split_members(body: str) -> Iterator[str]:
    """Split a block body on top-level separators, keeping nested braces intact."""
    depth = 0
    current: list[str] = []
    for char in body:
        if char in "{<":
            depth += 1
        elif char in "}>":
            depth = max(depth - 1, 0)
        if depth == 0 and char in ";,\n":
            chunk = "".join(current).strip()
            if chunk:
                yield chunk
            current = []
            continue
        current.append(char)
    chunk = "".join(current).strip()
    if chunk:
        yield chunk


def parse_member(member: str) -> FieldDescription | None:
    """Parse a single member declaration; None if the syntax is not recognized."""
    match = _MEMBER_RE.match(member)
    if match:
        if match.group("generic"):
            token = match.group("inner")
            is_array = True
        else:
            token = match.group("kind")
            is_array = bool(match.group("array"))
        kind = "array" if is_array else normalize_kind(token)
        return FieldDescription(
            name=match.group("name"),
            kind=kind,
            optional=bool(match.group("optional")),
            is_array=is_array,
            type_token=token,
        )

    match = _NESTED_OBJECT_RE.match(member)
    if match:
        is_array = bool(match.group("array"))
        return FieldDescription(
            name=match.group("name"),
            kind="array" if is_array else "object",
            optional=bool(match.group("optional")),
            is_array=is_array,
            type_token="object",
        )

    return None


class InterfaceExtractor:
    """Restartable, lazy iterable over the type blocks found in source text.

    Every iteration rescans the text from the start, so iterating twice yields
    the same sequence.

    Usage:
        for extracted in InterfaceExtractor(source):
            print(extracted.name, [f.name for f in extracted.fields])
    """

    def __init__(self, source: str):
        self.source = source

    def __iter__(self) -> Iterator[ExtractedType]:
        text = _COMMENT_RE.sub("", self.source or "")
        pos = 0
        while True:
            match = _HEADER_RE.search(text, pos)
            if not match:
                return
            open_pos = match.end() - 1
            close_pos = _find_block_end(text, open_pos)
            if close_pos == -1:
                return

            name = match.group("name")
            if name in _NON_TYPE_WORDS:
                pos = open_pos + 1
                continue

            body = text[open_pos + 1 : close_pos]
            fields = tuple(
                description
                for description in map(parse_member, _split_members(body))
                if description is not None
            )
            yield ExtractedType(name=name, fields=fields)
            pos = close_pos + 1


def extract_interfaces(source: str) -> InterfaceExtractor:
    """Return a restartable iterable of the type blocks in source."""
    return InterfaceExtractor(source)
