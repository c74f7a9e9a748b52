"""Location delta encoding as lupdate writes it: one fold over the catalog, a line counter per file."""
from collections.abc import Callable, Iterable, Mapping
from typing import TypeVar

from tssync.classes import Catalog, EncodedLocation, Location
from tssync.exceptions import ParseError

T = TypeVar("T")
U = TypeVar("U")

Cursor = tuple[str | None, Mapping[str, int]]

START: Cursor = (None, {})


def _advance(cursor: Cursor, location: Location) -> Cursor:
    _, lines = cursor
    return location.file, {**lines, location.file: location.line}


def encode_step(cursor: Cursor, location: Location) -> tuple[Cursor, EncodedLocation]:
    current_file, lines = cursor
    file = location.file if location.file != current_file else None
    delta = location.line - lines.get(location.file, 0)
    return _advance(cursor, location), EncodedLocation(file, delta)


def encode_absolute_step(cursor: Cursor, location: Location) -> tuple[Cursor, EncodedLocation]:
    return _advance(cursor, location), EncodedLocation(location.file, location.line, absolute=True)


def decode_step(cursor: Cursor, encoded: EncodedLocation) -> tuple[Cursor, Location]:
    current_file, lines = cursor
    file = encoded.file if encoded.file is not None else current_file
    if file is None:
        raise ParseError("location does not name a file and no previous location did")
    line = encoded.line_delta if encoded.absolute else lines.get(file, 0) + encoded.line_delta
    if line < 0:
        raise ParseError(f"location in {file} resolves to negative line {line}")
    location = Location(file, line)
    return _advance(cursor, location), location


def fold(
    step: Callable[[Cursor, T], tuple[Cursor, U]], cursor: Cursor, items: Iterable[T]
) -> tuple[Cursor, list[U]]:
    out = []
    for item in items:
        cursor, value = step(cursor, item)
        out.append(value)
    return cursor, out


def fold_groups(
    step: Callable[[Cursor, T], tuple[Cursor, U]],
    groups: Iterable[Iterable[T]],
    cursor: Cursor = START,
) -> tuple[Cursor, list[list[U]]]:
    """Run ``step`` across consecutive groups, carrying the cursor from one group into the next."""
    out = []
    for group in groups:
        cursor, values = fold(step, cursor, group)
        out.append(values)
    return cursor, out


def encode(groups: Iterable[Iterable[Location]], absolute: bool = False) -> list[list[EncodedLocation]]:
    _, encoded = fold_groups(encode_absolute_step if absolute else encode_step, groups)
    return encoded


def decode(groups: Iterable[Iterable[EncodedLocation]]) -> list[list[Location]]:
    _, decoded = fold_groups(decode_step, groups)
    return decoded


def encode_catalog(catalog: Catalog, absolute: bool = False) -> list[list[EncodedLocation]]:
    """One encoded list per message, in catalog iteration order."""
    return encode((message.locations for _, message in catalog.messages()), absolute)


def format_line(encoded: EncodedLocation) -> str:
    if encoded.absolute:
        return str(encoded.line_delta)
    return f"{encoded.line_delta:+d}"


def parse_line(text: str | None) -> tuple[int, bool]:
    """Returns ``(value, absolute)``; a leading sign marks a relative line."""
    if text is None or not text.strip():
        raise ParseError("location without a line")
    text = text.strip()
    try:
        value = int(text)
    except ValueError:
        raise ParseError(f"invalid location line {text!r}") from None
    return value, text[0] not in "+-"
