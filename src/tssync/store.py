"""Reading and writing catalogs in the Qt Linguist ``.ts`` format."""
import logging
import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape

from tssync.classes import (
    Catalog,
    Context,
    EncodedLocation,
    LocationStyle,
    Message,
    Status,
)
from tssync.exceptions import ParseError
from tssync.locations import START, decode_step, encode_catalog, fold, format_line, parse_line

logger = logging.getLogger(__name__)

# translation "type" attribute -> (status, prior status)
MARKERS: dict[str | None, tuple[Status, Status | None]] = {
    None: (Status.FINISHED, None),
    "unfinished": (Status.NEEDS_TRANSLATION, None),
    "obsolete": (Status.OBSOLETE, Status.FINISHED),
    "vanished": (Status.OBSOLETE, Status.NEEDS_TRANSLATION),
}

# XML parsers normalize raw \r, and whitespace in attribute values, on load
TEXT_ENTITIES = {'"': "&quot;", "'": "&apos;", "\r": "&#13;"}
ATTR_ENTITIES = {'"': "&quot;", "\r": "&#13;", "\n": "&#10;", "\t": "&#9;"}


def _marker(message: Message) -> str | None:
    if message.status == Status.NEEDS_TRANSLATION:
        return "unfinished"
    if message.status == Status.OBSOLETE:
        return "vanished" if message.prior_status == Status.NEEDS_TRANSLATION else "obsolete"
    if message.status == Status.VANISHED:
        raise ValueError(f'vanished message "{message.source_text}" cannot be stored')
    return None


def _parse_message(element: ET.Element, context_name: str, cursor):
    source = element.find("source")
    if source is None:
        raise ParseError("message without a source", context=context_name)
    if element.get("numerus") == "yes":
        raise ParseError(
            f'plural message "{source.text or ""}" is not supported', context=context_name
        )

    translation = element.find("translation")
    marker = translation.get("type") if translation is not None else "unfinished"
    if marker not in MARKERS:
        raise ParseError(f"unknown translation type {marker!r}", context=context_name)
    status, prior_status = MARKERS[marker]

    encoded = []
    for location in element.findall("location"):
        try:
            value, absolute = parse_line(location.get("line"))
        except ParseError as ex:
            raise ParseError(str(ex), context=context_name) from None
        encoded.append(EncodedLocation(location.get("filename"), value, absolute))

    try:
        cursor, locations = fold(decode_step, cursor, encoded)
    except ParseError as ex:
        raise ParseError(str(ex), context=context_name) from None

    message = Message(
        source_text=source.text or "",
        disambiguation=element.findtext("comment") or "",
        translation=(translation.text or "") if translation is not None else "",
        status=status,
        locations=locations,
        prior_status=prior_status,
        comment=element.findtext("extracomment"),
        translator_comment=element.findtext("translatorcomment"),
    )
    return cursor, message


def load(data: bytes | str) -> Catalog:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as ex:
        raise ParseError(f"malformed catalog: {ex}") from None

    if root.tag != "TS":
        raise ParseError(f"expected a <TS> root element, found <{root.tag}>")

    catalog = Catalog(
        language=root.get("language") or None,
        source_language=root.get("sourcelanguage") or None,
        version=root.get("version") or "2.1",
    )
    cursor = START
    for element in root.findall("context"):
        name = element.findtext("name")
        if name is None:
            raise ParseError("context without a name")
        if catalog.context(name) is not None:
            raise ParseError("duplicate context", context=name)

        context = Context(name)
        seen = set()
        for message_element in element.findall("message"):
            cursor, message = _parse_message(message_element, name, cursor)
            if message.key in seen:
                raise ParseError(f'duplicate message "{message.source_text}"', context=name)
            seen.add(message.key)
            context.messages.append(message)
        catalog.contexts.append(context)

    logger.debug(f"Loaded {catalog.count()} messages in {len(catalog.contexts)} contexts")
    return catalog


def _text(value: str) -> str:
    return escape(value, TEXT_ENTITIES)


def _attr(value: str) -> str:
    return escape(value, ATTR_ENTITIES)


def _location(encoded: EncodedLocation) -> str:
    filename = f' filename="{_attr(encoded.file)}"' if encoded.file is not None else ""
    return f'        <location{filename} line="{format_line(encoded)}"/>'


def dump(catalog: Catalog, style: LocationStyle = LocationStyle.RELATIVE) -> bytes:
    if style == LocationStyle.NONE:
        encoded_locations = None
    else:
        encoded_locations = iter(encode_catalog(catalog, absolute=style == LocationStyle.ABSOLUTE))

    header = f'<TS version="{_attr(catalog.version)}"'
    if catalog.language:
        header += f' language="{_attr(catalog.language)}"'
    if catalog.source_language:
        header += f' sourcelanguage="{_attr(catalog.source_language)}"'
    lines = ['<?xml version="1.0" encoding="utf-8"?>', "<!DOCTYPE TS>", header + ">"]

    for context in catalog.contexts:
        lines.append("<context>")
        lines.append(f"    <name>{_text(context.name)}</name>")
        for message in context.messages:
            marker = _marker(message)
            encoded = next(encoded_locations) if encoded_locations is not None else []
            lines.append("    <message>")
            lines.extend(_location(x) for x in encoded)
            lines.append(f"        <source>{_text(message.source_text)}</source>")
            if message.disambiguation:
                lines.append(f"        <comment>{_text(message.disambiguation)}</comment>")
            if message.comment:
                lines.append(f"        <extracomment>{_text(message.comment)}</extracomment>")
            if message.translator_comment:
                lines.append(
                    f"        <translatorcomment>{_text(message.translator_comment)}</translatorcomment>"
                )
            type_attr = f' type="{marker}"' if marker else ""
            lines.append(
                f"        <translation{type_attr}>{_text(message.translation)}</translation>"
            )
            lines.append("    </message>")
        lines.append("</context>")
    lines.append("</TS>")
    return ("\n".join(lines) + "\n").encode("utf-8")
