import logging
import pathlib
from typing import Any

import yaml

from tssync.classes import Occurrence
from tssync.exceptions import OccurrenceError

logger = logging.getLogger(__name__)


def _string(record: dict[str, Any], name: str, index: int, required: bool = True) -> str | None:
    value = record.get(name)
    if value is None:
        if required:
            raise OccurrenceError(f'missing "{name}"', index)
        return None
    if not isinstance(value, str):
        raise OccurrenceError(f'"{name}" must be a string, got {value!r}', index)
    return value


def _line(record: dict[str, Any], index: int) -> int:
    value = record.get("line")
    if isinstance(value, bool):
        raise OccurrenceError(f"invalid line number {value!r}", index)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise OccurrenceError(f"invalid line number {value!r}", index) from None
    if not isinstance(value, int) or value < 0:
        raise OccurrenceError(f"invalid line number {value!r}", index)
    return value


def from_mapping(record: Any, index: int) -> Occurrence:
    if not isinstance(record, dict):
        raise OccurrenceError(f"expected a mapping, got {type(record).__name__}", index)

    disambiguation = _string(record, "disambiguation", index, required=False)
    if disambiguation is None:
        disambiguation = _string(record, "comment", index, required=False)

    return Occurrence(
        context=_string(record, "context", index),
        source_text=_string(record, "source", index),
        file=_string(record, "file", index),
        line=_line(record, index),
        disambiguation=disambiguation or "",
        comment=_string(record, "extracomment", index, required=False),
    )


def parse_occurrences(records: Any) -> tuple[list[Occurrence], list[OccurrenceError]]:
    """Validate raw records, skipping the malformed ones.

    Returns the valid occurrences in input order and one error per skipped record.
    """
    if isinstance(records, dict) and "occurrences" in records:
        records = records["occurrences"]
    if records is None:
        records = []
    if not isinstance(records, list):
        raise OccurrenceError(f"expected a list of occurrences, got {type(records).__name__}")

    occurrences = []
    errors = []
    for index, record in enumerate(records):
        try:
            occurrences.append(from_mapping(record, index))
        except OccurrenceError as ex:
            logger.warning(f"Skipping {ex}")
            errors.append(ex)
    return occurrences, errors


def load_occurrences(path: str) -> tuple[list[Occurrence], list[OccurrenceError]]:
    logger.debug(f"Reading occurrences from {path}")
    try:
        records = yaml.safe_load(pathlib.Path(path).read_text("utf-8"))
    except yaml.YAMLError as ex:
        raise OccurrenceError(f"Error parsing {path}: {ex}") from None
    occurrences, errors = parse_occurrences(records)
    logger.info(f"Read {len(occurrences)} occurrences from {path}, skipped {len(errors)}")
    return occurrences, errors
