from dataclasses import dataclass, field
from collections.abc import Iterable
import logging

from tssync.classes import Catalog, Location, Message, MessageKey, Occurrence
from tssync.exceptions import DuplicateKeyError

logger = logging.getLogger(__name__)


@dataclass
class OccurrenceGroup:
    key: MessageKey
    locations: list[Location] = field(default_factory=list)
    comment: str | None = None

    @property
    def source_text(self) -> str:
        return self.key[1]

    @property
    def disambiguation(self) -> str:
        return self.key[2]


@dataclass
class ContextMatch:
    name: str
    # every previous message in catalog order, with its group or None when orphaned
    previous: list[tuple[Message, OccurrenceGroup | None]] = field(default_factory=list)
    new: list[OccurrenceGroup] = field(default_factory=list)

    @property
    def matched(self) -> list[tuple[Message, OccurrenceGroup]]:
        return [(message, group) for message, group in self.previous if group is not None]

    @property
    def orphaned(self) -> list[Message]:
        return [message for message, group in self.previous if group is None]


def group_occurrences(
    occurrences: Iterable[Occurrence],
) -> tuple[dict[str, dict[tuple[str, str], OccurrenceGroup]], list[DuplicateKeyError]]:
    """Group occurrences by context, then by (source_text, disambiguation).

    Both levels keep first-seen order. Repeats of one (file, line) within a
    group collapse into one location.
    """
    contexts: dict[str, dict[tuple[str, str], OccurrenceGroup]] = {}
    conflicts = []
    for occurrence in occurrences:
        key = occurrence.key
        groups = contexts.setdefault(occurrence.context, {})
        group = groups.get(key[1:])
        if group is None:
            group = groups[key[1:]] = OccurrenceGroup(key)

        location = Location(occurrence.file, occurrence.line)
        if location not in group.locations:
            group.locations.append(location)

        if occurrence.comment is not None:
            if group.comment is not None and group.comment != occurrence.comment:
                conflict = DuplicateKeyError(key, kept=occurrence.comment, dropped=group.comment)
                logger.warning(f"Conflicting occurrences: {conflict}")
                conflicts.append(conflict)
            group.comment = occurrence.comment
    return contexts, conflicts


def match(
    previous: Catalog, occurrences: Iterable[Occurrence]
) -> tuple[list[ContextMatch], list[DuplicateKeyError]]:
    """Partition each context into matched pairs, new groups and orphaned messages.

    Contexts come back in the previous catalog's order, followed by contexts
    seen for the first time in discovery order.
    """
    grouped, conflicts = group_occurrences(occurrences)

    matches = []
    for context in previous.contexts:
        groups = grouped.pop(context.name, {})
        result = ContextMatch(context.name)
        for message in context.messages:
            result.previous.append((message, groups.pop(message.key, None)))
        result.new.extend(groups.values())
        matches.append(result)

    for name, groups in grouped.items():
        logger.debug(f"New context {name}")
        matches.append(ContextMatch(name, new=list(groups.values())))

    return matches, conflicts
