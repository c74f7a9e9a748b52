"""Reconcile a saved catalog with fresh occurrences; only ``purge`` ever removes messages."""
from collections.abc import Iterable
import copy
import logging

from tssync.classes import (
    Catalog,
    Context,
    Message,
    Occurrence,
    PurgeResult,
    Status,
    SyncResult,
)
from tssync.matcher import OccurrenceGroup, match

logger = logging.getLogger(__name__)


def _new_message(group: OccurrenceGroup) -> Message:
    return Message(
        source_text=group.source_text,
        disambiguation=group.disambiguation,
        locations=list(group.locations),
        comment=group.comment,
    )


def _carry_forward(previous: Message, group: OccurrenceGroup) -> Message:
    message = copy.deepcopy(previous)
    message.locations = list(group.locations)
    message.comment = group.comment
    message.reinstate()
    return message


def _orphan(previous: Message) -> Message:
    message = copy.deepcopy(previous)
    message.make_obsolete()
    return message


def sync(
    previous: Catalog | None,
    occurrences: Iterable[Occurrence],
    language: str | None = None,
    source_language: str | None = None,
) -> SyncResult:
    if previous is None:
        previous = Catalog()

    catalog = Catalog(
        language=previous.language or language,
        source_language=previous.source_language or source_language,
        version=previous.version,
    )
    result = SyncResult(catalog)

    matches, conflicts = match(previous, occurrences)
    result.warnings.extend(conflicts)

    for context_match in matches:
        context = Context(context_match.name)
        for message, group in context_match.previous:
            if group is None:
                if message.status != Status.OBSOLETE:
                    result.obsoleted += 1
                context.messages.append(_orphan(message))
                continue
            if message.status == Status.OBSOLETE:
                result.reinstated += 1
            result.matched += 1
            context.messages.append(_carry_forward(message, group))

        for group in context_match.new:
            result.new += 1
            context.messages.append(_new_message(group))

        catalog.contexts.append(context)

    logger.debug(
        f"Synced {catalog.language or 'catalog'}: {result.new} new, {result.matched} matched, "
        f"{result.reinstated} reinstated, {result.obsoleted} obsoleted"
    )
    return result


def purge(catalog: Catalog) -> PurgeResult:
    """Drop obsolete messages; the dropped ones are returned marked vanished."""
    purged = Catalog(
        language=catalog.language,
        source_language=catalog.source_language,
        version=catalog.version,
    )
    result = PurgeResult(purged)
    for context in catalog.contexts:
        kept = []
        for message in context.messages:
            if message.status == Status.OBSOLETE:
                removed = copy.deepcopy(message)
                removed.status = Status.VANISHED
                removed.prior_status = None
                result.removed.append((context.name, removed))
            else:
                kept.append(copy.deepcopy(message))
        if kept:
            purged.contexts.append(Context(context.name, kept))
    logger.debug(f"Purged {len(result.removed)} obsolete messages")
    return result
