from dataclasses import dataclass, field
from enum import Enum


class Status(Enum):
    NEEDS_TRANSLATION = "unfinished"
    FINISHED = "finished"
    OBSOLETE = "obsolete"
    VANISHED = "vanished"


class LocationStyle(Enum):
    RELATIVE = "relative"
    ABSOLUTE = "absolute"
    NONE = "none"


# (context, source_text, disambiguation)
MessageKey = tuple[str, str, str]


@dataclass(frozen=True)
class Location:
    file: str
    line: int


@dataclass(frozen=True)
class EncodedLocation:
    """A location as persisted: file only when it changed, line relative to the previous one.

    With ``absolute`` set, ``line_delta`` holds the plain line number instead.
    """

    file: str | None
    line_delta: int
    absolute: bool = False


@dataclass(frozen=True)
class Occurrence:
    context: str
    source_text: str
    file: str
    line: int
    disambiguation: str = ""
    comment: str | None = None

    @property
    def key(self) -> MessageKey:
        return (self.context, self.source_text, self.disambiguation or "")


@dataclass
class Message:
    source_text: str
    disambiguation: str = ""
    translation: str = ""
    status: Status = Status.NEEDS_TRANSLATION
    locations: list[Location] = field(default_factory=list)
    prior_status: Status | None = None
    comment: str | None = None
    translator_comment: str | None = None

    def __post_init__(self):
        if self.disambiguation is None:
            self.disambiguation = ""
        self.comment = self.comment or None
        self.translator_comment = self.translator_comment or None
        if self.status != Status.OBSOLETE:
            self.prior_status = None
        elif self.prior_status is None:
            self.prior_status = Status.FINISHED

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_text, self.disambiguation)

    def make_obsolete(self) -> None:
        if self.status == Status.OBSOLETE:
            return
        self.prior_status = self.status
        self.status = Status.OBSOLETE

    def reinstate(self) -> None:
        if self.status != Status.OBSOLETE:
            return
        self.status = self.prior_status or Status.NEEDS_TRANSLATION
        self.prior_status = None


@dataclass
class Context:
    name: str
    messages: list[Message] = field(default_factory=list)

    def find(self, source_text: str, disambiguation: str | None = "") -> Message | None:
        key = (source_text, disambiguation or "")
        return next((x for x in self.messages if x.key == key), None)


@dataclass
class Catalog:
    contexts: list[Context] = field(default_factory=list)
    language: str | None = None
    source_language: str | None = None
    version: str = "2.1"

    def context(self, name: str) -> Context | None:
        return next((x for x in self.contexts if x.name == name), None)

    def messages(self):
        for context in self.contexts:
            for message in context.messages:
                yield context, message

    def count(self, status: Status | None = None) -> int:
        return sum(
            1 for _, message in self.messages() if status is None or message.status == status
        )


@dataclass
class SyncResult:
    catalog: Catalog
    new: int = 0
    matched: int = 0
    reinstated: int = 0
    obsoleted: int = 0
    skipped: int = 0
    warnings: list[Exception] = field(default_factory=list)


@dataclass
class PurgeResult:
    catalog: Catalog
    removed: list[tuple[str, Message]] = field(default_factory=list)


@dataclass
class Language:
    langid: str
    name: str
    path: str


@dataclass
class Report:
    langid: str
    filename: str
    file_warning: str = ""
    error: str | None = None
    counts: dict[Status, int] = field(default_factory=dict)
