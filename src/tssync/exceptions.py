class TsSyncError(Exception):
    pass


class ParseError(TsSyncError):
    def __init__(self, message: str, context: str | None = None):
        if context is not None:
            message = f"{message} (context {context!r})"
        super().__init__(message)
        self.context = context


class OccurrenceError(TsSyncError):
    def __init__(self, message: str, index: int | None = None):
        if index is not None:
            message = f"occurrence #{index}: {message}"
        super().__init__(message)
        self.index = index


class DuplicateKeyError(TsSyncError):
    """Two occurrences of one message disagree on metadata; the later one was kept."""

    def __init__(self, key, kept, dropped):
        context, source_text, disambiguation = key
        super().__init__(
            f'"{source_text}" in {context}'
            + (f" ({disambiguation})" if disambiguation else "")
            + f": comment {dropped!r} replaced by {kept!r}"
        )
        self.key = key
        self.kept = kept
        self.dropped = dropped


class ConfigError(TsSyncError):
    pass
