# -*- coding: utf-8 -*-
"""
Shared fixtures for the tssync tests.
"""

import pytest
from pathlib import Path

from tssync.classes import Catalog, Context, Location, Message, Occurrence, Status

DATA = Path(__file__).parent / "data"


@pytest.fixture
def sample_bytes() -> bytes:
    """A catalog written by lupdate with relative locations."""
    return (DATA / "challenge_ja.ts").read_bytes()


@pytest.fixture
def hello_catalog() -> Catalog:
    """One finished and one unfinished message in a single context."""
    return Catalog(
        contexts=[
            Context(
                "Ctx",
                [
                    Message(
                        "Hello",
                        translation="Bonjour",
                        status=Status.FINISHED,
                        locations=[Location("a.c", 10)],
                    ),
                    Message("Goodbye", locations=[Location("a.c", 20)]),
                ],
            )
        ],
        language="fr",
    )


@pytest.fixture
def hello_occurrences() -> list:
    return [
        Occurrence("Ctx", "Hello", "a.c", 10),
        Occurrence("Ctx", "Goodbye", "a.c", 20),
    ]


def _occurrences_of(catalog: Catalog) -> list:
    return [
        Occurrence(
            context.name,
            message.source_text,
            location.file,
            location.line,
            message.disambiguation,
            message.comment,
        )
        for context, message in catalog.messages()
        if message.status != Status.OBSOLETE
        for location in message.locations
    ]


@pytest.fixture
def occurrences_of():
    """Builds the occurrence list a catalog was last synced with."""
    return _occurrences_of


LANGUAGES_CFG = """"Languages"
{
	"de"		"German"
	"fr"		"French"
}
"""

CONFIG_YML = """logging:
  level: DEBUG
  format: "%(levelname)s %(name)s: %(message)s"
  datefmt: "%H:%M:%S"
catalog:
  prefix: app
  locations: relative
  source_language: en
"""

OCCURRENCES_YML = """- context: MainWindow
  source: Open
  file: src/main.cpp
  line: 12
- context: MainWindow
  source: Open
  disambiguation: verb
  file: src/main.cpp
  line: 30
- context: MainWindow
  source: Quit
  file: src/main.cpp
  line: 41
- context: Dialog
  source: Ok
  file: src/dialog.cpp
  line: seven
"""


@pytest.fixture
def project_dirs(tmp_path: Path):
    """A config folder, an empty translations folder and an occurrence file."""
    config = tmp_path / "config"
    config.mkdir()
    (config / "languages.cfg").write_text(LANGUAGES_CFG, "utf-8")
    (config / "config.yml").write_text(CONFIG_YML, "utf-8")
    translations = tmp_path / "translations"
    translations.mkdir()
    occurrences = tmp_path / "strings.yml"
    occurrences.write_text(OCCURRENCES_YML, "utf-8")
    return config, translations, occurrences
