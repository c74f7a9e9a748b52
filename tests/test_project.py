# -*- coding: utf-8 -*-
"""
Tests for the per-language project runner.
"""

from pathlib import Path

import pytest

from tssync import project, store
from tssync.classes import LocationStyle, Occurrence, PurgeResult, Status, SyncResult
from tssync.exceptions import ConfigError, OccurrenceError, ParseError


@pytest.fixture
def languages(project_dirs):
    config, translations, _ = project_dirs
    return project.load_languages(str(config / "languages.cfg"), str(translations), "app")


OCCURRENCES = [
    Occurrence("MainWindow", "Open", "src/main.cpp", 12),
    Occurrence("MainWindow", "Quit", "src/main.cpp", 41),
]


class TestConfig:

    def test_languages(self, languages, project_dirs):
        _, translations, _ = project_dirs
        assert list(languages) == ["de", "fr"]
        assert languages["de"].name == "German"
        assert languages["de"].path == str(translations / "app_de.ts")

    def test_missing_languages_file(self, tmp_path):
        with pytest.raises(ConfigError):
            project.load_languages(str(tmp_path / "languages.cfg"), str(tmp_path), "app")

    def test_languages_section_required(self, tmp_path):
        path = tmp_path / "languages.cfg"
        path.write_text('"Phrases"\n{\n}\n', "utf-8")
        with pytest.raises(ConfigError):
            project.load_languages(str(path), str(tmp_path), "app")

    def test_select_languages(self, languages):
        assert [x.langid for x in project.select_languages(languages, ())] == ["de", "fr"]
        assert [x.langid for x in project.select_languages(languages, ("fr",))] == ["fr"]
        with pytest.raises(ConfigError):
            project.select_languages(languages, ("xx",))

    def test_config_defaults(self, tmp_path):
        config = project.load_config(str(tmp_path / "config.yml"))
        assert config["logging"]["level"] == "INFO"
        assert config["catalog"]["locations"] == "relative"

    def test_config_overrides(self, project_dirs):
        config_folder, _, _ = project_dirs
        config = project.load_config(str(config_folder / "config.yml"))
        assert config["logging"]["level"] == "DEBUG"
        assert config["catalog"]["source_language"] == "en"
        assert config["catalog"]["prefix"] == "app"

    def test_unknown_locations_style(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("catalog:\n  locations: sideways\n", "utf-8")
        with pytest.raises(ConfigError):
            project.load_config(str(path))


class TestRunSync:

    def test_creates_catalogs(self, languages):
        results = project.run_sync(languages=list(languages.values()), occurrences=OCCURRENCES, source_language="en")

        assert all(isinstance(x, SyncResult) for x in results.values())
        catalog = store.load(Path(languages["de"].path).read_bytes())
        assert catalog.language == "de"
        assert catalog.source_language == "en"
        assert catalog.count(Status.NEEDS_TRANSLATION) == 2

    def test_second_run_is_stable(self, languages):
        selected = list(languages.values())
        project.run_sync(languages=selected, occurrences=OCCURRENCES)
        first = Path(languages["fr"].path).read_bytes()
        project.run_sync(languages=selected, occurrences=OCCURRENCES, jobs=2)
        assert Path(languages["fr"].path).read_bytes() == first

    def test_broken_catalog_does_not_stop_others(self, languages):
        with open(languages["de"].path, "w", encoding="utf-8") as file:
            file.write("<TS><context>")

        results = project.run_sync(languages=list(languages.values()), occurrences=OCCURRENCES)

        assert isinstance(results["de"], ParseError)
        assert isinstance(results["fr"], SyncResult)
        with open(languages["de"].path, encoding="utf-8") as file:
            assert file.read() == "<TS><context>"

    def test_skipped_occurrences_are_reported(self, languages):
        skipped = [OccurrenceError("invalid line number 'seven'", 3)]
        results = project.run_sync(languages=[languages["fr"]], occurrences=OCCURRENCES, skipped=skipped)
        assert results["fr"].skipped == 1
        assert results["fr"].warnings == skipped

    def test_absolute_locations(self, languages):
        project.run_sync(languages=[languages["fr"]], occurrences=OCCURRENCES, style=LocationStyle.ABSOLUTE)
        with open(languages["fr"].path, encoding="utf-8") as file:
            text = file.read()
        assert '<location filename="src/main.cpp" line="41"/>' in text

    def test_write_failure_does_not_stop_others(self, languages):
        Path(languages["de"].path).mkdir()

        results = project.run_sync(languages=list(languages.values()), occurrences=OCCURRENCES, jobs=2)

        assert isinstance(results["de"], OSError)
        assert isinstance(results["fr"], SyncResult)
        assert Path(languages["fr"].path).is_file()


class TestRunPurge:

    def test_purge(self, languages):
        selected = [languages["de"]]
        project.run_sync(languages=selected, occurrences=OCCURRENCES)
        project.run_sync(languages=selected, occurrences=OCCURRENCES[:1])

        results = project.run_purge(languages=selected)

        assert isinstance(results["de"], PurgeResult)
        assert [m.source_text for _, m in results["de"].removed] == ["Quit"]
        catalog = store.load(Path(languages["de"].path).read_bytes())
        assert catalog.count() == 1

    def test_missing_catalog(self, languages):
        assert project.run_purge(languages=[languages["fr"]]) == {"fr": None}


class TestRunCheck:

    def test_report(self, languages):
        project.run_sync(languages=[languages["de"]], occurrences=OCCURRENCES)
        reports, markdown = project.run_check(languages=list(languages.values()))

        de, fr = reports
        assert de.counts[Status.NEEDS_TRANSLATION] == 2
        assert de.counts[Status.FINISHED] == 0
        assert fr.file_warning == "File missing"
        assert fr.error is None
        assert "| German (`de`) | app_de.ts | 0 | 2 | 0 |" in markdown
        assert "**French (fr)**: File missing" in markdown

    def test_unparsable_catalog(self, languages):
        with open(languages["fr"].path, "w", encoding="utf-8") as file:
            file.write("<nope/>")
        report = project.check_language(languages["fr"])
        assert report.error
        assert report.file_warning.startswith("Cannot be parsed")

