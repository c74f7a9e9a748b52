#!/usr/bin/python3
from concurrent.futures import ThreadPoolExecutor
import logging
import pathlib
from typing import Any

import vdf
import yaml

from tssync import store
from tssync.classes import (
    Catalog,
    Language,
    LocationStyle,
    Occurrence,
    PurgeResult,
    Report,
    Status,
    SyncResult,
)
from tssync.exceptions import ConfigError, OccurrenceError, TsSyncError
from tssync.synchronizer import purge, sync

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
    "catalog": {
        "prefix": "app",
        "locations": "relative",
        "source_language": None,
    },
}


def load_config(config_file_path: str) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(pathlib.Path(config_file_path).read_text("utf-8")) or {}
    except FileNotFoundError:
        logger.warning(f"{config_file_path} not found, using defaults")
        raw = {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Error parsing {config_file_path}: {exc}") from None
    if not isinstance(raw, dict):
        raise ConfigError(f"{config_file_path} must contain a mapping")

    config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}
    for section, values in raw.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values
    try:
        LocationStyle(config["catalog"]["locations"])
    except ValueError:
        raise ConfigError(
            f'Unknown locations style "{config["catalog"]["locations"]}" in {config_file_path}'
        ) from None
    return config


def load_languages(
    language_cfg_path: str, translation_folder_path: str, prefix: str
) -> dict[str, Language]:
    try:
        languages_cfg = vdf.loads(pathlib.Path(language_cfg_path).read_text("utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"{language_cfg_path} not found") from None
    except Exception as ex:
        raise ConfigError(f"Error parsing {language_cfg_path}: {ex}") from None

    if "Languages" not in languages_cfg:
        raise ConfigError(f'{language_cfg_path} does not start with a "Languages" section')

    available_languages: dict[str, Language] = {}
    for langid, name in languages_cfg["Languages"].items():
        path = str(pathlib.Path(translation_folder_path) / f"{prefix}_{langid}.ts")
        available_languages[langid] = Language(langid, name, path)
    logger.info(f"Available languages: {len(available_languages)}")
    return available_languages


def select_languages(available: dict[str, Language], langids: tuple[str, ...]) -> list[Language]:
    if not langids:
        return list(available.values())
    unknown = [x for x in langids if x not in available]
    if unknown:
        raise ConfigError(f"Unknown language(s): {', '.join(unknown)}")
    return [available[x] for x in langids]


def read_catalog(path: str) -> Catalog | None:
    file = pathlib.Path(path)
    if not file.is_file():
        return None
    logger.debug(f"Parsing {file}")
    return store.load(file.read_bytes())


def write_catalog(path: str, catalog: Catalog, style: LocationStyle) -> None:
    file = pathlib.Path(path)
    file.parent.mkdir(parents=True, exist_ok=True)
    file.write_bytes(store.dump(catalog, style))


def sync_language(
    language: Language,
    occurrences: list[Occurrence],
    style: LocationStyle = LocationStyle.RELATIVE,
    source_language: str | None = None,
) -> SyncResult:
    previous = read_catalog(language.path)
    if previous is None:
        logger.info(f"Creating {language.path} for {language.name} ({language.langid})")
    result = sync(previous, occurrences, language=language.langid, source_language=source_language)
    write_catalog(language.path, result.catalog, style)
    return result


def purge_language(language: Language, style: LocationStyle = LocationStyle.RELATIVE) -> PurgeResult | None:
    previous = read_catalog(language.path)
    if previous is None:
        logger.warning(f"No catalog for {language.name} ({language.langid}) at {language.path}")
        return None
    result = purge(previous)
    write_catalog(language.path, result.catalog, style)
    return result


def _run(func, languages: list[Language], jobs: int, *args) -> dict[str, Any]:
    """Apply ``func`` to each language; failures are returned in place of results."""

    def task(language: Language):
        try:
            return func(language, *args)
        except (TsSyncError, OSError) as ex:
            logger.error(f"{language.name} ({language.langid}): {ex}")
            return ex

    if jobs > 1 and len(languages) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            results = list(executor.map(task, languages))
    else:
        results = [task(language) for language in languages]
    return {language.langid: result for language, result in zip(languages, results)}


def run_sync(
    *,
    languages: list[Language],
    occurrences: list[Occurrence],
    skipped: list[OccurrenceError] | None = None,
    style: LocationStyle = LocationStyle.RELATIVE,
    source_language: str | None = None,
    jobs: int = 1,
) -> dict[str, SyncResult | TsSyncError | OSError]:
    results = _run(sync_language, languages, jobs, occurrences, style, source_language)
    for language in languages:
        result = results[language.langid]
        if isinstance(result, Exception):
            continue
        if skipped:
            result.skipped = len(skipped)
            result.warnings = list(skipped) + result.warnings
        logger.info(
            f"{language.name} ({language.langid}): {result.new} new, {result.matched} matched, "
            f"{result.reinstated} reinstated, {result.obsoleted} obsolete, "
            f"{result.catalog.count(Status.NEEDS_TRANSLATION)} unfinished"
        )
    return results


def run_purge(
    *, languages: list[Language], style: LocationStyle = LocationStyle.RELATIVE, jobs: int = 1
) -> dict[str, PurgeResult | TsSyncError | OSError | None]:
    results = _run(purge_language, languages, jobs, style)
    for language in languages:
        result = results[language.langid]
        if isinstance(result, PurgeResult):
            logger.info(
                f"{language.name} ({language.langid}): removed {len(result.removed)} obsolete messages"
            )
    return results


def check_language(language: Language) -> Report:
    filename = pathlib.Path(language.path).name
    try:
        catalog = read_catalog(language.path)
    except TsSyncError as ex:
        return Report(language.langid, filename, file_warning=f"Cannot be parsed: {ex}", error=str(ex))
    if catalog is None:
        return Report(language.langid, filename, file_warning="File missing")
    counts = {status: catalog.count(status) for status in Status if status != Status.VANISHED}
    return Report(language.langid, filename, counts=counts)


def run_check(*, languages: list[Language]) -> tuple[list[Report], str]:
    reports = []
    markdown = "| Language | File | Finished | Unfinished | Obsolete |\n| ------- | ------- | ------- | ------- | ------- |\n"
    warnings = ""
    for language in languages:
        report = check_language(language)
        reports.append(report)
        if report.file_warning:
            logger.error(f"{language.name} ({language.langid}): {report.file_warning}")
            warnings += f"**{language.name} ({language.langid})**: {report.file_warning}\n\n"
            continue

        unfinished = report.counts[Status.NEEDS_TRANSLATION]
        if unfinished:
            logger.warning(f"{unfinished} unfinished messages for {language.name} ({language.langid})")
        else:
            logger.info(f"No issues found for {language.name} ({language.langid})")
        markdown += (
            f"| {language.name} (`{language.langid}`) | {report.filename} "
            f"| {report.counts[Status.FINISHED]} | {unfinished} | {report.counts[Status.OBSOLETE]} |\n"
        )
    return reports, warnings + markdown
