import logging
import os
import sys
from typing import Any

import click
from tssync import project
from tssync.classes import LocationStyle
from tssync.exceptions import ConfigError, OccurrenceError, TsSyncError
from tssync.occurrences import load_occurrences

logger = logging.getLogger(__name__)

config_folder_option = click.option(
    "--config-folder", default="config", help="Configuration folder path."
)
translation_folder_option = click.option(
    "--translation-folder", required=True, help="Folder holding the .ts catalogs."
)
language_option = click.option(
    "--language",
    "languages",
    multiple=True,
    help="Only process this language id (repeatable).",
)
jobs_option = click.option(
    "--jobs", default=1, show_default=True, type=click.IntRange(min=1), help="Languages processed in parallel."
)


def setup(config_folder: str, translation_folder: str, languages: tuple[str, ...]):
    config_folder_path = os.path.abspath(config_folder)
    config_file_path = os.path.abspath(f"{config_folder_path}/config.yml")

    config: dict[str, Any] = {}
    try:
        config = project.load_config(config_file_path)
    except ConfigError as exc:
        logger.error(sys._getframe().f_code.co_name + " " + str(exc))
        sys.exit(1)

    logging.basicConfig(
        level=logging.getLevelName(config["logging"]["level"]),
        format=config["logging"]["format"],
        datefmt=config["logging"]["datefmt"],
    )

    language_cfg_path = os.path.abspath(f"{config_folder_path}/languages.cfg")
    translation_folder_path = os.path.abspath(translation_folder)
    try:
        available = project.load_languages(
            language_cfg_path, translation_folder_path, config["catalog"]["prefix"]
        )
        selected = project.select_languages(available, languages)
    except ConfigError as exc:
        logger.error(str(exc))
        sys.exit(1)
    return config, selected


def exit_on_failures(results: dict[str, Any]) -> None:
    failed = [langid for langid, result in results.items() if isinstance(result, (TsSyncError, OSError))]
    if failed:
        logger.error(f"Failed languages: {', '.join(failed)}")
        sys.exit(1)


@click.group()
@click.version_option()
def cli() -> None:
    pass


@cli.command("sync")
@config_folder_option
@translation_folder_option
@click.option(
    "--occurrences", required=True, type=click.Path(exists=True, dir_okay=False), help="YAML file written by the extractor."
)
@language_option
@jobs_option
def sync(
    config_folder: str, translation_folder: str, occurrences: str, languages: tuple[str, ...], jobs: int
) -> None:
    """Bring every catalog in line with the extracted source strings."""
    config, selected = setup(config_folder, translation_folder, languages)

    try:
        found, skipped = load_occurrences(occurrences)
    except OccurrenceError as exc:
        logger.error(str(exc))
        sys.exit(1)

    results = project.run_sync(
        languages=selected,
        occurrences=found,
        skipped=skipped,
        style=LocationStyle(config["catalog"]["locations"]),
        source_language=config["catalog"]["source_language"],
        jobs=jobs,
    )
    exit_on_failures(results)


@cli.command("purge")
@config_folder_option
@translation_folder_option
@language_option
@jobs_option
def purge(config_folder: str, translation_folder: str, languages: tuple[str, ...], jobs: int) -> None:
    """Remove obsolete messages from the catalogs."""
    config, selected = setup(config_folder, translation_folder, languages)
    results = project.run_purge(
        languages=selected,
        style=LocationStyle(config["catalog"]["locations"]),
        jobs=jobs,
    )
    exit_on_failures(results)


@cli.command("check")
@config_folder_option
@translation_folder_option
@click.option("--report", default=None, help="Write the markdown report to this file.")
def check(config_folder: str, translation_folder: str, report: str | None) -> None:
    """Report finished, unfinished and obsolete counts per language."""
    _, selected = setup(config_folder, translation_folder, ())
    reports, markdown = project.run_check(languages=selected)

    if report:
        with open(report, "w", encoding="utf-8") as file:
            file.write(markdown)
    else:
        click.echo(markdown)

    if any(x.error for x in reports):
        sys.exit(1)
