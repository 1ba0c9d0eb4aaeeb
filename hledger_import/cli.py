import json
import logging
import os
import pathlib
import sys

import click

from hledger_import.data_types import ImporterConfig
from hledger_import.engine import ImportEngine
from hledger_import.environment import LOG_LEVEL_MAP
from hledger_import.errors import HledgerImportError
from hledger_import.extractors import ExtractorType

logger = logging.getLogger(__name__)


@click.group()
def cli():
    pass


@cli.command(name="import")
@click.option(
    "-i",
    "--input-file",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="The bank export file to import",
)
@click.option(
    "-t",
    "--importer",
    type=click.Choice([item.value for item in ExtractorType], case_sensitive=False),
    required=True,
    help="The importer matching the format of the input file",
)
@click.option(
    "-c",
    "--config",
    type=click.Path(dir_okay=False),
    default=None,
    help="The path to the config file, defaults to $HLEDGER_IMPORT_CONFIG or ~/.config/hledger-import/config.yaml",
)
@click.option(
    "-d",
    "--deduplicate",
    is_flag=True,
    help="Skip transactions whose code is already recorded in the ledger",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the journal to this file instead of stdout",
)
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(
        list(map(lambda key: key.value, LOG_LEVEL_MAP.keys())), case_sensitive=False
    ),
    default=lambda: os.environ.get("LOG_LEVEL", "INFO").lower(),
)
def import_cmd(
    input_file: str,
    importer: str,
    config: str | None,
    deduplicate: bool,
    output: str | None,
    log_level: str,
):
    """
    Import a bank export into an hledger journal:

        > hledger-import import -t erste -i transactions.json -d >> 2024.journal

    Accounts are resolved with the rules of the config file, already recorded
    transactions are skipped with -d.
    """
    try:
        engine = ImportEngine(
            input_file=input_file,
            importer=importer.lower(),
            config_path=config,
            deduplicate=deduplicate,
            log_level=log_level,
        )
        text = engine.run()
    except HledgerImportError as exc:
        logger.error("Import failed: %s", exc)
        sys.exit(1)

    if output is not None:
        pathlib.Path(output).write_text(text, encoding="utf8")
    else:
        click.echo(text)


@cli.command(name="schema")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    default="schema.json",
    help="The file to write the config JSON schema to",
)
def schema_cmd(output: str):
    with open(output, "w") as f:
        f.write(json.dumps(ImporterConfig.model_json_schema(), indent=2))


if __name__ == "__main__":
    cli()
