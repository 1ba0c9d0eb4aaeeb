import functools
import logging
import pathlib

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.padding import Padding
from rich.table import Table

from hledger_import.config import config_path as resolve_config_path
from hledger_import.config import load_config
from hledger_import.data_types import BankRecord, Transaction
from hledger_import.environment import LOG_LEVEL_MAP, LogLevel
from hledger_import.errors import InputFileReadError, InputParseError
from hledger_import.extractors import ALL_EXTRACTORS, ExtractorType, create_extractor
from hledger_import.hledger import format_transactions, get_codes, make_query
from hledger_import.post_processor import filter_known_codes, generate_output
from hledger_import.processor import process_records

TABLE_HEADER_STYLE = "yellow"
TABLE_COLUMN_STYLE = "cyan"


class ImportEngine:
    log_level: LogLevel = LogLevel.INFO
    logger: logging.Logger = logging.getLogger("hledger_import")
    input_path: pathlib.Path
    importer: ExtractorType
    deduplicate: bool

    def __init__(
        self,
        input_file: str | pathlib.Path,
        importer: str,
        config_path: str | pathlib.Path | None = None,
        deduplicate: bool = False,
        log_level: str = LogLevel.INFO.value,
        console: Console | None = None,
    ):
        self.input_path = pathlib.Path(input_file)
        self.importer = ExtractorType(importer)
        self.deduplicate = deduplicate
        self.log_level = LogLevel(log_level.lower())
        # stdout only carries the generated journal
        self.console = console if console is not None else Console(stderr=True)

        FORMAT = "%(message)s"
        logging.basicConfig(
            level=LOG_LEVEL_MAP[self.log_level],
            format=FORMAT,
            datefmt="[%X]",
            handlers=[RichHandler(console=self.console)],
            force=True,
        )
        self.config_path = resolve_config_path(config_path)
        self.config = load_config(self.config_path)
        self.query = make_query(self.config.hledger)

    @property
    def title(self) -> str:
        return ALL_EXTRACTORS[self.importer].title

    def extract(self) -> list[BankRecord]:
        extractor_cls = ALL_EXTRACTORS[self.importer]
        try:
            fo = self.input_path.open("rt", encoding=extractor_cls.encoding, newline="")
        except OSError as exc:
            raise InputFileReadError(self.input_path) from exc
        with fo:
            extractor = create_extractor(self.importer, fo, self.config)
            try:
                records = list(extractor.process())
            except UnicodeDecodeError as exc:
                raise InputParseError(f"{self.input_path}: {exc}") from exc
        self.logger.info(
            "Extracted %s records from [green]%s[/] with %s",
            len(records),
            escape(str(self.input_path)),
            self.importer.value,
            extra={"markup": True, "highlighter": None},
        )
        return records

    def known_codes(self) -> set[str]:
        self.logger.info("Collecting codes of transactions recorded in the ledger ...")
        codes = get_codes(self.config.hledger, self.config.deduplication_accounts)
        self.logger.info("Found %s recorded transaction codes", len(codes))
        return codes

    def print_summary(self, transactions: list[Transaction]):
        table = Table(
            title="Generated transactions",
            box=box.SIMPLE,
            header_style=TABLE_HEADER_STYLE,
            expand=True,
        )
        table.add_column("Date", style=TABLE_COLUMN_STYLE)
        table.add_column("Code", style=TABLE_COLUMN_STYLE)
        table.add_column("Payee", style=TABLE_COLUMN_STYLE)
        table.add_column("Accounts", style=TABLE_COLUMN_STYLE)
        for txn in transactions:
            table.add_row(
                escape(str(txn.date)),
                escape(txn.code or ""),
                escape(txn.payee),
                escape(", ".join(posting.account for posting in txn.postings)),
            )
        self.console.print(Padding(table, (1, 0, 0, 4)))

    def run(self) -> str:
        records = self.extract()
        transactions = list(process_records(records, self.config, self.query))
        self.logger.info("Resolved %s transactions", len(transactions))

        if self.deduplicate:
            known_codes = self.known_codes()
            new_transactions = filter_known_codes(transactions, known_codes)
            self.logger.info(
                "Skipped %s already recorded transactions",
                len(transactions) - len(new_transactions),
            )
            transactions = new_transactions

        output = generate_output(
            transactions,
            title=self.title,
            format_text=functools.partial(
                format_transactions,
                self.config.hledger,
                commodity_formatting_rules=self.config.commodity_formatting_rules,
            ),
        )
        self.print_summary(transactions)
        self.logger.info("done")
        return output
