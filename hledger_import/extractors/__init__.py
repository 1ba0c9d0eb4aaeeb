import enum
import typing

from hledger_import.data_types import ImporterConfig
from hledger_import.extractors.base import ExtractorBase
from hledger_import.extractors.cardcomplete import CardcompleteXmlExtractor
from hledger_import.extractors.erste import ErsteJsonExtractor
from hledger_import.extractors.flatex_csv import FlatexCsvExtractor
from hledger_import.extractors.paypal import PayPalTsvExtractor
from hledger_import.extractors.revolut import RevolutCsvExtractor


@enum.unique
class ExtractorType(str, enum.Enum):
    erste = "erste"
    revolut = "revolut"
    cardcomplete = "cardcomplete"
    flatex_csv = "flatex-csv"
    paypal = "paypal"


ALL_EXTRACTORS: dict[ExtractorType, typing.Type[ExtractorBase]] = {
    ExtractorType.erste: ErsteJsonExtractor,
    ExtractorType.revolut: RevolutCsvExtractor,
    ExtractorType.cardcomplete: CardcompleteXmlExtractor,
    ExtractorType.flatex_csv: FlatexCsvExtractor,
    ExtractorType.paypal: PayPalTsvExtractor,
}


def create_extractor(
    extractor_type: ExtractorType | str,
    input_file: typing.TextIO,
    config: ImporterConfig,
) -> ExtractorBase:
    return ALL_EXTRACTORS[ExtractorType(extractor_type)](input_file, config)
