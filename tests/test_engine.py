import io
import json
import pathlib

import pytest
from click.testing import CliRunner
from rich.console import Console

from hledger_import.cli import cli
from hledger_import.engine import ImportEngine
from hledger_import.errors import InputFileReadError
from tests.conftest import FIXTURE_FOLDER
from tests.conftest import FakeHledger

CONFIG_PATH = FIXTURE_FOLDER / "config.yaml"
HEADER_RULE = "; " + "*" * 78


def make_engine(importer: str, filename: str, **kwargs) -> ImportEngine:
    return ImportEngine(
        input_file=FIXTURE_FOLDER / filename,
        importer=importer,
        config_path=CONFIG_PATH,
        log_level="info",
        console=Console(file=io.StringIO(), width=200),
        **kwargs,
    )


def test_engine_instantiate():
    engine = make_engine("erste", "erste.json")
    assert engine.title == "Erste import"
    assert engine.config.transfer_accounts.bank == "Assets:Transfer:Bank"


def test_engine_run(fake_hledger: FakeHledger):
    engine = make_engine("erste", "erste.json")
    output = engine.run()

    lines = output.splitlines()
    assert lines[0] == HEADER_RULE
    assert lines[1].startswith("; Erste import ")
    assert lines[2] == HEADER_RULE
    assert lines[3] == ""
    assert lines[4] == "2024-01-31 * (209912345678AEI-00000001) BILLA 1234 | groceries"
    assert "2024-02-01 * (209912345678AEI-00000002) Telekom Austria | Handy" in lines

    # only the formatting call, no codes lookup without deduplication
    assert [call["cmd"] for call in fake_hledger.calls] == [
        ["hledger", "print", "-x", "-f-", "--round=soft", "-c", "EUR 1.000,00"]
    ]
    summary = engine.console.file.getvalue()
    assert "Generated transactions" in summary
    assert "Telekom Austria" in summary


def test_engine_run_deduplicate(fake_hledger: FakeHledger):
    fake_hledger.outputs["codes"] = "209912345678AEI-00000001\nOTHER-1\n"
    engine = make_engine("erste", "erste.json", deduplicate=True)
    output = engine.run()

    assert fake_hledger.calls[0]["cmd"] == ["hledger", "codes", "Assets:Bank"]
    assert "209912345678AEI-00000001" not in output
    assert "(209912345678AEI-00000002) Telekom Austria" in output


def test_engine_run_missing_input(fake_hledger: FakeHledger, tmp_path: pathlib.Path):
    engine = ImportEngine(
        input_file=tmp_path / "missing.json",
        importer="erste",
        config_path=CONFIG_PATH,
        console=Console(file=io.StringIO()),
    )
    with pytest.raises(InputFileReadError):
        engine.run()


@pytest.mark.parametrize(
    "importer, filename, expected",
    [
        ("revolut", "revolut.csv", "Exchanged to USD"),
        ("cardcomplete", "cardcomplete.xml", "ZUM HIRSCHEN | credit card"),
        ("flatex-csv", "flatex.csv", "(TA-1001) Max Mustermann | Überweisung"),
        ("paypal", "paypal.tsv", "Kunde GmbH | Zahlung erhalten"),
    ],
)
def test_cli_import(
    fake_hledger: FakeHledger,
    tmp_path: pathlib.Path,
    importer: str,
    filename: str,
    expected: str,
):
    output_path = tmp_path / "output.journal"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "import",
            "-i",
            str(FIXTURE_FOLDER / filename),
            "-t",
            importer,
            "-c",
            str(CONFIG_PATH),
            "-o",
            str(output_path),
        ],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    output = output_path.read_text(encoding="utf8")
    assert output.startswith(HEADER_RULE)
    assert expected in output


def test_cli_import_failure(
    fake_hledger: FakeHledger,
    tmp_path: pathlib.Path,
    construct_files,
):
    construct_files(
        tmp_path,
        {
            "config.yaml": "transfer_accounts:\n  bank: Assets:Transfer:Bank\n  cash: Assets:Transfer:Cash\n",
        },
    )
    output_path = tmp_path / "output.journal"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "import",
            "-i",
            str(FIXTURE_FOLDER / "revolut.csv"),
            "-t",
            "revolut",
            "-c",
            str(tmp_path / "config.yaml"),
            "-o",
            str(output_path),
        ],
    )
    assert result.exit_code == 1
    assert not output_path.exists()
    assert fake_hledger.calls == []


def test_cli_import_hledger_failure(fake_hledger: FakeHledger, tmp_path: pathlib.Path):
    fake_hledger.returncode = 1
    fake_hledger.stderr = b"hledger: Error: could not balance"
    output_path = tmp_path / "output.journal"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "import",
            "-i",
            str(FIXTURE_FOLDER / "erste.json"),
            "-t",
            "erste",
            "-c",
            str(CONFIG_PATH),
            "-o",
            str(output_path),
        ],
    )
    assert result.exit_code == 1
    assert not output_path.exists()


def test_cli_import_config_from_env(
    fake_hledger: FakeHledger, monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path
):
    monkeypatch.setenv("HLEDGER_IMPORT_CONFIG", str(CONFIG_PATH))
    output_path = tmp_path / "output.journal"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "import",
            "-i",
            str(FIXTURE_FOLDER / "erste.json"),
            "-t",
            "erste",
            "-o",
            str(output_path),
        ],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    assert "Telekom Austria" in output_path.read_text(encoding="utf8")


def test_cli_unknown_importer(tmp_path: pathlib.Path):
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["import", "-i", str(FIXTURE_FOLDER / "erste.json"), "-t", "ing"],
    )
    assert result.exit_code == 2


def test_cli_schema(tmp_path: pathlib.Path):
    output_path = tmp_path / "schema.json"
    runner = CliRunner()
    result = runner.invoke(cli, ["schema", "-o", str(output_path)])
    assert result.exit_code == 0
    schema = json.loads(output_path.read_text(encoding="utf8"))
    assert "transfer_accounts" in schema["properties"]
    assert "transfer_accounts" in schema["required"]
