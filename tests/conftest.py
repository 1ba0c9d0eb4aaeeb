import dataclasses
import pathlib
import subprocess
import typing

import pytest

from hledger_import.config import parse_config
from hledger_import.data_types import ImporterConfig

TEST_PACKAGE_FOLDER = pathlib.Path(__file__).parent
FIXTURE_FOLDER = TEST_PACKAGE_FOLDER / "fixtures"


@dataclasses.dataclass
class FakeHledger:
    """Stands in for subprocess.run, answers like hledger without running it"""

    # stdout keyed by hledger command, "json" for print -O json
    outputs: dict[str, str | bytes] = dataclasses.field(default_factory=dict)
    returncode: int = 0
    stderr: bytes = b""
    error: Exception | None = None
    calls: list[dict[str, typing.Any]] = dataclasses.field(default_factory=list)

    def __call__(
        self,
        cmd: list[str],
        input: bytes | None = None,
        capture_output: bool = False,
        timeout: float | None = None,
        check: bool = False,
    ) -> subprocess.CompletedProcess:
        self.calls.append(dict(cmd=cmd, input=input, timeout=timeout))
        if self.error is not None:
            raise self.error
        if "-f-" in cmd:
            # formatting echoes the journal back
            stdout = input or b""
        elif "json" in cmd:
            stdout = self.outputs.get("json", "[]")
        else:
            stdout = self.outputs.get(cmd[1], "")
        if isinstance(stdout, str):
            stdout = stdout.encode("utf8")
        return subprocess.CompletedProcess(
            cmd, self.returncode, stdout=stdout, stderr=self.stderr
        )


@pytest.fixture
def fixtures_folder() -> pathlib.Path:
    return FIXTURE_FOLDER


@pytest.fixture
def config(fixtures_folder: pathlib.Path) -> ImporterConfig:
    return parse_config((fixtures_folder / "config.yaml").read_text())


@pytest.fixture
def fake_hledger(monkeypatch: pytest.MonkeyPatch) -> FakeHledger:
    fake = FakeHledger()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def construct_files() -> (
    typing.Callable[[pathlib.Path, typing.Dict[str, typing.Any]], None]
):
    def _construct_files(workdir: pathlib.Path, spec: typing.Dict[str, typing.Any]):
        for name, value in spec.items():
            if isinstance(value, str):
                with open(workdir / name, "wt") as fo:
                    fo.write(value)
            elif isinstance(value, dict):
                sub_dir = workdir / name
                sub_dir.mkdir()
                _construct_files(sub_dir, value)
            else:
                raise ValueError()

    return _construct_files
