import logging
import os
import pathlib

import pydantic
import yaml

from hledger_import import constants
from hledger_import.data_types import ImporterConfig
from hledger_import.errors import ConfigParseError, ConfigPathError, ConfigReadError

logger = logging.getLogger(__name__)


def config_path(explicit_path: str | pathlib.Path | None = None) -> pathlib.Path:
    """Find the config file: explicit path, then $HLEDGER_IMPORT_CONFIG, then the home folder"""
    if explicit_path is not None:
        return pathlib.Path(explicit_path)
    env_path = os.environ.get(constants.CONFIG_ENV_VAR)
    if env_path:
        return pathlib.Path(env_path)
    try:
        home = pathlib.Path.home()
    except RuntimeError as exc:
        raise ConfigPathError() from exc
    return home / constants.DEFAULT_CONFIG_PATH


def parse_config(content: str) -> ImporterConfig:
    try:
        payload = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigParseError(str(exc)) from exc
    try:
        return ImporterConfig.model_validate(payload or {})
    except pydantic.ValidationError as exc:
        raise ConfigParseError(str(exc)) from exc


def load_config(path: pathlib.Path) -> ImporterConfig:
    try:
        content = path.read_text()
    except OSError as exc:
        raise ConfigReadError(path) from exc
    config = parse_config(content)
    logger.info(
        "Loaded config from [green]%s[/]",
        path,
        extra={"markup": True, "highlighter": None},
    )
    return config
