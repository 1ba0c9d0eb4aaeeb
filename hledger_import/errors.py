import pathlib


class HledgerImportError(Exception):
    """Base class of every error raised while importing"""


class InputFileReadError(HledgerImportError):
    def __init__(self, path: pathlib.Path | str):
        self.path = path

    def __str__(self):
        return f"Could not read input file {self.path}"


class InputParseError(HledgerImportError):
    def __init__(self, message: str):
        self.message = message

    def __str__(self):
        return f"Could not parse input: {self.message}"


class NumericConversionError(HledgerImportError):
    def __init__(self, value: str):
        self.value = value

    def __str__(self):
        return f"Could not convert {self.value!r} to a decimal number"


class RegexConfigError(HledgerImportError):
    def __init__(self, pattern: str, message: str):
        self.pattern = pattern
        self.message = message

    def __str__(self):
        return f"Invalid regular expression {self.pattern!r}: {self.message}"


class MissingConfigError(HledgerImportError):
    def __init__(self, section: str):
        self.section = section

    def __str__(self):
        return f"Configuration section {self.section!r} is required by this importer"


class MissingValueError(HledgerImportError):
    def __init__(self, field: str):
        self.field = field

    def __str__(self):
        return f"Required value {self.field!r} is missing"


class QueryError(HledgerImportError):
    def __init__(self, message: str):
        self.message = message

    def __str__(self):
        return f"hledger query failed: {self.message}"


class StringConversionError(HledgerImportError):
    def __init__(self, message: str):
        self.message = message

    def __str__(self):
        return f"hledger returned output that is not valid UTF-8: {self.message}"


class ConfigPathError(HledgerImportError):
    def __str__(self):
        return "Could not determine the configuration file location"


class ConfigReadError(HledgerImportError):
    def __init__(self, path: pathlib.Path | str):
        self.path = path

    def __str__(self):
        return f"Could not read configuration file {self.path}"


class ConfigParseError(HledgerImportError):
    def __init__(self, message: str):
        self.message = message

    def __str__(self):
        return f"Invalid configuration: {self.message}"
