"""Tests verifying the RxecError type hierarchy."""

from pathlib import Path

from rxec.config.infrastructure.errors import (
    ConfigFormatError,
    ConfigLoadError,
    ConfigValidationError,
)
from rxec.core.errors import RxecError
from rxec.execution.infrastructure.errors import OutputDirectoryError, ResultStoreError


class TestRxecErrorHierarchy:
    """All rxec-specific exceptions inherit from RxecError."""

    def test_config_load_error_is_rxec_error(self) -> None:
        error = ConfigLoadError(path=Path("rxec.toml"), reason="boom")
        assert isinstance(error, RxecError)

    def test_config_validation_error_is_rxec_error(self) -> None:
        error = ConfigValidationError(reason="bad value")
        assert isinstance(error, RxecError)

    def test_config_format_error_is_rxec_error(self) -> None:
        error = ConfigFormatError(path=Path("rxec.ini"), supported=[".toml"])
        assert isinstance(error, RxecError)

    def test_output_directory_error_is_rxec_error(self) -> None:
        error = OutputDirectoryError(path=Path("out"), reason="already exists")
        assert isinstance(error, RxecError)

    def test_result_store_error_is_rxec_error(self) -> None:
        error = ResultStoreError(path=Path("out/a-1.log"), reason="disk full")
        assert isinstance(error, RxecError)

    def test_rxec_error_is_exception(self) -> None:
        assert isinstance(RxecError("test"), Exception)


class TestErrorMessages:
    """Messages start with 'Failed to' and carry the offending path."""

    def test_config_load_error_message(self) -> None:
        error = ConfigLoadError(path=Path("rxec.toml"), reason="invalid syntax")
        assert str(error) == "Failed to load config rxec.toml: invalid syntax"

    def test_output_directory_error_keeps_path(self) -> None:
        error = OutputDirectoryError(path=Path("echo-20240101000000"), reason="x")
        assert error.path == Path("echo-20240101000000")
        assert str(error).startswith("Failed to create output directory")

    def test_result_store_error_message(self) -> None:
        error = ResultStoreError(path=Path("a-1.log"), reason="disk full")
        assert str(error) == "Failed to store result a-1.log: disk full"
