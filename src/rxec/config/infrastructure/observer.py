"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, path: str, command: str, from_file: bool) -> None:
        self._log.info(
            "config.loaded",
            path=path,
            command=command,
            from_file=from_file,
        )

    def config_file_missing(self, path: str) -> None:
        self._log.debug(
            "config.file_missing",
            path=path,
            message="Config file not found; using command-line options only",
        )

    def template_written(self, path: str) -> None:
        self._log.info("config.template_written", path=path)
