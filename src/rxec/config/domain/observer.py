"""Observer port for the config domain — defines events in domain language."""

from typing import Protocol


class ConfigObserver(Protocol):
    def config_loaded(self, path: str, command: str, from_file: bool) -> None: ...

    def config_file_missing(self, path: str) -> None: ...

    def template_written(self, path: str) -> None: ...
