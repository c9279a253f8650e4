"""
Loading of the external audio sink module.

The default loader starts ``pw-cli -m load-module <module> <args>``. pw-cli
keeps the module loaded for as long as it runs (``-m`` keeps it in monitor
mode), so the child process is the module handle.
"""
from __future__ import annotations

import subprocess
from typing import Any, Protocol

import structlog

from ..errors import SinkLoadError

logger = structlog.get_logger(__name__)


class SinkLoader(Protocol):
    def load(self, module_name: str, args: str) -> Any: ...

    def unload(self, handle: Any) -> None: ...


class PipewireModuleLoader:
    """Loads one module instance per call as a pw-cli child process."""

    def __init__(self, pw_cli_path: str = "pw-cli", terminate_timeout_seconds: float = 2.0):
        self.pw_cli_path = pw_cli_path
        self.terminate_timeout_seconds = terminate_timeout_seconds

    def command(self, module_name: str, args: str) -> list[str]:
        return [self.pw_cli_path, "-m", "load-module", module_name, args]

    def load(self, module_name: str, args: str) -> subprocess.Popen:
        """Start the module.

        Raises:
            SinkLoadError: pw-cli could not be started.
        """
        try:
            process = subprocess.Popen(
                self.command(module_name, args),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
            )
        except OSError as e:
            raise SinkLoadError(module_name, str(e)) from e
        logger.debug("Started module loader", module=module_name, pid=process.pid)
        return process

    def unload(self, handle: subprocess.Popen) -> None:
        if handle.poll() is not None:
            return
        handle.terminate()
        try:
            handle.wait(timeout=self.terminate_timeout_seconds)
        except subprocess.TimeoutExpired:
            logger.warning("Module loader did not exit, killing it", pid=handle.pid)
            handle.kill()
            handle.wait()
