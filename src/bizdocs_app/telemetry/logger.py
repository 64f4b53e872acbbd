from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from platformdirs import user_log_dir

from .events import TelemetryEvent

logger = logging.getLogger(__name__)

TELEMETRY_ENV_VAR = "BIZDOCS_TELEMETRY_ENABLED"


def telemetry_enabled_from_env() -> bool:
    return os.getenv(TELEMETRY_ENV_VAR, "0").strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class TelemetryLogger:
    """Appends document events to a local JSONL file; nothing leaves the device."""

    app_name: str
    enabled: bool | None = None
    log_file: Path | str | None = None
    stdout_sink: bool = False
    stdout_stream: TextIO | None = None
    emitted: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.enabled is None:
            self.enabled = telemetry_enabled_from_env()
        if self.log_file is None:
            self.log_file = Path(user_log_dir(self.app_name)) / "telemetry.jsonl"
        self.log_file = Path(self.log_file)

    def emit(self, event: TelemetryEvent) -> bool:
        if not self.enabled:
            return False
        record = {**event.to_dict(), "app_name": self.app_name}
        line = json.dumps(record, sort_keys=True, default=str)
        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with self.log_file.open("a", encoding="utf-8") as fp:
                fp.write(line + "\n")
        except OSError:
            logger.warning("telemetry_write_failed", extra={"log_file": str(self.log_file), "event": event.name})
            return False
        if self.stdout_sink:
            stream = self.stdout_stream or sys.stdout
            stream.write(line + "\n")
            stream.flush()
        self.emitted += 1
        return True
