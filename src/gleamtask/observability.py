"""Structured logging helpers."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, TextIO

Level = Literal["debug", "info", "error"]


@dataclass(slots=True)
class StructuredLogger:
    """Collects log records and echoes user-facing ones to *stream*.

    ``info`` and ``error`` records are always echoed; ``debug`` records only
    when *debug* is set.
    """

    stream: TextIO | None = field(default_factory=lambda: sys.stdout)
    debug: bool = False
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        unit: str | None,
        kind: str | None,
        phase: str | None,
        message: str,
        level: Level = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "unit": unit,
            "kind": kind,
            "phase": phase,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        self._echo(record)

    def records_for_unit(self, unit: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("unit") == unit]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True, default=str) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path

    def _echo(self, record: dict[str, Any]) -> None:
        if self.stream is None:
            return
        level = record["level"]
        if level == "debug":
            if not self.debug:
                return
            line = f"[gleamtask] {record['message']}"
            if record.get("extra"):
                line += f": {record['extra']}"
        else:
            line = record["message"]
        print(line, file=self.stream)
