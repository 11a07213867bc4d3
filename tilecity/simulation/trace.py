"""JSON Lines trace of tick reports.

One line per tick, serialised with orjson. The file is opened lazily on
the first write and appended to, so a resumed run extends an earlier trace.

Example:
    with TraceSink("city.jsonl") as sink:
        sink.write(simulation.tick())
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Optional, Union

import orjson

from tilecity.simulation.report import TickReport

logger = logging.getLogger(__name__)


class TraceSink:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._handle: Optional[IO[bytes]] = None
        self._written = 0

    @property
    def written(self) -> int:
        return self._written

    def write(self, report: TickReport) -> None:
        if self._handle is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.path.open("ab")
            logger.info(f"Writing tick trace to {self.path}")
        self._handle.write(orjson.dumps(report.to_dict()))
        self._handle.write(b"\n")
        self._written += 1

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "TraceSink":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
