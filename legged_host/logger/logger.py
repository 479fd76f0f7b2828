# legged_host/logger/logger.py
from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import asdict, is_dataclass
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional


class DedupFilter(logging.Filter):
    """
    Drop a WARNING+ record whose text was already emitted within `cooldown_s`.

    A polling loop against a stalled service fails every query the same way
    ("Request getRPY failed", "Request getBatteryPower failed", ...). Keying on
    the rendered message lets those interleaved repeats collapse, while
    INFO/DEBUG lines (connects, disconnects) always pass. cooldown_s <= 0
    turns the filter off.
    """
    def __init__(
        self,
        cooldown_s: float = 0.0,
        min_level: int = logging.WARNING,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.cooldown_s = float(cooldown_s)
        self.min_level = min_level
        self.suppressed = 0
        self._clock = clock
        self._lock = threading.Lock()
        self._seen: dict[tuple[str, str], float] = {}  # (logger, text) -> last emit

    def filter(self, record: logging.LogRecord) -> bool:
        if self.cooldown_s <= 0.0 or record.levelno < self.min_level:
            return True

        now = self._clock()
        key = (record.name, record.getMessage())
        with self._lock:
            last = self._seen.get(key)
            if last is not None and (now - last) < self.cooldown_s:
                self.suppressed += 1
                return False
            self._seen[key] = now
            if len(self._seen) > 256:
                self._seen = {k: t for k, t in self._seen.items() if now - t < self.cooldown_s}
            return True


class Logger:
    """
    Rotating text log (plus optional console) attached to one named logger.

    Attach it to the package name ("legged_host") to collect every module's
    records, since each module logs through logging.getLogger(__name__).
    Building a second Logger for the same name replaces the handlers of the
    first one instead of stacking them.
    """
    FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def __init__(
        self,
        log_file: str,
        logger_name: str,
        log_dir: str = "logs",
        level: int = logging.INFO,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
        propagate: bool = False,
        max_bytes: int = 5_000_000,
        backup_count: int = 5,
        console: bool = False,
        dedup_cooldown_s: float = 0.0,
    ) -> None:
        os.makedirs(log_dir, exist_ok=True)
        self.path = os.path.join(log_dir, log_file)

        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(level)
        self._logger.propagate = propagate
        self.close()

        fmt = logging.Formatter(self.FORMAT, datefmt=timestamp_format)
        handlers: list[logging.Handler] = [
            RotatingFileHandler(self.path, maxBytes=int(max_bytes), backupCount=int(backup_count))
        ]
        if console:
            handlers.append(logging.StreamHandler())

        for h in handlers:
            h.setLevel(level)
            h.setFormatter(fmt)
            # one filter per handler: a shared one would drop the second copy
            h.addFilter(DedupFilter(cooldown_s=dedup_cooldown_s))
            self._logger.addHandler(h)

        self._logger.debug("[Logger] '%s' -> %s", logger_name, self.path)

    def get_logger(self) -> logging.Logger:
        return self._logger

    def close(self) -> None:
        for h in list(self._logger.handlers):
            self._logger.removeHandler(h)
            h.close()


class JsonlLogger:
    """
    JSONL flight recorder: one JSON object per line (buffered=1 for near-real-time).
    Used to record every envelope exchanged with the service.
    """
    def __init__(self, path: str, mkdirs: bool = True) -> None:
        self.path = str(path)
        if mkdirs:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._f = open(self.path, "a", buffering=1, encoding="utf-8")

    def write(self, event: str, **data: Any) -> None:
        row = {
            "ts_ns": time.time_ns(),
            "event": event,
            **self._normalize(data),
        }
        line = json.dumps(row, ensure_ascii=False, default=str)
        with self._lock:
            if self._f.closed:
                return
            self._f.write(line + "\n")

    def close(self) -> None:
        with self._lock:
            if not self._f.closed:
                self._f.close()

    def __enter__(self) -> "JsonlLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _normalize(self, obj: Any) -> Any:
        """
        Make common objects JSON-friendly:
        - dataclasses -> dict
        - enums -> value
        - Path -> str
        - bytes -> UTF-8 text when it decodes (envelopes), else hex summary
        - exceptions -> repr
        """
        if isinstance(obj, dict):
            return {k: self._normalize(v) for k, v in obj.items()}

        if isinstance(obj, (list, tuple)):
            return [self._normalize(v) for v in obj]

        if is_dataclass(obj) and not isinstance(obj, type):
            return self._normalize(asdict(obj))

        if isinstance(obj, Enum):
            return obj.value

        if isinstance(obj, Path):
            return str(obj)

        if isinstance(obj, bytes):
            try:
                return {"bytes_len": len(obj), "text": obj.decode("utf-8")}
            except UnicodeDecodeError:
                pass
            # Avoid huge blobs; keep short summary + hex prefix
            if len(obj) <= 64:
                return {"bytes_len": len(obj), "hex": obj.hex()}
            return {"bytes_len": len(obj), "hex_prefix": obj[:64].hex()}

        if isinstance(obj, BaseException):
            return repr(obj)

        return obj


class LogBundle:
    """
    Convenience wrapper: a human-readable rotating Logger + a JSONL event logger.
    """
    def __init__(
        self,
        name: str,
        log_dir: str = "logs",
        level: int = logging.INFO,
        console: bool = False,
        max_bytes: int = 5_000_000,
        backup_count: int = 5,
        dedup_cooldown_s: float = 0.0,
        jsonl_file: Optional[str] = None,
        text_file: Optional[str] = None,
    ) -> None:
        text_file = text_file or f"{name}.log"
        jsonl_file = jsonl_file or f"{name}.jsonl"

        self.text = Logger(
            log_file=text_file,
            logger_name=name,
            log_dir=log_dir,
            level=level,
            console=console,
            max_bytes=max_bytes,
            backup_count=backup_count,
            dedup_cooldown_s=dedup_cooldown_s,
        )
        self.events = JsonlLogger(path=str(Path(log_dir) / jsonl_file))

    def close(self) -> None:
        self.events.close()
        self.text.close()
