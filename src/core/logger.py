"""Structured logging: console lines plus a JSONL event log."""

import contextvars
import json
import logging
import os
import sys
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from src.core.config import config


def _format_duration(ms: float) -> str:
    if ms < 0:
        return "0ms"
    seconds = ms / 1000
    if seconds >= 60:
        m = int(seconds // 60)
        s = seconds % 60
        return f"{m}m {s:.0f}s"
    if seconds >= 1:
        return f"{seconds:.1f}s"
    if ms >= 1:
        return f"{ms:.0f}ms"
    if ms > 0:
        return "<1ms"
    return "0ms"


def _short_reason(reason: str | None, max_len: int = 80) -> str:
    """One-line short reason for console (failed provider)."""
    if not reason or not reason.strip():
        return ""
    s = reason.strip().replace("\n", " ").strip()
    return s[:max_len] + "..." if len(s) > max_len else s


_LOG_KWARGS = {"exc_info", "stack_info", "stacklevel", "extra"}


def _log_kwargs(kwargs: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if k in _LOG_KWARGS}


_log_in_research: contextvars.ContextVar[bool] = contextvars.ContextVar(
    "log_in_research", default=False
)


def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except Exception:
        return False


def _c(role: str) -> str:
    if not _use_color():
        return ""
    codes = {
        "provider": "\033[38;5;81m",
        "run": "\033[38;5;78m",
        "done_ok": "\033[38;5;78m",
        "done_fail": "\033[38;5;203m",
        "duration": "\033[38;5;221m",
        "dim": "\033[38;5;245m",
    }
    return codes.get(role, "")


def _reset() -> str:
    if not _use_color():
        return ""
    return "\033[0m"


@dataclass
class LogEvent:
    event_type: str
    timestamp: str
    data: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class ResearchLogger:
    def __init__(self):
        config.logs_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = config.logs_dir / "research.log"
        self._file_lock = threading.Lock()
        self._log_file_handle = open(self.log_file, "a", encoding="utf-8")
        self._setup_console_logger()

    def _setup_console_logger(self):
        self.console = logging.getLogger("music_research")
        self.console.setLevel(logging.DEBUG)
        self._console_formatter = logging.Formatter(
            "%(asctime)s │ %(message)s", datefmt="%H:%M:%S"
        )
        if not self.console.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.INFO)
            handler.setFormatter(self._console_formatter)
            self.console.addHandler(handler)
        self._setup_library_console_logging()

    def _setup_library_console_logging(self):
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(self._console_formatter)
        log = logging.getLogger("src.research")
        log.setLevel(logging.INFO)
        log.propagate = False
        if not log.handlers:
            log.addHandler(handler)

    def log_event(self, event: LogEvent) -> None:
        with self._file_lock:
            self._log_file_handle.write(event.to_json() + "\n")
            self._log_file_handle.flush()

    def _timestamp(self) -> str:
        return datetime.now().isoformat()

    def _prefix(self) -> str:
        if _log_in_research.get():
            return "  │ "
        return ""

    def research_start(self, query: str, identity: str | None) -> None:
        _log_in_research.set(True)
        event = LogEvent(
            event_type="RESEARCH_START",
            timestamp=self._timestamp(),
            data={"query": query[:500], "has_identity": bool(identity)},
        )
        self.log_event(event)
        preview = query[:100] + ("..." if len(query) > 100 else "")
        self.console.info(f"{_c('run')}▶ Research{_reset()}  \"{preview}\"")

    def plan_selected(
        self,
        strategy: str,
        providers: list[str],
        needs_clarification: bool,
        planner: str,
    ) -> None:
        event = LogEvent(
            event_type="PLAN_SELECTED",
            timestamp=self._timestamp(),
            data={
                "strategy": strategy,
                "providers": providers,
                "needs_clarification": needs_clarification,
                "planner": planner,
            },
        )
        self.log_event(event)
        if needs_clarification:
            self.console.info(f"{self._prefix()}Plan ({planner}): needs clarification")
        else:
            joined = ", ".join(providers)
            self.console.info(
                f"{self._prefix()}Plan ({planner}): {strategy}  {_c('dim')}[{joined}]{_reset()}"
            )

    def provider_result(
        self,
        provider: str,
        success: bool,
        elapsed_ms: float,
        *,
        item_count: int = 0,
        confidence: float = 0.0,
        error_reason: str | None = None,
    ) -> None:
        data: dict[str, Any] = {
            "provider": provider,
            "success": success,
            "elapsed_ms": round(elapsed_ms, 1),
        }
        if success:
            data["item_count"] = item_count
            data["confidence"] = round(confidence, 4)
        elif error_reason:
            data["error_reason"] = error_reason[:500]
        event = LogEvent(
            event_type="PROVIDER_RESULT", timestamp=self._timestamp(), data=data
        )
        self.log_event(event)
        dur = f"{_c('duration')}{_format_duration(elapsed_ms)}{_reset()}"
        name = f"{_c('provider')}{provider}{_reset()}"
        if success:
            status = f"{_c('done_ok')}[ok]{_reset()}"
            self.console.info(
                f"{self._prefix()}{name}  {item_count} items  conf {confidence:.2f}  {dur}  {status}"
            )
        else:
            status = f"{_c('done_fail')}[failed]{_reset()}"
            self.console.warning(
                f"{self._prefix()}{name}  {dur}  {status} {_short_reason(error_reason)}"
            )

    def clarification_needed(self, questions: list[str]) -> None:
        event = LogEvent(
            event_type="RESEARCH_CLARIFY",
            timestamp=self._timestamp(),
            data={"questions": questions},
        )
        self.log_event(event)
        self.console.info(
            f"{_c('done_ok')}? Clarify{_reset()}  {len(questions)} questions, no providers invoked"
        )
        _log_in_research.set(False)

    def research_done(
        self,
        item_count: int,
        source_count: int,
        confidence: float,
        elapsed_ms: float,
    ) -> None:
        event = LogEvent(
            event_type="RESEARCH_DONE",
            timestamp=self._timestamp(),
            data={
                "item_count": item_count,
                "source_count": source_count,
                "confidence": round(confidence, 4),
                "elapsed_ms": round(elapsed_ms, 1),
            },
        )
        self.log_event(event)
        dur = f"{_c('duration')}{_format_duration(elapsed_ms)}{_reset()}"
        self.console.info(
            f"{_c('done_ok')}✓ Done{_reset()}  {item_count} songs from {source_count} sources  "
            f"confidence {confidence * 100:.1f}%  total {dur}"
        )
        _log_in_research.set(False)

    def error(self, message: str, *args, exception: Exception | None = None, **kwargs):
        event = LogEvent(
            event_type="ERROR",
            timestamp=self._timestamp(),
            data={
                "message": message,
                "exception": str(exception) if exception else None,
            },
        )
        self.log_event(event)

        log_kwargs = _log_kwargs(kwargs)
        if exception and "exc_info" not in log_kwargs:
            log_kwargs["exc_info"] = exception

        _log_in_research.set(False)
        self.console.error(f"❌ Error: {message}", *args, **log_kwargs)

    def info(self, message: str, *args, **kwargs):
        log_kwargs = _log_kwargs(kwargs)
        self.console.info(f"{self._prefix()}{message}", *args, **log_kwargs)

    def warning(self, message: str, *args, **kwargs):
        event = LogEvent(
            event_type="WARNING",
            timestamp=self._timestamp(),
            data={"message": message[:500]},
        )
        self.log_event(event)

        log_kwargs = _log_kwargs(kwargs)
        self.console.warning(f"{self._prefix()}⚠️ {message}", *args, **log_kwargs)

    def debug(self, message: str, *args, **kwargs):
        event = LogEvent(
            event_type="DEBUG", timestamp=self._timestamp(), data={"message": message}
        )
        self.log_event(event)

        log_kwargs = _log_kwargs(kwargs)
        self.console.debug(message, *args, **log_kwargs)


logger = ResearchLogger()
