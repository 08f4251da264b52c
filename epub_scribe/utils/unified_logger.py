"""
Unified logging for epub-scribe

One logger instance is shared by the CLI and by library callers. Pipeline
code reports through ``log_callback(event_type, message)`` callables built with
``UnifiedLogger.create_legacy_callback()``; backend and scheduler code use the
module-level helpers at the bottom of this file.
"""
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional


class LogLevel(Enum):
    """Log levels with priority values"""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


class LogType(Enum):
    """Kinds of log records that get their own console layout"""
    GENERAL = "general"
    BACKEND_REQUEST = "backend_request"
    PROGRESS = "progress"
    ENTRY_INFO = "entry_info"
    TRANSLATION_START = "translation_start"
    TRANSLATION_END = "translation_end"
    ERROR_DETAIL = "error_detail"


class Colors:
    """ANSI color codes for terminal output"""
    NO_COLOR = os.environ.get('NO_COLOR') is not None or not sys.stdout.isatty()

    YELLOW = '' if NO_COLOR else '\033[93m'
    WHITE = '' if NO_COLOR else '\033[97m'
    GRAY = '' if NO_COLOR else '\033[90m'
    GREEN = '' if NO_COLOR else '\033[92m'
    RED = '' if NO_COLOR else '\033[91m'
    ENDC = '' if NO_COLOR else '\033[0m'

    @classmethod
    def disable(cls):
        cls.YELLOW = cls.WHITE = cls.GRAY = cls.GREEN = cls.RED = cls.ENDC = ''


@dataclass
class RunState:
    """What the logger remembers between the start and end banners"""
    source_lang: str = ''
    target_lang: str = ''
    backend: str = ''
    started_at: Optional[datetime] = None
    entries_done: int = 0
    in_progress: bool = False


class UnifiedLogger:
    """
    Console logger with typed records and optional record sinks

    Every record that passes ``min_level`` is printed (when ``console_output``
    is set) and handed as a dict to ``web_callback`` and ``storage_callback``.
    """

    LEVEL_COLORS = {
        LogLevel.DEBUG: 'GRAY',
        LogLevel.INFO: 'WHITE',
        LogLevel.WARNING: 'YELLOW',
        LogLevel.ERROR: 'RED',
    }

    def __init__(self,
                 name: str = "epub-scribe",
                 console_output: bool = True,
                 enable_colors: bool = True,
                 min_level: LogLevel = LogLevel.INFO,
                 web_callback: Optional[Callable] = None,
                 storage_callback: Optional[Callable] = None):
        """
        Args:
            name: Logger name
            console_output: Print records to stdout
            enable_colors: Use ANSI colors (also off when NO_COLOR is set)
            min_level: Records below this level are dropped
            web_callback: Receives each record dict, for an embedding UI
            storage_callback: Receives each record dict, for keeping logs
        """
        self.name = name
        self.console_output = console_output
        self.enable_colors = enable_colors
        self.min_level = min_level
        self.web_callback = web_callback
        self.storage_callback = storage_callback
        self.run = RunState()

        if not enable_colors:
            Colors.disable()

    @staticmethod
    def _stamp() -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _render(self, level: LogLevel, message: str, log_type: LogType, data: Dict[str, Any]) -> str:
        if log_type == LogType.PROGRESS:
            return self._render_progress(data)
        if log_type == LogType.TRANSLATION_START:
            return self._render_start(data)
        if log_type == LogType.TRANSLATION_END:
            return self._render_end(data)
        if log_type == LogType.ERROR_DETAIL:
            return self._render_error(message, data)

        if log_type == LogType.ENTRY_INFO:
            color = Colors.GREEN if level == LogLevel.INFO else Colors.YELLOW
        else:
            color = getattr(Colors, self.LEVEL_COLORS[level])
        prefix = "" if level == LogLevel.INFO else f"[{level.name}] "
        if log_type == LogType.BACKEND_REQUEST and 'chunk' in data:
            prefix += f"(chunk {data['chunk']}) "
        return f"{color}[{self._stamp()}] {prefix}{message}{Colors.ENDC}"

    def _render_progress(self, data: Dict[str, Any]) -> str:
        percentage = data.get('percentage', 0)
        filled = int(30 * percentage / 100)
        bar = '█' * filled + '░' * (30 - filled)
        return f"{Colors.WHITE}[{bar}] {percentage:.1f}%{Colors.ENDC}"

    def _render_start(self, data: Dict[str, Any]) -> str:
        self.run = RunState(
            source_lang=data.get('source_lang', '?'),
            target_lang=data.get('target_lang', '?'),
            backend=data.get('backend', '?'),
            started_at=datetime.now(),
            in_progress=True,
        )
        lines = [
            f"{Colors.YELLOW}📚 EPUB TRANSLATION{Colors.ENDC}",
            f"{Colors.WHITE}Languages: {self.run.source_lang} → {self.run.target_lang}{Colors.ENDC}",
            f"{Colors.GRAY}Backend: {self.run.backend}{Colors.ENDC}",
        ]
        for key, label in (('input_file', 'Input'), ('output_file', 'Output')):
            if key in data:
                lines.append(f"{Colors.GRAY}{label}: {data[key]}{Colors.ENDC}")
        return '\n'.join(lines)

    def _render_end(self, data: Dict[str, Any]) -> str:
        lines = [f"\n{Colors.WHITE}✅ TRANSLATION COMPLETE{Colors.ENDC}"]
        if self.run.started_at:
            lines.append(f"{Colors.GRAY}Duration: {datetime.now() - self.run.started_at}{Colors.ENDC}")
        if 'output_file' in data:
            lines.append(f"{Colors.WHITE}Output saved to: {data['output_file']}{Colors.ENDC}")

        stats = data.get('stats') or {}
        if stats:
            lines.append(f"{Colors.WHITE}Translated entries: {stats.get('translated', 0)}{Colors.ENDC}")
            if stats.get('failed'):
                lines.append(f"{Colors.YELLOW}Failed entries: {stats['failed']}{Colors.ENDC}")
            if stats.get('skipped'):
                lines.append(f"{Colors.GRAY}Skipped entries: {stats['skipped']}{Colors.ENDC}")
            if stats.get('copied'):
                lines.append(f"{Colors.GRAY}Copied unchanged: {stats['copied']}{Colors.ENDC}")

        self.run.in_progress = False
        return '\n'.join(lines)

    def _render_error(self, message: str, data: Dict[str, Any]) -> str:
        lines = [f"{Colors.RED}[{self._stamp()}] ❌ {message}{Colors.ENDC}"]
        for key, label in (('details', 'Details'), ('entry', 'Entry')):
            if data.get(key):
                lines.append(f"{Colors.RED}   {label}: {data[key]}{Colors.ENDC}")
        return '\n'.join(lines)

    def log(self, level: LogLevel, message: str,
            log_type: LogType = LogType.GENERAL,
            data: Optional[Dict[str, Any]] = None):
        """
        Emit one record

        Args:
            level: Log level
            message: Log message
            log_type: Selects the console layout
            data: Extra fields, passed through to the callbacks
        """
        if level.value < self.min_level.value:
            return
        data = data or {}

        if log_type == LogType.ENTRY_INFO and self.run.in_progress:
            self.run.entries_done += 1

        if self.console_output:
            text = self._render(level, message, log_type, data)
            try:
                print(text, flush=True)
            except UnicodeEncodeError:
                # Consoles without UTF-8 cannot print the arrows and emoji
                print(text.encode('ascii', 'replace').decode('ascii'), flush=True)

        record = {
            'timestamp': datetime.now().isoformat(),
            'level': level.name,
            'type': log_type.value,
            'message': message,
            'data': data,
        }
        for sink in (self.web_callback, self.storage_callback):
            if sink:
                sink(record)

    def debug(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.DEBUG, message, log_type, data)

    def info(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.INFO, message, log_type, data)

    def warning(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.WARNING, message, log_type, data)

    def error(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.ERROR, message, log_type, data)

    def create_legacy_callback(self) -> Callable[..., None]:
        """
        Build a ``log_callback(event_type, message, data=None)`` for the pipeline

        The level comes from the event type suffix: ``_error``/``_failed`` are
        errors, ``_warning``/``_skipped``/``_rejected`` are warnings, ``_debug``
        is debug. ``entry_completed`` is an entry line, the rest is info.
        """
        def legacy_callback(event_type: str, message: str = "", data: Optional[Dict[str, Any]] = None):
            text = message or event_type
            if event_type.endswith(("_error", "_failed")):
                self.error(text, data=data)
            elif event_type.endswith(("_warning", "_skipped", "_rejected")):
                self.warning(text, data=data)
            elif event_type.endswith("_debug"):
                self.debug(text, data=data)
            elif event_type == "entry_completed":
                self.info(text, LogType.ENTRY_INFO, data)
            else:
                self.info(text, data=data)

        return legacy_callback


_global_logger: Optional[UnifiedLogger] = None


def get_logger(**kwargs) -> UnifiedLogger:
    """
    Return the shared logger, creating it on first use

    Later calls only replace the callbacks they pass; other options are fixed
    by the first call.
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = UnifiedLogger(**kwargs)
    else:
        for key in ('web_callback', 'storage_callback'):
            if key in kwargs:
                setattr(_global_logger, key, kwargs[key])
    return _global_logger


def setup_cli_logger(enable_colors: bool = True) -> UnifiedLogger:
    """Shared logger configured for the command line"""
    # Late import: config loads .env at import time
    from epub_scribe.config import DEBUG_MODE

    logger = get_logger()
    logger.console_output = True
    logger.min_level = LogLevel.DEBUG if DEBUG_MODE else LogLevel.INFO
    if not enable_colors:
        logger.enable_colors = False
        Colors.disable()
    return logger


def debug(message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
    get_logger().debug(message, log_type, data)


def warning(message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
    get_logger().warning(message, log_type, data)


def error(message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
    get_logger().error(message, log_type, data)
