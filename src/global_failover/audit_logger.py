"""
Audit Logger module for the global failover topology.

Provides structured logging of composition and provisioning steps with
dual-format output (JSON lines and human-readable text), a minimum level
threshold, and masking of sensitive values.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, TextIO

from .config import LoggingConfig
from .enums import LogLevel, Region
from .exceptions import TopologyError
from .input_validator import LOG_OUTPUT_FORMATS


@dataclass
class LogEntry:
    """A single log entry."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    region: Optional[str] = None
    data: dict = field(default_factory=dict)


class AuditLogger:
    """
    Structured logger for topology operations.

    Every entry names the component and, where one applies, the region it
    concerns. Entries below the configured level are dropped.
    """

    SENSITIVE_KEYS = frozenset({
        'token', 'secret', 'password', 'api_key', 'authorization',
        'credential', 'private_key', 'session',
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        level: LogLevel = LogLevel.INFO,
    ) -> None:
        """
        Initialize the logger.

        Args:
            output_format: 'json', 'text', or 'both'
            output_stream: Destination stream (defaults to sys.stderr)
            level: Minimum level that is emitted
        """
        if output_format not in LOG_OUTPUT_FORMATS:
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._output_stream = output_stream or sys.stderr
        self._level = level
        self._entries: list[LogEntry] = []

    @classmethod
    def from_config(cls, config: LoggingConfig, output_stream: Optional[TextIO] = None) -> "AuditLogger":
        """
        Build a logger from LoggingConfig.

        Raises:
            ValueError: If the level or format is unknown
        """
        return cls(
            output_format=config.output_format,
            output_stream=output_stream,
            level=LogLevel(config.level),
        )

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def entries(self) -> list[LogEntry]:
        """Emitted entries, oldest first."""
        return self._entries.copy()

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        region: Optional[Region] = None,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Emit an entry if its level passes the threshold.

        Returns:
            The emitted LogEntry, or None if it was filtered out
        """
        if level.severity < self._level.severity:
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            region=region.value if region is not None else None,
            data=self.mask_sensitive_data(data or {}),
        )
        self._entries.append(entry)
        self._write(entry)
        return entry

    def debug(self, component: str, message: str, region: Optional[Region] = None, **data) -> None:
        self.log(LogLevel.DEBUG, component, message, region, data)

    def info(self, component: str, message: str, region: Optional[Region] = None, **data) -> None:
        self.log(LogLevel.INFO, component, message, region, data)

    def warn(self, component: str, message: str, region: Optional[Region] = None, **data) -> None:
        self.log(LogLevel.WARN, component, message, region, data)

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        region: Optional[Region] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Log an error with its context.

        Structured topology errors contribute their code and details.
        """
        data = dict(additional_data or {})
        if error is not None:
            data["error_type"] = type(error).__name__
            data["error_message"] = str(error)
            if isinstance(error, TopologyError):
                data["error_code"] = error.code
                data["error_details"] = error.details
        return self.log(LogLevel.ERROR, component, message, region, data)

    def mask_sensitive_data(self, data: dict) -> dict:
        """Recursively replace values of sensitive keys."""
        masked = {}
        for key, value in data.items():
            if any(sensitive in key.lower() for sensitive in self.SENSITIVE_KEYS):
                masked[key] = self.MASK_VALUE
            elif isinstance(value, dict):
                masked[key] = self.mask_sensitive_data(value)
            elif isinstance(value, list):
                masked[key] = [
                    self.mask_sensitive_data(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                masked[key] = value
        return masked

    def format_json(self, entry: LogEntry) -> str:
        obj = {
            "timestamp": entry.timestamp,
            "level": entry.level.value,
            "component": entry.component,
            "message": entry.message,
            "data": entry.data,
        }
        if entry.region is not None:
            obj["region"] = entry.region
        return json.dumps(obj, ensure_ascii=False, default=str)

    def format_text(self, entry: LogEntry) -> str:
        # [TIMESTAMP] LEVEL [COMPONENT] (region) MESSAGE {data}
        parts = [
            f"[{entry.timestamp}]",
            entry.level.value.upper(),
            f"[{entry.component}]",
        ]
        if entry.region is not None:
            parts.append(f"({entry.region})")
        parts.append(entry.message)
        if entry.data:
            parts.append(json.dumps(entry.data, ensure_ascii=False, default=str))
        return " ".join(parts)

    def _write(self, entry: LogEntry) -> None:
        if self._output_format in ("json", "both"):
            self._output_stream.write(self.format_json(entry) + "\n")
        if self._output_format in ("text", "both"):
            self._output_stream.write(self.format_text(entry) + "\n")
        self._output_stream.flush()
