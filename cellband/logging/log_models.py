"""Log entry model for AT traffic logging."""

from dataclasses import dataclass, asdict, fields
from datetime import datetime
from typing import Dict, Any, Optional
import json


@dataclass(frozen=True)
class LogEntry:
    """Immutable record of one communication event.

    Attributes:
        timestamp: When the event occurred
        level: DEBUG, INFO, WARNING or ERROR
        source: Component name (SerialHandler, ATExecutor, ...)
        message: Human-readable message
        details: Additional structured data
        port: Serial port name
        command: AT command sent
        response: Response text received
        status: SUCCESS, ERROR or TIMEOUT
        execution_time: Command execution time in seconds
        retry_count: Number of retry attempts
        error: Error message if applicable

    Example:
        >>> entry = LogEntry(
        ...     timestamp=datetime(2026, 3, 1, 10, 30, 15, 234000),
        ...     level="INFO",
        ...     source="ATExecutor",
        ...     message="Received response",
        ...     command="AT+SPENGMD=0,6,0",
        ...     status="SUCCESS",
        ...     execution_time=0.123
        ... )
        >>> entry.to_string()
        '2026-03-01 10:30:15.234 | INFO    | ATExecutor      | Received response | CMD: AT+SPENGMD=0,6,0 | STATUS: SUCCESS | TIME: 0.123s'
    """

    timestamp: datetime
    level: str
    source: str
    message: str
    details: Optional[Dict[str, Any]] = None

    port: Optional[str] = None
    command: Optional[str] = None
    response: Optional[str] = None
    status: Optional[str] = None
    execution_time: Optional[float] = None
    retry_count: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_string(self) -> str:
        """Format as "YYYY-MM-DD HH:MM:SS.mmm | LEVEL | SOURCE | MESSAGE [| extras]"."""
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        parts = [timestamp_str, f"{self.level:7}", f"{self.source:15}", self.message]

        if self.command:
            parts.append(f"CMD: {self.command}")
        if self.status:
            parts.append(f"STATUS: {self.status}")
        if self.execution_time is not None:
            parts.append(f"TIME: {self.execution_time:.3f}s")
        if self.retry_count:
            parts.append(f"RETRIES: {self.retry_count}")
        if self.error:
            parts.append(f"ERROR: {self.error}")

        return " | ".join(parts)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogEntry':
        """Rebuild an entry from to_dict() output; unknown keys are ignored."""
        values = {f.name: data.get(f.name) for f in fields(cls)}
        if isinstance(values['timestamp'], str):
            values['timestamp'] = datetime.fromisoformat(values['timestamp'])
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> 'LogEntry':
        return cls.from_dict(json.loads(json_str))
