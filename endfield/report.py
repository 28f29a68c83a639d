import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, List

logger = logging.getLogger(__name__)


class Severity(enum.Enum):
    DEBUG = "debug"
    INFO = "info"
    ERROR = "error"


_LEVELS = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class ReportEntry:
    severity: Severity
    text: str

    def render(self) -> str:
        return f"({self.severity.name}) {self.text}"


@dataclass
class RunReport:
    """Ordered transcript of a run; every entry is also logged."""

    entries: List[ReportEntry] = field(default_factory=list)

    def add(self, severity: Severity, text: str) -> ReportEntry:
        entry = ReportEntry(severity, text)
        self.entries.append(entry)
        logger.log(_LEVELS[severity], text)
        return entry

    def debug(self, text: str) -> ReportEntry:
        return self.add(Severity.DEBUG, text)

    def info(self, text: str) -> ReportEntry:
        return self.add(Severity.INFO, text)

    def error(self, text: str) -> ReportEntry:
        return self.add(Severity.ERROR, text)

    @property
    def has_errors(self) -> bool:
        return any(e.severity is Severity.ERROR for e in self.entries)

    def visible(self) -> Iterable[ReportEntry]:
        """Entries meant for humans (debug lines are left out)."""
        return (e for e in self.entries if e.severity is not Severity.DEBUG)

    def render(self) -> str:
        return "\n".join(e.render() for e in self.visible())
