"""User-facing diagnostics returned by lifecycle operations."""

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single message for the operator.

    ``detail`` carries longer remediation guidance when there is any.
    """

    severity: Severity
    summary: str
    detail: str = ""


class Diagnostics(list[Diagnostic]):
    """Ordered collection of diagnostics from one operation."""

    def add_error(self, summary: str, detail: str = "") -> "Diagnostics":
        self.append(Diagnostic(Severity.ERROR, summary, detail))
        return self

    def add_warning(self, summary: str, detail: str = "") -> "Diagnostics":
        self.append(Diagnostic(Severity.WARNING, summary, detail))
        return self

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self if d.severity is Severity.WARNING]
