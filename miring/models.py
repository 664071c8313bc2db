from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

UNKNOWN_RULE = "?"


class Severity(str, Enum):
    FATAL = "fatal"
    CHECKLIST = "checklist"
    WARNING = "warning"
    INFO = "info"

    @classmethod
    def parse(cls, value) -> "Severity":
        """Map a rule-table or Schematron role spelling to a Severity.

        `miring` is the checklist spelling used by the original rule tables.
        Anything unrecognised is treated as fatal.
        """
        if isinstance(value, Severity):
            return value
        s = str(value or "").strip().lower()
        if s == "miring":
            return cls.CHECKLIST
        for member in cls:
            if member.value == s:
                return member
        return cls.FATAL


@dataclass(frozen=True)
class Diagnostic:
    message: str
    severity: Severity = Severity.FATAL
    rule_id: str = UNKNOWN_RULE
    solution: str = ""
    location: str = ""

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "rule_id": self.rule_id,
            "solution": self.solution,
            "location": self.location,
        }


@dataclass(frozen=True)
class Sample:
    id: Optional[str]
    center_code: Optional[str]


@dataclass(frozen=True)
class RuleEntry:
    """One row of a rule table.

    Node rules leave `attribute` empty; attribute rules key on the
    (node, attribute) pair.
    """

    node: str
    rule_id: str
    severity: Severity = Severity.FATAL
    solution: Optional[str] = None
    attribute: Optional[str] = None


@dataclass
class SchemaRun:
    """Outcome of one structural-tier run."""

    diagnostics: List[Diagnostic] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)
    namespace: str = ""
    catalog_gaps: List[str] = field(default_factory=list)
    failure: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.failure is None

    @property
    def conformant(self) -> bool:
        return self.completed and not self.diagnostics


def add_diagnostic(diagnostics: List[Diagnostic], diagnostic: Diagnostic) -> bool:
    """Append `diagnostic` unless an identical one is already recorded."""
    if diagnostic in diagnostics:
        return False
    diagnostics.append(diagnostic)
    return True


def has_fatal_errors(diagnostics) -> bool:
    return any(d.severity is Severity.FATAL for d in diagnostics or [])
