"""MIRING rule lookup for structural findings.

The two tables are plain YAML lists. A node row::

    - node-name: hmlid
      miring-rule-id: 1.1.a
      severity: fatal
      solution-text: Every HML document carries exactly one hmlid.

An attribute row adds ``attribute-name``. Rows are matched on exact key
equality and the first match wins.
"""

import logging
from pathlib import Path
from typing import List, Optional

import yaml

from .errors import InitializationFailure
from .models import UNKNOWN_RULE, Diagnostic, RuleEntry, Severity

logger = logging.getLogger(__name__)

NODE_TABLE = "missing_node_rules.yml"
ATTRIBUTE_TABLE = "missing_attribute_rules.yml"


def _join(*parts) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


def load_table(path, scope: str) -> List[RuleEntry]:
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise InitializationFailure(path, e) from e
    if raw is None:
        raw = []
    if isinstance(raw, dict):
        raw = raw.get("rules") or []
    if not isinstance(raw, list):
        raise InitializationFailure(path, "rule table must be a list of rows")

    entries = []
    for i, row in enumerate(raw, start=1):
        if not isinstance(row, dict):
            raise InitializationFailure(path, f"row {i} is not a mapping")
        node = row.get("node-name")
        rule_id = row.get("miring-rule-id")
        attribute = row.get("attribute-name")
        if not node or not rule_id:
            raise InitializationFailure(path, f"row {i} needs node-name and miring-rule-id")
        if scope == "attribute" and not attribute:
            raise InitializationFailure(path, f"row {i} needs attribute-name")
        entries.append(
            RuleEntry(
                node=str(node),
                rule_id=str(rule_id),
                severity=Severity.parse(row.get("severity")),
                solution=row.get("solution-text"),
                attribute=str(attribute) if scope == "attribute" else None,
            )
        )
    logger.debug("Loaded %d %s rules from %s", len(entries), scope, path)
    return entries


class RuleCatalog:
    def __init__(self, node_rules=None, attribute_rules=None):
        self.node_rules: List[RuleEntry] = list(node_rules or [])
        self.attribute_rules: List[RuleEntry] = list(attribute_rules or [])
        self.gaps: List[str] = []

    @classmethod
    def load(cls, rules_dir) -> "RuleCatalog":
        rules_dir = Path(rules_dir)
        return cls(
            load_table(rules_dir / NODE_TABLE, "node"),
            load_table(rules_dir / ATTRIBUTE_TABLE, "attribute"),
        )

    def lookup_node(self, name: str) -> Optional[RuleEntry]:
        for entry in self.node_rules:
            if entry.node == name:
                return entry
        return None

    def lookup_attribute(self, node: str, attribute: str) -> Optional[RuleEntry]:
        for entry in self.attribute_rules:
            if entry.node == node and entry.attribute == attribute:
                return entry
        return None

    def missing_node(self, name: str, parent: str, location: str) -> Diagnostic:
        message = f"There is a missing {name} node underneath the {parent} node."
        solution = f"Please add one {name} node underneath the {parent} node."
        entry = self.lookup_node(name)
        if entry is None:
            self._gap(name)
            return Diagnostic(message, Severity.FATAL, UNKNOWN_RULE, solution, location)
        return Diagnostic(message, entry.severity, entry.rule_id, _join(solution, entry.solution), location)

    def missing_attribute(self, attribute: str, node: str, location: str) -> Diagnostic:
        message = f"The node {node} is missing a {attribute} attribute."
        solution = f"Please add a {attribute} attribute to the {node} node."
        entry = self.lookup_attribute(node, attribute)
        if entry is None:
            self._gap(f"{node}@{attribute}")
            return Diagnostic(message, Severity.FATAL, UNKNOWN_RULE, solution, location)
        return Diagnostic(message, entry.severity, entry.rule_id, _join(solution, entry.solution), location)

    def _gap(self, key: str):
        logger.warning("No MIRING rule for %s; reporting a generic diagnostic", key)
        if key not in self.gaps:
            self.gaps.append(key)
