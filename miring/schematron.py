"""Semantic tier: ISO Schematron rule sets evaluated through lxml.

Each rule set is compiled to XSLT by `lxml.isoschematron` and produces an
SVRL report; failed assertions and successful reports both become
diagnostics. Rule ids come from the assertion `id`, severities from its
`role` (same spellings as the rule tables).
"""

import logging
from typing import Iterable, List

from lxml import etree, isoschematron

from .errors import InitializationFailure
from .models import UNKNOWN_RULE, Diagnostic, Severity, add_diagnostic
from .utils import element_path, resolve_resource, xml_parser, xml_root

logger = logging.getLogger(__name__)

DEFAULT_RULESETS = ("schematron/MiringAll.sch",)
SVRL = "http://purl.oclc.org/dsdl/svrl"
_FINDINGS = (f"{{{SVRL}}}failed-assert", f"{{{SVRL}}}successful-report")


def load_ruleset(ruleset_id) -> isoschematron.Schematron:
    path = resolve_resource(ruleset_id)
    try:
        doc = etree.parse(str(path), xml_parser())
        # rule ids live on sch:assert/@id, which lxml's bundled ISO grammar rejects
        return isoschematron.Schematron(doc, store_report=True, validate_schema=False)
    except (OSError, etree.XMLSyntaxError, etree.SchematronParseError, etree.XSLTParseError) as e:
        raise InitializationFailure(path, e) from e


def _location(tree, location: str) -> str:
    if not location:
        return ""
    try:
        found = tree.xpath(location)
    except etree.XPathError:
        return location
    if found and isinstance(found[0], etree._Element):
        return element_path(found[0])
    return location


def findings(report, tree) -> List[Diagnostic]:
    out = []
    for item in report.iter(*_FINDINGS):
        text = item.find(f"{{{SVRL}}}text")
        message = " ".join((text.text or "").split()) if text is not None else ""
        severity = Severity.parse(item.get("role") or Severity.CHECKLIST.value)
        out.append(
            Diagnostic(
                message=message,
                severity=severity,
                rule_id=item.get("id") or UNKNOWN_RULE,
                location=_location(tree, item.get("location", "")),
            )
        )
    return out


def validate(xml, ruleset_ids: Iterable[str] = DEFAULT_RULESETS) -> List[Diagnostic]:
    """Run every rule set over `xml`. Raises InitializationFailure for unloadable rule sets."""
    rulesets = [(rid, load_ruleset(rid)) for rid in ruleset_ids]
    root = xml_root(xml)
    if root is None:
        logger.warning("Semantic tier skipped: document is not well formed")
        return []
    tree = root.getroottree()

    diagnostics: List[Diagnostic] = []
    for ruleset_id, ruleset in rulesets:
        ruleset.validate(tree)
        for diagnostic in findings(ruleset.validation_report, tree):
            add_diagnostic(diagnostics, diagnostic)
        logger.debug("Rule set %s: %d findings so far", ruleset_id, len(diagnostics))
    return diagnostics
