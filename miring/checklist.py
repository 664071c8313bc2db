"""Both MIRING tiers run in sequence, folded into one report."""

import logging

from . import schema_validator, schematron
from .errors import InitializationFailure
from .models import UNKNOWN_RULE, Diagnostic, Severity, has_fatal_errors
from .report import generate_report
from .settings import load_settings
from .utils import get_hmlid, get_properties

logger = logging.getLogger(__name__)

EMPTY_INPUT = "XML is null or length 0."


class MiringValidator:
    def __init__(self, xml, schema=None, rulesets=None, rules_dir=None, settings=None):
        settings = settings or load_settings()
        self.xml = xml
        self.schema = schema or settings["schema"]
        self.rulesets = list(rulesets or settings["schematron"])
        self.rules_dir = rules_dir or settings["rules_dir"]
        self.tier1 = []
        self.tier2 = []
        self.samples = []
        self.report = None

    @property
    def diagnostics(self):
        return self.tier1 + self.tier2

    def validate(self) -> str:
        """Run tier 1, then tier 2 when tier 1 found nothing fatal, and return the report XML."""
        if not self.xml or not self.xml.strip():
            self.tier1 = [Diagnostic(EMPTY_INPUT, Severity.FATAL)]
            self.report = generate_report(self.tier1)
            return self.report

        run = schema_validator.validate(self.xml, self.schema, self.rules_dir)
        if run.failure:
            self.tier1 = [
                Diagnostic(
                    f"Structural validation could not run: {run.failure}",
                    Severity.FATAL,
                    UNKNOWN_RULE,
                    "Check the configured schema and rule tables.",
                )
            ]
        else:
            self.tier1 = list(run.diagnostics)
        self.samples = list(run.samples)

        if has_fatal_errors(self.tier1):
            logger.info("Skipping semantic tier: %d fatal structural findings",
                        sum(1 for d in self.tier1 if d.severity is Severity.FATAL))
        else:
            try:
                self.tier2 = schematron.validate(self.xml, self.rulesets)
            except InitializationFailure as e:
                logger.error("Semantic tier could not run: %s", e)
                self.tier2 = [
                    Diagnostic(
                        f"Semantic validation could not run: {e}",
                        Severity.FATAL,
                        UNKNOWN_RULE,
                        "Check the configured Schematron rule sets.",
                    )
                ]

        hmlid_root, hmlid_extension = get_hmlid(self.xml)
        self.report = generate_report(
            self.diagnostics, hmlid_root, hmlid_extension, get_properties(self.xml), self.samples
        )
        return self.report
