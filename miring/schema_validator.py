"""Structural tier: XML Schema conformance with MIRING rule enrichment.

One call to `validate` runs one parse. Element events keep a
`PositionTracker` in step with the parser; every violation is classified,
looked up in the rule catalog and stamped with the tracker's location.
"""

import logging
from typing import Optional

from lxml import etree

from . import classifier, events
from .catalog import RuleCatalog
from .errors import InitializationFailure
from .models import Diagnostic, Sample, SchemaRun, Severity, add_diagnostic
from .tracker import PositionTracker
from .utils import get_namespace, resolve_resource

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "schema/MiringTier1.xsd"
DEFAULT_RULES_DIR = "rules"


def load_schema(schema_id) -> etree.XMLSchema:
    path = resolve_resource(schema_id)
    try:
        doc = etree.parse(str(path), events.make_parser())
        return etree.XMLSchema(doc)
    except (OSError, etree.XMLSyntaxError, etree.XMLSchemaParseError) as e:
        raise InitializationFailure(path, e) from e


class ValidationRun:
    """State of a single parse; discarded when `validate` returns."""

    def __init__(self, catalog: RuleCatalog, namespace: str):
        self.catalog = catalog
        self.namespace = namespace
        self.tracker = PositionTracker()
        self.result = SchemaRun(namespace=namespace)

    def start_element(self, event):
        if event.name == "sample":
            self.result.samples.append(
                Sample(event.attrib.get("id"), event.attrib.get("center-code"))
            )
        self.tracker.on_element_start(event.name)

    def end_element(self, event):
        self.tracker.on_element_end()

    def violation(self, event):
        # every schema message counts as fatal until a rule says otherwise
        if event.level != Severity.FATAL.name:
            logger.debug("Promoting %s schema message to fatal", event.level or "unleveled")
        found = classifier.classify(event.message, self.namespace)

        if isinstance(found, classifier.MissingAttribute):
            diagnostic = self.catalog.missing_attribute(
                found.attribute, found.node, self.tracker.projected_path(found.node)
            )
        elif isinstance(found, classifier.MissingNode):
            diagnostic = self.catalog.missing_node(
                found.name, self.tracker.current_name(), self.tracker.current_path()
            )
        elif isinstance(found, classifier.PrologViolation):
            diagnostic = Diagnostic(
                found.message, Severity.FATAL, found.rule_id, found.solution, self.tracker.current_path()
            )
        else:
            diagnostic = Diagnostic(
                found.raw, Severity.FATAL, found.rule_id, found.solution, self.tracker.current_path()
            )
        add_diagnostic(self.result.diagnostics, diagnostic)

    def run(self, xml, schema):
        handlers = {
            events.START: self.start_element,
            events.END: self.end_element,
            events.VIOLATION: self.violation,
        }
        try:
            for event in events.iter_events(xml, schema):
                handlers[event.kind](event)
        except Exception:
            logger.exception("Parser failed; keeping %d diagnostics found so far", len(self.result.diagnostics))
        finally:
            self.result.catalog_gaps = list(self.catalog.gaps)
            self.tracker.reset()
        return self.result


def validate(xml, schema_id=DEFAULT_SCHEMA, rules_dir: Optional[str] = None) -> SchemaRun:
    """Validate `xml` against the schema resource `schema_id`.

    Returns the diagnostics in document order with the samples and namespace
    seen along the way. A schema or rule table that cannot be loaded gives a
    run with `failure` set and no diagnostics.
    """
    try:
        catalog = RuleCatalog.load(resolve_resource(rules_dir or DEFAULT_RULES_DIR))
        namespace = get_namespace(xml)
        schema = load_schema(schema_id)
    except InitializationFailure as e:
        logger.error("Structural validation could not start: %s", e)
        return SchemaRun(failure=str(e))

    logger.debug("Validating against %s (namespace %r)", schema_id, namespace)
    result = ValidationRun(catalog, namespace).run(xml, schema)
    logger.debug("Structural validation found %d diagnostics", len(result.diagnostics))
    return result
