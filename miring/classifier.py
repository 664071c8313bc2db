"""Turn raw schema-violation messages into typed findings.

Two message grammars are understood, and only these two:

Xerces (``cvc-*`` codes), the grammar the MIRING rule tables were written
against. Token positions are fixed; examples of the handled shapes::

    cvc-complex-type.2.4.a: Invalid content was found starting with element 'sample'. One of '{"http://schemas.nmdp.org/spec/hml/1.0.1":property, "http://schemas.nmdp.org/spec/hml/1.0.1":hmlid}' is expected.
    cvc-complex-type.2.4.b: The content of element 'sbt-ngs' is not complete. One of '{"http://schemas.nmdp.org/spec/hml/1.0.1":raw-reads}' is expected.
    cvc-complex-type.4: Attribute 'quality-score' must appear on element 'variant'.

libxml2, the validator lxml drives::

    Element '{http://schemas.nmdp.org/spec/hml/1.0.1}reporting-center': This element is not expected. Expected is ( {http://schemas.nmdp.org/spec/hml/1.0.1}hmlid ).
    Element '{http://schemas.nmdp.org/spec/hml/1.0.1}sbt-ngs': Missing child element(s). Expected is one of ( {...}property, {...}raw-reads ).
    Element '{http://schemas.nmdp.org/spec/hml/1.0.1}sbt-ngs': The attribute 'test-id' is required but missing.

Anything else is reported verbatim as unclassified. Do not loosen these
patterns to catch other phrasings; add a fixture and a branch instead.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from .models import UNKNOWN_RULE

logger = logging.getLogger(__name__)

PROLOG_MESSAGE = "Content is not allowed in prolog."
PROLOG_SOLUTION = (
    "This most likely means that there is some text before the initial xml node begins. "
    "Get rid of it and try again."
)
UNCLASSIFIED_SOLUTION = (
    "Verify that your HML file is well formed, and conforms to "
    "http://schemas.nmdp.org/spec/hml/1.0.1/hml-1.0.1.xsd"
)

# libxml2 reports text before the root as an empty document
LIBXML_PROLOG_MESSAGE = "Start tag expected, '<' not found"

MISSING_NODE_CODES = ("cvc-complex-type.2.4.a:", "cvc-complex-type.2.4.b:")
MISSING_ATTRIBUTE_CODE = "cvc-complex-type.4:"

_LIBXML_ELEMENT = re.compile(r"^Element '(?P<element>[^']+)': (?P<reason>.+)$", re.S)
_LIBXML_CONTENT_REASONS = ("This element is not expected.", "Missing child element(s).")
_LIBXML_EXPECTED = re.compile(r"Expected is (?:one of )?\( (?P<names>.+?) \)\.?$", re.S)
_LIBXML_REQUIRED_ATTRIBUTE = re.compile(
    r"^The attribute '(?P<attribute>[^']+)' is required but missing\.?$"
)


@dataclass(frozen=True)
class PrologViolation:
    message: str = PROLOG_MESSAGE
    solution: str = PROLOG_SOLUTION
    rule_id: str = UNKNOWN_RULE


@dataclass(frozen=True)
class MissingNode:
    name: str


@dataclass(frozen=True)
class MissingAttribute:
    attribute: str
    node: str


@dataclass(frozen=True)
class Unclassified:
    raw: str
    solution: str = UNCLASSIFIED_SOLUTION
    rule_id: str = UNKNOWN_RULE


Classification = Union[PrologViolation, MissingNode, MissingAttribute, Unclassified]


def strip_namespace(name: str, namespace: Optional[str] = None) -> str:
    """Local part of a `{uri}name`, `prefix:name` or plain element name."""
    if not name:
        return ""
    if namespace and name.startswith("{" + namespace + "}"):
        return name[len(namespace) + 2:]
    if name.startswith("{") and "}" in name:
        return name.rsplit("}", 1)[1]
    if ":" in name:
        return name.rsplit(":", 1)[1]
    return name


def classify(message: str, namespace: Optional[str] = None) -> Classification:
    raw = (message or "").strip()
    if raw in (PROLOG_MESSAGE, LIBXML_PROLOG_MESSAGE):
        return PrologViolation()

    tokens = raw.split()
    if tokens and tokens[0] in MISSING_NODE_CODES:
        name = _xerces_missing_node(tokens, namespace)
        if name:
            return MissingNode(name)
    elif tokens and tokens[0] == MISSING_ATTRIBUTE_CODE:
        found = _xerces_missing_attribute(tokens, namespace)
        if found:
            return MissingAttribute(*found)
    else:
        m = _LIBXML_ELEMENT.match(raw)
        if m:
            found = _libxml_finding(m.group("element"), m.group("reason"), namespace)
            if found is not None:
                return found
        logger.debug("Unhandled schema message: %s", raw)
    return Unclassified(raw)


def _xerces_missing_node(tokens, namespace) -> Optional[str]:
    # The expected names sit between '{' and '}'; the missing one is the last.
    first_open = last_close = -1
    for i, token in enumerate(tokens):
        if "{" in token and first_open < 0:
            first_open = i
        if "}" in token:
            last_close = i
    if first_open < 0 or last_close < 0:
        logger.warning("Classifier gap: no expected-element list in %r", " ".join(tokens))
        return None

    # "http://schemas.nmdp.org/spec/hml/1.0.1":hmlid}'
    qualified = tokens[last_close]
    marker = f'"{namespace}":' if namespace else None
    if marker and marker in qualified:
        start = qualified.rindex(marker) + len(marker)
    elif '":' in qualified:
        start = qualified.rindex('":') + 2
    else:
        start = qualified.rfind("{") + 1
    end = qualified.find("}'", start)
    if end < 0:
        end = qualified.find("}", start)
    name = qualified[start:end].strip(",") if end >= 0 else ""
    if not name:
        logger.warning("Classifier gap: empty element name in %r", qualified)
        return None
    return name


def _xerces_missing_attribute(tokens, namespace):
    # cvc-complex-type.4: Attribute 'quality-score' must appear on element 'variant'.
    if len(tokens) < 8:
        logger.warning("Classifier gap: short attribute message %r", " ".join(tokens))
        return None
    attribute = tokens[2].replace("'", "")
    untrimmed = tokens[7]
    start = untrimmed.find("'") + 1
    end = untrimmed.find("'.", start)
    if end < 0:
        end = len(untrimmed.rstrip("'."))
    node = strip_namespace(untrimmed[start:end], namespace)
    if not attribute or not node:
        logger.warning("Classifier gap: unreadable attribute message %r", " ".join(tokens))
        return None
    return attribute, node


def _libxml_finding(element: str, reason: str, namespace) -> Optional[Classification]:
    reason = reason.strip()
    if reason.startswith(_LIBXML_CONTENT_REASONS):
        m = _LIBXML_EXPECTED.search(reason)
        if not m:
            logger.warning("Classifier gap: no expected-element list in %r", reason)
            return None
        last = m.group("names").split(", ")[-1].strip()
        name = strip_namespace(last, namespace)
        # wildcards (*, ##other{...}*) do not name a node
        if not name or "*" in name or name.startswith("##"):
            logger.warning("Classifier gap: expected entry %r is not an element name", last)
            return None
        return MissingNode(name)
    m = _LIBXML_REQUIRED_ATTRIBUTE.match(reason)
    if m:
        return MissingAttribute(m.group("attribute"), strip_namespace(element, namespace))
    return None
