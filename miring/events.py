"""Schema-validating parse exposed as a flat stream of events.

libxml2 validates a finished tree, so the stream is rebuilt from the tree and
the schema error log: every log entry carries the path of the node it is
about, which `ElementTree.getpath` reproduces for each element while the
tree is walked.

A document that is not well formed has no tree. Its element events are
replayed with a pull parser up to the point where it broke, followed by the
syntax errors of this parse.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from lxml import etree

from .utils import as_bytes, xml_parser

logger = logging.getLogger(__name__)

START = "start"
END = "end"
VIOLATION = "violation"

# libxml2 reports these while the element is being opened
_OPENING_TYPES = ("SCHEMAV_CVC_COMPLEX_TYPE_4",)
_OPENING_TEXT = ("This element is not expected.",)


@dataclass(frozen=True)
class ParseEvent:
    kind: str
    name: str = ""
    attrib: Dict[str, str] = field(default_factory=dict)
    level: str = ""
    message: str = ""


def make_parser(encoding=None) -> etree.XMLParser:
    return xml_parser(encoding)


def _violation(entry) -> ParseEvent:
    return ParseEvent(VIOLATION, level=entry.level_name, message=entry.message)


def _is_opening(entry) -> bool:
    if entry.type_name in _OPENING_TYPES:
        return True
    return any(text in entry.message for text in _OPENING_TEXT)


def _owner_path(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    # attribute entries point at /a/b/@attr
    if "/@" in path:
        path = path.split("/@", 1)[0]
    return path


def _drain(parser) -> Iterator[ParseEvent]:
    for action, el in parser.read_events():
        if not isinstance(el.tag, str):
            continue
        if action == START:
            yield ParseEvent(START, etree.QName(el).localname, dict(el.attrib))
        else:
            yield ParseEvent(END, etree.QName(el).localname)


def _events_before_failure(data: bytes, encoding) -> Iterator[ParseEvent]:
    """Element events for everything read before the document broke."""
    parser = xml_parser(encoding, pull=True)
    try:
        for line in data.splitlines(keepends=True):
            parser.feed(line)
            yield from _drain(parser)
        parser.close()
    except etree.XMLSyntaxError as e:
        # the strict parse reports the syntax errors themselves
        logger.debug("Incremental parse stopped: %s", e)
    yield from _drain(parser)


def iter_events(xml, schema: etree.XMLSchema) -> Iterator[ParseEvent]:
    data, encoding = as_bytes(xml)
    parser = make_parser(encoding)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        yield from _events_before_failure(data, encoding)
        # only this parser's log; the exception's copy also holds earlier schema errors
        entries = list(parser.error_log)
        if not entries:
            yield ParseEvent(VIOLATION, level="FATAL", message=str(e))
        for entry in entries:
            yield _violation(entry)
        return
    if root is None:
        yield ParseEvent(VIOLATION, level="FATAL", message="Document is empty")
        return

    tree = root.getroottree()
    schema.validate(tree)

    opening: Dict[str, list] = {}
    closing: Dict[str, list] = {}
    loose = []
    for entry in schema.error_log:
        path = _owner_path(entry.path)
        if path is None:
            loose.append(entry)
        elif _is_opening(entry):
            opening.setdefault(path, []).append(entry)
        else:
            closing.setdefault(path, []).append(entry)

    for action, el in etree.iterwalk(root, events=(START, END)):
        if not isinstance(el.tag, str):
            continue
        path = tree.getpath(el)
        if action == START:
            for entry in opening.pop(path, ()):
                yield _violation(entry)
            yield ParseEvent(START, etree.QName(el).localname, dict(el.attrib))
        else:
            for entry in closing.pop(path, ()):
                yield _violation(entry)
            yield ParseEvent(END, etree.QName(el).localname)

    # paths that matched nothing in the walk
    for leftovers in (opening, closing):
        for entries in leftovers.values():
            loose.extend(entries)
    for entry in loose:
        logger.debug("Schema message without an element anchor: %s", entry.message)
        yield _violation(entry)
