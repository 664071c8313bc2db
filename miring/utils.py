from pathlib import Path
from typing import Dict, Optional, Tuple

from lxml import etree

RESOURCES = Path(__file__).parent / "resources"


def xml_parser(encoding=None, pull=False):
    """Parser that never resolves entities nor touches the network.

    `encoding` overrides the document declaration; it is set for text that
    has already been decoded.
    """
    options = dict(encoding=encoding, resolve_entities=False, no_network=True, load_dtd=False)
    if pull:
        return etree.XMLPullParser(events=("start", "end"), **options)
    return etree.XMLParser(**options)


def as_bytes(xml) -> Tuple[bytes, Optional[str]]:
    """Bytes to hand to lxml plus the encoding override they need.

    Bytes are passed through so the declared encoding is honoured; text is
    sent as UTF-8 with the declaration overridden.
    """
    if isinstance(xml, str):
        return xml.encode("utf-8"), "utf-8"
    return xml, None


def xml_root(xml) -> Optional[etree._Element]:
    """Parse `xml` (str or bytes) and return its root, or None when unreadable."""
    if xml is None:
        return None
    data, encoding = as_bytes(xml)
    try:
        return etree.fromstring(data, xml_parser(encoding))
    except etree.XMLSyntaxError:
        return None


def get_namespace(xml) -> str:
    """Namespace URI of the root element, "" when there is none or it cannot be read."""
    root = xml if isinstance(xml, etree._Element) else xml_root(xml)
    if root is None:
        return ""
    return etree.QName(root).namespace or ""


def _find_first(root, local_name):
    if root is None:
        return None
    if etree.QName(root).localname == local_name:
        return root
    found = root.xpath("//*[local-name()=$n]", n=local_name)
    return found[0] if found else None


def get_hmlid(xml) -> Tuple[Optional[str], Optional[str]]:
    """(root, extension) of the first hmlid element in an HML document or a report."""
    root = xml if isinstance(xml, etree._Element) else xml_root(xml)
    hmlid = _find_first(root, "hmlid")
    if hmlid is None:
        return None, None
    return hmlid.get("root"), hmlid.get("extension")


def get_properties(xml) -> Dict[str, str]:
    """name -> value of the property elements directly under the root."""
    root = xml if isinstance(xml, etree._Element) else xml_root(xml)
    properties = {}
    if root is None:
        return properties
    for el in root:
        if not isinstance(el.tag, str) or etree.QName(el).localname != "property":
            continue
        name = el.get("name")
        if name:
            properties[name] = el.get("value", "")
    return properties


def element_path(element) -> str:
    """Render `element` as /name[index] segments, counting same-named siblings."""
    parts = []
    cur = element
    while cur is not None:
        name = etree.QName(cur).localname
        parent = cur.getparent()
        if parent is None:
            index = 1
        else:
            index = 1 + sum(
                1 for sib in cur.itersiblings(preceding=True)
                if isinstance(sib.tag, str) and etree.QName(sib).localname == name
            )
        parts.append(f"{name}[{index}]")
        cur = parent
    return "/" + "/".join(reversed(parts))


def resolve_resource(name) -> Path:
    """Existing filesystem path as given, otherwise relative to the bundled resources."""
    path = Path(name)
    if path.exists():
        return path
    return RESOURCES / path
