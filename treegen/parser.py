"""Parse display model markup into ``TreeNode`` trees.

Each document holds one root element. The ``id`` and ``reportEvents``
attributes map onto dedicated node fields; every other attribute is kept as a
string in ``TreeNode.attributes``. Text of a leaf element becomes its ``text``;
text mixed with child elements becomes text-only child nodes in document
order.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Set, Union

from lxml import etree

from .errors import ParseError
from .model import EventBinding, TreeNode

ID_ATTRIBUTE = "id"
REPORT_EVENTS_ATTRIBUTE = "reportEvents"

PREVENT_DEFAULT_FLAG = "PD"
STOP_PROPAGATION_FLAG = "SP"
EXTRA_VALUE_PREFIX = "X-"

EVENT_SEPARATOR_RE = re.compile(r"[\s,]+")


def _new_parser() -> etree.XMLParser:
    return etree.XMLParser(
        recover=False,
        remove_comments=True,
        remove_pis=True,
        resolve_entities=False,
        no_network=True,
    )


def _local_name(name: str) -> str:
    return etree.QName(name).localname


def _parse_event_entry(entry: str, source: str) -> EventBinding:
    name, *flags = entry.split(":")
    prevent_default = False
    stop_propagation = False
    extra_values: Optional[List[str]] = None
    for flag in flags:
        if flag == PREVENT_DEFAULT_FLAG:
            prevent_default = True
        elif flag == STOP_PROPAGATION_FLAG:
            stop_propagation = True
        elif flag.startswith(EXTRA_VALUE_PREFIX) and len(flag) > len(EXTRA_VALUE_PREFIX):
            if extra_values is None:
                extra_values = []
            extra_values.append(flag[len(EXTRA_VALUE_PREFIX) :])
        else:
            raise ParseError(source, f"unknown flag {flag!r} in {REPORT_EVENTS_ATTRIBUTE} entry {entry!r}")
    return EventBinding(
        name=name,
        prevent_default=prevent_default,
        stop_propagation=stop_propagation,
        extra_values=extra_values,
    )


def parse_report_events(value: str, *, source: str = "<string>") -> List[EventBinding]:
    """Parse a ``reportEvents`` attribute such as ``"click:PD submit:PD:SP"``.

    Entries are separated by whitespace or commas. ``X-<value>`` flags append
    ``<value>`` to the binding's ``extra_values``.
    """

    entries = [entry for entry in EVENT_SEPARATOR_RE.split(value) if entry]
    return [_parse_event_entry(entry, source) for entry in entries]


def _append_text_node(children: List[TreeNode], text: Optional[str]) -> None:
    stripped = (text or "").strip()
    if stripped:
        children.append(TreeNode(text=stripped))


def _element_to_node(element: etree._Element, source: str) -> TreeNode:
    node_id = ""
    attributes: Optional[Dict[str, str]] = None
    report_events: Optional[List[EventBinding]] = None

    seen: Set[str] = set()
    for raw_name, value in element.attrib.items():
        name = _local_name(raw_name)
        if name in seen:
            raise ParseError(
                source,
                f"attribute {name!r} appears twice on line {element.sourceline} "
                "under different namespaces",
            )
        seen.add(name)
        if name == ID_ATTRIBUTE:
            node_id = value
        elif name == REPORT_EVENTS_ATTRIBUTE:
            report_events = parse_report_events(value, source=source)
        else:
            if attributes is None:
                attributes = {}
            attributes[name] = value

    for child in element:
        if child.tag is etree.Entity:
            raise ParseError(
                source,
                f"entity reference {child.text} on line {child.sourceline} is not expanded",
            )

    text = ""
    children: Optional[List[TreeNode]] = None
    if any(isinstance(child.tag, str) for child in element):
        children = []
        _append_text_node(children, element.text)
        for child in element:
            if isinstance(child.tag, str):
                children.append(_element_to_node(child, source))
            _append_text_node(children, child.tail)
    else:
        text = (element.text or "").strip()

    return TreeNode(
        id=node_id,
        element_kind=_local_name(element.tag),
        text=text,
        attributes=attributes,
        report_events=report_events,
        children=children,
    )


def parse_tree(text: Union[str, bytes], *, source: Optional[str] = None) -> TreeNode:
    """Parse one markup document into its root ``TreeNode``.

    Pass ``bytes`` to let an XML declaration pick the encoding. ``str`` input
    is already decoded, so lxml rejects one that declares an encoding.
    ``source`` names the input in error messages. Entity references other
    than the predefined ones are never expanded and fail the parse.
    """

    source = source or "<string>"
    if not text.strip():
        raise ParseError(source, "document is empty")
    try:
        root = etree.fromstring(text, parser=_new_parser())
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise ParseError(source, exc) from exc
    return _element_to_node(root, source)


__all__ = ["parse_report_events", "parse_tree"]
