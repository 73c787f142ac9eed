"""Emit Python source that reconstructs display trees literally.

Every present field of a node becomes a keyword argument, checked in a fixed
order; fields holding their default are left out so the generated code only
states what differs from an empty ``TreeNode()``. Attribute keys are sorted at
every level, while events and children keep their declared order.

The tokenizer refuses more than 200 open brackets, so a subexpression that
starts ``MAX_NESTING`` brackets deep is moved to a private module-level name
declared ahead of the binding that uses it. Deeper subexpressions are declared
first, which keeps the output order fixed.
"""

from __future__ import annotations

import ast
import math
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .errors import EmissionInvariantError
from .model import EventBinding, TreeNode
from .naming import HOISTED_PREFIX, is_valid_binding_name

VOCABULARY_MODULE = "treegen.model"
NODE_CONSTRUCTOR = "TreeNode"
EVENT_CONSTRUCTOR = "EventBinding"
MODULE_TEMPLATE = "module.py.jinja"
INDENT = "    "
MAX_NESTING = 64

NAMESPACE_RE = re.compile(r"[^\W\d]\w*(\.[^\W\d]\w*)*")

Field = Tuple[str, str]


class Hoister:
    """Collects subexpressions moved out of one binding's declaration."""

    def __init__(self, owner: str) -> None:
        self.owner = owner
        self.declarations: List[Field] = []

    def bind(self, expression: str) -> str:
        name = f"{HOISTED_PREFIX}{self.owner}_{len(self.declarations) + 1}"
        self.declarations.append((name, expression))
        return name


def _too_deep(depth: int, hoister: Optional[Hoister]) -> bool:
    return hoister is not None and depth >= MAX_NESTING


def _pad(depth: int) -> str:
    return INDENT * depth


def _call(constructor: str, fields: Sequence[Field], depth: int) -> str:
    if not fields:
        return f"{constructor}()"
    body = "".join(f"{_pad(depth + 1)}{name}={value},\n" for name, value in fields)
    return f"{constructor}(\n{body}{_pad(depth)})"


def _sequence(items: Sequence[str], depth: int) -> str:
    if not items:
        return "[]"
    body = "".join(f"{_pad(depth + 1)}{item},\n" for item in items)
    return f"[\n{body}{_pad(depth)}]"


def _mapping(pairs: Sequence[Field], depth: int) -> str:
    if not pairs:
        return "{}"
    body = "".join(f"{_pad(depth + 1)}{key}: {value},\n" for key, value in pairs)
    return f"{{\n{body}{_pad(depth)}}}"


def _string(value: str) -> str:
    return repr(value)


def _float(value: float) -> str:
    if math.isnan(value):
        return "float('nan')"
    if math.isinf(value):
        return "float('inf')" if value > 0 else "-float('inf')"
    return repr(float(value))


def _sorted_items(mapping: Mapping[Any, Any]) -> List[Tuple[str, Any]]:
    for key in mapping:
        if not isinstance(key, str):
            raise EmissionInvariantError(f"attribute keys must be strings, got {key!r}")
    return sorted(mapping.items(), key=lambda item: item[0])


def render_value(value: Any, depth: int = 0, hoister: Optional[Hoister] = None) -> str:
    """Render one attribute value; bools are checked before ints."""

    if isinstance(value, (Mapping, list, tuple)) and _too_deep(depth, hoister):
        return hoister.bind(render_value(value, 0, hoister))
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return repr(int(value))
    if isinstance(value, float):
        return _float(value)
    if isinstance(value, str):
        return _string(value)
    if isinstance(value, Mapping):
        pairs = [
            (_string(key), render_value(item, depth + 1, hoister))
            for key, item in _sorted_items(value)
        ]
        return _mapping(pairs, depth)
    if isinstance(value, (list, tuple)):
        return _sequence([render_value(item, depth + 1, hoister) for item in value], depth)
    raise EmissionInvariantError(
        f"unsupported attribute value {value!r} of type {type(value).__name__}"
    )


def render_attributes(
    attributes: Mapping[str, Any], depth: int = 0, hoister: Optional[Hoister] = None
) -> str:
    return render_value(attributes, depth, hoister)


def render_event(binding: EventBinding, depth: int = 0, hoister: Optional[Hoister] = None) -> str:
    if _too_deep(depth, hoister):
        return hoister.bind(render_event(binding, 0, hoister))
    fields: List[Field] = []
    if binding.name:
        fields.append(("name", _string(binding.name)))
    if binding.prevent_default:
        fields.append(("prevent_default", "True"))
    if binding.stop_propagation:
        fields.append(("stop_propagation", "True"))
    if binding.extra_values is not None:
        values = [_string(value) for value in binding.extra_values]
        fields.append(("extra_values", _sequence(values, depth + 1)))
    return _call(EVENT_CONSTRUCTOR, fields, depth)


def render_node(node: TreeNode, depth: int = 0, hoister: Optional[Hoister] = None) -> str:
    """Render the construction expression for ``node`` and its subtree.

    ``depth`` is both the indentation level and the number of brackets open
    around the expression. Without a ``hoister`` everything is rendered inline.
    """

    if _too_deep(depth, hoister):
        return hoister.bind(render_node(node, 0, hoister))
    fields: List[Field] = []
    if node.id:
        fields.append(("id", _string(node.id)))
    if node.element_kind:
        fields.append(("element_kind", _string(node.element_kind)))
    if node.text:
        fields.append(("text", _string(node.text)))
    if node.attributes is not None:
        fields.append(("attributes", render_attributes(node.attributes, depth + 1, hoister)))
    if node.report_events is not None:
        events = [render_event(binding, depth + 2, hoister) for binding in node.report_events]
        fields.append(("report_events", _sequence(events, depth + 1)))
    if node.children is not None:
        children = [render_node(child, depth + 2, hoister) for child in node.children]
        fields.append(("children", _sequence(children, depth + 1)))
    return _call(NODE_CONSTRUCTOR, fields, depth)


def _template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(Path(__file__).parent / "templates"),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def emit_module(models: Mapping[str, TreeNode], *, namespace: str) -> str:
    """Return the source of one module binding each tree to its name.

    Declarations follow the iteration order of ``models``. The result is parsed
    back with ``ast`` before it is returned; failing that is a generator bug.
    """

    if not NAMESPACE_RE.fullmatch(namespace):
        raise EmissionInvariantError(f"namespace {namespace!r} is not a dotted Python name")
    for name in models:
        if not is_valid_binding_name(name):
            raise EmissionInvariantError(f"binding name {name!r} is not usable in generated code")

    declarations: List[Field] = []
    for name, node in models.items():
        hoister = Hoister(name)
        expression = render_node(node, 0, hoister)
        declarations.extend(hoister.declarations)
        declarations.append((name, expression))
    template = _template_env().get_template(MODULE_TEMPLATE)
    source = template.render(
        namespace=namespace,
        namespace_literal=_string(namespace),
        vocabulary=VOCABULARY_MODULE,
        constructors=", ".join(sorted([EVENT_CONSTRUCTOR, NODE_CONSTRUCTOR])),
        exported=[_string(name) for name in models],
        declarations=declarations,
    )

    try:
        ast.parse(source)
    except SyntaxError as exc:
        raise EmissionInvariantError(f"generated module does not compile: {exc}") from exc
    return source


__all__ = [
    "MAX_NESTING",
    "VOCABULARY_MODULE",
    "Hoister",
    "emit_module",
    "render_attributes",
    "render_event",
    "render_node",
    "render_value",
]
