"""Pydantic models describing a display tree.

Generated modules import ``TreeNode`` and ``EventBinding`` from here, so the
field names below are also the keyword arguments emitted into generated code.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr
from typing_extensions import TypeAliasType

# Strict members keep True a bool and "1" a string; no coercion between cases.
AttributeValue = TypeAliasType(
    "AttributeValue",
    "Union[StrictStr, StrictBool, StrictInt, StrictFloat, "
    "List[AttributeValue], Dict[str, AttributeValue]]",
)


class EventBinding(BaseModel):
    """A named event a node reports back to the runtime."""

    name: str = Field("", description="Event name, e.g. click or submit.")
    prevent_default: bool = Field(
        False,
        alias="preventDefault",
        description="Suppress the browser's default action for the event.",
    )
    stop_propagation: bool = Field(
        False,
        alias="stopPropagation",
        description="Stop the event from bubbling to ancestor nodes.",
    )
    extra_values: Optional[List[str]] = Field(
        None,
        alias="extraValues",
        description="Additional event properties reported with the event, in order.",
    )

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TreeNode(BaseModel):
    """One element of a display tree; children are owned by their parent."""

    id: str = Field("", description="Node identifier; empty when not set.")
    element_kind: str = Field(
        "", alias="elementKind", description="Element tag name, e.g. div."
    )
    text: str = Field("", description="Text content of a leaf node.")
    attributes: Optional[Dict[str, AttributeValue]] = Field(
        None, description="Element attributes; None when the element declares none."
    )
    report_events: Optional[List[EventBinding]] = Field(
        None,
        alias="reportEvents",
        description="Events reported by this node, in declaration order.",
    )
    children: Optional[List[TreeNode]] = Field(
        None, description="Child nodes in render order; None for leaves."
    )

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    def iter_tree(self) -> Iterator[TreeNode]:
        """Yield this node and every descendant, depth first in document order."""

        yield self
        for child in self.children or ():
            yield from child.iter_tree()


__all__ = ["AttributeValue", "EventBinding", "TreeNode"]
