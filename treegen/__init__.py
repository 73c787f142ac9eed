"""Compile declarative display model markup into Python construction code."""

from .model import AttributeValue, EventBinding, TreeNode

__version__ = "0.1.0"

__all__ = ["AttributeValue", "EventBinding", "TreeNode", "__version__"]
