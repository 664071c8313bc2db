"""Skeleton of the document built while the parser walks it.

Nodes live in a flat arena and refer to each other by index, so tearing the
tree down is a matter of dropping one list. The tree only holds elements whose
start event has been seen; a violation reported before an element starts has
to ask for `projected_path` instead of `current_path`.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class PositionNode:
    name: str
    index: int
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)


class PositionTracker:
    def __init__(self):
        self._nodes: List[PositionNode] = []
        self._current: Optional[int] = None

    def on_element_start(self, name: str) -> PositionNode:
        if not self._nodes:
            node = PositionNode(name, 1)
        else:
            node = PositionNode(name, self._next_index(self._current, name), self._current)
            self._nodes[self._current].children.append(len(self._nodes))
        self._nodes.append(node)
        self._current = len(self._nodes) - 1
        return node

    def on_element_end(self):
        if self._current is None:
            logger.warning("Element end without a matching start")
            return
        parent = self._nodes[self._current].parent
        if parent is not None:
            self._current = parent

    def current_name(self) -> str:
        if self._current is None:
            return ""
        return self._nodes[self._current].name

    def current_path(self) -> str:
        if self._current is None:
            logger.warning("Position requested before the root element was seen")
            return ""
        return self._render(self._current)

    def projected_path(self, name: str) -> str:
        """Path `name` will get once its start event arrives.

        Attribute checks run before the owning element is registered, so the
        element is appended to the current path with the sibling index it is
        about to receive. The tree is left untouched.
        """
        if self._current is None:
            # the root element itself is missing the attribute
            return f"/{name}[1]"
        return f"{self._render(self._current)}/{name}[{self._next_index(self._current, name)}]"

    def reset(self):
        for node in self._nodes:
            node.children.clear()
            node.parent = None
        self._nodes = []
        self._current = None

    def _next_index(self, parent: int, name: str) -> int:
        siblings = self._nodes[parent].children
        return 1 + sum(1 for i in siblings if self._nodes[i].name == name)

    def _render(self, idx: int) -> str:
        parts = []
        cur = idx
        while cur is not None:
            node = self._nodes[cur]
            parts.append(f"{node.name}[{node.index}]")
            cur = node.parent
        return "/" + "/".join(reversed(parts))
