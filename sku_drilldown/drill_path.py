import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

# Grouping column for each drill depth; depth 3 is the leaf (per-SKU rows)
LEVEL_FIELDS = ('category', 'sub_category', 'item')
LEAF_DEPTH = len(LEVEL_FIELDS)


@dataclass(frozen=True)
class DrillPath:
    """
    Position in the category -> sub_category -> item hierarchy.

    Transitions return a new DrillPath. Invalid descend/ascend requests are
    ignored, matching what a click on a leaf row or on an empty root chart
    should do.
    """
    values: Tuple[str, ...] = ()

    def __post_init__(self):
        if len(self.values) > LEAF_DEPTH:
            raise ValueError(f"Drill path cannot be deeper than {LEAF_DEPTH}: {self.values}")
        object.__setattr__(self, 'values', tuple(self.values))

    @property
    def depth(self) -> int:
        return len(self.values)

    @property
    def is_root(self) -> bool:
        return self.depth == 0

    @property
    def is_leaf(self) -> bool:
        return self.depth >= LEAF_DEPTH

    @property
    def group_field(self) -> Optional[str]:
        """Column the current level groups by, or None in the leaf state."""
        return None if self.is_leaf else LEVEL_FIELDS[self.depth]

    @property
    def fixed_fields(self) -> List[Tuple[str, str]]:
        return list(zip(LEVEL_FIELDS, self.values))

    def breadcrumbs(self, root_label: str = 'All Categories') -> List[str]:
        return [root_label, *self.values]

    def descend(self, name: str) -> 'DrillPath':
        if self.is_leaf:
            logger.debug(f"Ignoring descend('{name}') at leaf path {self.values}")
            return self
        if not name:
            logger.debug("Ignoring descend() without a bucket name")
            return self
        return DrillPath(self.values + (name,))

    def ascend(self) -> 'DrillPath':
        if self.is_root:
            logger.debug("Ignoring ascend() at root")
            return self
        return DrillPath(self.values[:-1])

    def reset_to_root(self) -> 'DrillPath':
        return DrillPath()

    def reset_to_depth(self, depth: int) -> 'DrillPath':
        """Jump to an ancestor level (breadcrumb navigation)."""
        if depth < 0 or depth > self.depth:
            raise ValueError(f"Cannot reset to depth {depth}; current depth is {self.depth}")
        return DrillPath(self.values[:depth])
