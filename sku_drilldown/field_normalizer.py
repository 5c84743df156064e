"""
Field Normalizer

Maps inconsistently spelled table headers ("Sub-Category", " SKU code",
"No of Transactions") onto the canonical record shape: five dimension fields
plus a map of measures.

The alias table is declarative and lives in configs/drilldown.yaml:

    dimensions:
      sub_category: [sub_category, subcategory, sub-category, sub category]
    measures:
      Transaction Count: [transaction count, no of transactions, transactions]

Adding a spelling is a config change, not a code change.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .numeric_coercer import is_blank, to_number
from .yaml_processor import get_default_config, get_dimension_aliases, get_measure_aliases

DIMENSION_FIELDS = ('category', 'sub_category', 'item', 'sku_code', 'sku_description')

# Dimensions that must be present for a row to enter the working set
REQUIRED_DIMENSIONS = ('category', 'sub_category', 'item')

_SEPARATORS = re.compile(r'[\s_\-]+')


def normalize_header(header: Any) -> str:
    """Lower-case a header and fold whitespace, underscores and hyphens into '_'."""
    if header is None:
        return ''
    return _SEPARATORS.sub('_', str(header).strip().lower()).strip('_')


def _compact(key: str) -> str:
    return key.replace('_', '')


@dataclass(frozen=True)
class AliasTable:
    """Lookup from normalized header spellings to canonical names."""
    exact: Mapping[str, str]
    compact: Mapping[str, str]

    @classmethod
    def from_aliases(cls, aliases: Dict[str, List[str]]) -> 'AliasTable':
        exact: Dict[str, str] = {}
        compact: Dict[str, str] = {}
        for canonical, spellings in aliases.items():
            for spelling in [canonical, *spellings]:
                key = normalize_header(spelling)
                if not key:
                    continue
                # First alias wins
                exact.setdefault(key, canonical)
                compact.setdefault(_compact(key), canonical)
        return cls(MappingProxyType(exact), MappingProxyType(compact))

    def match(self, header: Any) -> Optional[str]:
        key = normalize_header(header)
        if not key:
            return None
        if key in self.exact:
            return self.exact[key]
        return self.compact.get(_compact(key))


@dataclass(frozen=True)
class CanonicalRow:
    """A table row normalized into fixed dimension fields plus a measure map."""
    category: Optional[str] = None
    sub_category: Optional[str] = None
    item: Optional[str] = None
    sku_code: Optional[str] = None
    sku_description: Optional[str] = None
    measures: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    # Unmatched headers whose values may still turn out to be measures
    candidates: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def dimension(self, name: str) -> Optional[str]:
        return getattr(self, name) if name in DIMENSION_FIELDS else None

    @property
    def is_complete(self) -> bool:
        return all(self.dimension(name) for name in REQUIRED_DIMENSIONS)


def build_alias_tables(config: Optional[Dict[str, Any]] = None) -> Tuple[AliasTable, AliasTable]:
    """
    Build the dimension and measure alias tables from configuration.

    Returns:
        Tuple of (dimension_table, measure_table)
    """
    config = config if config is not None else get_default_config()
    dimension_aliases = {
        name: spellings for name, spellings in get_dimension_aliases(config).items()
        if name in DIMENSION_FIELDS
    }
    for name in DIMENSION_FIELDS:
        dimension_aliases.setdefault(name, [])
    return AliasTable.from_aliases(dimension_aliases), AliasTable.from_aliases(get_measure_aliases(config))


def _dimension_value(value: Any) -> Optional[str]:
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def normalize_row(
    raw_row: Mapping[Any, Any],
    dimension_table: AliasTable,
    measure_table: AliasTable
) -> CanonicalRow:
    """
    Normalize one raw row.

    Dimension headers are matched through the dimension alias table, known
    measures through the measure alias table (non-numeric cells are left out
    of the measure map). Every other header is kept as a candidate measure
    under its trimmed header text.

    Args:
        raw_row: Mapping of header text to cell value
        dimension_table: Alias table for dimension fields
        measure_table: Alias table for canonical measures

    Returns:
        CanonicalRow (possibly incomplete; callers decide whether to keep it)
    """
    dimensions: Dict[str, Optional[str]] = {}
    measures: Dict[str, float] = {}
    seen_measures = set()
    candidates: Dict[str, Any] = {}

    for header, value in raw_row.items():
        dimension = dimension_table.match(header)
        if dimension is not None:
            if dimension not in dimensions:
                dimensions[dimension] = _dimension_value(value)
            continue

        measure = measure_table.match(header)
        if measure is not None:
            if measure not in seen_measures:
                seen_measures.add(measure)
                number = to_number(value)
                if number is not None:
                    measures[measure] = number
            continue

        name = str(header).strip() if header is not None else ''
        if name and name not in candidates:
            candidates[name] = value

    return CanonicalRow(
        measures=MappingProxyType(measures),
        candidates=MappingProxyType(candidates),
        **dimensions
    )
