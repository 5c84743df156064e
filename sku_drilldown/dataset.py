"""
Working set construction.

A load turns raw rows into an immutable Dataset: the retained canonical rows,
a pandas frame with one column per dimension and base measure, and the
Metric Catalog. A new table always produces a new Dataset; nothing is patched
in place.
"""

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .field_normalizer import DIMENSION_FIELDS, CanonicalRow, build_alias_tables, normalize_row
from .metric_catalog import MetricCatalog, build_catalog, ratio_definitions
from .numeric_coercer import is_blank, is_numeric, to_number

logger = logging.getLogger(__name__)

RawRows = Union[pd.DataFrame, Iterable[Mapping[Any, Any]]]


@dataclass(frozen=True, eq=False)
class Dataset:
    rows: Tuple[CanonicalRow, ...] = ()
    frame: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=list(DIMENSION_FIELDS)))
    catalog: MetricCatalog = field(default_factory=MetricCatalog)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows


def _as_records(raw_rows: RawRows) -> List[Mapping[Any, Any]]:
    if raw_rows is None:
        return []
    if isinstance(raw_rows, pd.DataFrame):
        return raw_rows.to_dict('records')
    return list(raw_rows)


def _promotable(values: List[Any]) -> bool:
    """A candidate column is a measure when every non-blank cell is numeric."""
    filled = [v for v in values if not is_blank(v)]
    return bool(filled) and all(is_numeric(v) for v in filled)


def _measure_order(records, retained_idx, dimension_table, measure_table) -> List[str]:
    order: List[str] = []
    for idx in retained_idx:
        for header in records[idx].keys():
            if dimension_table.match(header) is not None:
                continue
            name = measure_table.match(header)
            if name is None:
                name = str(header).strip() if header is not None else ''
            if name and name not in order:
                order.append(name)
    return order


def _build_frame(rows: Tuple[CanonicalRow, ...], measures: Tuple[str, ...]) -> pd.DataFrame:
    data = {
        name: [row.dimension(name) for row in rows] for name in DIMENSION_FIELDS
    }
    for measure in measures:
        data[measure] = np.array([row.measures.get(measure, np.nan) for row in rows], dtype=float)
    return pd.DataFrame(data, columns=list(DIMENSION_FIELDS) + list(measures))


def load_dataset(raw_rows: RawRows, config: Optional[Dict[str, Any]] = None) -> Dataset:
    """
    Normalize raw rows into a Dataset.

    Rows missing category, sub_category or item are dropped (a business rule,
    not an error). Unmatched columns become measures when all of their
    non-blank cells are numeric.

    Args:
        raw_rows: Iterable of header -> cell mappings, or a DataFrame
        config: Loaded configuration dictionary (defaults to the packaged config)

    Returns:
        Dataset; empty input yields an empty Dataset with an empty catalog
    """
    records = _as_records(raw_rows)
    dimension_table, measure_table = build_alias_tables(config)

    normalized = [normalize_row(record, dimension_table, measure_table) for record in records]
    retained_idx = [i for i, row in enumerate(normalized) if row.is_complete]
    dropped = len(normalized) - len(retained_idx)
    if dropped:
        logger.debug(f"Dropped {dropped} of {len(normalized)} rows missing category/sub_category/item")

    retained = [normalized[i] for i in retained_idx]

    candidate_names: List[str] = []
    for row in retained:
        for name in row.candidates:
            if name not in candidate_names:
                candidate_names.append(name)
    promoted = [
        name for name in candidate_names
        if _promotable([row.candidates.get(name) for row in retained])
    ]

    rows = []
    for row in retained:
        measures = dict(row.measures)
        for name in promoted:
            number = to_number(row.candidates.get(name))
            if number is not None and name not in measures:
                measures[name] = number
        remaining = {k: v for k, v in row.candidates.items() if k not in promoted}
        rows.append(replace(row, measures=MappingProxyType(measures), candidates=MappingProxyType(remaining)))
    rows = tuple(rows)

    present = [
        name for name in _measure_order(records, retained_idx, dimension_table, measure_table)
        if any(name in row.measures for row in rows)
    ]
    catalog = build_catalog(present, ratio_definitions(config))
    frame = _build_frame(rows, catalog.base_measures)

    logger.info(
        f"Loaded {len(rows)} rows with {len(catalog.base_measures)} measures "
        f"and {len(catalog.ratios)} ratio metrics"
    )
    return Dataset(rows=rows, frame=frame, catalog=catalog)
