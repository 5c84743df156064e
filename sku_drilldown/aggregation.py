"""
Aggregation Engine for Drill-Down Levels

Groups the working set by the column below the current drill path and sums
every base measure per group. Ratio metrics (e.g. Margin %) are derived from
each bucket's summed numerator and denominator:

    Margin % = sum(Margin) / sum(Revenue) * 100

Averaging per-row ratios instead would weight a row with 1 unit of revenue
the same as a row with 1M, so it is never done here. A zero summed
denominator yields NaN, which downstream code renders as "no data" rather
than 0.
"""

import logging
import unicodedata
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .dataset import Dataset
from .drill_path import DrillPath
from .field_normalizer import CanonicalRow
from .metric_catalog import MetricCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregateBucket:
    """One named group at the current level."""
    name: str
    sums: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    ratios: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def metrics(self) -> Dict[str, float]:
        """All base sums followed by derived ratios."""
        return {**self.sums, **self.ratios}

    def value(self, metric: str) -> float:
        if metric in self.ratios:
            return self.ratios[metric]
        return self.sums.get(metric, 0.0)


@dataclass(frozen=True)
class AggregationResult:
    group_field: Optional[str]
    buckets: Tuple[AggregateBucket, ...] = ()
    leaf_rows: Tuple[CanonicalRow, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return self.group_field is None


def bucket_sort_key(name: str) -> Tuple[str, str, str]:
    """
    Case- and accent-insensitive ordering, so "Éclairs" sorts between "Apples"
    and "Eggs". Ties between spellings fall back to the casefolded, then raw name.
    """
    decomposed = unicodedata.normalize('NFKD', name)
    base = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), name.casefold(), name)


def filter_frame(dataset: Dataset, path: DrillPath) -> pd.DataFrame:
    """
    Rows of the dataset frame inside the drill path.

    Matching is exact and case-sensitive: 'Snacks' and 'snacks' are different
    categories, just as they form different buckets.
    """
    frame = dataset.frame
    mask = pd.Series(True, index=frame.index)
    for column, value in path.fixed_fields:
        mask &= frame[column] == value
    return frame[mask]


def filter_rows(dataset: Dataset, path: DrillPath) -> Tuple[CanonicalRow, ...]:
    """Canonical rows inside the drill path, in load order."""
    fixed = path.fixed_fields
    return tuple(
        row for row in dataset.rows
        if all(row.dimension(column) == value for column, value in fixed)
    )


def compute_ratios(sums: Mapping[str, float], catalog: MetricCatalog) -> Dict[str, float]:
    return {
        ratio.name: ratio.compute(sums.get(ratio.numerator, 0.0), sums.get(ratio.denominator, 0.0))
        for ratio in catalog.ratios
    }


def row_metric_values(row: CanonicalRow, catalog: MetricCatalog) -> Dict[str, float]:
    """
    Metric values for a single row (leaf table). Missing measures count as 0,
    so a row without revenue gets an undefined margin %.
    """
    sums = {name: row.measures.get(name, 0.0) for name in catalog.base_measures}
    return {**sums, **compute_ratios(sums, catalog)}


def aggregate_frame(frame: pd.DataFrame, group_field: str, catalog: MetricCatalog) -> Tuple[AggregateBucket, ...]:
    """
    Sum base measures per distinct value of group_field.

    Args:
        frame: Filtered dataset frame
        group_field: Dimension column to group by
        catalog: Metric catalog of the dataset

    Returns:
        Buckets sorted case-insensitively by name. Rows with an empty grouping
        value are left out; every other row lands in exactly one bucket.
    """
    keys = frame[group_field]
    frame = frame[keys.notna() & (keys.astype(str).str.len() > 0)]
    if frame.empty:
        return ()

    base = list(catalog.base_measures)
    names = pd.unique(frame[group_field])
    if base:
        # sum() skips NaN, so non-numeric cells contribute 0
        summed = frame.groupby(group_field, sort=False)[base].sum()
    else:
        summed = pd.DataFrame(index=names)

    buckets = []
    for name in names:
        sums = {measure: float(summed.at[name, measure]) for measure in base}
        buckets.append(AggregateBucket(
            name=str(name),
            sums=MappingProxyType(sums),
            ratios=MappingProxyType(compute_ratios(sums, catalog)),
        ))

    buckets.sort(key=lambda b: bucket_sort_key(b.name))
    return tuple(buckets)


def aggregate(dataset: Dataset, path: DrillPath) -> AggregationResult:
    """
    Aggregate the dataset at the level below the drill path.

    Args:
        dataset: Loaded working set
        path: Current drill path

    Returns:
        AggregationResult holding buckets, or the filtered rows when the path
        is at the leaf level
    """
    if path.is_leaf:
        leaf_rows = filter_rows(dataset, path)
        logger.debug(f"Leaf level {path.values}: {len(leaf_rows)} rows")
        return AggregationResult(group_field=None, leaf_rows=leaf_rows)

    group_field = path.group_field
    if dataset.is_empty:
        return AggregationResult(group_field=group_field)

    buckets = aggregate_frame(filter_frame(dataset, path), group_field, dataset.catalog)
    logger.debug(f"Aggregated {len(buckets)} buckets by {group_field} under {path.values}")
    return AggregationResult(group_field=group_field, buckets=buckets)


def measure_totals(frame: pd.DataFrame, catalog: MetricCatalog) -> Dict[str, float]:
    """Sum of each base measure over a (filtered) frame."""
    return {
        measure: float(np.nansum(frame[measure].to_numpy(dtype=float)))
        for measure in catalog.base_measures
    }
