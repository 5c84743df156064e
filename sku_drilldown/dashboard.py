"""
Dashboard state and view assembly.

State is an immutable (dataset, drill path, selected metric) triple. Every
interaction produces a new state, and ``build_view`` recomputes the whole
view from it:

    state = load_dashboard(rows)
    state = drill_down(state, 'Snacks')
    view = build_view(state)
    for record in view.records:
        print(record.name, record.label, record.color)
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from jinja2 import Template

from .aggregation import aggregate, filter_frame, measure_totals, row_metric_values
from .dataset import Dataset, RawRows, load_dataset
from .drill_path import DrillPath
from .encoder import ChartRecord, encode_buckets, format_metric_value
from .field_normalizer import CanonicalRow
from .metric_catalog import MetricCatalog
from .yaml_processor import get_default_config, get_default_metric, get_root_label, get_title_templates

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DashboardState:
    dataset: Dataset = field(default_factory=Dataset)
    path: DrillPath = field(default_factory=DrillPath)
    selected_metric: Optional[str] = None


@dataclass(frozen=True)
class LeafRow:
    """One SKU row in the leaf table, with display strings per metric."""
    row: CanonicalRow
    values: Dict[str, float]
    labels: Dict[str, str]


@dataclass(frozen=True)
class DashboardView:
    title: str
    breadcrumbs: List[str]
    metric: Optional[str]
    is_leaf: bool = False
    records: Tuple[ChartRecord, ...] = ()
    leaf_rows: Tuple[LeafRow, ...] = ()
    totals: Dict[str, float] = field(default_factory=dict)


def pick_default_metric(catalog: MetricCatalog, preferred: Optional[str]) -> Optional[str]:
    if preferred and preferred in catalog:
        return preferred
    return catalog.names[0] if len(catalog) else None


def load_dashboard(raw_rows: RawRows, config: Optional[Dict[str, Any]] = None) -> DashboardState:
    """Load a new table; the drill path always restarts at the root."""
    config = config if config is not None else get_default_config()
    dataset = load_dataset(raw_rows, config)
    metric = pick_default_metric(dataset.catalog, get_default_metric(config))
    return DashboardState(dataset=dataset, path=DrillPath(), selected_metric=metric)


def select_metric(state: DashboardState, metric: str) -> DashboardState:
    if metric not in state.dataset.catalog:
        logger.warning(
            f"Ignoring unknown metric '{metric}'. Available: {list(state.dataset.catalog.names)}"
        )
        return state
    return replace(state, selected_metric=metric)


def drill_down(state: DashboardState, name: str) -> DashboardState:
    return replace(state, path=state.path.descend(name))


def drill_up(state: DashboardState) -> DashboardState:
    return replace(state, path=state.path.ascend())


def go_home(state: DashboardState) -> DashboardState:
    return replace(state, path=state.path.reset_to_root())


def go_to_depth(state: DashboardState, depth: int) -> DashboardState:
    return replace(state, path=state.path.reset_to_depth(depth))


def render_title(path: DrillPath, metric: Optional[str], config: Dict[str, Any]) -> str:
    templates = get_title_templates(config)
    if path.depth >= len(templates):
        return ' / '.join(path.values)
    return Template(templates[path.depth]).render(metric=metric or '', path=list(path.values))


def _leaf_row(row: CanonicalRow, catalog: MetricCatalog) -> LeafRow:
    values = row_metric_values(row, catalog)
    labels = {name: format_metric_value(name, value, catalog) for name, value in values.items()}
    return LeafRow(row=row, values=values, labels=labels)


def build_view(state: DashboardState, config: Optional[Dict[str, Any]] = None) -> DashboardView:
    """
    Recompute the full view for a state.

    Args:
        state: Current dashboard state
        config: Loaded configuration dictionary

    Returns:
        DashboardView with chart records (levels 0-2) or leaf rows (level 3)
    """
    config = config if config is not None else get_default_config()
    dataset, path, metric = state.dataset, state.path, state.selected_metric
    catalog = dataset.catalog

    result = aggregate(dataset, path)
    view_kwargs = dict(
        title=render_title(path, metric, config),
        breadcrumbs=path.breadcrumbs(get_root_label(config)),
        metric=metric,
        totals=measure_totals(filter_frame(dataset, path), catalog),
    )

    if result.is_leaf:
        leaf_rows = tuple(_leaf_row(row, catalog) for row in result.leaf_rows)
        return DashboardView(is_leaf=True, leaf_rows=leaf_rows, **view_kwargs)

    if metric is None or metric not in catalog:
        return DashboardView(**view_kwargs)

    records = encode_buckets(result.buckets, metric, catalog, config)
    return DashboardView(records=tuple(records), **view_kwargs)
