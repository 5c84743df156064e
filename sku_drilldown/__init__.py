"""
SKU Drilldown Package for hierarchical sales exploration.

This package normalizes loosely-structured sales tables, re-aggregates their
measures at the category / sub-category / item level currently in view,
derives ratio metrics such as Margin % from summed components, and encodes
the result as chart-ready records.
"""

__version__ = "0.1.0"

# Import configuration helpers from yaml_processor
from .yaml_processor import (
    load_config,
    get_default_config,
    get_dimension_aliases,
    get_measure_aliases,
    get_ratio_metrics,
    get_default_metric
)

# Import normalization and coercion
from .field_normalizer import (
    CanonicalRow,
    AliasTable,
    normalize_header,
    normalize_row,
    build_alias_tables
)
from .numeric_coercer import (
    to_number,
    is_strict_numeric,
    is_numeric,
    coerce_series
)

# Import working set and catalog
from .metric_catalog import MetricCatalog, RatioMetric, build_catalog
from .dataset import Dataset, load_dataset

# Import drill navigation and aggregation
from .drill_path import DrillPath
from .aggregation import (
    AggregateBucket,
    AggregationResult,
    aggregate,
    filter_rows,
    row_metric_values
)

# Import encoding
from .encoder import (
    ChartRecord,
    encode_buckets,
    compact_number,
    format_metric_value
)

# Import dashboard state handling
from .dashboard import (
    DashboardState,
    DashboardView,
    load_dashboard,
    select_metric,
    drill_down,
    drill_up,
    go_home,
    go_to_depth,
    build_view
)

from .table_reader import read_table

# Define what should be available in "from sku_drilldown import *"
__all__ = [
    # Configuration
    'load_config',
    'get_default_config',
    'get_dimension_aliases',
    'get_measure_aliases',
    'get_ratio_metrics',
    'get_default_metric',

    # Normalization
    'CanonicalRow',
    'AliasTable',
    'normalize_header',
    'normalize_row',
    'build_alias_tables',
    'to_number',
    'is_strict_numeric',
    'is_numeric',
    'coerce_series',

    # Working set
    'MetricCatalog',
    'RatioMetric',
    'build_catalog',
    'Dataset',
    'load_dataset',
    'read_table',

    # Aggregation and navigation
    'DrillPath',
    'AggregateBucket',
    'AggregationResult',
    'aggregate',
    'filter_rows',
    'row_metric_values',

    # Encoding and views
    'ChartRecord',
    'encode_buckets',
    'compact_number',
    'format_metric_value',
    'DashboardState',
    'DashboardView',
    'load_dashboard',
    'select_metric',
    'drill_down',
    'drill_up',
    'go_home',
    'go_to_depth',
    'build_view'
]
