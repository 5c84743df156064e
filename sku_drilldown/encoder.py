"""
Rank-Relative Encoder

Turns aggregate buckets into chart-ready records with a bar color and a short
label. Ratio metrics use a signed three-way scheme; magnitude metrics are
shaded on a light-to-dark gradient between the smallest and largest bucket
on screen.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .aggregation import AggregateBucket
from .metric_catalog import MetricCatalog
from .yaml_processor import get_colors, get_default_config, get_gradient

NO_DATA_LABEL = 'N/A'

COMPACT_UNITS = (
    (1e9, 'B'),
    (1e6, 'M'),
    (1e3, 'K'),
)


@dataclass(frozen=True)
class ChartRecord:
    name: str
    value: float
    metrics: Dict[str, float] = field(default_factory=dict)
    color: str = ''
    label: str = ''


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def compact_number(value: float) -> str:
    """Format a magnitude as 1.2B / 3.4M / 5.6K, or a rounded integer below 1000."""
    if _is_missing(value) or not math.isfinite(value):
        return NO_DATA_LABEL
    magnitude = abs(value)
    for threshold, unit in COMPACT_UNITS:
        if magnitude >= threshold:
            return f"{value / threshold:.1f}{unit}"
    return str(_round_half_up(value))


def format_percent(value: float) -> str:
    if _is_missing(value) or not math.isfinite(value):
        return NO_DATA_LABEL
    # Normalize -0.0 (zero margin over negative revenue)
    return f"{value + 0.0:.1f}%"


def format_metric_value(metric: str, value: float, catalog: MetricCatalog) -> str:
    """Display string for any catalog metric (tooltips and leaf tables)."""
    if catalog.is_ratio(metric):
        return format_percent(value)
    return compact_number(value)


def _hex_to_rgb(color: str) -> Tuple[int, int, int]:
    color = color.lstrip('#')
    return tuple(int(color[i:i + 2], 16) for i in (0, 2, 4))


def gradient_color(position: float, start: str, end: str) -> str:
    """Linear interpolation between two hex colors; position is clamped to [0, 1]."""
    p = min(1.0, max(0.0, position))
    start_rgb = _hex_to_rgb(start)
    end_rgb = _hex_to_rgb(end)
    channels = [_round_half_up(a + (b - a) * p) for a, b in zip(start_rgb, end_rgb)]
    return '#{:02x}{:02x}{:02x}'.format(*channels)


def polarity_color(value: float, colors: Mapping[str, str]) -> str:
    if _is_missing(value):
        return colors['no_data']
    if value > 0:
        return colors['positive']
    if value < 0:
        return colors['negative']
    return colors['neutral']


def encode_values(
    values: Sequence[float],
    is_ratio: bool,
    config: Optional[Dict[str, Any]] = None
) -> List[Tuple[str, str]]:
    """
    Assign (color, label) pairs to a list of values.

    Args:
        values: One value per bucket, in display order
        is_ratio: Use the signed scheme instead of the min-max gradient
        config: Loaded configuration dictionary

    Returns:
        List of (color, label) tuples aligned with values
    """
    config = config if config is not None else get_default_config()

    if is_ratio:
        colors = get_colors(config)
        return [(polarity_color(v, colors), format_percent(v)) for v in values]

    start, end = get_gradient(config)
    finite = [v for v in values if not _is_missing(v) and math.isfinite(v)]
    if not finite:
        return [(start, compact_number(v)) for v in values]

    low, high = min(finite), max(finite)
    span = (high - low) or 1.0
    encoded = []
    for v in values:
        position = 0.0 if _is_missing(v) else (v - low) / span
        encoded.append((gradient_color(position, start, end), compact_number(v)))
    return encoded


def encode_buckets(
    buckets: Sequence[AggregateBucket],
    metric: str,
    catalog: MetricCatalog,
    config: Optional[Dict[str, Any]] = None
) -> List[ChartRecord]:
    """
    Build chart records for the selected metric.

    Args:
        buckets: Aggregate buckets in display order
        metric: Selected metric; must be a catalog member
        catalog: Metric catalog of the loaded dataset
        config: Loaded configuration dictionary

    Returns:
        List of ChartRecord with the full metric map attached for tooltips
    """
    if metric not in catalog:
        raise ValueError(f"Unknown metric '{metric}'. Available: {list(catalog.names)}")

    values = [bucket.value(metric) for bucket in buckets]
    encoded = encode_values(values, catalog.is_ratio(metric), config)
    return [
        ChartRecord(name=bucket.name, value=value, metrics=bucket.metrics, color=color, label=label)
        for bucket, value, (color, label) in zip(buckets, values, encoded)
    ]
