from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .yaml_processor import get_default_config, get_ratio_metrics


@dataclass(frozen=True)
class RatioMetric:
    """A metric derived from two summed measures: numerator / denominator * scale."""
    name: str
    numerator: str
    denominator: str
    scale: float = 100.0

    def compute(self, numerator_value: float, denominator_value: float) -> float:
        """Ratio from already-summed components; NaN when the denominator is zero."""
        if denominator_value == 0:
            return float('nan')
        return numerator_value / denominator_value * self.scale


@dataclass(frozen=True)
class MetricCatalog:
    """Ordered, duplicate-free list of base measures plus applicable ratio metrics."""
    base_measures: Tuple[str, ...] = ()
    ratios: Tuple[RatioMetric, ...] = ()

    @property
    def names(self) -> Tuple[str, ...]:
        return self.base_measures + tuple(r.name for r in self.ratios)

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self):
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def is_ratio(self, name: str) -> bool:
        return any(r.name == name for r in self.ratios)

    def get_ratio(self, name: str) -> Optional[RatioMetric]:
        for ratio in self.ratios:
            if ratio.name == name:
                return ratio
        return None


def ratio_definitions(config: Optional[Dict[str, Any]] = None) -> List[RatioMetric]:
    config = config if config is not None else get_default_config()
    return [RatioMetric(**info) for info in get_ratio_metrics(config)]


def build_catalog(
    present_measures: Iterable[str],
    ratio_metrics: Sequence[RatioMetric]
) -> MetricCatalog:
    """
    Build the catalog for a loaded dataset.

    Args:
        present_measures: Base measure names in first-seen order; each must hold
            a numeric value in at least one row
        ratio_metrics: Candidate ratio definitions

    Returns:
        MetricCatalog with duplicates removed. A ratio is kept only when both
        of its components are present; a base measure sharing a ratio's name
        is dropped only when that derived metric is added.
    """
    present: List[str] = []
    for name in present_measures:
        if name not in present:
            present.append(name)

    ratios: List[RatioMetric] = []
    for ratio in ratio_metrics:
        if any(r.name == ratio.name for r in ratios):
            continue
        components = (ratio.numerator, ratio.denominator)
        if all(c in present and c != ratio.name for c in components):
            ratios.append(ratio)

    # A raw column named like a ratio stays a base measure unless the ratio applies
    derived = {r.name for r in ratios}
    base = [name for name in present if name not in derived]
    return MetricCatalog(base_measures=tuple(base), ratios=tuple(ratios))
