import copy
import os
from functools import lru_cache

import yaml
from typing import Dict, Any, List, Optional

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'configs', 'drilldown.yaml')

DEFAULT_COLORS = {
    'positive': '#16a34a',
    'negative': '#dc2626',
    'neutral': '#9ca3af',
    'no_data': '#e5e7eb',
}

DEFAULT_GRADIENT = ('#ede9fe', '#5b21b6')


def load_config(yaml_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load and parse the YAML configuration file.

    Args:
        yaml_path: Path to the YAML configuration file. Defaults to the
            drilldown.yaml shipped with the package.

    Returns:
        Dictionary containing the parsed configuration
    """
    yaml_path = yaml_path or DEFAULT_CONFIG_PATH
    try:
        with open(yaml_path, 'r') as file:
            config = yaml.safe_load(file)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Error parsing YAML configuration: {e}")

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration root must be a mapping, got {type(config).__name__}: {yaml_path}")
    return config


@lru_cache(maxsize=1)
def _load_default_config() -> Dict[str, Any]:
    return load_config(DEFAULT_CONFIG_PATH)


def get_default_config() -> Dict[str, Any]:
    """Return a private copy of the packaged configuration."""
    return copy.deepcopy(_load_default_config())


def _get_alias_section(config: Dict[str, Any], section: str) -> Dict[str, List[str]]:
    aliases = {}
    for canonical, spellings in (config.get(section) or {}).items():
        if isinstance(spellings, str):
            spellings = [spellings]
        aliases[str(canonical)] = [str(s) for s in (spellings or [])]
    return aliases


def get_dimension_aliases(config: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Get the accepted header spellings for each canonical dimension field.

    Args:
        config: Loaded configuration dictionary

    Returns:
        Ordered dictionary mapping canonical field names to raw spellings
    """
    return _get_alias_section(config, 'dimensions')


def get_measure_aliases(config: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Get the accepted header spellings for each canonical measure.

    Args:
        config: Loaded configuration dictionary

    Returns:
        Ordered dictionary mapping canonical measure names to raw spellings
    """
    return _get_alias_section(config, 'measures')


def get_ratio_metrics(config: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Get derived ratio metric definitions.

    Args:
        config: Loaded configuration dictionary

    Returns:
        List of dicts with 'name', 'numerator', 'denominator' and 'scale' keys
    """
    ratios = []
    for name, info in (config.get('ratios') or {}).items():
        try:
            ratios.append({
                'name': str(name),
                'numerator': str(info['numerator']),
                'denominator': str(info['denominator']),
                'scale': float(info.get('scale', 100)),
            })
        except (KeyError, TypeError) as e:
            raise ValueError(f"Ratio metric '{name}' must define numerator and denominator: {e}")
    return ratios


def get_default_metric(config: Dict[str, Any]) -> Optional[str]:
    """Get the metric selected right after a load, if present in the data."""
    return config.get('default_metric')


def _get_display(config: Dict[str, Any]) -> Dict[str, Any]:
    return config.get('display') or {}


def get_root_label(config: Dict[str, Any]) -> str:
    return _get_display(config).get('root_label', 'All Categories')


def get_title_templates(config: Dict[str, Any]) -> List[str]:
    """
    Get the Jinja title templates, one per drill depth (root first).

    Templates receive 'metric' and 'path' as parameters.
    """
    return list(_get_display(config).get('titles') or [])


def get_colors(config: Dict[str, Any]) -> Dict[str, str]:
    colors = dict(DEFAULT_COLORS)
    colors.update(_get_display(config).get('colors') or {})
    return colors


def get_gradient(config: Dict[str, Any]) -> tuple:
    """Get the (light, dark) hex endpoints of the magnitude gradient."""
    gradient = _get_display(config).get('gradient') or {}
    return (
        gradient.get('start', DEFAULT_GRADIENT[0]),
        gradient.get('end', DEFAULT_GRADIENT[1]),
    )
