import importlib.util
import os
import pathlib
from typing import Any, Dict, Optional

PARENT_PATH = pathlib.Path(importlib.util.find_spec("genoplot.util").origin).parent  # type: ignore

CONFIG: Dict[str, Any] = {
    "display_as": "widget",
    "plot_module_url": "https://cdn.jsdelivr.net/npm/@observablehq/plot@0.6/+esm",
    "alignment_path": os.environ.get("GENOPLOT_ALIGNMENT_PATH"),
    "reference_path": os.environ.get("GENOPLOT_REFERENCE_PATH"),
    "panel": {"width": 320, "height": 240},
}


def deep_merge(dict1: Dict[str, Any], dict2: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two dictionaries into a new one.
    Values in dict2 overwrite values in dict1. If both values are dictionaries, recursively merge them.
    """
    result = dict(dict1)
    for k, v in dict2.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def configure(options: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
    """Update the global configuration, eg. configure(alignment_path="reads.bam")."""
    merged = deep_merge(CONFIG, {**(options or {}), **kwargs})
    CONFIG.clear()
    CONFIG.update(merged)
    return CONFIG
