import datetime
import json
from typing import Any, Iterable

import anywidget
import numpy as np
import pandas as pd
import traitlets

from genoplot.util import CONFIG, PARENT_PATH


def to_json(data: Any) -> Any:
    """
    Convert a program AST to JSON-safe values. Missing and non-finite values
    (NaN, ±inf, pd.NA, NaT) become null; numpy scalars and arrays become
    Python numbers and lists; anything with `for_json` (datasets, plots, JS
    nodes) is expanded.
    """
    if isinstance(data, float):
        return data if np.isfinite(data) else None

    if data is None or isinstance(data, (str, int, bool)):
        return data

    if data is pd.NA or data is pd.NaT:
        return None

    if isinstance(data, np.generic):
        return to_json(data.item())

    if isinstance(data, (datetime.date, datetime.datetime)):
        return {"__type__": "datetime", "value": data.isoformat()}

    if isinstance(data, (np.ndarray, pd.Series)):
        return [to_json(x) for x in data.tolist()]

    if hasattr(data, "for_json"):
        return to_json(data.for_json())

    if isinstance(data, dict):
        return {str(k): to_json(v) for k, v in data.items()}

    if isinstance(data, Iterable):
        return [to_json(x) for x in data]

    raise TypeError(f"Object of type {type(data)} is not JSON serializable")


def to_json_string(ast: Any) -> str:
    """Serialize a plot AST together with renderer configuration."""
    return json.dumps(
        {
            "ast": to_json(ast),
            "plotModuleUrl": CONFIG["plot_module_url"],
        },
        allow_nan=False,
    )


class Widget(anywidget.AnyWidget):
    _esm = PARENT_PATH / "js/widget.js"
    _css = PARENT_PATH / "widget.css"
    data = traitlets.Any().tag(sync=True, to_json=lambda ast, _widget: to_json_string(ast))

    def __init__(self, ast: Any):
        super().__init__()
        self.data = ast

    def _repr_mimebundle_(self, **kwargs):  # type: ignore
        return super()._repr_mimebundle_(**kwargs)
