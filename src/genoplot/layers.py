from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple, Union

import pandas as pd

from genoplot.aes import ALIASES, CHANNELS, Aes
from genoplot.dataset import Dataset

LayerData = Union[Dataset, Callable[[Dataset], Dataset], None]


@dataclass(frozen=True)
class Geom:
    """
    A geometry: how rows are drawn, which channels it needs, and the
    values used for optional channels nobody maps.
    """

    name: str
    mark: str
    required: Tuple[str, ...]
    defaults: Mapping[str, Any] = field(default_factory=dict)
    stat: str = "identity"
    position: str = "identity"


# Channels each statistic computes, and therefore never needs mapped.
STATS: Dict[str, FrozenSet[str]] = {
    "identity": frozenset(),
    "count": frozenset({"y"}),
    "bin": frozenset({"y"}),
    "density": frozenset({"y"}),
    "boxplot": frozenset(),
    "ydensity": frozenset(),
}

POSITIONS = ("identity", "stack", "dodge", "fill")

GEOMS: Dict[str, Geom] = {
    g.name: g
    for g in [
        Geom(
            "point",
            "dot",
            ("x", "y"),
            {"color": "black", "size": 1.5, "shape": "circle", "alpha": 1},
        ),
        Geom("line", "line", ("x", "y"), {"color": "black", "linetype": "solid"}),
        Geom("area", "areaY", ("x", "y"), {"fill": "#595959", "alpha": 1}),
        Geom("bar", "barY", ("x", "y"), {"fill": "#595959"}, "count", "stack"),
        Geom("col", "barY", ("x", "y"), {"fill": "#595959"}, "identity", "stack"),
        Geom("histogram", "rectY", ("x", "y"), {"fill": "#595959"}, "bin", "stack"),
        Geom("boxplot", "boxY", ("y",), {"fill": "white"}, "boxplot", "dodge"),
        Geom("violin", "areaX", ("y",), {"fill": "white"}, "ydensity", "dodge"),
        Geom("density", "areaY", ("x", "y"), {"fill": "none", "color": "black"}, "density"),
        Geom("text", "text", ("x", "y", "label"), {"color": "black", "size": 3.88}),
        Geom("tile", "cell", ("x", "y"), {"fill": "#595959"}),
        Geom("rect", "rect", ("xmin", "xmax", "ymin", "ymax"), {"fill": "#595959"}),
        Geom("segment", "link", ("x", "y", "xend", "yend"), {"color": "black"}),
        Geom("hline", "ruleY", ("yintercept",), {"color": "black"}),
        Geom("vline", "ruleX", ("xintercept",), {"color": "black"}),
    ]
}


def as_dataset(data: Any) -> LayerData:
    if data is None or isinstance(data, Dataset) or callable(data):
        return data
    if isinstance(data, (pd.DataFrame, dict, list)):
        return Dataset(data)
    raise TypeError(f"Cannot use {type(data).__name__} as layer data")


@dataclass(frozen=True, eq=False)
class Layer:
    """
    One visual representation of data: a geometry, a statistic and a
    position adjustment, with optional layer-local data and mapping.

    `settings` holds channels fixed to a constant for every row (eg.
    geom_point(color="red")); `params` holds everything else that is passed
    through to the mark or its transform (eg. bins, width).
    """

    geom: Geom
    stat: str
    position: str
    data: LayerData = None
    mapping: Aes = field(default_factory=Aes)
    settings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    inherit_aes: bool = True

    @property
    def required(self) -> Tuple[str, ...]:
        computed = STATS[self.stat]
        return tuple(c for c in self.geom.required if c not in computed)

    def layer_data(self, plot_data: Optional[Dataset]) -> Optional[Dataset]:
        """The rows this layer draws: its own data, or the plot's."""
        if self.data is None:
            return plot_data
        if isinstance(self.data, Dataset):
            return self.data
        if plot_data is None:
            raise ValueError("Layer data is a function but the plot has no data")
        return self.data(plot_data)

    def __repr__(self):
        return f"<Layer geom_{self.geom.name} stat={self.stat} position={self.position} mapping={self.mapping!r}>"


def layer(
    geom: str,
    mapping: Optional[Mapping[str, Any]] = None,
    data: Any = None,
    stat: Optional[str] = None,
    position: Optional[str] = None,
    inherit_aes: bool = True,
    **params: Any,
) -> Layer:
    if geom not in GEOMS:
        raise ValueError(f"Unknown geometry: '{geom}'")
    g = GEOMS[geom]
    stat = stat or g.stat
    position = position or g.position
    if stat not in STATS:
        raise ValueError(f"Unknown statistic: '{stat}'")
    if position not in POSITIONS:
        raise ValueError(f"Unknown position adjustment: '{position}'")

    settings: Dict[str, Any] = {}
    options: Dict[str, Any] = {}
    for key, value in params.items():
        name = ALIASES.get(key, key)
        if name in CHANNELS:
            settings[name] = value
        else:
            options[key] = value

    # a fixed intercept takes nothing from the plot mapping
    intercept = {"hline": "yintercept", "vline": "xintercept"}.get(geom)
    if intercept in settings:
        inherit_aes = False

    return Layer(
        geom=g,
        stat=stat,
        position=position,
        data=as_dataset(data),
        mapping=mapping if isinstance(mapping, Aes) else Aes(mapping),
        settings=MappingProxyType(settings),
        params=MappingProxyType(options),
        inherit_aes=inherit_aes,
    )


def _geom_fn(name: str, doc: str) -> Callable[..., Layer]:
    def geom_fn(mapping=None, data=None, stat=None, position=None, inherit_aes=True, **params):
        return layer(name, mapping, data, stat, position, inherit_aes, **params)

    geom_fn.__name__ = f"geom_{name}"
    geom_fn.__qualname__ = f"geom_{name}"
    geom_fn.__doc__ = doc
    return geom_fn


geom_point = _geom_fn(
    "point",
    """Scatter plot of x against y. Optional: color, fill, shape, size, alpha.""",
)
geom_line = _geom_fn("line", """Connect observations in x order. Use `group` to draw several lines.""")
geom_area = _geom_fn("area", """Filled area between y and zero.""")
geom_bar = _geom_fn(
    "bar",
    """
    Bar heights proportional to the number of rows at each x (stat "count").
    Pass stat="identity" to use a mapped y instead; position may be
    "stack" (default), "dodge" or "fill".
    """,
)
geom_col = _geom_fn("col", """Bars whose heights are the mapped y values.""")
geom_histogram = _geom_fn(
    "histogram",
    """Bin a continuous x and count rows per bin. Params: bins, binwidth.""",
)
geom_boxplot = _geom_fn(
    "boxplot",
    """Box and whiskers summary of y, one box per x value when x is mapped.""",
)
geom_violin = _geom_fn("violin", """Mirrored density of y, one violin per x value when x is mapped.""")
geom_density = _geom_fn("density", """Smoothed distribution of x. Params: bins (smoothing resolution).""")
geom_text = _geom_fn("text", """Draw the `label` channel as text at x, y.""")
geom_tile = _geom_fn("tile", """Heatmap cells at discrete x, y positions.""")
geom_rect = _geom_fn("rect", """Rectangles spanning xmin..xmax and ymin..ymax.""")
geom_segment = _geom_fn("segment", """Straight segments from (x, y) to (xend, yend).""")
geom_hline = _geom_fn(
    "hline",
    """Horizontal reference line(s), eg. geom_hline(yintercept=7.3).""",
)
geom_vline = _geom_fn("vline", """Vertical reference line(s), eg. geom_vline(xintercept=1000).""")
