"""
Translate a built plot into an Observable Plot program.

Each panel becomes one `Plot.plot({...})` call; faceted plots arrange their
panels in a Grid. Statistics are delegated to Observable Plot transforms
(groupX for counts, binX for histograms and densities, boxY for boxplots).

See https://observablehq.com/plot/
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from genoplot.aes import Constant
from genoplot.dataset import Dataset
from genoplot.layout import Grid, JSRef, LayoutItem, js
from genoplot.plot_spec import BuiltPanel, BuiltPlot, ResolvedLayer
from genoplot.theme import DEFAULT_THEME, plot_options
from genoplot.util import CONFIG, deep_merge

Plot = JSRef("Plot")

_FLIPPED_KEYS = {
    "x": "y",
    "y": "x",
    "x1": "y1",
    "y1": "x1",
    "x2": "y2",
    "y2": "x2",
    "fx": "fy",
    "fy": "fx",
}

# Where each channel goes on an Observable Plot mark, unless overridden per geom.
_CHANNEL_OPTIONS = {
    "x": "x",
    "y": "y",
    "color": "stroke",
    "fill": "fill",
    "shape": "symbol",
    "size": "r",
    "alpha": "opacity",
    "label": "text",
    "group": "z",
    "linetype": "strokeDasharray",
}

_GEOM_CHANNEL_OPTIONS = {
    "point": {"color": "fill"},
    "text": {"color": "fill", "size": "fontSize"},
    "line": {"size": "strokeWidth"},
    "density": {"size": "strokeWidth"},
    "segment": {"x": "x1", "y": "y1", "xend": "x2", "yend": "y2", "size": "strokeWidth"},
    "rect": {"xmin": "x1", "xmax": "x2", "ymin": "y1", "ymax": "y2"},
    "hline": {"yintercept": "y", "size": "strokeWidth"},
    "vline": {"xintercept": "x", "size": "strokeWidth"},
}

_SCALE_KEYS = {
    "x": "x",
    "y": "y",
    "color": "color",
    "fill": "color",
    "shape": "symbol",
    "size": "r",
    "alpha": "opacity",
}

_SHAPES = {
    0: "square",
    1: "circle",
    2: "triangle",
    3: "plus",
    4: "times",
    5: "diamond",
    15: "square",
    16: "circle",
    17: "triangle",
    18: "diamond",
    19: "circle",
}

_LINETYPES = {"solid": None, "dashed": "4,4", "dotted": "1,3", "dotdash": "1,3,4,3", "longdash": "8,4"}

# geom_point(size=1.5) is roughly a 2.25px radius; text size is in mm
_POINT_SCALE = 1.5
_MM_TO_PT = 2.845


def constantly(x):
    """
    Returns a javascript function which always returns `x`, so a mapped
    constant still passes through the channel's scale (and legend).
    """
    x = json.dumps(x)
    return js(f"()=>{x}")


def flip_name(name: str) -> str:
    if name.endswith("X"):
        return name[:-1] + "Y"
    if name.endswith("Y"):
        return name[:-1] + "X"
    return name


def flip_keys(options: Dict[str, Any]) -> Dict[str, Any]:
    return {_FLIPPED_KEYS.get(k, k): v for k, v in options.items()}


def _setting_value(geom: str, channel: str, value: Any) -> Any:
    if channel == "size" and geom == "point":
        return value * _POINT_SCALE
    if channel == "size" and geom == "text":
        return value * _MM_TO_PT
    if channel == "shape":
        return _SHAPES.get(value, value)
    if channel == "linetype":
        return _LINETYPES.get(value, value)
    return value


def channel_options(r: ResolvedLayer) -> Dict[str, Any]:
    geom = r.layer.geom.name
    names = {**_CHANNEL_OPTIONS, **_GEOM_CHANNEL_OPTIONS.get(geom, {})}
    options: Dict[str, Any] = {}
    for channel, value in r.settings.items():
        if channel in names:
            value = _setting_value(geom, channel, value)
            if value is not None:
                options[names[channel]] = value
    for channel, binding in r.mapping.items():
        if channel not in names:
            continue
        if channel == "linetype":
            # dash patterns are not a scaled channel; keep the series apart
            options["z"] = binding if isinstance(binding, str) else None
            continue
        if isinstance(binding, Constant):
            options[names[channel]] = constantly(binding.value)
        else:
            options[names[channel]] = binding
    if geom == "line" and "color" in r.mapping and "group" not in r.mapping:
        options["z"] = options["stroke"]
    return options


def _bin_options(params: Dict[str, Any], default_bins: Optional[int] = None) -> Dict[str, Any]:
    out = {}
    if params.get("binwidth") is not None:
        out["interval"] = params["binwidth"]
    elif params.get("bins") is not None:
        out["thresholds"] = params["bins"]
    elif default_bins is not None:
        out["thresholds"] = default_bins
    return out


def _passthrough(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if k not in ("bins", "binwidth", "na_rm")}


def _dodge(options: Dict[str, Any], r: ResolvedLayer) -> Dict[str, Any]:
    group = r.mapping.get("fill") or r.mapping.get("color")
    if isinstance(group, str) and "x" in options:
        return {**options, "fx": options["x"], "x": group}
    return options


def layer_mark(r: ResolvedLayer, data: Optional[Dataset], flip: bool) -> Any:
    """The Observable Plot mark (with its transform) drawing one layer in one panel."""
    geom = r.layer.geom
    stat = r.layer.stat
    position = r.layer.position
    params = dict(r.layer.params)
    options = {**channel_options(r), **_passthrough(params)}
    mark_name = geom.mark
    rows: Any = data if data is not None else []
    f = flip_name if flip else (lambda n: n)
    keys = flip_keys if flip else (lambda o: o)

    if geom.name in ("hline", "vline"):
        channel = "yintercept" if geom.name == "hline" else "xintercept"
        if channel not in r.mapping:
            value = r.settings[channel]
            rows = list(value) if isinstance(value, (list, tuple)) else [value]
            options.pop("y" if geom.name == "hline" else "x", None)
        return JSRef(f"Plot.{f(mark_name)}")(rows, keys(options))

    if stat == "count":
        if position == "fill":
            options["offset"] = "normalize"
        elif position == "dodge":
            options = _dodge(options, r)
        return JSRef(f"Plot.{f(mark_name)}")(
            rows, JSRef(f"Plot.{f('groupX')}")(keys({"y": "count"}), keys(options))
        )

    if stat == "bin":
        if position == "fill":
            options["offset"] = "normalize"
        return JSRef(f"Plot.{f(mark_name)}")(
            rows,
            JSRef(f"Plot.{f('binX')}")(
                keys({"y": "count"}), keys({**options, **_bin_options(params)})
            ),
        )

    if stat == "density":
        filled = "fill" in r.mapping or r.settings.get("fill") not in (None, "none")
        if not filled:
            options.pop("fill", None)
        mark_name = "areaY" if filled else "lineY"
        return JSRef(f"Plot.{f(mark_name)}")(
            rows,
            JSRef(f"Plot.{f('binX')}")(
                keys({"y": "proportion"}),
                keys({"curve": "basis", **options, **_bin_options(params, 40)}),
            ),
        )

    if stat == "ydensity":
        if "x" in options:
            options["fx"] = options.pop("x")
        return JSRef(f"Plot.{f('areaX')}")(
            rows,
            JSRef(f"Plot.{f('binY')}")(
                keys({"x1": js("(values) => -values.length"), "x2": "count"}),
                keys({"curve": "basis", **options, **_bin_options(params, 30)}),
            ),
        )

    if stat == "boxplot":
        return JSRef(f"Plot.{f('boxY')}")(rows, keys(options))

    if position == "dodge" and mark_name in ("barY", "dot"):
        options = _dodge(options, r)
    return JSRef(f"Plot.{f(mark_name)}")(rows, keys(options))


def _drawn_on(r: ResolvedLayer, channel: str) -> bool:
    # violins and dodged bars move the x column onto the fx facet channel
    if channel != "x" or r.layer.stat == "boxplot":
        return True
    if r.layer.stat == "ydensity":
        return False
    dodged = r.layer.stat == "count" or r.layer.geom.mark in ("barY", "dot")
    return not (r.layer.position == "dodge" and dodged)


def _column_domain(
    layers: List[Tuple[ResolvedLayer, Optional[Dataset]]], channel: str, numeric: bool
) -> Optional[List[Any]]:
    """
    Domain covering a channel's column across layers: the level order for
    discrete columns, or (if `numeric`) the extent of numeric ones.
    """
    levels: List[Any] = []
    extent: Optional[Tuple[float, float]] = None
    for r, data in layers:
        column = r.mapping.get(channel)
        if not isinstance(column, str) or data is None or not _drawn_on(r, channel):
            continue
        if data.is_numeric(column) and not data.is_categorical(column):
            e = data.extent(column)
            if e is not None:
                extent = e if extent is None else (min(extent[0], e[0]), max(extent[1], e[1]))
        else:
            levels.extend(v for v in data.levels(column) if v not in levels)
    if levels:
        return levels
    if numeric and extent is not None:
        return list(extent)
    return None


def _legend_channels(built: BuiltPlot) -> bool:
    return any(
        isinstance(r.mapping.get(c), str)
        for r in built.layers
        for c in ("color", "fill")
    )


def panel_options(built: BuiltPlot, panel: Optional[BuiltPanel], first: bool) -> Dict[str, Any]:
    plot = built.plot
    facet = plot.facet
    theme = DEFAULT_THEME + plot.theme if plot.theme is not None else DEFAULT_THEME
    options = plot_options(plot.theme)

    whole = [(r, r.data) for r in built.layers]
    local = whole
    if panel is not None and panel.layer_data is not None:
        local = list(zip(built.layers, panel.layer_data))
    for channel in ("x", "y", "color", "fill"):
        if channel in ("color", "fill"):
            domain = _column_domain(whole, channel, numeric=False)
        elif facet is not None and not facet.free(channel):
            domain = _column_domain(whole, channel, numeric=True)
        else:
            domain = _column_domain(local, channel, numeric=False)
        if domain is not None:
            options = deep_merge(options, {_SCALE_KEYS[channel]: {"domain": domain}})

    for aesthetic, scale in plot.scales.items():
        options = deep_merge(options, {_SCALE_KEYS.get(aesthetic, aesthetic): scale.plot_options()})

    for channel in ("x", "y", "color", "fill"):
        label = plot.labels.get(channel)
        if label is not None:
            options = deep_merge(options, {_SCALE_KEYS[channel]: {"label": label}})

    if plot.coord.xlim is not None:
        options = deep_merge(options, {"x": {"domain": list(plot.coord.xlim)}})
    if plot.coord.ylim is not None:
        options = deep_merge(options, {"y": {"domain": list(plot.coord.ylim)}})

    if _legend_channels(built) and theme.get("legend_position") != "none" and first:
        options = deep_merge(options, {"color": {"legend": True}})

    if facet is None:
        for key in ("title", "subtitle", "caption"):
            if plot.labels.get(key) is not None:
                options[key] = plot.labels.get(key)
    else:
        options["title"] = panel.label if panel is not None else None
        options = {**CONFIG["panel"], **options}

    if plot.coord.flip:
        options = flip_keys(options)
    return options


def panel_plot(built: BuiltPlot, panel: BuiltPanel, first: bool = True) -> LayoutItem:
    plot = built.plot
    flip = plot.coord.flip
    marks = [
        layer_mark(r, data, flip)
        for r, data in zip(built.layers, panel.layer_data or ())
    ]
    theme = DEFAULT_THEME + plot.theme if plot.theme is not None else DEFAULT_THEME
    if theme.get("panel_border"):
        marks.append(Plot.frame())
    return Plot.plot({**panel_options(built, panel, first), "marks": marks})


def program(built: BuiltPlot) -> LayoutItem:
    """Observable Plot program for a built plot: one plot, or a grid of panels."""
    if built.plot.facet is None:
        return panel_plot(built, built.panels[0])

    by_position = {(p.row, p.col): p for p in built.panels}
    items = []
    first = True
    for row in range(built.nrow):
        for col in range(built.ncol):
            p = by_position.get((row, col))
            if p is None or p.empty:
                items.append(None)
            else:
                items.append(panel_plot(built, p, first))
                first = False
    labels = built.plot.labels
    return Grid(
        *items,
        ncols=built.ncol,
        **{
            k: labels.get(k)
            for k in ("title", "subtitle", "caption")
            if labels.get(k) is not None
        },
    )
