from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

ELEMENTS = (
    "base_size",
    "font_family",
    "axis_text_x_angle",
    "axis_text_y_angle",
    "legend_position",
    "panel_grid",
    "panel_border",
    "background",
    "width",
    "height",
)

LEGEND_POSITIONS = ("right", "left", "top", "bottom", "none")


@dataclass(frozen=True)
class Theme:
    """
    Non-data appearance of a plot. A complete theme (theme_bw() etc.)
    replaces the plot's theme; a partial theme(...) updates only the
    elements it names.
    """

    elements: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    complete: bool = False

    def __post_init__(self):
        for name in self.elements:
            if name not in ELEMENTS:
                raise ValueError(f"Unknown theme element: '{name}'")
        position = self.elements.get("legend_position")
        if position is not None and position not in LEGEND_POSITIONS:
            raise ValueError(f"legend_position must be one of {LEGEND_POSITIONS}")

    def get(self, name: str, default: Any = None) -> Any:
        return self.elements.get(name, default)

    def __add__(self, other: "Theme") -> "Theme":
        if other.complete:
            return other
        return Theme(MappingProxyType({**self.elements, **other.elements}), self.complete)


def _theme(complete: bool, **elements: Any) -> Theme:
    return Theme(MappingProxyType(elements), complete)


def theme(**elements: Any) -> Theme:
    """
    Adjust individual theme elements, eg.
    theme(axis_text_x_angle=90, legend_position="none").
    """
    return _theme(False, **elements)


def theme_grey(base_size: float = 11) -> Theme:
    return _theme(
        True,
        base_size=base_size,
        panel_grid=True,
        panel_border=False,
        background="#ebebeb",
        legend_position="right",
    )


theme_gray = theme_grey


def theme_bw(base_size: float = 11) -> Theme:
    return _theme(
        True,
        base_size=base_size,
        panel_grid=True,
        panel_border=True,
        background="white",
        legend_position="right",
    )


def theme_minimal(base_size: float = 11) -> Theme:
    return _theme(
        True,
        base_size=base_size,
        panel_grid=True,
        panel_border=False,
        background="none",
        legend_position="right",
    )


def theme_classic(base_size: float = 11) -> Theme:
    return _theme(
        True,
        base_size=base_size,
        panel_grid=False,
        panel_border=False,
        background="white",
        legend_position="right",
    )


DEFAULT_THEME = theme_grey()


def plot_options(t: Optional[Theme]) -> Dict[str, Any]:
    """Observable Plot top-level options for a theme."""
    t = DEFAULT_THEME + t if t is not None else DEFAULT_THEME
    style: Dict[str, Any] = {"fontSize": f"{t.get('base_size')}px"}
    if t.get("font_family"):
        style["fontFamily"] = t.get("font_family")
    if t.get("background") not in (None, "none"):
        style["background"] = t.get("background")
    options: Dict[str, Any] = {"style": style, "grid": bool(t.get("panel_grid"))}
    for size in ("width", "height"):
        if t.get(size) is not None:
            options[size] = t.get(size)
    if t.get("axis_text_x_angle") is not None:
        options["x"] = {"tickRotate": -t.get("axis_text_x_angle")}
    if t.get("axis_text_y_angle") is not None:
        options["y"] = {"tickRotate": -t.get("axis_text_y_angle")}
    return options
