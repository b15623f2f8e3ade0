from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from genoplot.aes import channel_name


@dataclass(frozen=True)
class Labels:
    """Axis, legend and plot titles, keyed by channel (plus title/subtitle/caption)."""

    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __add__(self, other: "Labels") -> "Labels":
        return Labels(MappingProxyType({**self.values, **other.values}))

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)


_TITLES = ("title", "subtitle", "caption")


def labs(**labels: Optional[str]) -> Labels:
    """Set labels, eg. labs(x="Position", y="Depth", title="Chr 1 variants")."""
    values = {
        (k if k in _TITLES else channel_name(k)): v
        for k, v in labels.items()
        if v is not None
    }
    return Labels(MappingProxyType(values))


def xlab(label: str) -> Labels:
    return labs(x=label)


def ylab(label: str) -> Labels:
    return labs(y=label)


def ggtitle(title: str, subtitle: Optional[str] = None) -> Labels:
    return labs(title=title, subtitle=subtitle)


@dataclass(frozen=True)
class Scale:
    """How a channel's data values map to visual values."""

    aesthetic: str
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def plot_options(self) -> Dict[str, Any]:
        return dict(self.options)


def _scale(aesthetic: str, **options: Any) -> Scale:
    return Scale(channel_name(aesthetic), MappingProxyType(options))


def scale_x_discrete(limits: Optional[Sequence[Any]] = None) -> Scale:
    """Fix the order (and subset) of a discrete x axis."""
    return _scale("x", type="band", **({"domain": list(limits)} if limits else {}))


def scale_x_continuous(limits: Optional[Tuple[float, float]] = None) -> Scale:
    return _scale("x", type="linear", **({"domain": list(limits)} if limits else {}))


def scale_y_continuous(limits: Optional[Tuple[float, float]] = None) -> Scale:
    return _scale("y", type="linear", **({"domain": list(limits)} if limits else {}))


def scale_x_log10() -> Scale:
    return _scale("x", type="log")


def scale_y_log10() -> Scale:
    return _scale("y", type="log")


def _manual(aesthetic: str, values: Any) -> Scale:
    if isinstance(values, Mapping):
        return _scale(aesthetic, domain=list(values.keys()), range=list(values.values()))
    return _scale(aesthetic, range=list(values))


def scale_color_manual(values: Any) -> Scale:
    """Explicit colours, either a list or a {level: colour} dict."""
    return _manual("color", values)


def scale_fill_manual(values: Any) -> Scale:
    return _manual("fill", values)


def scale_color_brewer(palette: str = "Set1") -> Scale:
    return _scale("color", scheme=palette)


def scale_fill_brewer(palette: str = "Set1") -> Scale:
    return _scale("fill", scheme=palette)


scale_colour_manual = scale_color_manual
scale_colour_brewer = scale_color_brewer


@dataclass(frozen=True)
class Coord:
    """Coordinate system: axis limits and whether x and y are swapped."""

    xlim: Optional[Tuple[float, float]] = None
    ylim: Optional[Tuple[float, float]] = None
    flip: bool = False


def coord_cartesian(
    xlim: Optional[Tuple[float, float]] = None, ylim: Optional[Tuple[float, float]] = None
) -> Coord:
    """Zoom to limits without dropping rows outside them."""
    return Coord(
        tuple(xlim) if xlim is not None else None,  # type: ignore
        tuple(ylim) if ylim is not None else None,  # type: ignore
    )


def coord_flip() -> Coord:
    return Coord(flip=True)
