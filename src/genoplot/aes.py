from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

CHANNELS = (
    "x",
    "y",
    "color",
    "fill",
    "shape",
    "size",
    "alpha",
    "label",
    "group",
    "linetype",
    "xend",
    "yend",
    "xmin",
    "xmax",
    "ymin",
    "ymax",
    "xintercept",
    "yintercept",
)

ALIASES = {"colour": "color", "col": "color", "pch": "shape", "cex": "size"}


def channel_name(name: str) -> str:
    name = ALIASES.get(name, name)
    if name not in CHANNELS:
        raise ValueError(f"Unknown aesthetic channel: '{name}'")
    return name


class Constant:
    """A fixed value for a channel, as opposed to a column reference."""

    def __init__(self, value: Any):
        self.value = value

    def __eq__(self, other):
        return isinstance(other, Constant) and other.value == self.value

    def __hash__(self):
        return hash(("Constant", repr(self.value)))

    def __repr__(self):
        return f"const({self.value!r})"


def const(value: Any) -> Constant:
    """
    Bind a channel to a constant, eg. aes(color=const("all variants")).

    The value is still passed through the channel's scale, so it shows up
    in the legend (unlike a layer parameter such as geom_point(color="red")).
    """
    return Constant(value)


Binding = Union[str, Constant]


class Aes(Mapping[str, Binding]):
    """An immutable mapping from visual channels to column names or constants."""

    def __init__(self, bindings: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        merged: Dict[str, Binding] = {}
        for name, value in {**(bindings or {}), **kwargs}.items():
            if value is None:
                continue
            if not isinstance(value, (str, Constant)):
                raise TypeError(
                    f"aes({name}=...) must be a column name or const(value), "
                    f"got {type(value).__name__}"
                )
            merged[channel_name(name)] = value
        self._bindings = MappingProxyType(merged)

    def __getitem__(self, channel: str) -> Binding:
        return self._bindings[ALIASES.get(channel, channel)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __eq__(self, other):
        if isinstance(other, Mapping):
            return dict(self._bindings) == dict(other)
        return NotImplemented

    def __hash__(self):
        return hash(tuple(sorted(self._bindings.items(), key=lambda kv: kv[0])))

    def __repr__(self):
        inner = ", ".join(f"{k}={v!r}" for k, v in self._bindings.items())
        return f"aes({inner})"

    def merge(self, other: Optional[Mapping[str, Any]]) -> "Aes":
        """Union of both mappings; `other` wins where channels overlap."""
        if not other:
            return self
        return Aes({**self._bindings, **dict(other)})

    def columns(self) -> Tuple[str, ...]:
        return tuple(v for v in self._bindings.values() if isinstance(v, str))


def aes(x: Optional[Binding] = None, y: Optional[Binding] = None, **channels: Any) -> Aes:
    """Map visual channels to dataset columns, eg. aes(x="Start", y="DP", color="Func")."""
    return Aes(x=x, y=y, **channels)
