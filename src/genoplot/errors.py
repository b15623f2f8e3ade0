from typing import Any, Optional, Sequence


class GenoplotError(Exception):
    """Base class for errors raised while composing or rendering a plot."""


class MissingAesthetic(GenoplotError):
    def __init__(self, geom: str, channel: str, layer_index: Optional[int] = None):
        self.geom = geom
        self.channel = channel
        self.layer_index = layer_index
        where = f" (layer {layer_index})" if layer_index is not None else ""
        super().__init__(
            f"geom_{geom}{where} requires the '{channel}' aesthetic, "
            "which is not mapped by the layer or the plot"
        )


class ColumnNotFound(GenoplotError, KeyError):
    def __init__(self, column: str, available: Sequence[str] = ()):
        self.column = column
        self.available = list(available)
        super().__init__(
            f"Column '{column}' not found. Available columns: {self.available}"
        )

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class InvalidComponent(GenoplotError, TypeError):
    def __init__(self, component: Any):
        self.component = component
        super().__init__(
            f"Cannot add object of type {type(component).__name__} to a plot. "
            "Expected a layer, facet, theme, aes, labels, scale or coord."
        )


class RangeQueryEmpty(UserWarning):
    def __init__(self, which: Any):
        self.which = which
        super().__init__(f"No aligned reads in {which}; rendering an empty track")
