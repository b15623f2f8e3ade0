import json
from types import MappingProxyType
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from genoplot.aes import aes
from genoplot.dataset import Dataset
from genoplot.genome import GenomicRange, chromosome_levels
from genoplot.layers import geom_hline, geom_point
from genoplot.layout import Column, LayoutItem, js
from genoplot.plot_spec import PlotSpec, build, ggplot
from genoplot.scales import Coord, Scale, labs, scale_color_manual, ylab
from genoplot.theme import theme

# channels that carry genomic positions on the x axis
_X_CHANNELS = ("x", "xend", "xmin", "xmax", "xintercept")


def x_extent(plot: PlotSpec) -> Optional[Tuple[float, float]]:
    """Numeric extent of everything a plot draws along x."""
    lo, hi = np.inf, -np.inf
    for r in build(plot).layers:
        if r.data is None:
            continue
        for channel in _X_CHANNELS:
            column = r.mapping.get(channel)
            if isinstance(column, str) and r.data.is_numeric(column):
                e = r.data.extent(column)
                if e is not None:
                    lo, hi = min(lo, e[0]), max(hi, e[1])
    if lo > hi:
        return None
    return lo, hi


class Tracks(LayoutItem):
    """
    Plots stacked vertically on a shared genomic x axis, like the lanes of
    a genome browser. Each track keeps its own y axis.
    """

    def __init__(
        self,
        tracks: Sequence[Tuple[Optional[str], PlotSpec]],
        xlim: Any = None,
        heights: Optional[Sequence[float]] = None,
    ):
        super().__init__()
        self.tracks = list(tracks)
        if heights is not None and len(heights) != len(self.tracks):
            raise ValueError(
                f"Got {len(heights)} heights for {len(self.tracks)} tracks"
            )
        self.heights = list(heights) if heights is not None else None
        if isinstance(xlim, (GenomicRange, str)):
            region = GenomicRange.coerce(xlim)
            xlim = (region.start, region.end)
        self.xlim = tuple(xlim) if xlim is not None else None

    def x_domain(self) -> Optional[Tuple[float, float]]:
        if self.xlim is not None:
            return self.xlim  # type: ignore
        extents = [x_extent(p) for _, p in self.tracks]
        extents = [e for e in extents if e is not None]
        if not extents:
            return None
        return min(e[0] for e in extents), max(e[1] for e in extents)

    def aligned(self) -> List[PlotSpec]:
        """Each track with the shared x domain, its label and its height applied."""
        domain = self.x_domain()
        out = []
        for i, (name, plot) in enumerate(self.tracks):
            plot = plot + Coord(domain, plot.coord.ylim, plot.coord.flip)
            if name is not None:
                plot = plot + ylab(name)
            if self.heights is not None:
                plot = plot + theme(height=self.heights[i])
            out.append(plot)
        return out

    def for_json(self) -> Any:
        return Column({"gap": 0}, *self.aligned()).for_json()


def tracks(*plots: PlotSpec, xlim: Any = None, heights: Optional[Sequence[float]] = None, **named: PlotSpec) -> Tracks:
    """
    Align plots on one genomic coordinate axis, eg.
    tracks(Reads=autoplot(reads), Genes=autoplot(genes), xlim="chr17:41196312-41277500").
    """
    entries: List[Tuple[Optional[str], PlotSpec]] = [(None, p) for p in plots]
    entries += [(name.replace("_", " "), p) for name, p in named.items()]
    return Tracks(entries, xlim=xlim, heights=heights)


def plot_grand_linear(
    dataset: Dataset,
    y: str,
    chrom: str = "Chr",
    pos: str = "Start",
    cutoff: Optional[float] = None,
    colors: Tuple[str, str] = ("#1f78b4", "#a6cee3"),
) -> PlotSpec:
    """
    Manhattan plot: every chromosome laid end to end in genome order on one
    x axis, points alternating colour by chromosome, and an optional
    horizontal cutoff line.
    """
    dataset.require(chrom, pos, y)
    frame = dataset.drop_missing(chrom, pos, y).to_pandas()
    frame[chrom] = frame[chrom].astype(str)
    order = chromosome_levels(frame[chrom])
    lengths = frame.groupby(chrom)[pos].max()

    offsets, ticks, offset = {}, {}, 0
    for name in order:
        offsets[name] = offset
        ticks[int(offset + lengths[name] // 2)] = name
        offset += int(lengths[name])

    genome = Dataset(frame).mutate(
        genome_pos=lambda d: d[pos] + d[chrom].map(offsets),
        chrom_shade=lambda d: d[chrom].map(
            {name: ("odd" if i % 2 == 0 else "even") for i, name in enumerate(order)}
        ),
    )
    axis = Scale(
        "x",
        MappingProxyType(
            {
                "ticks": list(ticks),
                "tickFormat": js(f"(d) => ({json.dumps({str(k): v for k, v in ticks.items()})})[d]"),
            }
        ),
    )
    plot = (
        ggplot(genome, aes(x="genome_pos", y=y, color="chrom_shade"))
        + geom_point(size=1)
        + scale_color_manual({"odd": colors[0], "even": colors[1]})
        + axis
        + labs(x="Chromosome", y=y)
        + theme(legend_position="none")
    )
    if cutoff is not None:
        plot = plot + geom_hline(yintercept=cutoff, color="red", linetype="dashed")
    return plot
