from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Optional

import pandas as pd

from genoplot.aes import aes
from genoplot.alignment import AlignmentSource
from genoplot.dataset import Dataset
from genoplot.errors import InvalidComponent
from genoplot.facet import facet_wrap
from genoplot.genome import GenomicRange, chromosome_levels, pack_rows, strip_chr
from genoplot.layers import (
    geom_area,
    geom_bar,
    geom_boxplot,
    geom_histogram,
    geom_point,
    geom_rect,
    geom_segment,
    geom_text,
)
from genoplot.plot_spec import PlotSpec, ggplot
from genoplot.scales import labs, scale_color_manual
from genoplot.theme import theme, theme_bw

STRAND_COLORS = {"+": "#e41a1c", "-": "#377eb8"}


@dataclass(frozen=True)
class TableData:
    kind: ClassVar[str] = "table"
    dataset: Dataset
    x: str
    y: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class RangeData:
    kind: ClassVar[str] = "ranges"
    dataset: Dataset
    chrom: str = "chrom"
    start: str = "start"
    end: str = "end"
    color: Optional[str] = None


@dataclass(frozen=True)
class AlignmentData:
    kind: ClassVar[str] = "alignment"
    source: AlignmentSource
    which: Any
    view: str = "coverage"


@dataclass(frozen=True)
class AnnotationData:
    """A gene model table (one row per gene, transcript or exon)."""

    kind: ClassVar[str] = "annotation"
    dataset: Dataset
    chrom: str = "chrom"
    start: str = "start"
    end: str = "end"
    name: str = "gene"
    which: Any = None


def _table(data: TableData) -> PlotSpec:
    ds = data.dataset
    mapping = aes(x=data.x, y=data.y, color=data.color)
    if data.y is None:
        layer = geom_histogram() if ds.is_numeric(data.x) else geom_bar()
        if data.color is not None:
            mapping = aes(x=data.x, fill=data.color)
    elif ds.is_numeric(data.x) and not ds.is_categorical(data.x):
        layer = geom_point()
    else:
        layer = geom_boxplot()
    return ggplot(ds, mapping) + layer


def _stacked(frame: pd.DataFrame, chrom: str, start: str, end: str) -> pd.DataFrame:
    frame = frame.copy()
    frame["row"] = 0
    for _, index in frame.groupby(chrom, observed=True).groups.items():
        sub = frame.loc[index]
        frame.loc[index, "row"] = pack_rows(sub[start].tolist(), sub[end].tolist())
    return frame


def _ranges(data: RangeData) -> PlotSpec:
    ds = data.dataset
    ds.require(data.chrom, data.start, data.end)
    stacked = Dataset(_stacked(ds.to_pandas(), data.chrom, data.start, data.end))
    stacked = stacked.reorder(data.chrom, chromosome_levels(ds.column(data.chrom)))
    return (
        ggplot(stacked, aes(x=data.start, xend=data.end, y="row", yend="row", color=data.color))
        + geom_segment(size=3)
        + facet_wrap(data.chrom, scales="free_x")
        + labs(y="")
        + theme_bw()
    )


def _alignment(data: AlignmentData) -> PlotSpec:
    region = GenomicRange.coerce(data.which)
    if data.view == "coverage":
        coverage = data.source.coverage(region)
        return (
            ggplot(coverage, aes(x="pos", y="depth"))
            + geom_area(fill="#595959")
            + labs(x=f"Position on {region.chrom}", y="Coverage")
            + theme_bw()
        )
    if data.view == "pileup":
        reads = data.source.query(region)
        return (
            ggplot(reads, aes(x="pos", xend="end", y="row", yend="row", color="strand"))
            + geom_segment(size=2)
            + scale_color_manual(STRAND_COLORS)
            + labs(x=f"Position on {region.chrom}", y="")
            + theme_bw()
        )
    if data.view == "mismatch":
        counts = data.source.mismatches(region)
        return (
            ggplot(counts, aes(x="pos"))
            + geom_area(aes(y="depth"), fill="#cccccc")
            + geom_segment(
                aes(xend="pos", yend="mismatch"),
                data=counts.filter("mismatch > 0"),
                y=0,
                color="red",
            )
            + labs(x=f"Position on {region.chrom}", y="Coverage / mismatches")
            + theme_bw()
        )
    raise ValueError(f"Unknown alignment view: '{data.view}'")


def _annotation(data: AnnotationData) -> PlotSpec:
    ds = data.dataset
    ds.require(data.chrom, data.start, data.end, data.name)
    if data.which is not None:
        region = GenomicRange.coerce(data.which)
        frame = ds.to_pandas()
        same_chrom = frame[data.chrom].astype(str).map(strip_chr) == strip_chr(region.chrom)
        ds = ds.filter(
            same_chrom & (frame[data.start] <= region.end) & (frame[data.end] >= region.start)
        )
    frame = _stacked(ds.to_pandas(), data.chrom, data.start, data.end)
    genes = Dataset(frame).mutate(
        ymin=lambda d: d["row"] - 0.3,
        ymax=lambda d: d["row"] + 0.3,
        mid=lambda d: (d[data.start] + d[data.end]) / 2,
        label_y=lambda d: d["row"] + 0.55,
    )
    return (
        ggplot(genes)
        + geom_rect(aes(xmin=data.start, xmax=data.end, ymin="ymin", ymax="ymax"), fill="#377eb8")
        + geom_text(aes(x="mid", y="label_y", label=data.name), size=3)
        + labs(y="")
        + theme_bw()
        + theme(panel_grid=False)
    )


_STRATEGIES: Dict[str, Callable[[Any], PlotSpec]] = {
    TableData.kind: _table,
    RangeData.kind: _ranges,
    AlignmentData.kind: _alignment,
    AnnotationData.kind: _annotation,
}


def autoplot(data: Any, **components: Any) -> PlotSpec:
    """
    Pick a sensible plot for a tagged input:

    - TableData: histogram/bar of x alone, scatter of numeric x and y,
      boxplots of y by discrete x.
    - RangeData: intervals stacked into rows, one panel per chromosome.
    - AlignmentData: coverage, read pileup or mismatch counts over a range.
    - AnnotationData: gene models stacked into rows, labelled by name.

    Extra keyword arguments are components composed onto the result, eg.
    autoplot(data, title=ggtitle("BRCA1")).
    """
    strategy = _STRATEGIES.get(getattr(data, "kind", None))  # type: ignore
    if strategy is None:
        raise InvalidComponent(data)
    plot = strategy(data)
    for component in components.values():
        plot = plot + component
    return plot
