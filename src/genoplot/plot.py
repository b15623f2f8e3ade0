# %%
# ruff: noqa: F401
from genoplot.aes import Aes, aes, const
from genoplot.alignment import AlignmentSource
from genoplot.autoplot import (
    AlignmentData,
    AnnotationData,
    RangeData,
    TableData,
    autoplot,
)
from genoplot.dataset import Dataset, read_table, read_variants
from genoplot.errors import (
    ColumnNotFound,
    GenoplotError,
    InvalidComponent,
    MissingAesthetic,
    RangeQueryEmpty,
)
from genoplot.facet import FacetSpec, facet_grid, facet_wrap
from genoplot.genome import GenomicRange, chromosome_key, chromosome_levels
from genoplot.layers import (
    Layer,
    geom_area,
    geom_bar,
    geom_boxplot,
    geom_col,
    geom_density,
    geom_histogram,
    geom_hline,
    geom_line,
    geom_point,
    geom_rect,
    geom_segment,
    geom_text,
    geom_tile,
    geom_violin,
    geom_vline,
    layer,
)
from genoplot.layout import Column, Grid, Row, js
from genoplot.plot_spec import PlotSpec, build, compose, ggplot, resolve_channels
from genoplot.scales import (
    coord_cartesian,
    coord_flip,
    ggtitle,
    labs,
    scale_color_brewer,
    scale_color_manual,
    scale_colour_brewer,
    scale_colour_manual,
    scale_fill_brewer,
    scale_fill_manual,
    scale_x_continuous,
    scale_x_discrete,
    scale_x_log10,
    scale_y_continuous,
    scale_y_log10,
    xlab,
    ylab,
)
from genoplot.theme import (
    theme,
    theme_bw,
    theme_classic,
    theme_gray,
    theme_grey,
    theme_minimal,
)
from genoplot.tracks import Tracks, plot_grand_linear, tracks
from genoplot.util import configure

# This module is the public surface of genoplot: a Grammar of Graphics for
# genomic variant tables and alignments, rendered with Observable Plot.
#
# See:
# - https://observablehq.com/plot/
# - https://github.com/manzt/anywidget
#
# Key features:
# - Build plots declaratively from data, an aesthetic mapping and layers
# - Compose plots with + (or compose()) to add layers, facets, themes, scales
# - Facet by chromosome in genome order (1..22, X, Y)
# - Genome-browser tracks of coverage, read pileups and gene models
# - Render to an interactive widget, standalone HTML or a PNG


def order_chromosomes(dataset: Dataset, column: str = "Chr") -> Dataset:
    """Reorder a chromosome column to 1..22, X, Y, MT instead of lexicographic order."""
    return dataset.reorder(column, chromosome_levels(dataset.column(column)))


def small_multiples(*specs, ncols=3, **options):
    return Grid(*specs, ncols=ncols, **options)


def size(width, height=None):
    return theme(width=width, height=height or width)
