# %% [markdown]
# # Visualizing genomic variants with the Grammar of Graphics
#
# A plot is built from three things: a **dataset**, an **aesthetic mapping**
# that binds columns to visual channels (x, y, color, shape, size), and one or
# more **layers** that draw the rows with a geometry (points, bars, boxes...).
# Facets, themes, labels and scales are added the same way, with `+`.
#
# To start, import genoplot:

# %%
import genoplot.plot as Plot

# %% [markdown]
# ## The data
#
# We use an annotated variant table (eg. ANNOVAR output): one row per variant
# with its chromosome, position, read depth, population allele frequency and
# functional category. `read_variants` keeps the chromosome column as text, so
# that "1" and "X" are treated alike.

# %%
variants = Plot.Dataset(
    {
        "Chr": ["1", "1", "2", "2", "3", "10", "X", "X", "1", "2", "10", "3"],
        "Start": [
            1_250_000,
            8_900_000,
            2_100_000,
            15_300_000,
            4_400_000,
            7_700_000,
            900_000,
            3_300_000,
            22_000_000,
            6_600_000,
            12_100_000,
            9_800_000,
        ],
        "DP": [34, 12, 56, 23, 41, 8, 19, 27, 64, 15, 38, 45],
        "ExAC_ALL": [0.01, 0.2, 0.0004, 0.5, 0.03, 0.11, 0.002, 0.4, 0.07, 0.25, 0.009, 0.6],
        "Func": [
            "exonic",
            "intronic",
            "exonic",
            "intergenic",
            "UTR3",
            "intronic",
            "exonic",
            "splicing",
            "intergenic",
            "exonic",
            "intronic",
            "exonic",
        ],
        "Otherinfo": ["het", "hom", "het", "het", "hom", "het", "hom", "het", "het", "hom", "het", "het"],
    }
)
# variants = Plot.read_variants("annotated_variants.csv")
variants.head()

# %% [markdown]
# ## Scatter plots
#
# Map the variant position to x and read depth to y, and draw points:

# %%
Plot.ggplot(variants, Plot.aes(x="Start", y="DP")) + Plot.geom_point()

# %% [markdown]
# Channels can be mapped to columns (`color="Func"`) or set to a constant for
# every row (`size=3`). Layers are drawn in the order they are added.

# %%
(
    Plot.ggplot(variants, Plot.aes(x="ExAC_ALL", y="DP", color="Func"))
    + Plot.geom_point(size=3, alpha=0.7)
    + Plot.scale_x_log10()
    + Plot.geom_hline(yintercept=20, linetype="dashed")
    + Plot.labs(x="Allele frequency (ExAC)", y="Read depth", color="Function")
)

# %% [markdown]
# `compose` is the same operation as `+`, spelled as a function:

# %%
base = Plot.ggplot(variants, Plot.aes(x="Start", y="DP"))
Plot.compose(Plot.compose(base, Plot.geom_point()), Plot.theme_minimal())

# %% [markdown]
# ## Bar plots
#
# `geom_bar` counts rows per x value, so no y mapping is needed. Stacked bars
# come from mapping `fill`; `position="dodge"` puts them side by side and
# `position="fill"` shows proportions.

# %%
Plot.ggplot(variants, Plot.aes(x="Func")) + Plot.geom_bar()

# %%
(
    Plot.ggplot(variants, Plot.aes(x="Chr", fill="Otherinfo"))
    + Plot.geom_bar(position="dodge")
    + Plot.theme(axis_text_x_angle=45)
)

# %%
Plot.ggplot(variants, Plot.aes(x="Func", fill="Otherinfo")) + Plot.geom_bar(
    position="fill"
) + Plot.coord_flip()

# %% [markdown]
# ## Distributions
#
# Box plots, violins and densities summarise a continuous column, optionally
# split by a category. A categorical axis can be put in a meaningful order with
# `reorder`; only the display order changes, never the rows.

# %%
by_function = variants.reorder("Func", ["exonic", "splicing", "UTR3", "intronic", "intergenic"])

(
    Plot.ggplot(by_function, Plot.aes(x="Func", y="DP"))
    + Plot.geom_boxplot()
    + Plot.geom_point(Plot.aes(color="Otherinfo"))
)

# %%
Plot.ggplot(by_function, Plot.aes(x="Func", y="DP")) + Plot.geom_violin(fill="#a6cee3")

# %%
Plot.ggplot(variants, Plot.aes(x="DP", fill="Otherinfo")) + Plot.geom_density(alpha=0.4)

# %%
Plot.ggplot(variants, Plot.aes(x="DP")) + Plot.geom_histogram(binwidth=10)

# %% [markdown]
# ## Filtering and faceting
#
# Datasets are immutable: `filter`, `isin` and `mutate` return new ones. Here
# we keep three categories and draw one panel per chromosome.

# %%
coding = variants.isin("Func", ["exonic", "intergenic", "intronic"])

(
    Plot.ggplot(coding, Plot.aes(x="Func", fill="Func"))
    + Plot.geom_bar()
    + Plot.facet_wrap("Chr")
    + Plot.theme(legend_position="none")
)

# %% [markdown]
# Panels follow the level order of the facet column. Chromosome names sort
# lexicographically ("1", "10", "2"...) unless reordered; `order_chromosomes`
# applies genome order (1..22, X, Y, MT):

# %%
(
    Plot.ggplot(Plot.order_chromosomes(variants), Plot.aes(x="Start", y="DP"))
    + Plot.geom_point()
    + Plot.facet_wrap("Chr", ncol=3, scales="free_x")
    + Plot.theme_bw()
)

# %% [markdown]
# `facet_grid` lays panels out by two variables; combinations without rows
# leave an empty slot.

# %%
(
    Plot.ggplot(Plot.order_chromosomes(variants), Plot.aes(x="DP"))
    + Plot.geom_histogram(bins=5)
    + Plot.facet_grid(rows="Otherinfo", cols="Chr")
)

# %% [markdown]
# ## Whole-genome views
#
# A Manhattan plot lays all chromosomes end to end on one axis:

# %%
Plot.plot_grand_linear(
    variants.mutate(score=lambda d: d["DP"] / 10), "score", cutoff=5
)

# %% [markdown]
# ## Alignments and tracks
#
# Reads come from an indexed BAM file. Its location is configuration: pass a
# path, call `Plot.configure(alignment_path=...)`, or set
# `GENOPLOT_ALIGNMENT_PATH`. A reference FASTA enables mismatch counts.
#
# ```python
# Plot.configure(alignment_path="NA12878.brca1.bam", reference_path="hg19.fa")
# source = Plot.AlignmentSource()
# brca1 = "chr17:41,196,312-41,277,500"
#
# coverage = Plot.autoplot(Plot.AlignmentData(source, brca1))
# mismatches = Plot.autoplot(Plot.AlignmentData(source, brca1, view="mismatch"))
# reads = Plot.autoplot(Plot.AlignmentData(source, brca1, view="pileup"))
# ```
#
# Tracks stack plots on one shared genomic axis, like a genome browser:
#
# ```python
# genes = Plot.read_table("brca1_genes.tsv")
# Plot.tracks(
#     Coverage=coverage,
#     Reads=reads,
#     Gene_models=Plot.autoplot(Plot.AnnotationData(genes, which=brca1)),
#     xlim=brca1,
#     heights=[150, 300, 80],
# )
# ```
#
# A region with no reads warns with `RangeQueryEmpty` and renders an empty
# track rather than failing.

# %% [markdown]
# ## Saving
#
# Every plot can be written to standalone HTML or a PNG:
#
# ```python
# p.save_html("depth.html")
# p.save_image("depth.png", width=800)
# ```
