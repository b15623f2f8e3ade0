import genoplot.plot as Plot
from genoplot.widget import to_json

variants = Plot.Dataset(
    {
        "Chr": ["1", "2", "1"],
        "Start": [100, 50, 200],
        "DP": [10, 20, 5],
        "Func": ["exonic", "intronic", "exonic"],
    }
)


def marks(p):
    return to_json(p)["args"][0]["marks"]


def options(p):
    return to_json(p)["args"][0]


def test_bar_counts_use_group_transform():
    (mark,) = marks(Plot.ggplot(variants, Plot.aes(x="Func")) + Plot.geom_bar())
    assert mark["path"] == "Plot.barY"
    transform = mark["args"][1]
    assert transform["path"] == "Plot.groupX"
    assert transform["args"][0] == {"y": "count"}
    assert transform["args"][1]["x"] == "Func"
    assert transform["args"][1]["fill"] == "#595959"


def test_position_fill_and_dodge():
    (mark,) = marks(
        Plot.ggplot(variants, Plot.aes(x="Chr", fill="Func")) + Plot.geom_bar(position="fill")
    )
    assert mark["args"][1]["args"][1]["offset"] == "normalize"

    (mark,) = marks(
        Plot.ggplot(variants, Plot.aes(x="Chr", fill="Func")) + Plot.geom_bar(position="dodge")
    )
    grouped = mark["args"][1]["args"][1]
    assert grouped["fx"] == "Chr"
    assert grouped["x"] == "Func"


def test_coord_flip_swaps_axes():
    p = Plot.ggplot(variants, Plot.aes(x="Func")) + Plot.geom_bar() + Plot.coord_flip()
    (mark,) = marks(p)
    assert mark["path"] == "Plot.barX"
    transform = mark["args"][1]
    assert transform["path"] == "Plot.groupY"
    assert transform["args"][0] == {"x": "count"}
    assert transform["args"][1]["y"] == "Func"
    assert options(p)["y"]["domain"] == ["exonic", "intronic"]


def test_histogram_and_density():
    (mark,) = marks(Plot.ggplot(variants, Plot.aes(x="DP")) + Plot.geom_histogram(bins=5))
    assert mark["path"] == "Plot.rectY"
    assert mark["args"][1]["path"] == "Plot.binX"
    assert mark["args"][1]["args"][1]["thresholds"] == 5

    (mark,) = marks(Plot.ggplot(variants, Plot.aes(x="DP")) + Plot.geom_density())
    assert mark["path"] == "Plot.lineY"
    assert mark["args"][1]["args"][0] == {"y": "proportion"}

    (mark,) = marks(Plot.ggplot(variants, Plot.aes(x="DP", fill="Func")) + Plot.geom_density(alpha=0.5))
    assert mark["path"] == "Plot.areaY"
    assert mark["args"][1]["args"][1]["opacity"] == 0.5


def test_box_and_violin():
    (mark,) = marks(Plot.ggplot(variants, Plot.aes(x="Func", y="DP")) + Plot.geom_boxplot())
    assert mark["path"] == "Plot.boxY"
    assert mark["args"][1]["x"] == "Func"

    (mark,) = marks(Plot.ggplot(variants, Plot.aes(x="Func", y="DP")) + Plot.geom_violin())
    assert mark["path"] == "Plot.areaX"
    binned = mark["args"][1]
    assert binned["path"] == "Plot.binY"
    assert binned["args"][0]["x2"] == "count"
    assert binned["args"][0]["x1"]["__type__"] == "js_source"
    assert binned["args"][1]["fx"] == "Func"
    assert "x" not in binned["args"][1]


def test_point_channels_and_constants():
    p = Plot.ggplot(variants, Plot.aes(x="Start", y="DP", color=Plot.const("all"))) + Plot.geom_point(
        size=2, shape=17
    )
    (mark,) = marks(p)
    mark_options = mark["args"][1]
    assert mark_options["fill"] == {"__type__": "js_source", "value": '()=>"all"'}
    assert mark_options["r"] == 3.0
    assert mark_options["symbol"] == "triangle"


def test_reference_lines():
    p = (
        Plot.ggplot(variants, Plot.aes(x="Start", y="DP"))
        + Plot.geom_point()
        + Plot.geom_hline(yintercept=[8, 12], linetype="dashed", color="red")
    )
    _, rule = marks(p)
    assert rule["path"] == "Plot.ruleY"
    assert rule["args"][0] == [8, 12]
    assert rule["args"][1] == {"stroke": "red", "strokeDasharray": "4,4"}


def test_segments_map_to_link_channels():
    reads = Plot.Dataset({"pos": [1, 5], "end": [10, 20], "row": [0, 1]})
    p = Plot.ggplot(reads, Plot.aes(x="pos", xend="end", y="row", yend="row")) + Plot.geom_segment()
    (mark,) = marks(p)
    assert mark["path"] == "Plot.link"
    assert {k: mark["args"][1][k] for k in ("x1", "x2", "y1", "y2")} == {
        "x1": "pos",
        "x2": "end",
        "y1": "row",
        "y2": "row",
    }


def test_plot_options_from_theme_scales_labels():
    p = (
        Plot.ggplot(variants, Plot.aes(x="Start", y="DP", color="Func"))
        + Plot.geom_point()
        + Plot.theme_bw(base_size=14)
        + Plot.theme(axis_text_x_angle=45)
        + Plot.scale_y_log10()
        + Plot.labs(x="Position", color="Function", title="Depth")
    )
    opts = options(p)
    assert opts["style"]["fontSize"] == "14px"
    assert opts["x"]["tickRotate"] == -45
    assert opts["x"]["label"] == "Position"
    assert opts["y"]["type"] == "log"
    assert opts["color"]["label"] == "Function"
    assert opts["color"]["legend"] is True
    assert opts["color"]["domain"] == ["exonic", "intronic"]
    assert opts["title"] == "Depth"
    # theme_bw draws a panel border
    assert opts["marks"][-1]["path"] == "Plot.frame"

    hidden = p + Plot.theme(legend_position="none")
    assert "legend" not in options(hidden)["color"]


def test_categorical_axis_order():
    ordered = variants.reorder("Func", ["intronic", "exonic"])
    p = Plot.ggplot(ordered, Plot.aes(x="Func", y="DP")) + Plot.geom_boxplot()
    assert options(p)["x"]["domain"] == ["intronic", "exonic"]


def test_facet_scales():
    p = Plot.ggplot(variants, Plot.aes(x="Func", y="DP")) + Plot.geom_point()

    def domains(facet, channel):
        panels = to_json(p + facet)["args"][1:]
        return [panel["args"][0].get(channel, {}).get("domain") for panel in panels]

    fixed = Plot.facet_wrap("Chr")
    assert domains(fixed, "x") == [["exonic", "intronic"]] * 2
    assert domains(fixed, "y") == [[5.0, 20.0]] * 2

    free_x = Plot.facet_wrap("Chr", scales="free_x")
    assert domains(free_x, "x") == [["exonic"], ["intronic"]]
    assert domains(free_x, "y") == [[5.0, 20.0]] * 2

    # numeric scales left free fall back to each panel's own extent
    free = Plot.facet_wrap("Chr", scales="free")
    assert domains(free, "x") == [["exonic"], ["intronic"]]
    assert domains(free, "y") == [None, None]
