from services.workers.chart.core.types import ColumnMeta
from services.workers.chart.nodes.suggest import suggest_charts


def _meta(*pairs):
    return [ColumnMeta(name=name, kind=kind) for name, kind in pairs]


def test_date_and_number_yield_only_line():
    suggestions = suggest_charts(_meta(("day", "date"), ("sales", "number")))
    assert [s.chart_kind for s in suggestions] == ["line"]
    line = suggestions[0]
    assert line.x == "day"
    assert line.y == ("sales",)
    assert line.aggregation == "none"
    assert line.label == "Line: sales over day"


def test_two_numbers_and_string():
    suggestions = suggest_charts(_meta(("price", "number"), ("qty", "number"), ("shop", "string")))
    assert [s.chart_kind for s in suggestions] == ["bar", "scatter", "pie"]

    bar, scatter, pie = suggestions
    assert (bar.x, bar.y, bar.aggregation) == ("shop", ("price",), "avg")
    assert (scatter.x, scatter.y, scatter.aggregation) == ("price", ("qty",), "none")
    assert (pie.x, pie.y, pie.aggregation) == ("shop", ("price",), "sum")
    assert scatter.label == "Scatter: price vs qty"
    assert pie.label == "Pie: price by shop"


def test_sample_dataset_order():
    meta = _meta(("date", "date"), ("product", "string"), ("region", "string"), ("sales", "number"))
    suggestions = suggest_charts(meta)
    assert [s.chart_kind for s in suggestions] == ["line", "bar", "pie"]
    assert suggestions[1].x == "product"


def test_no_rule_matches():
    assert suggest_charts([]) == []
    assert suggest_charts(_meta(("only", "number"))) == []
    assert suggest_charts(_meta(("a", "string"), ("b", "string"), ("c", "date"))) == []


def test_suggestion_converts_to_config():
    suggestion = suggest_charts(_meta(("shop", "string"), ("price", "number")))[0]
    config = suggestion.to_config()
    assert config.chart_kind == "bar"
    assert config.x == "shop"
    assert config.y == ["price"]
    assert config.aggregation == "avg"
