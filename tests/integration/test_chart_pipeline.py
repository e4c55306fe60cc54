import pytest

from services.workers.chart import run_pipeline
from services.workers.chart.app import lambda_handler
from services.workers.chart.core.codec import decode_state, encode_state
from services.workers.chart.core.types import ChartConfig


PHASES_EXPECTED = ["infer", "suggest", "plan", "share"]


def test_pipeline_runs_every_phase(sales_rows):
    snapshot = run_pipeline(sales_rows, auto_pick=True)

    assert list(snapshot.phases.keys()) == PHASES_EXPECTED
    assert snapshot.phases["infer"]["rows"] == 8
    assert snapshot.phases["suggest"]["autoPicked"] == "Line: sales over date"
    assert snapshot.phases["plan"]["chartKind"] == "line"
    assert snapshot.phases["share"]["published"] is True

    decoded = decode_state(snapshot.token)
    assert decoded.rows == sales_rows
    assert decoded.config == snapshot.config


def test_pipeline_keeps_explicit_config(sales_rows):
    config = ChartConfig(chart_kind="pie", x="product", y=["sales"], aggregation="none")
    snapshot = run_pipeline(sales_rows, config)
    assert snapshot.config == config
    assert snapshot.plan.labels == ["A", "B", "C"]


def test_pipeline_stops_after_suggestions_for_empty_dataset():
    snapshot = run_pipeline([], previous_token="older")
    assert list(snapshot.phases.keys()) == ["infer", "suggest"]
    assert snapshot.plan is None
    assert snapshot.token == "older"


def test_lambda_render_and_restore(sales_rows):
    rendered = lambda_handler({"action": "render", "rows": sales_rows, "settings": {"type": "bar", "x": "region", "y": ["sales"], "agg": "sum"}}, None)
    assert rendered["plan"]["labels"] == ["North", "South", "West"]
    assert rendered["plan"]["datasets"][0]["data"] == [330, 280, 225]

    restored = lambda_handler({"action": "restore", "token": rendered["token"]}, None)
    assert restored["restored"] is True
    assert restored["rows"] == sales_rows
    assert restored["config"]["aggregation"] == "sum"

    token = encode_state(sales_rows, ChartConfig(chart_kind="scatter", x="sales", y=["sales"]))
    assert lambda_handler({"action": "restore", "token": token}, None)["plan"]["chartKind"] == "scatter"


def test_lambda_restore_keeps_auto_picked_x(sales_rows):
    rows = [{"product": row["product"], "date": row["date"], "sales": row["sales"]} for row in sales_rows]
    token = encode_state(rows, ChartConfig(chart_kind="bar", x="", y=["sales"], aggregation="sum"))
    restored = lambda_handler({"action": "restore", "token": token}, None)
    assert restored["restored"] is True
    assert restored["config"]["x"] == "date"
    assert restored["config"]["aggregation"] == "sum"


def test_lambda_errors():
    assert lambda_handler({"action": "restore", "token": "junk"}, None) == {"restored": False}
    with pytest.raises(ValueError):
        lambda_handler({}, None)
    with pytest.raises(ValueError):
        lambda_handler({"action": "render", "rows": "nope"}, None)
    with pytest.raises(ValueError):
        lambda_handler({"action": "explode"}, None)
