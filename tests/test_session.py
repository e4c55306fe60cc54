import pytest

from services.workers.chart import (
    ChangeConfig,
    ChartSession,
    LoadDataset,
    RequestShare,
    RestoreFromToken,
)
from services.workers.chart.core.codec import decode_state


def test_load_dataset_auto_picks_first_suggestion(sales_rows):
    session = ChartSession()
    snapshot = session.dispatch(LoadDataset(sales_rows))

    assert session.columns == ["date", "product", "region", "sales"]
    assert [s.chart_kind for s in snapshot.suggestions] == ["line", "bar", "pie"]
    assert session.config.chart_kind == "line"
    assert session.config.x == "date"
    assert session.config.y == ["sales"]
    assert snapshot.plan.chart_kind == "line"
    assert snapshot.plan.labels == [row["date"] for row in sales_rows]
    assert session.token is not None


def test_load_without_suggestions_defaults_x_to_first_column():
    rows = [{"name": "a", "note": "x"}, {"name": "b", "note": "y"}]
    session = ChartSession()
    snapshot = session.load_dataset(rows)
    assert snapshot.suggestions == []
    assert session.config.x == "name"
    assert session.config.chart_kind == "auto"
    assert snapshot.plan.chart_kind == "bar"


def test_empty_dataset_has_no_plan_or_token():
    session = ChartSession()
    snapshot = session.load_dataset([])
    assert snapshot.column_meta == []
    assert snapshot.suggestions == []
    assert snapshot.plan is None
    assert session.token is None
    assert "plan" not in snapshot.phases


def test_change_config_recomputes_plan_and_token(sales_rows):
    session = ChartSession()
    session.load_dataset(sales_rows)
    first_token = session.token

    snapshot = session.dispatch(ChangeConfig(chart_kind="bar", x="region", aggregation="avg"))
    assert snapshot.plan.labels == ["North", "South", "West"]
    assert session.token != first_token
    decoded = decode_state(session.token)
    assert decoded.config == session.config


def test_change_config_rejects_unknown_values(sales_rows):
    session = ChartSession()
    session.load_dataset(sales_rows)
    with pytest.raises(ValueError):
        session.change_config(chart_kind="donut")
    with pytest.raises(ValueError):
        session.change_config(aggregation="max")


def test_overflow_keeps_previous_token(sales_rows):
    session = ChartSession()
    session.load_dataset(sales_rows)
    token = session.token

    session.max_token_length = 10
    snapshot = session.change_config(chart_kind="pie", x="region")
    assert session.token == token
    assert snapshot.phases["share"]["published"] is False
    assert session.dispatch(RequestShare()) == token


def test_request_share_returns_current_token(sales_rows):
    session = ChartSession()
    assert session.request_share() is None
    session.load_dataset(sales_rows)
    assert session.request_share() == session.token


def test_restore_round_trip(sales_rows):
    source = ChartSession()
    source.load_dataset(sales_rows)
    source.change_config(chart_kind="bar", x="region", y=["sales"], aggregation="avg")

    target = ChartSession()
    assert target.dispatch(RestoreFromToken(source.token)) is True
    assert target.rows == sales_rows
    assert target.config == source.config
    assert target.snapshot.plan == source.snapshot.plan


def test_restore_keeps_auto_picked_x_when_settings_have_none(sales_rows):
    from services.workers.chart.core.codec import encode_state
    from services.workers.chart.core.types import ChartConfig

    token = encode_state(sales_rows, ChartConfig(chart_kind="bar", x="", y=["sales"], aggregation="sum"))
    session = ChartSession()
    assert session.restore_from_token(token)
    assert session.config.x == "date"
    assert session.config.aggregation == "sum"


def test_bad_token_leaves_state_unchanged(sales_rows):
    session = ChartSession()
    session.load_dataset(sales_rows)
    before = (list(session.rows), session.config, session.token, session.snapshot)

    assert session.restore_from_token("garbage!!") is False
    assert (session.rows, session.config, session.token, session.snapshot) == before


def test_phase_callback_receives_every_phase(sales_rows):
    seen = []
    session = ChartSession(on_phase=lambda phase, payload, index, total: seen.append((phase, index, total)))
    session.load_dataset(sales_rows)
    assert seen == [("infer", 0, 4), ("suggest", 1, 4), ("plan", 2, 4), ("share", 3, 4)]


def test_unknown_command_is_rejected():
    with pytest.raises(TypeError):
        ChartSession().dispatch(object())


def test_deeply_nested_token_leaves_state_unchanged(sales_rows):
    import base64
    import zlib

    raw = b'{"rows":' + b"[" * 200000 + b"]" * 200000 + b"}"
    token = base64.urlsafe_b64encode(zlib.compress(raw, 9)).decode("ascii").rstrip("=")

    session = ChartSession()
    session.load_dataset(sales_rows)
    before = (list(session.rows), session.config, session.token, session.snapshot)

    assert session.restore_from_token(token) is False
    assert (session.rows, session.config, session.token, session.snapshot) == before
