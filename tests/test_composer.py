"""Unit tests for request composition: method detection, FORMAT injection, URL params."""

from __future__ import annotations

import pytest

from ch_http.db.composer import (
    QueryRequest,
    build_url_params,
    compose,
    compose_insert,
    detect_method,
    existing_format,
    has_format_clause,
    has_inline_values,
    serialize_rows,
)
from ch_http.db.config import ClickHouseConfig


@pytest.mark.parametrize(
    "sql",
    [
        "INSERT INTO t VALUES (1)",
        "CREATE TABLE t (id Int32) ENGINE = Memory",
        "  update t set x = 1",
        "\n\tDelete FROM t WHERE 1",
        "DROP TABLE IF EXISTS t",
        "alter table t add column y Int32",
        "TRUNCATE TABLE t",
    ],
)
def test_write_statements_use_post(sql):
    assert detect_method(sql) == "POST"


@pytest.mark.parametrize("sql", ["SELECT 1", "  show tables", "DESCRIBE TABLE t", "WITH x AS (SELECT 1) SELECT * FROM x"])
def test_read_statements_use_get(sql):
    assert detect_method(sql) == "GET"


@pytest.mark.parametrize(
    "sql,expected",
    [
        ("SELECT 1 FORMAT TabSeparated", True),
        ("select 1 format json", True),
        ("SELECT 1", False),
        ("SELECT format", False),
    ],
)
def test_has_format_clause(sql, expected):
    assert has_format_clause(sql) is expected


@pytest.mark.parametrize(
    "sql,expected",
    [
        ("INSERT INTO t VALUES (1)", True),
        ("insert into db.t values (1), (2)", True),
        ("INSERT INTO t (id, name) VALUES (1, 'a')", True),
        ("INSERT INTO t VALUES(1)", True),
        ("SELECT * FROM t WHERE x IN (SELECT 1) AND VALUES(1)", True),
        ("INSERT INTO t SELECT * FROM s", False),
        ("SELECT 1", False),
    ],
)
def test_has_inline_values(sql, expected):
    assert has_inline_values(sql) is expected


def test_select_gets_default_format_and_get_method():
    req = compose("SELECT 1", None, ClickHouseConfig())
    assert req.method == "GET"
    assert req.sql == "SELECT 1 FORMAT JSONEachRow"
    assert req.format_applied is True
    assert req.format == "JSONEachRow"
    assert req.body is None


def test_existing_format_clause_is_not_duplicated():
    req = compose("SELECT 1 FORMAT TabSeparated", None, ClickHouseConfig(format="JSON"))
    assert req.sql == "SELECT 1 FORMAT TabSeparated"
    assert req.format_applied is False


def test_inline_values_suppress_format_clause():
    req = compose("INSERT INTO t VALUES (1)", None, ClickHouseConfig(format="JSON"))
    assert req.sql == "INSERT INTO t VALUES (1)"
    assert req.format_applied is False
    assert req.method == "POST"
    assert req.body == b""


def test_no_configured_format_means_no_clause():
    req = compose("SELECT 1", None, ClickHouseConfig(format=None))
    assert req.sql == "SELECT 1"
    assert req.format_applied is False
    assert req.format is None


def test_per_call_format_overrides_default():
    req = compose("SELECT 1", {"format": "TabSeparated"}, ClickHouseConfig(format="JSON"))
    assert req.sql == "SELECT 1 FORMAT TabSeparated"
    assert req.format == "TabSeparated"


def test_explicit_method_overrides_detection():
    req = compose("SELECT 1", {"method": "post"}, ClickHouseConfig())
    assert req.method == "POST"
    assert req.body == b""


def test_reserved_keys_never_forwarded():
    req = compose("SELECT 1", {"format": "JSON", "method": "GET", "max_result_rows": 10}, ClickHouseConfig())
    keys = [k for k, _ in req.url_params]
    assert keys == ["query", "max_result_rows"]
    assert dict(req.url_params)["max_result_rows"] == "10"


def test_query_request_splits_reserved_keys():
    req = QueryRequest.from_params("SELECT 1", {"format": "JSON", "method": "POST", "a": 1})
    assert req.format == "JSON"
    assert req.method == "POST"
    assert req.settings == {"a": 1}


def test_build_url_params_sorted_and_coerced():
    params = build_url_params("SELECT 1", {"z": 1, "a": True, "m": 1.5}, sorted_params=True)
    assert params == [("query", "SELECT 1"), ("a", "true"), ("m", "1.5"), ("z", "1")]


def test_sorted_params_option_from_config():
    req = compose("SELECT 1", {"b": 2, "a": 1}, ClickHouseConfig(sorted_params=True))
    assert req.query_string == "query=SELECT+1+FORMAT+JSONEachRow&a=1&b=2"


def test_url_is_percent_encoded():
    req = compose("SELECT 'a&b=c'", {"x y": "1/2"}, ClickHouseConfig(format=None))
    assert req.url("http://localhost:8123/") == (
        "http://localhost:8123/?query=SELECT+%27a%26b%3Dc%27&x+y=1%2F2"
    )


def test_legacy_mode_always_get_and_ignores_values_guard():
    cfg = ClickHouseConfig(legacy_compose=True)
    req = compose("INSERT INTO t VALUES (1)", None, cfg)
    assert req.method == "GET"
    assert req.sql == "INSERT INTO t VALUES (1) FORMAT JSONEachRow"
    assert req.format_applied is True


def test_legacy_mode_still_respects_existing_format():
    req = compose("SELECT 1 FORMAT CSV", None, ClickHouseConfig(legacy_compose=True))
    assert req.sql == "SELECT 1 FORMAT CSV"
    assert req.format_applied is False


def test_compose_insert_json_each_row():
    req = compose_insert("t", [{"id": 1}])
    assert req.method == "POST"
    assert req.query_string == "query=INSERT+INTO+t+FORMAT+JSONEachRow"
    assert req.body == b'{"id":1}'


def test_compose_insert_ignores_extra_params():
    req = compose_insert("t", [{"id": 1}], {"format": "JSON", "max_insert_block_size": 10})
    assert req.url_params == [("query", "INSERT INTO t FORMAT JSON")]
    assert req.body == b'{"data":[{"id":1}]}'


def test_serialize_rows_multiple_lines():
    body = serialize_rows([{"id": 1, "name": "a"}, {"id": 2, "name": "é"}], "JSONEachRow")
    assert body == '{"id":1,"name":"a"}\n{"id":2,"name":"é"}'


def test_serialize_rows_unknown_format_degrades_to_str():
    rows = [{"id": 1}]
    assert serialize_rows(rows, "CSV") == str(rows)


def test_empty_format_param_disables_clause():
    req = compose("SELECT 1", {"format": ""}, ClickHouseConfig())
    assert req.sql == "SELECT 1"
    assert req.format_applied is False
    assert req.decode_format is None


def test_none_format_param_uses_default():
    req = compose("SELECT 1", {"format": None}, ClickHouseConfig())
    assert req.sql == "SELECT 1 FORMAT JSONEachRow"


@pytest.mark.parametrize(
    "sql,expected",
    [
        ("SELECT * FROM t FORMAT JSONEachRow", "JSONEachRow"),
        ("select * from t format jsoneachrow", "JSONEachRow"),
        ("SELECT 1 Format Json", "JSON"),
        ("SELECT 1 FORMAT TabSeparated", "TabSeparated"),
        ("SELECT 1", None),
    ],
)
def test_existing_format(sql, expected):
    assert existing_format(sql) == expected


def test_decode_format_follows_existing_clause():
    req = compose("SELECT * FROM t FORMAT JSONEachRow", None, ClickHouseConfig(format="JSON"))
    assert req.format_applied is False
    assert req.decode_format == "JSONEachRow"


def test_decode_format_absent_when_values_guard_fires():
    req = compose("INSERT INTO t VALUES (1)", None, ClickHouseConfig())
    assert req.decode_format is None


@pytest.mark.parametrize(
    "sql",
    [
        "INSERT INTO `my-db`.t VALUES (1)",
        'INSERT INTO "my table" VALUES (1)',
        "INSERT INTO `db`.`weird name` (a, b) VALUES (1, 2)",
    ],
)
def test_inline_values_with_quoted_identifiers(sql):
    assert has_inline_values(sql) is True
    req = compose(sql, None, ClickHouseConfig())
    assert "FORMAT" not in req.sql
