import pytest
import streamlit as st
from hypothesis import given
from hypothesis import strategies as hst

import utils
from utils import (
    SECONDS_IN_MONTH,
    flow_rate_from_amount,
    format_number_with_commas,
    from_time_units_to_seconds,
    get_subgraph_url,
    int_div,
    parse_ether,
    round_wei_amount,
    sqrt_bigint,
)


@pytest.mark.parametrize(
    "s, expected",
    [(0, 0), (1, 1), (2, 1), (3, 1), (4, 2), (24, 4), (25, 5), (26, 5), (10 ** 40, 10 ** 20)],
)
def test_sqrt_bigint_known_values(s, expected):
    assert sqrt_bigint(s) == expected


def test_sqrt_bigint_beyond_float_precision():
    n = (10 ** 20 + 1) ** 2 - 1
    assert sqrt_bigint(n) == 10 ** 20
    assert sqrt_bigint(n + 1) == 10 ** 20 + 1


@given(hst.integers(min_value=0, max_value=2 ** 512))
def test_sqrt_bigint_is_floor_root(s):
    r = sqrt_bigint(s)
    assert r * r <= s < (r + 1) * (r + 1)


@pytest.mark.parametrize(
    "a, b, expected",
    [(7, 2, 3), (-7, 2, -3), (7, -2, -3), (-7, -2, 3), (0, -5, 0), (-6, 3, -2)],
)
def test_int_div_truncates_toward_zero(a, b, expected):
    assert int_div(a, b) == expected


def test_time_intervals():
    assert from_time_units_to_seconds(1, "day") == 86400
    assert from_time_units_to_seconds(2, "week") == 1209600
    assert from_time_units_to_seconds(1, "month") == SECONDS_IN_MONTH
    assert from_time_units_to_seconds(1, "year") == 12 * SECONDS_IN_MONTH

    with pytest.raises(ValueError):
        from_time_units_to_seconds(1, "fortnight")


def test_parse_ether():
    assert parse_ether("1") == 10 ** 18
    assert parse_ether(2) == 2 * 10 ** 18
    assert parse_ether("1,000.5") == 1000500000000000000000
    assert parse_ether("0.000000000000000001") == 1
    # rounds half up past 18 decimals
    assert parse_ether("0.0000000000000000015") == 2
    assert parse_ether("0.0000000000000000014") == 1


@pytest.mark.parametrize("amount", ["", "abc", "1.2.3", "nan", "inf"])
def test_parse_ether_rejects_garbage(amount):
    with pytest.raises(ValueError):
        parse_ether(amount)


def test_flow_rate_from_amount():
    assert flow_rate_from_amount("2628", "month") == 10 ** 15
    # 1 token a day does not divide evenly; remainder is dropped
    assert flow_rate_from_amount("1", "day") == 10 ** 18 // 86400


def test_format_number_with_commas():
    assert format_number_with_commas("1234567") == "1,234,567"
    assert format_number_with_commas("1234567.891") == "1,234,567.891"
    assert format_number_with_commas("-1000") == "-1,000"
    assert format_number_with_commas("999") == "999"


def test_round_wei_amount():
    assert round_wei_amount(36 * 10 ** 17) == "3.6000"
    assert round_wei_amount(1234567 * 10 ** 18, 2) == "1,234,567.00"
    assert round_wei_amount(-5 * 10 ** 17, 1) == "-0.5"
    assert round_wei_amount(1) == "0.0000"
    assert round_wei_amount(-1) == "0.0000"


def test_get_subgraph_url_defaults():
    assert get_subgraph_url(8453) == utils.SUPERFLUID_SUBGRAPHS[8453]

    with pytest.raises(ValueError):
        get_subgraph_url(1)


def test_get_subgraph_url_secrets_override(monkeypatch):
    monkeypatch.setattr(st, "secrets", {"superfluid_subgraphs": {"8453": "https://example.test/base"}})

    assert get_subgraph_url(8453) == "https://example.test/base"
    assert get_subgraph_url(42220) == utils.SUPERFLUID_SUBGRAPHS[42220]
