import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext

import streamlit as st
from streamlit.errors import StreamlitAPIException

WEI_DECIMALS = 18
DECIMAL_PRECISION = 100 # enough digits for uint256 wei amounts
SECONDS_IN_MONTH = 2628000

TIME_INTERVAL_SECONDS = {
    "day": 86400,
    "week": 604800,
    "month": SECONDS_IN_MONTH,
    "year": SECONDS_IN_MONTH * 12,
}

SUPERFLUID_SUBGRAPHS = {
    8453: "https://subgraph-endpoints.superfluid.dev/base-mainnet/protocol-v1",
    11155420: "https://subgraph-endpoints.superfluid.dev/optimism-sepolia/protocol-v1",
    10: "https://subgraph-endpoints.superfluid.dev/optimism-mainnet/protocol-v1",
    42161: "https://subgraph-endpoints.superfluid.dev/arbitrum-one/protocol-v1",
    42220: "https://subgraph-endpoints.superfluid.dev/celo-mainnet/protocol-v1",
}


def int_div(a, b):
    """Integer division truncating toward zero, matching on-chain bigint arithmetic."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def sqrt_bigint(s):
    """
    Return the largest integer ``x`` such that ``x**2 <= s``.

    Newton's method on integers only, so precision holds for values far beyond
    64 bits. ``s`` must be non-negative.
    """
    if s <= 1:
        return s
    x0 = s // 2
    x1 = (x0 + s // x0) // 2
    while x1 < x0:
        x0 = x1
        x1 = (x0 + s // x0) // 2
    return x0


def get_subgraph_url(chain_id):
    """Resolve the Superfluid subgraph endpoint for a chain, preferring a secrets override."""
    try:
        overrides = st.secrets["superfluid_subgraphs"]
    except (KeyError, FileNotFoundError, StreamlitAPIException):
        overrides = {}

    url = overrides.get(str(chain_id)) or SUPERFLUID_SUBGRAPHS.get(chain_id)
    if url is None:
        raise ValueError(f"Superfluid subgraph for chain ID {chain_id} is not supported.")
    return url


def from_time_units_to_seconds(units, interval):
    """Convert a number of time units (days, weeks, months, years) to seconds."""
    if interval not in TIME_INTERVAL_SECONDS:
        raise ValueError(f"Unknown time interval '{interval}', expected one of {list(TIME_INTERVAL_SECONDS)}")
    return units * TIME_INTERVAL_SECONDS[interval]


def parse_ether(amount):
    """Parse a human readable token amount (e.g. "1,000.5") into wei."""
    cleaned = str(amount).replace(",", "").strip()
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        try:
            value = Decimal(cleaned)
            if not value.is_finite():
                raise InvalidOperation
            wei = (value * 10 ** WEI_DECIMALS).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise ValueError(f"Invalid token amount: {amount!r}")
    return int(wei)


def flow_rate_from_amount(amount, interval):
    """Per-second flow rate in wei for streaming ``amount`` tokens every ``interval``."""
    return int_div(parse_ether(amount), from_time_units_to_seconds(1, interval))


def format_number_with_commas(value):
    """Insert thousands separators in the integer part of a numeric string."""
    text = str(value)
    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]
    integer, dot, fraction = text.partition(".")
    integer = re.sub(r"\B(?=(\d{3})+(?!\d))", ",", integer)
    return f"{sign}{integer}{dot}{fraction}"


def round_wei_amount(amount, places=4):
    """Format a wei amount as a token amount rounded to ``places`` decimals."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        value = Decimal(int(amount)) / Decimal(10 ** WEI_DECIMALS)
        rounded = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)
    return format_number_with_commas(f"{rounded:f}")
