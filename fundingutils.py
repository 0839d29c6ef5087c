from dataclasses import dataclass
from typing import Optional

from utils import int_div, sqrt_bigint

# Scaling calibrated to 18-decimal tokens; must match the deployed computation.
FLOW_RATE_SCALING = 10 ** 6
UNITS_SCALING = 10 ** 5

PORTION_DENOMINATOR = 1000
LIQUIDATION_PERIOD_SHIFT = 32
LIQUIDATION_PERIOD_MASK = 0xFFFFFFFF


@dataclass(frozen=True)
class PoolState:
    total_flow_rate: int
    total_units: int


@dataclass(frozen=True)
class RecipientState:
    grantee_units: int
    grantee_flow_rate: int


@dataclass(frozen=True)
class FlowRateChange:
    previous_flow_rate: int
    new_flow_rate: int


@dataclass(frozen=True)
class ProtocolBufferParams:
    minimum_deposit: int
    liquidation_period: int  # seconds
    side_recipient_portion: int  # per-mille routed to the side recipient
    total_inflow_rate: int


def calc_new_grantee_units(grantee_units, previous_flow_rate, new_flow_rate):
    """
    Recompute a grantee's pool units after one donor changes their flow rate.

    The donor's old square-root contribution is removed from the square root of
    the grantee's units and the new one added; other donors stay embedded in
    ``grantee_units``. Units are scaled by ``UNITS_SCALING`` before the square
    root so that small values keep distinct roots.
    """
    scaled_previous_flow_rate = int_div(previous_flow_rate, FLOW_RATE_SCALING)
    scaled_new_flow_rate = int_div(new_flow_rate, FLOW_RATE_SCALING)
    new_grantee_units_sqrt = (
        sqrt_bigint(grantee_units * UNITS_SCALING)
        - sqrt_bigint(scaled_previous_flow_rate)
        + sqrt_bigint(scaled_new_flow_rate)
    )
    return int_div(new_grantee_units_sqrt * new_grantee_units_sqrt, UNITS_SCALING)


def calc_matching_impact_estimate(pool: PoolState, recipient: RecipientState, change: FlowRateChange) -> int:
    """
    Estimate how a donor's flow rate change moves a grantee's matched flow rate.

    Returns the signed difference between the grantee's projected and current
    distribution flow rate. An empty resulting pool projects a zero flow rate.
    """
    new_grantee_units = calc_new_grantee_units(
        recipient.grantee_units, change.previous_flow_rate, change.new_flow_rate
    )
    units_delta = new_grantee_units - recipient.grantee_units
    new_pool_units = pool.total_units + units_delta

    if new_pool_units == 0:
        new_grantee_flow_rate = 0
    else:
        new_grantee_flow_rate = int_div(new_grantee_units * pool.total_flow_rate, new_pool_units)

    return new_grantee_flow_rate - recipient.grantee_flow_rate


def buffer_for_rate(rate, liquidation_period, minimum_deposit):
    """Deposit the protocol locks for a single stream of ``rate`` wei per second."""
    if rate <= 0:
        return 0
    return max(rate * liquidation_period, minimum_deposit)


def _split_buffer(total_rate, params):
    main_portion = PORTION_DENOMINATOR - params.side_recipient_portion
    main_rate = int_div(total_rate * main_portion, PORTION_DENOMINATOR)
    side_rate = int_div(total_rate * params.side_recipient_portion, PORTION_DENOMINATOR)
    # each downstream stream carries its own minimum deposit
    return (
        buffer_for_rate(main_rate, params.liquidation_period, params.minimum_deposit)
        + buffer_for_rate(side_rate, params.liquidation_period, params.minimum_deposit)
    )


def calc_buffer_delta(change: FlowRateChange, params: ProtocolBufferParams) -> int:
    """Additional deposit required to move a stream from the previous to the new flow rate."""
    user_delta = change.new_flow_rate - change.previous_flow_rate
    old_total = params.total_inflow_rate
    new_total = old_total + user_delta

    delta = _split_buffer(new_total, params) - _split_buffer(old_total, params)
    return max(delta, 0)


def decode_liquidation_period(ppp_config_value):
    """Extract the liquidation period (seconds) from the packed PPP governance config."""
    if not ppp_config_value:
        return 0
    return (int(ppp_config_value) >> LIQUIDATION_PERIOD_SHIFT) & LIQUIDATION_PERIOD_MASK


def build_buffer_params(
    splitter_address: Optional[str],
    minimum_deposit: Optional[int],
    ppp_config_value: Optional[int],
    side_recipient_portion: Optional[int],
    total_inflow_rate,
) -> Optional[ProtocolBufferParams]:
    """
    Assemble buffer parameters from governance reads.

    Returns None while any required read is missing. A zero minimum deposit or
    liquidation period counts as missing; a zero side portion does not.
    """
    liquidation_period = decode_liquidation_period(ppp_config_value)
    if not splitter_address or not minimum_deposit or not liquidation_period or side_recipient_portion is None:
        return None

    side_recipient_portion = int(side_recipient_portion)
    if not 0 <= side_recipient_portion <= PORTION_DENOMINATOR:
        raise ValueError(
            f"Side recipient portion must be between 0 and {PORTION_DENOMINATOR}, got {side_recipient_portion}"
        )

    return ProtocolBufferParams(
        minimum_deposit=int(minimum_deposit),
        liquidation_period=liquidation_period,
        side_recipient_portion=side_recipient_portion,
        total_inflow_rate=int(total_inflow_rate or 0),
    )


def resolve_buffer_delta(change: FlowRateChange, params: Optional[ProtocolBufferParams]) -> int:
    """Buffer delta, or 0 while the governance parameters are not loaded."""
    if params is None:
        return 0
    return calc_buffer_delta(change, params)


def calc_member_flow_rate(member_units, pool_flow_rate, adjustment_flow_rate, total_units):
    """Current distribution flow rate of a pool member, derived from its units."""
    if total_units <= 0:
        return 0
    return int_div(member_units * (pool_flow_rate - adjustment_flow_rate), total_units)


def pool_state_from_members(members_df):
    """Build a PoolState from the frame returned by get_matching_pool_graphql."""
    if members_df.empty:
        raise ValueError("Matching pool data is empty")
    first = members_df.iloc[0]
    return PoolState(total_flow_rate=int(first['flow_rate']), total_units=int(first['total_units']))


def recipient_state_from_members(members_df, recipient_address):
    """Build a RecipientState for one member, or None if the address holds no pool membership."""
    if members_df.empty:
        raise ValueError("Matching pool data is empty")
    first = members_df.iloc[0]
    accounts = members_df['account'].fillna('').str.lower()
    member = members_df[accounts == recipient_address.lower()]
    if len(member) == 0:
        return None
    units = int(member['units'].iloc[0])

    flow_rate = calc_member_flow_rate(
        units,
        int(first['flow_rate']),
        int(first['adjustment_flow_rate']),
        int(first['total_units']),
    )
    return RecipientState(grantee_units=units, grantee_flow_rate=flow_rate)
