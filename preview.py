from dataclasses import dataclass
from typing import Optional

import fundingutils
from fundingutils import FlowRateChange, PoolState, ProtocolBufferParams, RecipientState
from utils import SECONDS_IN_MONTH, flow_rate_from_amount, round_wei_amount


@dataclass(frozen=True)
class DonationPreview:
    new_flow_rate: int
    flow_rate_delta: int
    monthly_matching_delta: int
    buffer_delta: Optional[int]  # None until the governance parameters are loaded


def preview_donation_change(
    pool: PoolState,
    recipient: Optional[RecipientState],
    change: FlowRateChange,
    buffer_params: Optional[ProtocolBufferParams] = None,
) -> DonationPreview:
    """
    Project matching impact and required buffer for a donor's flow rate change.

    ``recipient`` is None when the address is not a member of the matching
    pool; it receives no distribution, so the matching impact is zero.
    """
    flow_rate_delta = 0
    if recipient is not None:
        flow_rate_delta = fundingutils.calc_matching_impact_estimate(pool, recipient, change)
    buffer_delta = None
    if buffer_params is not None:
        buffer_delta = fundingutils.calc_buffer_delta(change, buffer_params)

    return DonationPreview(
        new_flow_rate=change.new_flow_rate,
        flow_rate_delta=flow_rate_delta,
        monthly_matching_delta=flow_rate_delta * SECONDS_IN_MONTH,
        buffer_delta=buffer_delta,
    )


def preview_amount_change(pool, recipient, previous_flow_rate, amount, interval, buffer_params=None):
    """Same as preview_donation_change for an amount typed per time interval (e.g. "10" per "month")."""
    new_flow_rate = flow_rate_from_amount(amount, interval)
    change = FlowRateChange(previous_flow_rate=previous_flow_rate, new_flow_rate=new_flow_rate)
    return preview_donation_change(pool, recipient, change, buffer_params)


def describe_preview(preview: DonationPreview, allocation_token, matching_token, places=4):
    """One-line summary of a preview for display next to the donation form."""
    monthly_stream = round_wei_amount(preview.new_flow_rate * SECONDS_IN_MONTH, places)
    matching = round_wei_amount(abs(preview.monthly_matching_delta), places)

    if preview.monthly_matching_delta == 0:
        summary = f"Your {monthly_stream} {allocation_token}/mo stream will not change this grantee's matching"
    else:
        direction = "decrease" if preview.monthly_matching_delta < 0 else "increase"
        summary = (
            f"Your {monthly_stream} {allocation_token}/mo stream will {direction} "
            f"this grantee's matching by {matching} {matching_token}/mo"
        )
    if preview.buffer_delta is None:
        return f"{summary}; buffer requirement still loading"
    return f"{summary} and requires an additional {round_wei_amount(preview.buffer_delta, places)} {allocation_token} buffer"
