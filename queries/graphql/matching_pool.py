import streamlit as st
import pandas as pd
import requests

from utils import get_subgraph_url

# Cache TTL values
ttl_short = 900  # 15 minutes

@st.cache_resource(ttl=ttl_short)
def get_matching_pool_graphql(chain_id, pool_id, limit=1000):
    """
    Fetch a matching pool and its members from the Superfluid protocol subgraph.

    Parameters:
    -----------
    chain_id : int
        The chain ID the pool is deployed on
    pool_id : str
        Address of the distribution pool
    limit : int, optional
        Maximum number of pool members to return (default: 1000)

    Returns:
    --------
    pandas.DataFrame
        One row per member (account, units) with the pool totals
        (flow_rate, adjustment_flow_rate, total_units) repeated on every row.
        Empty if the pool could not be fetched.
    """
    # GraphQL query
    query = """
    query GetMatchingPool($poolId: ID!, $limit: Int!) {
        pool(id: $poolId) {
            id
            flowRate
            adjustmentFlowRate
            totalUnits
            poolMembers(first: $limit) {
                account {
                    id
                }
                units
            }
        }
    }
    """

    variables = {
        "poolId": pool_id.lower(),
        "limit": limit,
    }

    try:
        response = requests.post(
            get_subgraph_url(chain_id),
            json={"query": query, "variables": variables},
            headers={"Content-Type": "application/json"}
        )
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        st.error(f"Error fetching matching pool from subgraph: {e}")
        return pd.DataFrame()

    pool = (data.get("data") or {}).get("pool")
    if not pool:
        st.warning(f"Matching pool {pool_id} not found on chain {chain_id}")
        return pd.DataFrame()

    pool_totals = {
        "flow_rate": int(pool.get("flowRate") or 0),
        "adjustment_flow_rate": int(pool.get("adjustmentFlowRate") or 0),
        "total_units": int(pool.get("totalUnits") or 0),
    }

    processed_data = []
    for member in pool.get("poolMembers") or []:
        member_dict = {
            "account": (member.get("account") or {}).get("id", "").lower(),
            "units": int(member.get("units") or 0),
        }
        member_dict.update(pool_totals)
        processed_data.append(member_dict)

    if not processed_data:
        # keep the pool totals even when nobody holds units yet
        processed_data.append({"account": None, "units": 0, **pool_totals})

    return pd.DataFrame(processed_data)
