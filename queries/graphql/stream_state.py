import streamlit as st
import requests

from utils import get_subgraph_url

# Cache TTL values
ttl_short = 900  # 15 minutes

@st.cache_resource(ttl=ttl_short)
def get_stream_state_graphql(chain_id, sender, receiver, token):
    """
    Fetch the donor's current stream to a receiver and the receiver's total inflow.

    Parameters:
    -----------
    chain_id : int
        The chain ID of the token
    sender : str
        Donor address
    receiver : str
        Receiving contract (e.g. the fee splitter in front of a recipient)
    token : str
        Super token address

    Returns:
    --------
    dict or None
        ``flow_rate_to_receiver`` and ``total_inflow_rate`` in wei per second,
        or None if the subgraph could not be reached.
    """
    query = """
    query GetStreamState($sender: String!, $receiver: String!, $token: String!) {
        account(id: $receiver) {
            accountTokenSnapshots(where: {token: $token}) {
                totalInflowRate
            }
        }
        streams(
            where: {
                sender: $sender,
                receiver: $receiver,
                token: $token,
                currentFlowRate_gt: "0"
            }
        ) {
            currentFlowRate
        }
    }
    """

    variables = {
        "sender": sender.lower(),
        "receiver": receiver.lower(),
        "token": token.lower(),
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
        st.error(f"Error fetching stream state from subgraph: {e}")
        return None

    if "data" not in data:
        st.warning("No data returned from the subgraph")
        return None

    account = data["data"].get("account") or {}
    snapshots = account.get("accountTokenSnapshots") or []
    streams = data["data"].get("streams") or []

    return {
        "flow_rate_to_receiver": sum(int(stream["currentFlowRate"]) for stream in streams),
        "total_inflow_rate": int(snapshots[0]["totalInflowRate"]) if snapshots else 0,
    }
