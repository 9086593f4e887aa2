"""DarkPool contract ABI: the subset this client calls."""
from typing import Any


def _fn(
    name: str,
    inputs: list[tuple[str, str]],
    outputs: list[tuple[str, str]],
    mutability: str,
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
        "stateMutability": mutability,
    }


DARK_POOL_ABI: list[dict[str, Any]] = [
    _fn("commitOrder", [("commitment", "bytes32")], [], "payable"),
    _fn(
        "revealOrder",
        [
            ("a", "uint256[2]"),
            ("b", "uint256[2][2]"),
            ("c", "uint256[2]"),
            ("publicInputs", "uint256[2]"),
            ("tokenAddress", "address"),
            ("tokenId", "uint256"),
            ("orderType", "uint8"),
            ("side", "uint8"),
            ("amount", "uint256"),
            ("price", "uint256"),
            ("minFillAmount", "uint256"),
            ("expiry", "uint256"),
        ],
        [("orderHash", "bytes32")],
        "nonpayable",
    ),
    _fn("cancelCommitment", [("commitment", "bytes32")], [], "nonpayable"),
    _fn(
        "getCommitmentDetails",
        [("commitment", "bytes32")],
        [
            ("exists", "bool"),
            ("timestamp", "uint256"),
            ("trader", "address"),
            ("escrowAmount", "uint256"),
            ("revealed", "bool"),
        ],
        "view",
    ),
    _fn(
        "getOrder",
        [("orderHash", "bytes32")],
        [
            ("trader", "address"),
            ("tokenAddress", "address"),
            ("tokenId", "uint256"),
            ("orderType", "uint8"),
            ("side", "uint8"),
            ("amount", "uint256"),
            ("price", "uint256"),
            ("filledAmount", "uint256"),
            ("minFillAmount", "uint256"),
            ("expiry", "uint256"),
            ("status", "uint8"),
            ("isPublic", "bool"),
            ("timestamp", "uint256"),
        ],
        "view",
    ),
    _fn("getUserOrders", [("user", "address")], [("", "bytes32[]")], "view"),
    _fn(
        "getStatistics",
        [("tokenAddress", "address"), ("tokenId", "uint256")],
        [("totalVolume", "uint256"), ("totalTrades", "uint256"), ("lastPrice", "uint256")],
        "view",
    ),
    _fn("getActiveOrdersCount", [], [("", "uint256")], "view"),
]
