"""Minimal ABIs for the Euler contracts the allocator reads."""

from typing import Dict, List, Sequence, Tuple


def _view(name: str, inputs: Sequence[Tuple[str, str]], outputs: Sequence[Tuple[str, str]]) -> Dict:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": [{"name": arg, "type": kind} for arg, kind in inputs],
        "outputs": [{"name": arg, "type": kind} for arg, kind in outputs],
    }


ERC20_ABI: List[Dict] = [
    _view("decimals", [], [("", "uint8")]),
    _view("symbol", [], [("", "string")]),
]

# Euler Vault Kit credit vault
EVK_ABI: List[Dict] = [
    _view("asset", [], [("", "address")]),
    _view("symbol", [], [("", "string")]),
    _view("balanceOf", [("account", "address")], [("", "uint256")]),
    _view("previewRedeem", [("shares", "uint256")], [("", "uint256")]),
    _view("maxWithdraw", [("owner", "address")], [("", "uint256")]),
    _view("totalSupply", [], [("", "uint256")]),
    _view("cash", [], [("", "uint256")]),
    _view("totalBorrows", [], [("", "uint256")]),
    _view("interestFee", [], [("", "uint16")]),
    _view("interestRateModel", [], [("", "address")]),
    _view("caps", [], [("supplyCap", "uint16"), ("borrowCap", "uint16")]),
]

EULER_EARN_ABI: List[Dict] = [
    _view("asset", [], [("", "address")]),
    _view("withdrawQueueLength", [], [("", "uint256")]),
    _view("withdrawQueue", [("index", "uint256")], [("", "address")]),
    _view(
        "config",
        [("strategy", "address")],
        [("balance", "uint112"), ("cap", "uint136"), ("enabled", "bool"), ("removableAt", "uint64")],
    ),
]

IRM_LINEAR_KINK_ABI: List[Dict] = [
    _view("baseRate", [], [("", "uint256")]),
    _view("slope1", [], [("", "uint256")]),
    _view("slope2", [], [("", "uint256")]),
    _view("kink", [], [("", "uint256")]),
]

IRM_ADAPTIVE_CURVE_ABI: List[Dict] = [
    _view("TARGET_UTILIZATION", [], [("", "int256")]),
    _view("INITIAL_RATE_AT_TARGET", [], [("", "int256")]),
    _view("MIN_RATE_AT_TARGET", [], [("", "int256")]),
    _view("MAX_RATE_AT_TARGET", [], [("", "int256")]),
    _view("CURVE_STEEPNESS", [], [("", "int256")]),
    _view("ADJUSTMENT_SPEED", [], [("", "int256")]),
    _view("irState", [("vault", "address")], [("rateAtTarget", "uint144"), ("lastUpdate", "uint64")]),
]
