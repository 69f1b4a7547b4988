from __future__ import annotations

MINICHEF_V2_ABI = [
    {
        "type": "function",
        "stateMutability": "view",
        "name": "SUSHI",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "lpToken",
        "inputs": [{"name": "", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "rewarder",
        "inputs": [{"name": "", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "pendingSushi",
        "inputs": [
            {"name": "_pid", "type": "uint256"},
            {"name": "_user", "type": "address"},
        ],
        "outputs": [{"name": "pending", "type": "uint256"}],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "userInfo",
        "inputs": [
            {"name": "", "type": "uint256"},
            {"name": "", "type": "address"},
        ],
        "outputs": [
            {"name": "amount", "type": "uint256"},
            {"name": "rewardDebt", "type": "int256"},
        ],
    },
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "harvest",
        "inputs": [
            {"name": "pid", "type": "uint256"},
            {"name": "to", "type": "address"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "stateMutability": "nonpayable",
        "name": "deposit",
        "inputs": [
            {"name": "pid", "type": "uint256"},
            {"name": "amount", "type": "uint256"},
            {"name": "to", "type": "address"},
        ],
        "outputs": [],
    },
]

# Secondary-reward rewarder attached to a MiniChef pool (OHM rewarder).
REWARDER_ABI = [
    {
        "type": "function",
        "stateMutability": "view",
        "name": "rewardToken",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "stateMutability": "view",
        "name": "pendingToken",
        "inputs": [
            {"name": "_pid", "type": "uint256"},
            {"name": "_user", "type": "address"},
        ],
        "outputs": [{"name": "pending", "type": "uint256"}],
    },
]
