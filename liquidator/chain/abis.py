"""Minimal ABIs for the contracts the agent talks to."""

LIQUIDATOR_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "borrowerToLiquidate", "type": "address"},
            {"internalType": "address", "name": "jRepayTokenAddress", "type": "address"},
            {"internalType": "address", "name": "jSeizeTokenAddress", "type": "address"},
        ],
        "name": "liquidate",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": False, "internalType": "address", "name": "borrowerLiquidated", "type": "address"},
            {"indexed": False, "internalType": "address", "name": "jRepayToken", "type": "address"},
            {"indexed": False, "internalType": "address", "name": "jSeizeToken", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "repayAmount", "type": "uint256"},
            {"indexed": False, "internalType": "uint256", "name": "profitedAvax", "type": "uint256"},
        ],
        "name": "LiquidationEvent",
        "type": "event",
    },
]

ROUTER_ABI = [
    {
        "inputs": [
            {"internalType": "uint256", "name": "amountOut", "type": "uint256"},
            {"internalType": "address[]", "name": "path", "type": "address[]"},
        ],
        "name": "getAmountsIn",
        "outputs": [{"internalType": "uint256[]", "name": "amounts", "type": "uint256[]"}],
        "stateMutability": "view",
        "type": "function",
    },
]
