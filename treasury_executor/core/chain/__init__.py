"""
Chain access layer.

- LiteChainClient: lite-server requests with retries and typed get-method results
- WalletSender: signs, submits and waits for internal messages
- TransactionRecord: normalized compute phase of a finalized transaction
"""

from .client import LiteChainClient, StackResult, load_lite_config
from .models import ComputePhase, TransactionRecord
from .wallet import PAY_GAS_SEPARATELY, WalletSender

__all__ = [
    "LiteChainClient",
    "StackResult",
    "load_lite_config",
    "ComputePhase",
    "TransactionRecord",
    "PAY_GAS_SEPARATELY",
    "WalletSender",
]
