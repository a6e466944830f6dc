"""Data-synchronization core for the NCW MPC wallet demo client.

Provides the HTTP transport, the typed backend session client and the
long-polling engine that relays signing messages and transaction snapshots
to the wallet SDK and UI.
"""

__version__ = "0.1.0"

from .client import SessionClient
from .config import WalletConfig, load_config
from .errors import (
    AuthenticationError,
    ConfigurationError,
    DecodingError,
    NetworkConnectionError,
    NetworkError,
    RequestTimeout,
    ResponseError,
    WalletClientError,
)
from .models import (
    Asset,
    AssetAddress,
    AssetBalance,
    AssignResponse,
    CreateTransactionResponse,
    Device,
    EstimatedFee,
    FeeEstimate,
    FeeLevel,
    PostTransactionParams,
    SigningMessage,
    SigningStatus,
    Transaction,
    TransactionDetails,
    TransferInfo,
    TransferStatus,
)
from .polling import PollingEngine, PollingListener, PollingState
from .transport import MessageBody, RawJsonBody, StructBody, Transport, resolve_body

__all__ = [
    "Asset",
    "AssetAddress",
    "AssetBalance",
    "AssignResponse",
    "AuthenticationError",
    "ConfigurationError",
    "CreateTransactionResponse",
    "DecodingError",
    "Device",
    "EstimatedFee",
    "FeeEstimate",
    "FeeLevel",
    "MessageBody",
    "NetworkConnectionError",
    "NetworkError",
    "PollingEngine",
    "PollingListener",
    "PollingState",
    "PostTransactionParams",
    "RawJsonBody",
    "RequestTimeout",
    "ResponseError",
    "SessionClient",
    "SigningMessage",
    "SigningStatus",
    "StructBody",
    "Transaction",
    "TransactionDetails",
    "TransferInfo",
    "TransferStatus",
    "Transport",
    "WalletClientError",
    "WalletConfig",
    "__version__",
    "load_config",
    "resolve_body",
]
