"""Domain records exchanged with the NCW wallet backend.

Records are plain dataclasses decoded from the backend's camelCase JSON via
``from_dict``. Decoders raise :class:`DecodingError` on schema mismatch;
optional fields that are absent or ``null`` decode to ``None`` (or the
field default).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from .errors import DecodingError

_T = TypeVar("_T")


def _mapping(data: Any, name: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodingError(f"{name}: expected object, got {type(data).__name__}")
    return data


def _list(data: Any, name: str) -> list[Any]:
    if not isinstance(data, list):
        raise DecodingError(f"{name}: expected array, got {type(data).__name__}")
    return data


def _str(data: dict[str, Any], key: str, *, required: bool = False) -> str | None:
    value = data.get(key)
    if value is None:
        if required:
            raise DecodingError(f"Missing required field '{key}'")
        return None
    if not isinstance(value, str):
        raise DecodingError(f"Field '{key}' must be a string")
    return value


def _number(data: dict[str, Any], key: str, *, required: bool = False) -> float | None:
    value = data.get(key)
    if value is None:
        if required:
            raise DecodingError(f"Missing required field '{key}'")
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodingError(f"Field '{key}' must be a number")
    return value


def _int(data: dict[str, Any], key: str, *, required: bool = False) -> int | None:
    value = _number(data, key, required=required)
    if value is None:
        return None
    if isinstance(value, float) and not value.is_integer():
        raise DecodingError(f"Field '{key}' must be an integer")
    return int(value)


def _bool(data: dict[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise DecodingError(f"Field '{key}' must be a boolean")
    return value


def _amount(data: dict[str, Any], key: str) -> str | None:
    """Read a decimal amount that may arrive as a string or a JSON number."""
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodingError(f"Field '{key}' must be a decimal string or number")
    return str(value)


def _decimal(value: str | None) -> float:
    """Parse a decimal string, treating missing or malformed input as 0."""
    try:
        return float(value) if value is not None else 0.0
    except ValueError:
        return 0.0


class SigningStatus(Enum):
    """Transaction status as reported by the backend."""

    SUBMITTED = "SUBMITTED"
    QUEUED = "QUEUED"
    PENDING_SIGNATURE = "PENDING_SIGNATURE"
    PENDING_AUTHORIZATION = "PENDING_AUTHORIZATION"
    PENDING_3RD_PARTY_MANUAL_APPROVAL = "PENDING_3RD_PARTY_MANUAL_APPROVAL"
    PENDING_3RD_PARTY = "PENDING_3RD_PARTY"
    PENDING_CONSOLE_APPROVAL = "PENDING_CONSOLE_APPROVAL"
    SIGNED = "SIGNED"
    SIGNED_BY_CLIENT = "SIGNED_BY_CLIENT"
    COMPLETED = "COMPLETED"
    REJECTED_BY_CLIENT = "REJECTED_BY_CLIENT"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    @classmethod
    def from_raw(cls, raw: str) -> SigningStatus:
        """Match case-insensitively; unrecognized values fall back to SIGNED."""
        try:
            return cls(raw.upper())
        except ValueError:
            return cls.SIGNED


class TransferStatus(Enum):
    """Status shown in the transfer list; exact match or UNKNOWN."""

    SUBMITTED = "SUBMITTED"
    QUEUED = "QUEUED"
    PENDING_SIGNATURE = "PENDING_SIGNATURE"
    PENDING_AUTHORIZATION = "PENDING_AUTHORIZATION"
    PENDING_3RD_PARTY_MANUAL_APPROVAL = "PENDING_3RD_PARTY_MANUAL_APPROVAL"
    PENDING_3RD_PARTY = "PENDING_3RD_PARTY"
    PENDING_CONSOLE_APPROVAL = "PENDING_CONSOLE_APPROVAL"
    SIGNED = "SIGNED"
    SIGNED_BY_CLIENT = "SIGNED_BY_CLIENT"
    COMPLETED = "COMPLETED"
    REJECTED_BY_CLIENT = "REJECTED_BY_CLIENT"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"
    UNKNOWN = "Unknown"

    @classmethod
    def from_raw(cls, raw: str | None) -> TransferStatus:
        if raw is None:
            return cls.UNKNOWN
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


class FeeLevel(Enum):
    """Fee tiers accepted by transaction creation and estimation."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class Device:
    """A registered MPC device paired with a wallet."""

    wallet_id: str
    device_id: str
    created_at: int

    @classmethod
    def from_dict(cls, data: Any) -> Device:
        data = _mapping(data, "Device")
        return cls(
            wallet_id=_str(data, "walletId", required=True),
            device_id=_str(data, "deviceId", required=True),
            created_at=_int(data, "createdAt", required=True),
        )


@dataclass(frozen=True)
class AssignResponse:
    wallet_id: str

    @classmethod
    def from_dict(cls, data: Any) -> AssignResponse:
        data = _mapping(data, "AssignResponse")
        return cls(wallet_id=_str(data, "walletId", required=True))


@dataclass(frozen=True)
class SigningMessage:
    """Inbound MPC protocol message awaiting relay to the SDK."""

    id: int | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> SigningMessage:
        data = _mapping(data, "SigningMessage")
        return cls(id=_int(data, "id"), message=_str(data, "message"))


@dataclass(frozen=True)
class TransferPeer:
    """Source or destination of a transfer."""

    id: str | None = None
    name: str | None = None
    type: str | None = None
    sub_type: str | None = None
    wallet_id: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TransferPeer:
        data = _mapping(data, "TransferPeer")
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            type=_str(data, "type"),
            sub_type=_str(data, "subType"),
            wallet_id=_str(data, "walletId"),
        )


@dataclass(frozen=True)
class AmountInfo:
    amount: str | None = None
    amount_usd: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> AmountInfo:
        data = _mapping(data, "AmountInfo")
        return cls(amount=_str(data, "amount"), amount_usd=_str(data, "amountUSD"))


@dataclass(frozen=True)
class TransactionDetails:
    """Detailed transaction payload returned with ``details=true``."""

    id: str = ""
    note: str = ""
    amount: float = 0.0
    source: TransferPeer | None = None
    destination: TransferPeer | None = None
    status: str | None = None
    tx_hash: str | None = None
    asset_id: str | None = None
    amount_usd: float | None = None
    asset_type: str | None = None
    created_at: int | None = None
    created_by: str | None = None
    operation: str | None = None
    destination_address: str | None = None
    source_address: str | None = None
    fee_currency: str | None = None
    network_fee: float | None = None
    amount_info: AmountInfo | None = None
    extra_parameters: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TransactionDetails:
        data = _mapping(data, "TransactionDetails")
        source = data.get("source")
        destination = data.get("destination")
        amount_info = data.get("amountInfo")
        extra = data.get("extraParameters")
        return cls(
            id=_str(data, "id") or "",
            note=_str(data, "note") or "",
            amount=_number(data, "amount") or 0.0,
            source=TransferPeer.from_dict(source) if source is not None else None,
            destination=(
                TransferPeer.from_dict(destination) if destination is not None else None
            ),
            status=_str(data, "status"),
            tx_hash=_str(data, "txHash"),
            asset_id=_str(data, "assetId"),
            amount_usd=_number(data, "amountUSD"),
            asset_type=_str(data, "assetType"),
            created_at=_int(data, "createdAt"),
            created_by=_str(data, "createdBy"),
            operation=_str(data, "operation"),
            destination_address=_str(data, "destinationAddress"),
            source_address=_str(data, "sourceAddress"),
            fee_currency=_str(data, "feeCurrency"),
            network_fee=_number(data, "networkFee"),
            amount_info=(
                AmountInfo.from_dict(amount_info) if amount_info is not None else None
            ),
            extra_parameters=(
                _mapping(extra, "extraParameters") if extra is not None else None
            ),
        )


@dataclass(frozen=True)
class TransferInfo:
    """Flattened, display-ready view of a transaction."""

    transaction_id: str
    creation_date: str
    last_updated: float | None
    asset_id: str
    asset_symbol: str
    amount: float
    fee: float
    receiver_address: str
    source_address: str
    status: TransferStatus
    transaction_hash: str
    price: float
    blockchain_name: str
    sender_wallet_id: str
    receiver_wallet_id: str


@dataclass(frozen=True, eq=False)
class Transaction:
    """A transaction snapshot entry.

    Identity is the transaction id: two records with the same id compare
    equal and hash alike regardless of the other fields.
    """

    id: str
    details: TransactionDetails
    status: SigningStatus | None = None
    created_at: int | None = None
    last_updated: float | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def created_seconds(self) -> int | None:
        return self.created_at // 1000 if self.created_at is not None else None

    @property
    def last_updated_seconds(self) -> float | None:
        return self.last_updated / 1000 if self.last_updated is not None else None

    @classmethod
    def from_dict(cls, data: Any) -> Transaction:
        data = _mapping(data, "Transaction")
        if "details" not in data:
            raise DecodingError("Missing required field 'details'")
        raw_status = _str(data, "status")
        return cls(
            id=_str(data, "id", required=True),
            details=TransactionDetails.from_dict(data["details"]),
            status=SigningStatus.from_raw(raw_status) if raw_status is not None else None,
            created_at=_int(data, "createdAt"),
            last_updated=_number(data, "lastUpdated"),
        )

    def to_transfer_info(self) -> TransferInfo:
        """Build the display model.

        The display status is matched exactly against ``details.status`` and
        falls back to ``TransferStatus.UNKNOWN``, unlike ``status`` which
        falls back to ``SIGNED``.
        """
        details = self.details
        amount_info = details.amount_info or AmountInfo()
        source = details.source or TransferPeer()
        destination = details.destination or TransferPeer()
        creation_date = ""
        if self.created_at is not None:
            creation_date = datetime.fromtimestamp(
                self.created_at / 1000, tz=UTC
            ).strftime("%Y-%m-%d %H:%M:%S")
        return TransferInfo(
            transaction_id=self.id,
            creation_date=creation_date,
            last_updated=self.last_updated,
            asset_id=details.asset_id or "",
            asset_symbol=details.asset_id or "",
            amount=round(_decimal(amount_info.amount), 6),
            fee=details.network_fee or 0.0,
            receiver_address=details.destination_address or "",
            source_address=details.source_address or "",
            status=TransferStatus.from_raw(details.status),
            transaction_hash=details.tx_hash or " ",
            price=round(_decimal(amount_info.amount_usd), 6),
            blockchain_name=details.asset_type or "",
            sender_wallet_id=source.wallet_id or "",
            receiver_wallet_id=destination.wallet_id or "",
        )


@dataclass(frozen=True)
class CreateTransactionResponse:
    id: str
    status: TransferStatus

    @classmethod
    def from_dict(cls, data: Any) -> CreateTransactionResponse:
        data = _mapping(data, "CreateTransactionResponse")
        return cls(
            id=_str(data, "id", required=True),
            status=TransferStatus.from_raw(_str(data, "status", required=True)),
        )


@dataclass(frozen=True)
class PostTransactionParams:
    """Body for transaction creation and fee estimation."""

    dest_address: str
    amount: str
    note: str = ""
    fee_level: FeeLevel | None = None
    account_id: str = "0"

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "destAddress": self.dest_address,
            "accountId": self.account_id,
            "amount": self.amount,
            "note": self.note,
        }
        if self.fee_level is not None:
            body["feeLevel"] = self.fee_level.value
        return body


@dataclass(frozen=True)
class FeeEstimate:
    """Fee for a single tier."""

    network_fee: str | None = None
    gas_price: str | None = None
    gas_limit: str | None = None
    fee_per_byte: str | None = None
    base_fee: str | None = None
    priority_fee: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> FeeEstimate:
        data = _mapping(data, "FeeEstimate")
        return cls(
            network_fee=_amount(data, "networkFee"),
            gas_price=_amount(data, "gasPrice"),
            gas_limit=_amount(data, "gasLimit"),
            fee_per_byte=_amount(data, "feePerByte"),
            base_fee=_amount(data, "baseFee"),
            priority_fee=_amount(data, "priorityFee"),
        )


@dataclass(frozen=True)
class EstimatedFee:
    """Fee estimate for each tier; ``None`` when the backend omits it."""

    low: FeeEstimate | None = None
    medium: FeeEstimate | None = None
    high: FeeEstimate | None = None

    @classmethod
    def from_dict(cls, data: Any) -> EstimatedFee:
        data = _mapping(data, "EstimatedFee")
        fee = data.get("fee")
        if fee is None:
            return cls()
        fee = _mapping(fee, "fee")
        tiers: dict[str, FeeEstimate | None] = {}
        for tier in ("low", "medium", "high"):
            value = fee.get(tier)
            tiers[tier] = FeeEstimate.from_dict(value) if value is not None else None
        return cls(**tiers)


@dataclass(frozen=True)
class Asset:
    """Asset enabled on the wallet's account."""

    id: str
    symbol: str | None = None
    name: str | None = None
    type: str | None = None
    decimals: int | None = None
    network_protocol: str | None = None
    testnet: bool | None = None
    has_fee: bool | None = None
    base_asset: str | None = None
    extra: dict[str, Any] = field(default_factory=lambda: {})

    @classmethod
    def from_dict(cls, data: Any) -> Asset:
        data = _mapping(data, "Asset")
        known = {
            "id",
            "symbol",
            "name",
            "type",
            "decimals",
            "networkProtocol",
            "testnet",
            "hasFee",
            "baseAsset",
        }
        return cls(
            id=_str(data, "id", required=True),
            symbol=_str(data, "symbol"),
            name=_str(data, "name"),
            type=_str(data, "type"),
            decimals=_int(data, "decimals"),
            network_protocol=_str(data, "networkProtocol"),
            testnet=_bool(data, "testnet"),
            has_fee=_bool(data, "hasFee"),
            base_asset=_str(data, "baseAsset"),
            extra={k: v for k, v in data.items() if k not in known},
        )


@dataclass(frozen=True)
class AssetBalance:
    """Balance of a single asset; amounts are decimal strings."""

    id: str
    total: str | None = None
    available: str | None = None
    pending: str | None = None
    frozen: str | None = None
    locked_amount: str | None = None
    block_height: str | None = None
    block_hash: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> AssetBalance:
        data = _mapping(data, "AssetBalance")
        return cls(
            id=_str(data, "id", required=True),
            total=_amount(data, "total"),
            available=_amount(data, "available"),
            pending=_amount(data, "pending"),
            frozen=_amount(data, "frozen"),
            locked_amount=_amount(data, "lockedAmount"),
            block_height=_amount(data, "blockHeight"),
            block_hash=_str(data, "blockHash"),
        )


@dataclass(frozen=True)
class AssetAddress:
    """Deposit address of an asset."""

    asset_id: str
    address: str
    account_id: str | None = None
    account_name: str | None = None
    address_type: str | None = None
    address_description: str | None = None
    tag: str | None = None
    address_index: int | None = None
    legacy_address: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> AssetAddress:
        data = _mapping(data, "AssetAddress")
        return cls(
            asset_id=_str(data, "asset", required=True),
            address=_str(data, "address", required=True),
            account_id=_str(data, "accountId"),
            account_name=_str(data, "accountName"),
            address_type=_str(data, "addressType"),
            address_description=_str(data, "addressDescription"),
            tag=_str(data, "tag"),
            address_index=_int(data, "addressIndex"),
            legacy_address=_str(data, "legacyAddress"),
        )


def decode_list(data: Any, decoder: Callable[[Any], _T], name: str) -> list[_T]:
    """Decode a JSON array with ``decoder`` applied to each element."""
    return [decoder(item) for item in _list(data, name)]
