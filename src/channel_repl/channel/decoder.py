"""
Display-only decoding of encoded channel transactions.

Encoded objects look like ``tx_<base64(rlp || checksum)>`` where the checksum is
the first four bytes of a double sha256 over the RLP payload. The decoded form
is only ever shown to the operator; signing always uses the encoded string.
"""

import base64
import binascii
import hashlib
import json
import logging
from typing import Any, Dict, List, Tuple, Union

logger = logging.getLogger(__name__)

RlpItem = Union[bytes, List["RlpItem"]]

OBJECT_TAGS: Dict[int, str] = {
    11: "SignedTx",
    12: "SpendTx",
    50: "ChannelCreateTx",
    51: "ChannelDepositTx",
    52: "ChannelWithdrawTx",
    53: "ChannelCloseMutualTx",
    54: "ChannelCloseSoloTx",
    55: "ChannelSlashTx",
    56: "ChannelSettleTx",
    57: "ChannelOffChainTx",
    58: "Channel",
    59: "ChannelSnapshotSoloTx",
    60: "Poi",
    521: "ChannelForceProgressTx",
    570: "ChannelOffChainUpdateTransfer",
    571: "ChannelOffChainUpdateDeposit",
    572: "ChannelOffChainUpdateWithdrawal",
    573: "ChannelOffChainUpdateCreateContract",
    574: "ChannelOffChainUpdateCallContract",
}

SIGNED_TX_TAG = 11
CHECKSUM_LENGTH = 4


class TxDecodeError(ValueError):
    """Raised when an encoded object cannot be decoded."""


def _checksum(payload: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(payload).digest()).digest()[:CHECKSUM_LENGTH]


def decode_base64_check(encoded: str) -> Tuple[str, bytes]:
    """Split ``<prefix>_<data>`` and return the prefix and verified payload."""
    prefix, sep, data = encoded.strip().partition("_")
    if not sep or not data:
        raise TxDecodeError(f"not a prefixed object: {encoded[:16]!r}")
    try:
        raw = base64.b64decode(data + "=" * (-len(data) % 4), validate=True)
    except (binascii.Error, ValueError) as e:
        raise TxDecodeError(f"invalid base64 payload: {e}") from e
    payload, checksum = raw[:-CHECKSUM_LENGTH], raw[-CHECKSUM_LENGTH:]
    if len(raw) <= CHECKSUM_LENGTH or _checksum(payload) != checksum:
        raise TxDecodeError("checksum mismatch")
    return prefix, payload


def _decode_length(data: bytes, offset: int, length_of_length: int) -> Tuple[int, int]:
    start = offset + 1
    end = start + length_of_length
    if end > len(data):
        raise TxDecodeError("truncated RLP length")
    return int.from_bytes(data[start:end], "big"), end


def _decode_item(data: bytes, offset: int) -> Tuple[RlpItem, int]:
    if offset >= len(data):
        raise TxDecodeError("truncated RLP item")
    first = data[offset]
    if first < 0x80:
        return data[offset : offset + 1], offset + 1
    if first < 0xB8:
        start, length = offset + 1, first - 0x80
    elif first < 0xC0:
        length, start = _decode_length(data, offset, first - 0xB7)
    else:
        if first < 0xF8:
            start, length = offset + 1, first - 0xC0
        else:
            length, start = _decode_length(data, offset, first - 0xF7)
        end = start + length
        if end > len(data):
            raise TxDecodeError("truncated RLP list")
        items: List[RlpItem] = []
        position = start
        while position < end:
            item, position = _decode_item(data, position)
            items.append(item)
        return items, end

    end = start + length
    if end > len(data):
        raise TxDecodeError("truncated RLP string")
    return data[start:end], end


def rlp_decode(data: bytes) -> RlpItem:
    """Decode a complete RLP payload."""
    item, end = _decode_item(data, 0)
    if end != len(data):
        raise TxDecodeError(f"{len(data) - end} trailing bytes after RLP item")
    return item


def _render_field(item: RlpItem) -> Any:
    if isinstance(item, list):
        return [_render_field(child) for child in item]
    if len(item) <= 8:
        return int.from_bytes(item, "big")
    return "0x" + item.hex()


def _render_object(fields: List[RlpItem]) -> Dict[str, Any]:
    if len(fields) < 2 or isinstance(fields[0], list) or isinstance(fields[1], list):
        return {"fields": [_render_field(field) for field in fields]}

    tag = int.from_bytes(fields[0], "big")
    version = int.from_bytes(fields[1], "big")
    rest = fields[2:]
    rendered: Dict[str, Any] = {
        "tag": OBJECT_TAGS.get(tag, str(tag)),
        "version": version,
    }

    # A signed transaction wraps the RLP of the transaction it signs
    if tag == SIGNED_TX_TAG and len(rest) == 2 and isinstance(rest[1], bytes):
        signatures = rest[0] if isinstance(rest[0], list) else [rest[0]]
        rendered["signatures"] = [_render_field(sig) for sig in signatures]
        try:
            inner = rlp_decode(rest[1])
        except TxDecodeError:
            rendered["tx"] = _render_field(rest[1])
        else:
            rendered["tx"] = (
                _render_object(inner)
                if isinstance(inner, list)
                else _render_field(inner)
            )
        return rendered

    rendered["fields"] = [_render_field(field) for field in rest]
    return rendered


def decode_tx(encoded: str) -> Dict[str, Any]:
    """Decode an encoded transaction (or state) into a displayable structure."""
    prefix, payload = decode_base64_check(encoded)
    item = rlp_decode(payload)
    if not isinstance(item, list):
        return {"prefix": prefix, "value": _render_field(item)}
    return {"prefix": prefix, **_render_object(item)}


def format_tx(encoded: str) -> str:
    """Pretty-print a decoded transaction, falling back to a short notice."""
    try:
        return json.dumps(decode_tx(encoded), indent=2)
    except TxDecodeError as e:
        logger.debug(f"Could not decode {encoded[:16]!r}: {e}")
        return f"<undecodable: {e}>"
