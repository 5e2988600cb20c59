"""Decoder for bundled ledger entries (bincode ``Vec<Entry>``).

Layout, little-endian throughout::

    u64 entry_count
    entry_count * Entry:
        u64 num_hashes
        [u8; 32] hash
        u64 tx_count
        tx_count * VersionedTransaction

Transactions are decoded with ``solders``. Only static account keys are
reported; lookup-table addresses would need an RPC round trip to resolve.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from solders.transaction import VersionedTransaction

U64 = struct.Struct("<Q")

HASH_LEN = 32
MAX_ENTRIES = 1 << 20
MAX_TRANSACTIONS_PER_ENTRY = 1 << 16


class EntryDecodeError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class DecodedTransaction:
    signature: str
    account_keys: list[str]


class _Reader:
    __slots__ = ("_buf", "_pos")

    def __init__(self, buf: bytes) -> None:
        self._buf = bytes(buf)
        self._pos = 0

    @property
    def offset(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._pos

    def take(self, size: int) -> bytes:
        if size < 0 or self._pos + size > len(self._buf):
            raise EntryDecodeError(
                f"truncated payload: need {size} bytes at offset {self._pos}, have {self.remaining}"
            )
        chunk = self._buf[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def skip(self, size: int) -> None:
        self.take(size)

    def u64(self) -> int:
        return U64.unpack(self.take(U64.size))[0]

    def rest(self) -> bytes:
        return self._buf[self._pos :]


def _read_transaction(reader: _Reader) -> DecodedTransaction:
    offset = reader.offset
    try:
        tx = VersionedTransaction.from_bytes(reader.rest())
    except ValueError as exc:
        raise EntryDecodeError(f"invalid transaction at offset {offset}: {exc}") from exc
    if not tx.signatures:
        raise EntryDecodeError(f"transaction without signatures at offset {offset}")
    # bincode reads a prefix of the buffer; re-serializing gives its length.
    reader.skip(len(bytes(tx)))
    return DecodedTransaction(
        signature=str(tx.signatures[0]),
        account_keys=[str(key) for key in tx.message.account_keys],
    )


def decode_entries(payload: bytes) -> list[DecodedTransaction]:
    reader = _Reader(payload)
    entry_count = reader.u64()
    if entry_count > MAX_ENTRIES:
        raise EntryDecodeError(f"implausible entry count: {entry_count}")
    transactions: list[DecodedTransaction] = []
    for _ in range(entry_count):
        reader.u64()  # num_hashes
        reader.skip(HASH_LEN)
        tx_count = reader.u64()
        if tx_count > MAX_TRANSACTIONS_PER_ENTRY:
            raise EntryDecodeError(f"implausible transaction count: {tx_count}")
        for _ in range(tx_count):
            transactions.append(_read_transaction(reader))
    if reader.remaining:
        raise EntryDecodeError(f"{reader.remaining} trailing bytes after entries")
    return transactions


def encode_entries(entries: list[list[bytes]], *, num_hashes: int = 1) -> bytes:
    """Frame already-serialized transactions as a ``Vec<Entry>`` payload."""
    out = bytearray(U64.pack(len(entries)))
    for transactions in entries:
        out += U64.pack(num_hashes)
        out += b"\x00" * HASH_LEN
        out += U64.pack(len(transactions))
        for tx in transactions:
            out += tx
    return bytes(out)
