from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncIterator
from urllib.parse import urlsplit

import base58
import grpc
from google.protobuf.message import DecodeError, Message

from .generated import geyser_pb2, geyser_pb2_grpc, shredstream_pb2, shredstream_pb2_grpc

UPDATE_TRANSACTION = "transaction"
UPDATE_ACCOUNT = "account"
UPDATE_ENTRIES = "entries"
UPDATE_PING = "ping"
UPDATE_PONG = "pong"
UPDATE_OTHER = "other"
UPDATE_MALFORMED = "malformed"

COMMITMENT_CODES = {
    "processed": geyser_pb2.CommitmentLevel.PROCESSED,
    "confirmed": geyser_pb2.CommitmentLevel.CONFIRMED,
    "finalized": geyser_pb2.CommitmentLevel.FINALIZED,
}
FILTER_NAME = "account"
PING_REPLY_ID = 1
SIGNATURE_LEN = 64
PUBKEY_LEN = 32
SECURE_SCHEMES = {"https", "grpcs"}
INSECURE_SCHEMES = {"http", "grpc"}

SubscriptionRequest = Any


class ConnectError(ConnectionError):
    pass


class SubscribeError(ConnectionError):
    pass


class StreamError(ConnectionError):
    pass


class UpdateDecodeError(ValueError):
    pass


def build_transactions_request(account: str, commitment: str) -> geyser_pb2.SubscribeRequest:
    request = geyser_pb2.SubscribeRequest(commitment=COMMITMENT_CODES[commitment])
    request.transactions[FILTER_NAME].account_include.append(account)
    return request


def build_dual_stream_request(account: str, commitment: str) -> geyser_pb2.SubscribeRequest:
    request = build_transactions_request(account, commitment)
    request.accounts[FILTER_NAME].account.append(account)
    return request


def build_entries_request() -> shredstream_pb2.SubscribeEntriesRequest:
    return shredstream_pb2.SubscribeEntriesRequest()


def build_ping_reply(ping_id: int = PING_REPLY_ID) -> geyser_pb2.SubscribeRequest:
    return geyser_pb2.SubscribeRequest(ping=geyser_pb2.SubscribeRequestPing(id=ping_id))


def request_fields(request: Message) -> list[str]:
    """Names of the populated top-level fields, for logging."""
    return sorted(descriptor.name for descriptor, _value in request.ListFields())


@dataclass(slots=True)
class GeyserUpdate:
    kind: str
    filters: list[str] = field(default_factory=list)
    slot: int | None = None
    signature: str | None = None
    account_keys: list[str] = field(default_factory=list)
    pubkey: str | None = None
    payload: bytes | None = None
    update_type: str | None = None
    error: str | None = None
    raw_sample: str | None = None


def _b58(raw: bytes, expected_len: int, name: str) -> str:
    if len(raw) != expected_len:
        raise UpdateDecodeError(f"{name}: expected {expected_len} bytes, got {len(raw)}")
    return base58.b58encode(raw).decode("ascii")


def _decode_transaction(msg: geyser_pb2.SubscribeUpdate, filters: list[str]) -> GeyserUpdate:
    info = msg.transaction.transaction
    if not info.HasField("transaction"):
        raise UpdateDecodeError("transaction update without transaction")
    tx = info.transaction
    raw_signature = info.signature
    if not raw_signature:
        if not tx.signatures:
            raise UpdateDecodeError("transaction without signatures")
        raw_signature = tx.signatures[0]
    return GeyserUpdate(
        kind=UPDATE_TRANSACTION,
        filters=filters,
        slot=msg.transaction.slot,
        signature=_b58(raw_signature, SIGNATURE_LEN, "signature"),
        account_keys=[_b58(key, PUBKEY_LEN, "account key") for key in tx.message.account_keys],
    )


def _decode_account(msg: geyser_pb2.SubscribeUpdate, filters: list[str]) -> GeyserUpdate:
    info = msg.account.account
    signature = None
    if info.HasField("txn_signature") and info.txn_signature:
        signature = _b58(info.txn_signature, SIGNATURE_LEN, "txn_signature")
    return GeyserUpdate(
        kind=UPDATE_ACCOUNT,
        filters=filters,
        slot=msg.account.slot,
        pubkey=_b58(info.pubkey, PUBKEY_LEN, "pubkey"),
        signature=signature,
    )


def _malformed(error: str, sample: str) -> GeyserUpdate:
    return GeyserUpdate(kind=UPDATE_MALFORMED, error=error, raw_sample=sample[:50])


def decode_update(raw: Any) -> GeyserUpdate:
    """Decode one stream message; malformed ones come back as ``UPDATE_MALFORMED`` instead of raising.

    Accepts a ``SubscribeUpdate``, a shredstream ``Entry`` or the serialized
    bytes of a ``SubscribeUpdate``.
    """
    if isinstance(raw, shredstream_pb2.Entry):
        return GeyserUpdate(kind=UPDATE_ENTRIES, slot=raw.slot, payload=bytes(raw.entries))
    if isinstance(raw, (bytes, bytearray, memoryview)):
        payload = bytes(raw)
        try:
            raw = geyser_pb2.SubscribeUpdate.FromString(payload)
        except DecodeError as exc:
            return _malformed(f"protobuf: {exc}", payload[:50].hex())
    if not isinstance(raw, geyser_pb2.SubscribeUpdate):
        return _malformed(f"unexpected message {type(raw).__name__}", repr(raw))
    filters = list(raw.filters)
    which = raw.WhichOneof("update_oneof")
    try:
        if which == "transaction":
            return _decode_transaction(raw, filters)
        if which == "account":
            return _decode_account(raw, filters)
    except UpdateDecodeError as exc:
        return _malformed(str(exc), str(raw))
    if which == "ping":
        return GeyserUpdate(kind=UPDATE_PING, filters=filters)
    if which == "pong":
        return GeyserUpdate(kind=UPDATE_PONG, filters=filters)
    return GeyserUpdate(kind=UPDATE_OTHER, filters=filters, update_type=which)


class SubscriptionSender:
    """Writes follow-up requests (ping replies) onto a bidirectional Subscribe call."""

    def __init__(self, call: Any, url: str) -> None:
        self._call = call
        self.url = url

    async def send(self, request: geyser_pb2.SubscribeRequest) -> None:
        if self._call is None:
            raise StreamError(f"{self.url}: stream does not accept requests")
        try:
            await self._call.write(request)
        except (grpc.RpcError, asyncio.InvalidStateError) as exc:
            raise StreamError(f"{self.url}: send failed: {exc}") from exc


class GeyserConnection:
    def __init__(
        self,
        channel: Any,
        url: str,
        *,
        metadata: tuple[tuple[str, str], ...] = (),
        close_grace: float | None = None,
    ) -> None:
        self._channel = channel
        self.url = url
        self._metadata = metadata
        self._close_grace = close_grace
        self._calls: list[Any] = []

    async def subscribe(
        self, request: SubscriptionRequest
    ) -> tuple[SubscriptionSender, AsyncIterator[GeyserUpdate]]:
        if isinstance(request, shredstream_pb2.SubscribeEntriesRequest):
            stub = shredstream_pb2_grpc.ShredstreamProxyStub(self._channel)
            call = stub.SubscribeEntries(request, metadata=self._metadata)
            self._calls.append(call)
            return SubscriptionSender(None, self.url), self._updates(call)
        call = geyser_pb2_grpc.GeyserStub(self._channel).Subscribe(metadata=self._metadata)
        self._calls.append(call)
        sender = SubscriptionSender(call, self.url)
        try:
            await sender.send(request)
        except StreamError as exc:
            raise SubscribeError(f"{self.url}: subscribe failed: {exc}") from exc
        return sender, self._updates(call)

    async def _updates(self, call: Any) -> AsyncIterator[GeyserUpdate]:
        while True:
            try:
                message = await call.read()
            except grpc.aio.AioRpcError as exc:
                raise StreamError(f"{self.url}: {exc.code().name}: {exc.details()}") from exc
            if message is grpc.aio.EOF:
                return
            yield decode_update(message)

    async def close(self) -> None:
        for call in self._calls:
            call.cancel()
        await self._channel.close(self._close_grace)


class GeyserClient:
    """Opens a gRPC channel to one endpoint.

    ``https://`` and ``grpcs://`` URLs get TLS with the default roots,
    ``http://`` and ``grpc://`` a plaintext channel. A bare ``host:port``
    target uses TLS only on port 443.
    """

    def __init__(
        self,
        url: str,
        x_token: str | None = None,
        *,
        connect_timeout: float = 10.0,
        close_grace: float | None = 5.0,
        max_message_bytes: int | None = None,
        user_agent: str | None = None,
    ) -> None:
        self.url = url
        self._x_token = x_token
        self._connect_timeout = connect_timeout
        self._close_grace = close_grace
        self._max_message_bytes = max_message_bytes
        self._user_agent = user_agent

    def target(self) -> tuple[str, bool]:
        if "://" not in self.url:
            return self.url, self.url.rsplit(":", 1)[-1] == "443"
        parts = urlsplit(self.url)
        scheme = parts.scheme.lower()
        if scheme not in SECURE_SCHEMES and scheme not in INSECURE_SCHEMES:
            raise ConnectError(f"{self.url}: unsupported scheme {parts.scheme!r}")
        if not parts.hostname:
            raise ConnectError(f"{self.url}: missing host")
        secure = scheme in SECURE_SCHEMES
        port = parts.port or (443 if secure else 80)
        return f"{parts.hostname}:{port}", secure

    def channel_options(self) -> list[tuple[str, Any]]:
        options: list[tuple[str, Any]] = []
        if self._max_message_bytes is not None:
            options.append(("grpc.max_receive_message_length", self._max_message_bytes))
        if self._user_agent:
            options.append(("grpc.primary_user_agent", self._user_agent))
        return options

    def metadata(self) -> tuple[tuple[str, str], ...]:
        if self._x_token:
            return (("x-token", self._x_token),)
        return ()

    async def connect(self) -> GeyserConnection:
        target, secure = self.target()
        options = self.channel_options()
        if secure:
            channel = grpc.aio.secure_channel(target, grpc.ssl_channel_credentials(), options=options)
        else:
            channel = grpc.aio.insecure_channel(target, options=options)
        try:
            await asyncio.wait_for(channel.channel_ready(), timeout=self._connect_timeout)
        except (asyncio.TimeoutError, grpc.RpcError) as exc:
            await channel.close()
            raise ConnectError(f"{self.url}: {type(exc).__name__}: {exc}") from exc
        return GeyserConnection(
            channel,
            self.url,
            metadata=self.metadata(),
            close_grace=self._close_grace,
        )
