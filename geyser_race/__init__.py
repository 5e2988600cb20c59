"""Latency race between Solana streaming endpoints (Geyser and ShredStream)."""

__all__ = [
    "cli",
    "config",
    "bootstrap",
    "comparator",
    "dual_stream",
    "entries",
    "geyser_grpc",
    "race",
    "report",
    "runlog",
    "runner",
    "shutdown",
]
