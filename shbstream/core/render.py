"""Human-readable rendering of inbound payloads."""

from __future__ import annotations


def render(payload: bytes) -> str:
    octets = "".join(f"{byte:02X} " for byte in payload)
    return f"Indication ({len(payload)} bytes): {octets}"
