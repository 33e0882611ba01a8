"""Canonical account addresses and the fallback allow-list."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import bech32


@dataclass(frozen=True, slots=True)
class Address:
    """An account identified by its raw bytes.

    Equality and hashing use ``raw`` only, so ``axelar1...`` and
    ``axelarvaloper1...`` renderings of the same key compare equal.
    """

    raw: bytes
    hrp: str = field(default="axelar", compare=False)

    @classmethod
    def from_bech32(cls, value: str) -> Address:
        hrp, data = bech32.bech32_decode(value.strip().lower())
        if hrp is None or data is None:
            raise ValueError(f"invalid bech32 address: {value!r}")
        decoded = bech32.convertbits(data, 5, 8, False)
        if decoded is None or not decoded:
            raise ValueError(f"invalid bech32 payload: {value!r}")
        return cls(raw=bytes(decoded), hrp=hrp)

    @classmethod
    def from_bytes(cls, raw: bytes, *, hrp: str = "axelar") -> Address:
        return cls(raw=bytes(raw), hrp=hrp)

    def to_bech32(self) -> str:
        data = bech32.convertbits(list(self.raw), 8, 5)
        if data is None:  # pragma: no cover - 8->5 with padding always converts
            raise ValueError("address bytes could not be converted")
        return bech32.bech32_encode(self.hrp, data)

    def __str__(self) -> str:
        return self.to_bech32()


@dataclass(frozen=True, slots=True)
class AddressAllowList:
    """Addresses accepted as heartbeat senders besides the broadcaster."""

    addresses: frozenset[Address] = frozenset()

    @classmethod
    def from_bech32(cls, values: Iterable[str]) -> AddressAllowList:
        return cls(frozenset(Address.from_bech32(value) for value in values if value.strip()))

    def __contains__(self, candidate: object) -> bool:
        return candidate in self.addresses

    def __len__(self) -> int:
        return len(self.addresses)


KNOWN_RELAYER_ADDRESS = "axelar17xpfvakm2amg962yls6f84z3kell8c5l5h4gqu"


__all__ = ["Address", "AddressAllowList", "KNOWN_RELAYER_ADDRESS"]
