"""Maintainer membership verdict."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MaintainerVerdict:
    per_chain: Mapping[str, bool]
    status: bool

    @classmethod
    def from_results(cls, per_chain: Mapping[str, bool]) -> MaintainerVerdict:
        results = dict(per_chain)
        return cls(per_chain=results, status=all(results.values()))

    @property
    def missing_chains(self) -> tuple[str, ...]:
        return tuple(chain for chain, present in self.per_chain.items() if not present)

    @property
    def summary(self) -> str:
        return " ".join(f"({chain}: {present})" for chain, present in self.per_chain.items())


__all__ = ["MaintainerVerdict"]
