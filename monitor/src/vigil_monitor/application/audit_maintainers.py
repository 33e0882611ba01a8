"""Check that the validator maintains every activated external chain."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.ports.chain import ChainClientPort
from vigil_monitor.domain.address import Address
from vigil_monitor.domain.maintainers import MaintainerVerdict

logger = logging.getLogger("vigil_monitor.maintainers")


class MaintainerAuditor:
    """Builds the per-chain membership map for the validator.

    Chains in the exception set are recorded as passing without a query.
    Any transport failure aborts the whole audit.
    """

    def __init__(
        self,
        *,
        chain: ChainClientPort,
        validator: Address,
        except_chains: Iterable[str] = (),
    ) -> None:
        self._chain = chain
        self._validator = validator
        self._except_chains = frozenset(name.strip().lower() for name in except_chains if name.strip())

    def audit(self, token: CancellationToken) -> MaintainerVerdict:
        token.raise_if_cancelled()
        chains = self._chain.chains(token)
        results: dict[str, bool] = {}
        for chain_name in chains:
            if chain_name.lower() in self._except_chains:
                results[chain_name] = True
                continue
            token.raise_if_cancelled()
            maintainers = self._chain.chain_maintainers(chain_name, token)
            results[chain_name] = self._validator in maintainers

        verdict = MaintainerVerdict.from_results(results)
        logger.info(
            "maintainers audited",
            extra={"data": {"per_chain": dict(verdict.per_chain), "status": verdict.status}},
        )
        return verdict


__all__ = ["MaintainerAuditor"]
