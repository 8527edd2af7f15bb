"""
Request-scoped engine context.

Everything a projection needs from the outside world is carried explicitly:
the record repository, the clock, the contribution policy and the config.
There is no module-level engine state; build one context per request (or
share one, it holds nothing mutable).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Protocol, Union

from contributions.policy import DEFAULT_POLICY, ContributionPolicy
from core.config import ProjectionConfig
from core.schema import Ledger, ProjectionRequest
from engine.overrides import Now

from .projection import compute_balance_projection
from .results import ProjectionResult


class RecordRepository(Protocol):
    def load_ledger(self, owner_id: str) -> Ledger:
        ...


@dataclass
class InMemoryRepository:
    """Ledgers keyed by owner id; an unknown owner gets an empty ledger."""
    ledgers: Dict[str, Ledger] = field(default_factory=dict)

    def add(self, owner_id: str, ledger: Ledger) -> None:
        self.ledgers[owner_id] = ledger

    def load_ledger(self, owner_id: str) -> Ledger:
        return self.ledgers.get(owner_id) or Ledger(holdings_count=0)


@dataclass(frozen=True)
class EngineContext:
    repository: RecordRepository
    clock: Callable[[], Now] = datetime.now
    policy: ContributionPolicy = DEFAULT_POLICY
    config: ProjectionConfig = field(default_factory=ProjectionConfig)

    def project(
        self,
        owner_id: str,
        request: Union[ProjectionRequest, Mapping[str, Any]],
    ) -> ProjectionResult:
        """Load the owner's snapshot, read the clock once, run the projection."""
        ledger = self.repository.load_ledger(owner_id)
        return compute_balance_projection(
            request,
            ledger,
            self.clock(),
            config=self.config,
            policy=self.policy,
        )
