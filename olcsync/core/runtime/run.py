"""
Bucle de reconciliación: una corrida = validar → prefetch → converger por entrada.

Síncrono y secuencial: el discovery termina antes de decidir nada y cada escritura
termina antes de empezar la siguiente. No hay estado entre corridas.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from olcsync.core.errors import ConvergenceError, ValidationError
from olcsync.core.infra.contracts import ProviderContract
from olcsync.core.resource.models import DesiredEntry
from olcsync.core.resource.planner import Action, Create, Delete, Modify
from olcsync.core.resource.validator import validate_catalog, validate_entry

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """Resultado de una entrada en la corrida"""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    UNCHANGED = "unchanged"
    PLANNED = "planned"  # dry-run: habría una escritura
    FAILED = "failed"


_OUTCOME_BY_ACTION = {Create: Outcome.CREATED, Modify: Outcome.UPDATED, Delete: Outcome.DELETED}


@dataclass
class EntryResult:
    name: str
    outcome: Outcome
    action: Optional[Action] = None
    error: Optional[Exception] = None


@dataclass
class RunReport:
    """Informe de una corrida (una entrada por elemento del catálogo, en orden)."""
    results: List[EntryResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def failed(self) -> List[EntryResult]:
        return [r for r in self.results if r.outcome == Outcome.FAILED]

    @property
    def changed(self) -> bool:
        return any(r.outcome in (Outcome.CREATED, Outcome.UPDATED, Outcome.DELETED) for r in self.results)

    @property
    def ok(self) -> bool:
        return not self.failed

    def counts(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for r in self.results:
            out[r.outcome.value] = out.get(r.outcome.value, 0) + 1
        return out


def reconcile(
    provider: ProviderContract,
    desired: Sequence[DesiredEntry],
    dry_run: bool = False,
    fail_fast: bool = False,
) -> RunReport:
    """
    Ejecuta una corrida completa.

    - ValidationError por entrada: esa entrada falla antes de cualquier comando.
    - Identidad repetida en el catálogo: ValidationError antes del discovery.
    - DiscoveryError / AmbiguousStateError: abortan la corrida (se propagan).
    - ConvergenceError: falla esa entrada; las demás siguen salvo fail_fast.
    """
    report = RunReport(dry_run=dry_run)
    results: Dict[int, EntryResult] = {}

    valid: List[DesiredEntry] = []
    for entry in desired:
        try:
            validate_entry(entry, provider.descriptor)
        except ValidationError as e:
            if fail_fast:
                raise
            logger.error("%s: entrada inválida: %s", entry.name or "<sin nombre>", e)
            results[id(entry)] = EntryResult(entry.name, Outcome.FAILED, error=e)
            continue
        valid.append(entry)

    # Identidades repetidas en el catálogo abortan la corrida antes del discovery
    valid = validate_catalog(valid, provider.descriptor)
    provider.prefetch(valid)

    for entry in valid:
        results[id(entry)] = _converge(provider, entry.name, dry_run, fail_fast)

    report.results = [results[id(entry)] for entry in desired]
    logger.info("%s: corrida terminada %s", provider.name, report.counts())
    return report


def _converge(provider: ProviderContract, name: str, dry_run: bool, fail_fast: bool) -> EntryResult:
    try:
        action = provider.plan(name)
        if action is None:
            logger.debug("%s %s: sin cambios", provider.name, name)
            return EntryResult(name, Outcome.UNCHANGED)
        if dry_run:
            return EntryResult(name, Outcome.PLANNED, action=action)
        provider.flush(name, action)
        return EntryResult(name, _OUTCOME_BY_ACTION[type(action)], action=action)
    except (ConvergenceError, ValidationError) as e:
        if fail_fast:
            raise
        logger.error("%s %s: %s", provider.name, name, e)
        return EntryResult(name, Outcome.FAILED, error=e)
