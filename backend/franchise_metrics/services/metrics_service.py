# Overview: Entry point of the metrics engine; one request in, one MetricsSnapshot out.

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from franchise_metrics.time_utils import utcnow
from .aggregation_service import AggregationEngine, FailurePolicy
from .period_service import resolve_period
from .snapshot_service import MetricsSnapshot, assemble_snapshot


@dataclass(frozen=True)
class MetricsRequest:
    """
    What a caller asks for. Authorization is the caller's job: franchise_id
    is trusted as already scoped to what the caller may see.
    """
    period_token: str | None = None
    franchise_id: int | None = None
    failure_policy: str = FailurePolicy.STRICT.value
    start: object = None
    end: object = None


def compute_metrics(
    request: MetricsRequest,
    *,
    now: datetime | None = None,
    engine: AggregationEngine | None = None,
    ranking_size: int | None = None,
) -> MetricsSnapshot:
    """
    Resolve the period, fan out the aggregate reads and assemble a snapshot.

    `now` is read once here (or injected) and threaded through every
    sub-query and the invoice reconciliation.
    """
    now = now or utcnow()
    period = resolve_period(request.period_token, now=now, start=request.start, end=request.end)
    policy = FailurePolicy.parse(request.failure_policy)

    engine = engine or AggregationEngine.from_config()
    if ranking_size is None:
        ranking_size = current_app.config.get("METRICS_RANKING_SIZE", 3)

    started = time.monotonic()
    totals = engine.collect(period, franchise_id=request.franchise_id, policy=policy)
    snapshot = assemble_snapshot(
        period,
        totals,
        ranking_size=ranking_size,
        franchise_id=request.franchise_id,
        failure_policy=policy.value,
    )

    current_app.logger.info(
        "Metrics snapshot period=%s franchise_id=%s policy=%s degraded=%s elapsed_ms=%.1f",
        period.token or "custom",
        request.franchise_id,
        policy.value,
        ",".join(snapshot.degraded) or "-",
        (time.monotonic() - started) * 1000,
    )
    return snapshot
