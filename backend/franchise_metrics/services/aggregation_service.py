# Overview: Concurrent fan-out of independent aggregate reads joined at one barrier.

"""
Aggregation engine.

Every figure of a metrics snapshot comes from an independent read-only
sub-query. The engine submits all of them to a thread pool, each worker
running in its own app context (and therefore its own DB session), then
joins them with a single all-or-nothing barrier:

    - every sub-query succeeded            -> PeriodTotals
    - any failed after its retry budget    -> STRICT:  PartialAggregationFailure
                                              DEGRADE: failed parts are zero,
                                                       listed in `degraded`
    - store unreachable before fan-out,    -> DataStoreUnavailable (both policies)
      or every sub-query lost it after
      with a connection error
    - caller deadline fires                -> MetricsTimeout (both policies);
                                              statements already running are
                                              abandoned, not interrupted

Nothing is cached: each call re-reads everything for the period it is given.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from flask import current_app

from franchise_metrics.errors import DataStoreUnavailable, MetricsTimeout, PartialAggregationFailure
from .concurrency import is_transient, run_with_retry
from .metrics_store import FleetCounts, FranchiseCounts, SalesSummary, SqlMetricsStore
from .period_service import ResolvedPeriod


class FailurePolicy(str, Enum):
    STRICT = "strict"
    DEGRADE = "degrade"

    @classmethod
    def parse(cls, value) -> "FailurePolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid failure policy '{value}'. Must be one of: strict, degrade"
            ) from None


@dataclass(frozen=True)
class SubQuery:
    name: str
    run: Callable[[], Any]
    # Zero-valued result substituted under the degrade policy
    empty: Callable[[], Any]
    franchise_scoped: bool = True


@dataclass(frozen=True)
class PeriodTotals:
    franchises: FranchiseCounts = field(default_factory=FranchiseCounts)
    directory: dict = field(default_factory=dict)
    current_sales: SalesSummary = field(default_factory=SalesSummary)
    previous_sales: SalesSummary = field(default_factory=SalesSummary)
    current_by_franchise: dict = field(default_factory=dict)
    previous_by_franchise: dict = field(default_factory=dict)
    invoices_issued: tuple = ()
    invoices_paid: tuple = ()
    order_counts: dict = field(default_factory=dict)
    fleet: FleetCounts = field(default_factory=FleetCounts)
    stock_positions: tuple = ()
    degraded: tuple = ()


class AggregationEngine:
    def __init__(
        self,
        store=None,
        *,
        attempts: int = 2,
        backoff_base: float = 0.05,
        max_workers: int = 8,
        timeout: float | None = None,
        app=None,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.store = store if store is not None else SqlMetricsStore()
        self.attempts = attempts
        self.backoff_base = backoff_base
        self.max_workers = max_workers
        self.timeout = timeout
        self.app = app

    @classmethod
    def from_config(cls, store=None, app=None) -> "AggregationEngine":
        app = app or current_app._get_current_object()
        config = app.config
        return cls(
            store,
            attempts=config.get("METRICS_RETRY_ATTEMPTS", 2),
            backoff_base=config.get("METRICS_RETRY_BACKOFF", 0.05),
            max_workers=config.get("METRICS_MAX_WORKERS", 8),
            timeout=config.get("METRICS_REQUEST_TIMEOUT"),
            app=app,
        )

    def plan(self, period: ResolvedPeriod, franchise_id: int | None = None) -> list[SubQuery]:
        """The independent reads behind one snapshot, in a stable order."""
        store = self.store
        current, previous = period.current, period.previous
        return [
            SubQuery("franchise_counts", lambda: store.franchise_counts(franchise_id), FranchiseCounts),
            SubQuery("franchise_directory", lambda: store.franchise_directory(franchise_id), dict),
            SubQuery("current_sales", lambda: store.sales_summary(current, franchise_id), SalesSummary),
            SubQuery("previous_sales", lambda: store.sales_summary(previous, franchise_id), SalesSummary),
            SubQuery("current_sales_by_franchise", lambda: store.sales_by_franchise(current, franchise_id), dict),
            SubQuery("previous_sales_by_franchise", lambda: store.sales_by_franchise(previous, franchise_id), dict),
            SubQuery("invoices_issued", lambda: tuple(store.invoices_issued(current, franchise_id)), tuple),
            SubQuery("invoices_paid", lambda: tuple(store.invoices_paid(current, franchise_id)), tuple),
            SubQuery("order_counts", lambda: store.order_counts(current, franchise_id), dict),
            SubQuery("fleet", lambda: store.fleet_counts(period.now, franchise_id), FleetCounts),
            # Warehouse stock is network-wide; a franchise filter does not apply to it
            SubQuery("stock_positions", lambda: tuple(store.stock_positions()), tuple, franchise_scoped=False),
        ]

    def collect(
        self,
        period: ResolvedPeriod,
        *,
        franchise_id: int | None = None,
        policy=FailurePolicy.STRICT,
    ) -> PeriodTotals:
        policy = FailurePolicy.parse(policy)
        app = self.app or current_app._get_current_object()

        self._check_available()

        sub_queries = self.plan(period, franchise_id)
        results, failures = self._fan_out(app, sub_queries)

        failed = tuple(sorted(failures))
        # Every read lost its connection after the ping: the store went away
        if len(failed) == len(sub_queries) and all(is_transient(exc) for exc in failures.values()):
            raise DataStoreUnavailable(
                "Data store became unavailable during aggregation",
                details={"failed": list(failed)},
            )
        if failed:
            if policy is FailurePolicy.STRICT:
                raise PartialAggregationFailure(
                    f"{len(failed)} metrics sub-quer{'y' if len(failed) == 1 else 'ies'} failed",
                    details={
                        "failed": list(failed),
                        "errors": {name: str(failures[name]) for name in failed},
                    },
                )
            by_name = {sub_query.name: sub_query for sub_query in sub_queries}
            for name in failed:
                current_app.logger.warning(
                    "Metrics sub-query %s failed; substituting zero totals", name,
                    exc_info=failures[name],
                )
                results[name] = by_name[name].empty()

        return PeriodTotals(
            franchises=results["franchise_counts"],
            directory=results["franchise_directory"],
            current_sales=results["current_sales"],
            previous_sales=results["previous_sales"],
            current_by_franchise=results["current_sales_by_franchise"],
            previous_by_franchise=results["previous_sales_by_franchise"],
            invoices_issued=results["invoices_issued"],
            invoices_paid=results["invoices_paid"],
            order_counts=results["order_counts"],
            fleet=results["fleet"],
            stock_positions=results["stock_positions"],
            degraded=failed,
        )

    def _check_available(self) -> None:
        try:
            run_with_retry(self.store.ping, attempts=self.attempts, backoff_base=self.backoff_base)
        except Exception as exc:
            if is_transient(exc):
                raise DataStoreUnavailable(
                    "Data store is unavailable",
                    details={"error": str(exc)},
                ) from exc
            raise

    def _run_one(self, app, sub_query: SubQuery, stop: threading.Event):
        if stop.is_set():
            raise MetricsTimeout(f"Sub-query {sub_query.name} abandoned after deadline")

        with app.app_context():
            def log_retry(attempt, exc):
                current_app.logger.warning(
                    "Metrics sub-query %s attempt %d failed, retrying: %s",
                    sub_query.name, attempt, exc,
                )

            return run_with_retry(
                sub_query.run,
                attempts=self.attempts,
                backoff_base=self.backoff_base,
                on_retry=log_retry,
                should_stop=stop.is_set,
            )

    def _fan_out(self, app, sub_queries: list[SubQuery]):
        stop = threading.Event()
        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(sub_queries)),
            thread_name_prefix="metrics",
        )
        try:
            futures = {
                executor.submit(self._run_one, app, sub_query, stop): sub_query.name
                for sub_query in sub_queries
            }
            _, pending = wait(futures, timeout=self.timeout)
            if pending:
                stop.set()
                for future in pending:
                    future.cancel()
                raise MetricsTimeout(
                    "Metrics request exceeded its deadline",
                    details={
                        "timeout_seconds": self.timeout,
                        "pending": sorted(futures[future] for future in pending),
                    },
                )

            results, failures = {}, {}
            for future, name in futures.items():
                exc = future.exception()
                if exc is None:
                    results[name] = future.result()
                else:
                    failures[name] = exc
            return results, failures
        finally:
            # Running workers are abandoned, not joined; queued ones never start
            executor.shutdown(wait=False, cancel_futures=True)
