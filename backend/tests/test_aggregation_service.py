# Overview: Pytest coverage for the concurrent aggregation fan-out, retry and failure policies.

import threading
import time

import pytest
from sqlalchemy.exc import OperationalError

from franchise_metrics.errors import DataStoreUnavailable, MetricsTimeout, PartialAggregationFailure
from franchise_metrics.services.aggregation_service import AggregationEngine, FailurePolicy
from franchise_metrics.services.metrics_store import (
    FleetCounts,
    FranchiseCounts,
    FranchiseInfo,
    SalesSummary,
)
from franchise_metrics.services.period_service import resolve_period

from .conftest import NOW


def locked():
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


class FakeStore:
    """
    In-memory store recording every call.

    `fail` maps a method name to the exceptions it raises on successive
    calls; once the list is exhausted the method succeeds.
    """

    def __init__(self, *, fail=None, delay=None):
        self.fail = {name: list(errors) for name, errors in (fail or {}).items()}
        self.delay = delay or {}
        self.calls = []
        self._lock = threading.Lock()

    def _call(self, name, franchise_id=None):
        with self._lock:
            self.calls.append((name, franchise_id))
            errors = self.fail.get(name)
            error = errors.pop(0) if errors else None
        if name in self.delay:
            time.sleep(self.delay[name])
        if error is not None:
            raise error

    def calls_to(self, name):
        return [call for call in self.calls if call[0] == name]

    def ping(self):
        self._call("ping")

    def franchise_counts(self, franchise_id=None):
        self._call("franchise_counts", franchise_id)
        return FranchiseCounts(total=2, active=2)

    def franchise_directory(self, franchise_id=None):
        self._call("franchise_directory", franchise_id)
        return {1: FranchiseInfo(1, "Paris Nord", 400, True)}

    def sales_summary(self, period, franchise_id=None):
        self._call("sales_summary", franchise_id)
        return SalesSummary(gross_sales_cents=100_000, royalty_cents=4_000, transaction_count=10, record_count=1)

    def sales_by_franchise(self, period, franchise_id=None):
        self._call("sales_by_franchise", franchise_id)
        return {1: 100_000}

    def invoices_issued(self, period, franchise_id=None):
        self._call("invoices_issued", franchise_id)
        return []

    def invoices_paid(self, period, franchise_id=None):
        self._call("invoices_paid", franchise_id)
        return []

    def order_counts(self, period, franchise_id=None):
        self._call("order_counts", franchise_id)
        return {"PENDING": 2, "DELIVERED": 1}

    def fleet_counts(self, now, franchise_id=None):
        self._call("fleet_counts", franchise_id)
        return FleetCounts(total_vehicles=3, maintenance_alerts=1)

    def stock_positions(self):
        self._call("stock_positions")
        return []


@pytest.fixture
def period():
    return resolve_period("month", now=NOW)


def make_engine(app, store, *, timeout=5.0, attempts=2):
    return AggregationEngine(store, attempts=attempts, backoff_base=0, max_workers=4, timeout=timeout, app=app)


class TestCollect:
    def test_all_sub_queries_succeed(self, app, period):
        store = FakeStore()
        totals = make_engine(app, store).collect(period)

        assert totals.degraded == ()
        assert totals.order_counts == {"PENDING": 2, "DELIVERED": 1}
        assert totals.current_sales.gross_sales_cents == 100_000
        assert totals.fleet.total_vehicles == 3
        assert len(store.calls_to("sales_summary")) == 2

    def test_transient_failure_retried_then_succeeds(self, app, period):
        store = FakeStore(fail={"order_counts": [locked()]})
        totals = make_engine(app, store).collect(period)

        assert totals.degraded == ()
        assert totals.order_counts["PENDING"] == 2
        assert len(store.calls_to("order_counts")) == 2

    def test_non_transient_failure_not_retried(self, app, period):
        store = FakeStore(fail={"order_counts": [RuntimeError("bad column")]})

        with pytest.raises(PartialAggregationFailure):
            make_engine(app, store).collect(period)
        assert len(store.calls_to("order_counts")) == 1

    def test_franchise_filter_reaches_every_scoped_read(self, app, period):
        store = FakeStore()
        make_engine(app, store).collect(period, franchise_id=7)

        scoped = [call for call in store.calls if call[0] not in ("ping", "stock_positions")]
        assert len(scoped) == 10
        assert all(franchise_id == 7 for _, franchise_id in scoped)


class TestFailurePolicies:
    def test_strict_fails_whole_request(self, app, period):
        store = FakeStore(fail={"order_counts": [locked(), locked()]})

        with pytest.raises(PartialAggregationFailure) as excinfo:
            make_engine(app, store).collect(period, policy=FailurePolicy.STRICT)

        assert excinfo.value.details["failed"] == ["order_counts"]
        assert "order_counts" in excinfo.value.details["errors"]
        assert excinfo.value.http_status == 502

    def test_degrade_zeroes_only_failed_part(self, app, period):
        store = FakeStore(fail={"order_counts": [locked(), locked()]})

        totals = make_engine(app, store).collect(period, policy="degrade")

        assert totals.degraded == ("order_counts",)
        assert totals.order_counts == {}
        assert totals.current_sales.gross_sales_cents == 100_000
        assert totals.franchises.total == 2

    def test_degraded_names_sorted(self, app, period):
        store = FakeStore(fail={"stock_positions": [locked(), locked()], "fleet_counts": [locked(), locked()]})

        totals = make_engine(app, store).collect(period, policy=FailurePolicy.DEGRADE)

        assert totals.degraded == ("fleet", "stock_positions")
        assert totals.fleet == FleetCounts()
        assert totals.stock_positions == ()

    def test_unreachable_store_never_degrades(self, app, period):
        store = FakeStore(fail={"ping": [locked(), locked()]})

        with pytest.raises(DataStoreUnavailable):
            make_engine(app, store).collect(period, policy=FailurePolicy.DEGRADE)
        assert store.calls_to("order_counts") == []

    def test_store_lost_after_ping_never_degrades(self, app, period):
        methods = (
            "franchise_counts", "franchise_directory", "sales_summary", "sales_by_franchise",
            "invoices_issued", "invoices_paid", "order_counts", "fleet_counts", "stock_positions",
        )
        # Enough failures for two calls of each method with two attempts apiece
        store = FakeStore(fail={name: [locked() for _ in range(4)] for name in methods})

        with pytest.raises(DataStoreUnavailable) as excinfo:
            make_engine(app, store).collect(period, policy=FailurePolicy.DEGRADE)
        assert len(excinfo.value.details["failed"]) == 11
        assert excinfo.value.http_status == 503

    def test_all_failed_with_programming_errors_still_degrades(self, app, period):
        methods = (
            "franchise_counts", "franchise_directory", "sales_summary", "sales_by_franchise",
            "invoices_issued", "invoices_paid", "order_counts", "fleet_counts", "stock_positions",
        )
        store = FakeStore(fail={name: [RuntimeError("bad column") for _ in range(2)] for name in methods})

        totals = make_engine(app, store).collect(period, policy=FailurePolicy.DEGRADE)
        assert len(totals.degraded) == 11

    def test_deadline_fails_under_degrade(self, app, period):
        store = FakeStore(delay={"order_counts": 1.0})

        with pytest.raises(MetricsTimeout) as excinfo:
            make_engine(app, store, timeout=0.2).collect(period, policy=FailurePolicy.DEGRADE)
        assert "order_counts" in excinfo.value.details["pending"]


class TestFailurePolicyParse:
    def test_parse_case_insensitive(self):
        assert FailurePolicy.parse("STRICT") is FailurePolicy.STRICT
        assert FailurePolicy.parse(" degrade ") is FailurePolicy.DEGRADE

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError, match="Invalid failure policy"):
            FailurePolicy.parse("lenient")


def test_engine_rejects_zero_workers():
    with pytest.raises(ValueError):
        AggregationEngine(FakeStore(), max_workers=0)
