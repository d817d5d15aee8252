# Overview: Pytest coverage for report payloads.

from datetime import date

import pytest

from franchise_metrics.errors import PartialAggregationFailure
from franchise_metrics.services import report_service
from franchise_metrics.services.aggregation_service import PeriodTotals
from franchise_metrics.services.metrics_service import MetricsRequest
from franchise_metrics.services.metrics_store import SalesSummary, SqlMetricsStore
from franchise_metrics.services.period_service import resolve_period
from franchise_metrics.services.report_service import ReportError, build_report, generate_report
from franchise_metrics.services.snapshot_service import assemble_snapshot

from .conftest import NOW
from .test_aggregation_service import locked


@pytest.fixture
def snapshot():
    totals = PeriodTotals(
        current_sales=SalesSummary(gross_sales_cents=250_000, royalty_cents=10_000, transaction_count=20),
        current_by_franchise={1: 250_000},
    )
    return assemble_snapshot(resolve_period("quarter", now=NOW), totals, ranking_size=10)


class TestBuildReport:
    def test_sales_report(self, snapshot):
        report = build_report("sales", snapshot)

        assert report["id"] == "sales_quarter_20260331120000"
        assert report["title"] == "Sales report"
        assert report["subtitle"] == "Period: Last quarter"
        assert report["generatedAt"] == "2026-03-31T12:00:00Z"
        assert report["data"]["totalSales"] == 2500.0
        assert report["data"]["averageTicket"] == 125.0
        assert report["data"]["topFranchises"][0]["displayName"] == "Unknown"

    def test_financial_report(self, snapshot):
        data = build_report("financial", snapshot)["data"]

        assert data["totalRevenue"] == 2500.0
        assert data["totalRoyalties"] == 100.0
        assert data["outstandingAmount"] == 0.0

    def test_operational_report(self, snapshot):
        data = build_report("operational", snapshot)["data"]

        assert data["totalOrders"] == 0
        assert "inventoryValue" in data
        assert "totalFranchises" in data

    def test_invalid_type(self, snapshot):
        with pytest.raises(ReportError):
            build_report("marketing", snapshot)


class TestGenerateReport:
    def test_from_database(self, factory):
        franchise = factory.franchise("Toulouse")
        factory.sales(franchise, date(2026, 3, 3), 12_345, transactions=3)

        report = generate_report("sales", MetricsRequest(period_token="month"), now=NOW)

        assert report["data"]["totalSales"] == 123.45
        assert report["data"]["topFranchises"][0]["franchiseId"] == franchise.id

    def test_always_strict(self, factory, monkeypatch):
        def failing(self, period, franchise_id=None):
            raise locked()

        monkeypatch.setattr(SqlMetricsStore, "order_counts", failing)

        with pytest.raises(PartialAggregationFailure):
            generate_report(
                "operational",
                MetricsRequest(period_token="month", failure_policy="degrade"),
                now=NOW,
            )

    def test_invalid_type_before_any_query(self, monkeypatch):
        def unexpected(*args, **kwargs):
            raise AssertionError("metrics should not be computed")

        monkeypatch.setattr(report_service, "compute_metrics", unexpected)
        with pytest.raises(ReportError):
            generate_report("marketing", MetricsRequest(period_token="month"), now=NOW)
