# Overview: Builds report documents (sales, financial, operational) from a strict snapshot.

"""
Report payloads for the document-export layer.

A report is generated from a STRICT snapshot only: financial documents must
never be built from zero-substituted partial data. Rendering (PDF layout,
upload) belongs to the export layer; this module returns the structured
content it consumes.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from flask import current_app

from franchise_metrics.time_utils import to_utc_z
from .aggregation_service import AggregationEngine, FailurePolicy
from .metrics_service import MetricsRequest, compute_metrics
from .snapshot_service import MetricsSnapshot

REPORT_TITLES = {
    "sales": "Sales report",
    "financial": "Financial report",
    "operational": "Operational report",
}


class ReportError(ValueError):
    """Raised for invalid report requests."""


def validate_report_type(report_type: str) -> str:
    if report_type not in REPORT_TITLES:
        raise ReportError(
            f"Invalid report type '{report_type}'. Must be one of: {', '.join(sorted(REPORT_TITLES))}"
        )
    return report_type


def _report_data(report_type: str, snapshot: MetricsSnapshot) -> dict:
    overview = snapshot.network_overview.to_dict()
    financial = snapshot.financial.to_dict()
    if report_type == "sales":
        return {
            "totalSales": overview["totalSales"],
            "averageTicket": overview["averageTicket"],
            "growthRate": overview["growthRate"],
            "totalRoyalties": overview["totalRoyalties"],
            "topFranchises": [entry.to_dict() for entry in snapshot.performance.top_performers],
        }
    if report_type == "financial":
        return {
            **financial,
            "totalRoyalties": overview["totalRoyalties"],
            "growthRate": overview["growthRate"],
        }
    return {
        **snapshot.operations.to_dict(),
        "totalFranchises": overview["totalFranchises"],
        "activeFranchises": overview["activeFranchises"],
        "totalVehicles": overview["totalVehicles"],
    }


def build_report(report_type: str, snapshot: MetricsSnapshot) -> dict:
    validate_report_type(report_type)
    period = snapshot.period
    generated = snapshot.generated_at
    return {
        "id": f"{report_type}_{period.token or 'custom'}_{generated.strftime('%Y%m%d%H%M%S')}",
        "type": report_type,
        "title": REPORT_TITLES[report_type],
        "subtitle": f"Period: {period.label}",
        "period": period.to_dict(),
        "franchiseId": snapshot.franchise_id,
        "generatedAt": to_utc_z(generated),
        "data": _report_data(report_type, snapshot),
    }


def generate_report(
    report_type: str,
    request: MetricsRequest,
    *,
    now: datetime | None = None,
    engine: AggregationEngine | None = None,
) -> dict:
    """Compute a strict snapshot and build the report; any failed sub-query fails the report."""
    validate_report_type(report_type)
    strict_request = replace(request, failure_policy=FailurePolicy.STRICT.value)
    snapshot = compute_metrics(
        strict_request,
        now=now,
        engine=engine,
        ranking_size=current_app.config.get("REPORT_RANKING_SIZE", 10),
    )
    return build_report(report_type, snapshot)
