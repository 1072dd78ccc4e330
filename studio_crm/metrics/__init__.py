"""Dashboard metrics."""
from studio_crm.metrics.aggregator import DashboardOverview, compute_overview

__all__ = ["DashboardOverview", "compute_overview"]
