"""Monitoring module - Watchdog and export metrics."""

from .watchdog import Watchdog, run_watchdog
from .export_metrics import ExportMetrics, ExportMetricsLogger

__all__ = ['Watchdog', 'run_watchdog', 'ExportMetrics', 'ExportMetricsLogger']
