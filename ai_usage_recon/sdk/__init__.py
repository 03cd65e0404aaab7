"""
SDK for AI Usage Recon.

Provides programmatic access to usage reconciliation.
"""

from .reconciler import UsageReconciler, UsageReport

__all__ = ["UsageReconciler", "UsageReport"]
