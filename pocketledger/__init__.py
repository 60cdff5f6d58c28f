"""
Pocket Ledger - Source Package

A personal finance ledger: income/expense transactions and savings goals,
persisted locally, with dashboards, period reports and insights derived
on request.

DESIGN PRINCIPLES:
1. The ledger core is a set of pure functions over immutable snapshots
2. Nothing is deleted outright: reversals retire, the sweep purges later
3. Corrupt storage degrades to an empty ledger, never a crash
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Pocket Ledger Team"
