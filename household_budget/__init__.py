"""
Household Budget - Source Package

A personal/household budgeting library: monthly income and expense
records per contributor, plus the summary and report figures derived
from them.

DESIGN PRINCIPLES:
1. Reports are pure functions of the records
2. Reject invalid input at the boundary, never coerce it
3. Classifications are frozen when an item is written
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Budget Team"
