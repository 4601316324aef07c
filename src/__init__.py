"""
Smart Spends - Source Package

A quick-add expense tracker: say or type a spend, review the draft,
save it.

DESIGN PRINCIPLES:
1. Parser suggests → Human confirms → Store persists
2. Never auto-save a draft
3. Fail visibly when persistence fails
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Smart Spends Team"
