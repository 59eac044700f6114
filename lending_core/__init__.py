"""
Lending Core

Loan financial computation core for a multi-tenant lending and pawnshop
business: payment schedules, late-fee accrual, minimum payments and the
standalone financial calculators. All monetary math uses Decimal.
"""

__version__ = "1.0.0"
