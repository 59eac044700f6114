"""
Lending Core Errors

Domain errors raised at the boundaries of the financial core. They subclass
built-in exceptions so callers can keep catching ValueError / LookupError.
"""


class InvalidTermsError(ValueError):
    """Loan terms violate principal, term, rate or company amount limits"""
    pass


class UnsupportedFrequencyOrAmortizationError(ValueError):
    """Enum value outside the supported frequency / amortization / policy sets"""
    pass


class LoanNotFoundError(LookupError):
    """Loan does not exist for the requesting company"""
    pass


class ScheduleLockedError(RuntimeError):
    """Schedule cannot be regenerated because payments were already recorded"""
    pass
