"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
Company loan defaults live here and are handed to the service layer explicitly;
the pure computation modules never read configuration.
"""

from decimal import Decimal
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

from .late_fees import LateFeePolicy


class LendingConfig(BaseSettings):
    """Lending core configuration"""

    model_config = SettingsConfigDict(
        env_prefix="LENDING_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Database configuration
    database_url: str = "sqlite:///lending.db"
    use_sqlite: bool = True

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Company profile and loan defaults
    company_name: str = ""
    currency: str = "DOP"
    default_interest_rate_percent: Decimal = Decimal("15.0")
    default_term_months: int = 12
    default_amortization_type: str = "simple"
    default_payment_frequency: str = "monthly"
    min_loan_amount: Decimal = Decimal("1000")
    max_loan_amount: Decimal = Decimal("500000")

    # Late fee defaults
    late_fee_enabled: bool = True
    late_fee_percentage: Decimal = Decimal("5.0")
    late_fee_calculation_type: str = "daily"
    grace_period_days: int = 3
    max_late_fee: Decimal = Decimal("0")  # 0 = no cap

    @property
    def sqlite_path(self) -> Optional[str]:
        """File path of a sqlite:/// database URL"""
        prefix = "sqlite:///"
        if self.database_url.startswith(prefix):
            return self.database_url[len(prefix):] or ":memory:"
        return None

    def late_fee_policy(self) -> LateFeePolicy:
        """Company default late fee policy"""
        return LateFeePolicy.from_settings(
            enabled=self.late_fee_enabled,
            rate_percent=self.late_fee_percentage,
            grace_period_days=self.grace_period_days,
            max_late_fee=self.max_late_fee,
            calculation_type=self.late_fee_calculation_type,
        )


# Global configuration instance
config = LendingConfig()


def get_config() -> LendingConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LendingConfig:
    """Reload configuration from environment"""
    global config
    config = LendingConfig()
    return config
