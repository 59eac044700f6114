"""
Tests for environment-based configuration and structured logging
"""

import json
import logging
import pytest
from decimal import Decimal

from lending_core import config as config_module
from lending_core.config import LendingConfig, get_config, reload_config
from lending_core.late_fees import LateFeeCalculationType
from lending_core.logging_config import ContextTextFormatter, JSONFormatter, get_logger, log_action, setup_logging


class TestLendingConfig:

    def test_company_defaults(self):
        config = LendingConfig(_env_file=None)

        assert config.currency == "DOP"
        assert config.company_name == ""
        assert config.default_interest_rate_percent == Decimal('15.0')
        assert config.default_term_months == 12
        assert config.min_loan_amount == Decimal('1000')
        assert config.max_loan_amount == Decimal('500000')
        assert config.grace_period_days == 3

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("LENDING_MAX_LOAN_AMOUNT", "750000")
        monkeypatch.setenv("LENDING_LATE_FEE_CALCULATION_TYPE", "compound")

        config = LendingConfig(_env_file=None)

        assert config.max_loan_amount == Decimal('750000')
        assert config.late_fee_policy().calculation_type == LateFeeCalculationType.COMPOUND

    def test_default_late_fee_policy_has_no_cap(self):
        policy = LendingConfig(_env_file=None).late_fee_policy()

        assert policy.enabled
        assert policy.rate_percent == Decimal('5.0')
        assert policy.grace_period_days == 3
        assert policy.max_late_fee is None

    def test_positive_cap(self):
        policy = LendingConfig(_env_file=None, max_late_fee=Decimal('300')).late_fee_policy()
        assert policy.max_late_fee == Decimal('300')

    def test_sqlite_path(self):
        assert LendingConfig(_env_file=None, database_url="sqlite:///data/lending.db").sqlite_path == "data/lending.db"
        assert LendingConfig(_env_file=None, database_url="postgresql://db/lending").sqlite_path is None

    def test_reload(self, monkeypatch):
        original = get_config()
        monkeypatch.setenv("LENDING_API_PORT", "9100")
        try:
            assert reload_config().api_port == 9100
            assert get_config().api_port == 9100
        finally:
            config_module.config = original


class TestStructuredLogging:

    def test_json_formatter_fields(self):
        logger = logging.getLogger("lending.test_formatter")
        record = logger.makeRecord(logger.name, logging.INFO, __name__, 0, "Loan created", (), None)
        record.company_id = "company_a"
        record.action = "create_loan"
        record.extra = {"principal": "1000.00"}

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "Loan created"
        assert entry["level"] == "INFO"
        assert entry["company_id"] == "company_a"
        assert entry["extra"] == {"principal": "1000.00"}
        assert "resource" not in entry

    def test_setup_logging(self):
        logger = setup_logging("DEBUG", "lending.test_setup", "text")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert not logger.propagate

        setup_logging("INFO", "lending.test_setup")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_text_format_appends_context(self):
        logger = logging.getLogger("lending.test_text")
        record = logger.makeRecord(logger.name, logging.INFO, __name__, 0, "Loan created", (), None)
        record.company_id = "company_a"
        record.resource = "loan:1"

        line = ContextTextFormatter().format(record)

        assert line.endswith("INFO lending.test_text: Loan created company_id=company_a resource=loan:1")

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown log format"):
            setup_logging("INFO", "lending.test_unknown", "xml")

    def test_log_action_attaches_context(self, caplog):
        logger = get_logger("lending.test_action")

        with caplog.at_level(logging.INFO, logger="lending.test_action"):
            log_action(logger, "info", "Payment recorded", company_id="company_a",
                       action="record_payment", resource="payment:1", correlation_id="req-1")

        record = caplog.records[-1]
        assert record.getMessage() == "Payment recorded"
        assert record.action == "record_payment"
        assert record.correlation_id == "req-1"

    def test_log_action_respects_level(self, caplog):
        logger = get_logger("lending.test_level")

        with caplog.at_level(logging.WARNING, logger="lending.test_level"):
            log_action(logger, "info", "ignored")

        assert not [r for r in caplog.records if r.name == "lending.test_level"]
