"""
Test suite for configuration and logging

Tests environment-driven settings and structured log output.
"""

import pytest
import io
import json
import logging
from decimal import Decimal
from datetime import date

from loan_projector.config import ProjectorConfig, get_config, reload_config
from loan_projector.logging_config import JSONFormatter, setup_logging, log_action
from loan_projector.loans import Loan
from loan_projector.simulation import estimate_completion_date, SimulationLimitExceededError


@pytest.fixture
def restore_config(monkeypatch):
    """Reload the global configuration once the environment is restored"""
    yield monkeypatch
    monkeypatch.undo()
    reload_config()


class TestConfig:
    """Test configuration defaults and overrides"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOAN_PROJECTOR_MAX_SIMULATION_MONTHS", raising=False)
        config = ProjectorConfig()

        assert config.max_simulation_months == 1200
        assert config.zero_rate_policy == "equal_split"
        assert config.accrue_between_payments is True
        assert config.log_format == "json"
        assert config.api_port == 8090

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("LOAN_PROJECTOR_ZERO_RATE_POLICY", "minimum_only")
        monkeypatch.setenv("LOAN_PROJECTOR_ACCRUE_BETWEEN_PAYMENTS", "false")

        config = ProjectorConfig()

        assert config.zero_rate_policy == "minimum_only"
        assert config.accrue_between_payments is False

    def test_simulation_uses_configured_bound(self, restore_config):
        restore_config.setenv("LOAN_PROJECTOR_MAX_SIMULATION_MONTHS", "3")
        assert reload_config() is get_config()
        assert get_config().max_simulation_months == 3

        loan = Loan(id=0, interest_rate=Decimal('0'))
        loan.set_balance(Decimal('1000'), Decimal('0'), date(2024, 1, 1))

        with pytest.raises(SimulationLimitExceededError) as exc_info:
            estimate_completion_date([loan], Decimal('100'), date(2024, 1, 1))

        assert exc_info.value.months == 3

    def test_configured_bound_does_not_leak(self, monkeypatch):
        """The global configuration is rebuilt from the restored environment"""
        monkeypatch.delenv("LOAN_PROJECTOR_MAX_SIMULATION_MONTHS", raising=False)

        assert get_config().max_simulation_months == ProjectorConfig().max_simulation_months


class TestLogging:
    """Test structured logging"""

    def test_json_formatter(self):
        record = logging.LogRecord(
            name="loan_projector.test", level=logging.INFO, pathname=__file__,
            lineno=1, msg="Allocated %s loans", args=(2,), exc_info=None
        )
        record.action = "allocate"
        record.loan_id = 4

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "Allocated 2 loans"
        assert entry["action"] == "allocate"
        assert entry["loan_id"] == 4
        assert entry["logger"] == "loan_projector.test"
        assert "extra" not in entry

    def test_setup_logging_replaces_handlers(self):
        logger = setup_logging("DEBUG", logger_name="loan_projector.test_setup", log_format="text")
        logger = setup_logging("DEBUG", logger_name="loan_projector.test_setup", log_format="text")

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert not logger.propagate
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_log_action(self):
        logger = logging.getLogger("loan_projector.test_action")
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False

        try:
            log_action(logger, "info", "Payment applied", action="apply_payment",
                       loan_id=3, extra={"amount": "100.00"})
        finally:
            logger.removeHandler(handler)

        entry = json.loads(stream.getvalue())
        assert entry["message"] == "Payment applied"
        assert entry["action"] == "apply_payment"
        assert entry["loan_id"] == 3
        assert entry["extra"] == {"amount": "100.00"}
