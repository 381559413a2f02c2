"""Unit tests for engine settings and logging setup."""

import logging

import pytest
from pydantic import ValidationError

from propmodel.core.exceptions import ConfigurationError, InvalidParameterError, PropModelError
from propmodel.core.logging import configure_logging, get_logger
from propmodel.core.settings import EngineSettings, get_settings


class TestEngineSettings:

    def test_defaults(self, settings):
        assert settings.default_interest_rate_pct == 3.5
        assert settings.default_loan_term_years == 30
        assert settings.irr_lower_bound == -0.99
        assert settings.irr_upper_bound == 10.0
        assert settings.irr_outlay_basis == "total_investment"
        assert settings.snowball_max_months == 600

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PROPMODEL_DEFAULT_INTEREST_RATE_PCT", "4.25")
        monkeypatch.setenv("PROPMODEL_IRR_OUTLAY_BASIS", "equity")
        settings = EngineSettings(_env_file=None)
        assert settings.default_interest_rate_pct == 4.25
        assert settings.irr_outlay_basis == "equity"

    def test_irr_bounds_must_be_ordered(self):
        with pytest.raises(ValidationError):
            EngineSettings(_env_file=None, irr_lower_bound=0.5, irr_upper_bound=0.1)

    def test_unknown_outlay_basis(self):
        with pytest.raises(ValidationError):
            EngineSettings(_env_file=None, irr_outlay_basis="loan")

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()

    def test_get_settings_wraps_validation_error(self, monkeypatch):
        monkeypatch.setenv("PROPMODEL_SNOWBALL_MAX_MONTHS", "0")
        get_settings.cache_clear()
        with pytest.raises(ConfigurationError):
            get_settings()


class TestExceptions:

    def test_invalid_parameter_message(self):
        err = InvalidParameterError("strategy", "avalanche", "unknown")
        assert isinstance(err, PropModelError)
        assert err.param_name == "strategy"
        assert "avalanche" in str(err)
        assert "unknown" in str(err)


class TestLogging:

    def test_configure_is_idempotent(self):
        configure_logging()
        configure_logging()

    def test_bound_logger(self):
        log = get_logger("tests.settings")
        log.debug("settings_test_event", value=1)
        log.info("settings_test_event", value=2)

    def test_handlers_scoped_to_package(self):
        configure_logging(force=True)
        engine_logger = logging.getLogger("propmodel")
        assert engine_logger.handlers
        assert engine_logger.propagate is False
