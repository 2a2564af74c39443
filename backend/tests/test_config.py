"""
Daygrid Backend - Settings Tests
==================================

What:  Production readiness check and value normalisation on Settings.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from daygrid.config import DEV_JWT_SECRET, Settings


class TestProductionCheck:

    def test_dev_secret_rejected(self):
        settings = Settings(jwt_secret=DEV_JWT_SECRET)
        with pytest.raises(ValueError, match="JWT_SECRET"):
            settings.validate_required_for_production()

    def test_empty_secret_rejected(self):
        settings = Settings(jwt_secret="")
        with pytest.raises(ValueError, match="Configuration validation failed"):
            settings.validate_required_for_production()

    def test_real_secret_accepted(self):
        Settings(jwt_secret="x" * 48).validate_required_for_production()


def test_cors_origins_list_splits_and_trims():
    settings = Settings(cors_origins=" http://a.example , ,http://b.example")
    assert settings.cors_origins_list == ["http://a.example", "http://b.example"]


def test_log_level_normalised():
    assert Settings(log_level="debug").log_level == "DEBUG"
    with pytest.raises(PydanticValidationError):
        Settings(log_level="chatty")
