# backend/tests/unit/test_config_and_exceptions.py

from datetime import date

import pytest
from pydantic import ValidationError

from rehome_ops.core.config import Settings
from rehome_ops.core.exceptions import (
    ConcurrentModificationException,
    NotFoundException,
    PartialBulkFailureException,
    StoreUnavailableException,
    ValidationException,
)


class TestSettings:
    def test_city_universe_from_comma_string(self):
        settings = Settings(city_universe=" Amsterdam, Utrecht,,Amsterdam ")
        assert settings.city_universe == ["Amsterdam", "Utrecht"]

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError):
            Settings(business_timezone="Mars/Olympus_Mons")

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"


class TestExceptionMapping:
    @pytest.mark.parametrize(
        "exc,status_code",
        [
            (ValidationException("bad"), 400),
            (NotFoundException("missing"), 404),
            (ConcurrentModificationException(date(2025, 6, 10), ["A"], ["B"]), 409),
            (PartialBulkFailureException([date(2025, 6, 1)], [date(2025, 6, 2)]), 422),
            (StoreUnavailableException("list_date_blocks", target="2025-06-10"), 503),
        ],
    )
    def test_http_status(self, exc, status_code):
        http_exc = exc.to_http_exception()
        assert http_exc.status_code == status_code
        assert http_exc.detail["code"] == exc.code

    def test_store_unavailable_carries_operation_and_target(self):
        exc = StoreUnavailableException(
            "insert_schedule_assignments", target="2025-06-10", cause=RuntimeError("boom")
        )
        assert exc.details == {
            "operation": "insert_schedule_assignments",
            "target": "2025-06-10",
            "error": "boom",
        }
        assert "2025-06-10" in exc.message
