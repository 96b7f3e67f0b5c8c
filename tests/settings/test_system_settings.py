"""Tests for the system settings store and its admin routes."""

from decimal import Decimal

import pytest

from app.core.constants import INSTRUCTOR_REVENUE_PERCENTAGE_KEY
from app.core.exceptions import NotFoundError, ValidationError
from app.settings.models.system_setting import SystemSetting
from app.settings.services.system_settings_service import SystemSettingsService


def _store(db_session, value):
    db_session.add(SystemSetting(key=INSTRUCTOR_REVENUE_PERCENTAGE_KEY, value=value))
    db_session.commit()


class TestInstructorRevenuePercentage:
    def test_default_when_unset(self, db_session):
        assert SystemSettingsService(db_session).get_instructor_revenue_percentage() == Decimal(
            "70"
        )

    def test_stored_value(self, db_session):
        _store(db_session, "65.5")
        assert SystemSettingsService(db_session).get_instructor_revenue_percentage() == Decimal(
            "65.5"
        )

    @pytest.mark.parametrize(("raw", "expected"), [("150", "100"), ("-5", "0")])
    def test_clamps_out_of_range(self, db_session, raw, expected):
        _store(db_session, raw)
        assert SystemSettingsService(db_session).get_instructor_revenue_percentage() == Decimal(
            expected
        )

    @pytest.mark.parametrize("raw", ["seventy", "", "NaN", "Infinity"])
    def test_invalid_falls_back_to_default(self, db_session, raw):
        _store(db_session, raw)
        assert SystemSettingsService(db_session).get_instructor_revenue_percentage() == Decimal(
            "70"
        )


class TestSystemSettingsService:
    def test_get_all_includes_defaults(self, db_session):
        [setting] = SystemSettingsService(db_session).get_all()

        assert setting.key == INSTRUCTOR_REVENUE_PERCENTAGE_KEY
        assert setting.value == "70"
        assert setting.is_default is True

    def test_update_creates_then_updates(self, db_session):
        service = SystemSettingsService(db_session)

        created = service.update(INSTRUCTOR_REVENUE_PERCENTAGE_KEY, "60")
        updated = service.update(INSTRUCTOR_REVENUE_PERCENTAGE_KEY, "55", "Lowered for promo")

        assert created.value == "60"
        assert created.is_default is False
        assert updated.value == "55"
        assert updated.description == "Lowered for promo"
        assert db_session.query(SystemSetting).count() == 1

    @pytest.mark.parametrize("value", ["101", "-1", "abc", "NaN"])
    def test_update_rejects_invalid_percentage(self, db_session, value):
        with pytest.raises(ValidationError):
            SystemSettingsService(db_session).update(INSTRUCTOR_REVENUE_PERCENTAGE_KEY, value)

    def test_other_keys_are_free_text(self, db_session):
        service = SystemSettingsService(db_session)
        service.update("support_email", "help@example.com")
        assert service.get_value("support_email") == "help@example.com"

    def test_unknown_key(self, db_session):
        with pytest.raises(NotFoundError):
            SystemSettingsService(db_session).get_by_key("missing")


class TestSystemSettingsRoutes:
    async def test_list(self, test_client, admin_headers):
        response = await test_client.get("/api/v1/admin/settings", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()[0]["key"] == INSTRUCTOR_REVENUE_PERCENTAGE_KEY

    async def test_update(self, test_client, admin_headers):
        response = await test_client.put(
            f"/api/v1/admin/settings/{INSTRUCTOR_REVENUE_PERCENTAGE_KEY}",
            json={"value": "75"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["value"] == "75"

    async def test_update_out_of_range(self, test_client, admin_headers):
        response = await test_client.put(
            f"/api/v1/admin/settings/{INSTRUCTOR_REVENUE_PERCENTAGE_KEY}",
            json={"value": "120"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"

    async def test_unknown_key(self, test_client, admin_headers):
        response = await test_client.get("/api/v1/admin/settings/missing", headers=admin_headers)
        assert response.status_code == 404

    async def test_instructor_forbidden(self, test_client, instructor_headers):
        response = await test_client.put(
            f"/api/v1/admin/settings/{INSTRUCTOR_REVENUE_PERCENTAGE_KEY}",
            json={"value": "100"},
            headers=instructor_headers,
        )
        assert response.status_code == 403
