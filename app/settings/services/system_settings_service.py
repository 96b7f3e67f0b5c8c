"""Administrator-editable system settings."""

from decimal import Decimal, InvalidOperation

import structlog
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import (
    INSTRUCTOR_REVENUE_PERCENTAGE_KEY,
    MAX_REVENUE_PERCENTAGE,
    MIN_REVENUE_PERCENTAGE,
)
from app.core.exceptions import NotFoundError, ValidationError
from app.core.repository import BaseRepository
from app.settings.models.system_setting import SystemSetting
from app.settings.schemas.system_setting import SystemSettingResponse

logger = structlog.get_logger(__name__)

DEFAULT_VALUES: dict[str, str] = {
    INSTRUCTOR_REVENUE_PERCENTAGE_KEY: str(settings.DEFAULT_INSTRUCTOR_REVENUE_PERCENTAGE),
}

DEFAULT_DESCRIPTIONS: dict[str, str] = {
    INSTRUCTOR_REVENUE_PERCENTAGE_KEY: (
        "Percentage of course revenue paid to independent instructors (0-100)"
    ),
}


def _parse_percentage(value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


class SystemSettingRepository(BaseRepository[SystemSetting]):
    def __init__(self, db: Session):
        super().__init__(db, SystemSetting)

    def find_by_key(self, key: str) -> SystemSetting | None:
        return self.db.query(SystemSetting).filter(SystemSetting.key == key).first()


class SystemSettingsService:
    """Read and update the key/value settings store."""

    def __init__(self, db: Session):
        self.repository = SystemSettingRepository(db)

    def get_all(self) -> list[SystemSettingResponse]:
        """Stored settings plus defaults for known keys that were never saved."""
        stored = {s.key: s for s in self.repository.get_all(SystemSetting.key)}
        responses = [self._to_response(s) for s in stored.values()]
        for key, value in DEFAULT_VALUES.items():
            if key not in stored:
                responses.append(self._default_response(key, value))
        return sorted(responses, key=lambda r: r.key)

    def get_by_key(self, key: str) -> SystemSettingResponse:
        """Get one setting.

        Raises:
            NotFoundError: If the key is neither stored nor known.
        """
        setting = self.repository.find_by_key(key)
        if setting is not None:
            return self._to_response(setting)
        if key in DEFAULT_VALUES:
            return self._default_response(key, DEFAULT_VALUES[key])
        raise NotFoundError(f"Setting {key!r} not found", resource="system_setting")

    def get_value(self, key: str) -> str | None:
        """Stored value, falling back to the documented default."""
        setting = self.repository.find_by_key(key)
        if setting is not None:
            return setting.value
        return DEFAULT_VALUES.get(key)

    def get_instructor_revenue_percentage(self) -> Decimal:
        """Instructor share of course revenue, in percent.

        Unset or unparseable values fall back to the default; values outside
        [0, 100] are clamped, since the setting may be edited by hand.
        """
        raw = self.get_value(INSTRUCTOR_REVENUE_PERCENTAGE_KEY)
        percentage = _parse_percentage(raw)
        if percentage is None:
            default = Decimal(DEFAULT_VALUES[INSTRUCTOR_REVENUE_PERCENTAGE_KEY])
            logger.warning("revenue_percentage_invalid", raw_value=raw, fallback=str(default))
            return default

        clamped = min(MAX_REVENUE_PERCENTAGE, max(MIN_REVENUE_PERCENTAGE, percentage))
        if clamped != percentage:
            logger.warning(
                "revenue_percentage_clamped", raw_value=raw, clamped_value=str(clamped)
            )
        return clamped

    def update(self, key: str, value: str, description: str | None = None) -> SystemSettingResponse:
        """Create or update a setting.

        Raises:
            ValidationError: If the revenue percentage is not a number in [0, 100].
        """
        if key == INSTRUCTOR_REVENUE_PERCENTAGE_KEY:
            percentage = _parse_percentage(value)
            if percentage is None or not (
                MIN_REVENUE_PERCENTAGE <= percentage <= MAX_REVENUE_PERCENTAGE
            ):
                raise ValidationError(
                    "Instructor revenue percentage must be a number between 0 and 100",
                    field="value",
                )

        setting = self.repository.find_by_key(key)
        if setting is None:
            setting = self.repository.create(
                key=key,
                value=value,
                description=description or DEFAULT_DESCRIPTIONS.get(key),
            )
        else:
            changes: dict[str, object] = {"value": value}
            if description is not None:
                changes["description"] = description
            setting = self.repository.update(setting, **changes)

        logger.info("system_setting_updated", key=key, value=value)
        return self._to_response(setting)

    @staticmethod
    def _to_response(setting: SystemSetting) -> SystemSettingResponse:
        return SystemSettingResponse(
            key=setting.key,
            value=setting.value,
            description=setting.description,
            is_default=False,
            updated_at=setting.updated_at,
        )

    @staticmethod
    def _default_response(key: str, value: str) -> SystemSettingResponse:
        return SystemSettingResponse(
            key=key,
            value=value,
            description=DEFAULT_DESCRIPTIONS.get(key),
            is_default=True,
        )
