from pydantic import BaseModel, Field

from app.core.datetime_utils import UTCDatetime


class SystemSettingResponse(BaseModel):
    key: str
    value: str
    description: str | None = None
    is_default: bool = Field(
        default=False, description="True when no value is stored and the default applies"
    )
    updated_at: UTCDatetime | None = None


class SystemSettingUpdate(BaseModel):
    value: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=1000)
