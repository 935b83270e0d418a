from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class UsageReport(BaseModel):
    """Payload of a `usage_report.created` event"""
    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    report_id: Optional[str] = Field(default=None, alias="reportId")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    charger_id: Optional[str] = Field(default=None, alias="chargerId")
    location: Optional[str] = None
    reported_by: Optional[str] = Field(default=None, alias="reportedBy")


class UsageReportCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl", min_length=1)
    charger_id: Optional[str] = Field(default=None, alias="chargerId")
    location: Optional[str] = None


class UsageReportCreateResponse(BaseModel):
    status: str
    message: str
    report_id: str


class DetectionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    plate: str
    confidence: float = Field(ge=0, le=1)


class OwnerRecord(BaseModel):
    plate: str
    user_id: str
