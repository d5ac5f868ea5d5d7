from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing with camelCase keys (the JSON shape the API exposes)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class JobStatus(Enum):
    STARTING = "starting"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ExtractionOutcome(Enum):
    COMPLETE = "COMPLETE"                 # Both panels scraped, comparables attempted
    INCOMPLETE_DATA = "INCOMPLETE_DATA"   # One or both property panels were empty
    NOT_REACHED = "NOT_REACHED"           # Login or search did not succeed


class Session(CamelModel):
    """Persisted authentication artifacts (cookies + localStorage)."""

    cookies: List[Dict[str, Any]] = Field(default_factory=list)
    local_storage: Dict[str, str] = Field(default_factory=dict)
    stale: bool = False
    saved_at: Optional[datetime] = None


class Job(CamelModel):
    id: str
    location: str
    started_at: datetime
    status: JobStatus = JobStatus.STARTING
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    login_success: Optional[bool] = None
    search_success: Optional[bool] = None
    comparable_extraction_success: Optional[bool] = None
    overall_success: Optional[bool] = None

    @property
    def is_active(self) -> bool:
        return self.status in (JobStatus.STARTING, JobStatus.RUNNING)


class PropertyPanels(CamelModel):
    """Label/value mappings scraped from the base and land tabs."""

    property_info: Dict[str, str] = Field(default_factory=dict)
    land_info: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return bool(self.property_info) and bool(self.land_info)


class GalleryImages(CamelModel):
    model_config = ConfigDict(frozen=True)

    all_images: List[str] = Field(default_factory=list)


class ComparableProperty(CamelModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    property_info: Dict[str, str] = Field(default_factory=dict)
    gallery: GalleryImages = Field(default_factory=GalleryImages)


class ExtractionSummary(CamelModel):
    model_config = ConfigDict(frozen=True)

    total_fields: int
    property_info_fields: int
    land_info_fields: int
    comparable_properties_count: int
    failed_pages_count: int = 0
    has_complete_data: bool


class ExtractionResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    location: str
    extracted_at: str
    property_data: Dict[str, str]
    land_info: Dict[str, str]
    comparable_sales: List[ComparableProperty] = Field(default_factory=list)
    summary: ExtractionSummary


class JobResult(CamelModel):
    """One entry of the results log."""

    job_id: str
    location: str
    login_success: bool = False
    search_success: bool = False
    comparable_extraction_success: bool = False
    comparable_data: Dict[str, Any] = Field(default_factory=dict)
    overall_success: bool = False
    outcome: ExtractionOutcome = ExtractionOutcome.NOT_REACHED
    output_path: Optional[str] = None
    error: Optional[str] = None
    completed_at: Optional[datetime] = None
    duration_ms: Optional[int] = None
