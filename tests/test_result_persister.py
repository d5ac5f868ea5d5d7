import json
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from genesis_comps.models import ComparableProperty, GalleryImages, PropertyPanels
from genesis_comps.services.result_persister import ResultPersister, sanitize_location

WHEN = datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=UTC)

PANELS = PropertyPanels(
    property_info={"Bedrooms": "3", "Bathrooms": "2", "Sq Ft": "1,850"},
    land_info={"Lot Size": "0.25 acres"},
)
COMPS = [
    ComparableProperty(
        page=2,
        property_info={"location": "200 Main St", "ExtractionTimestamp": "2024-05-01T12:00:00.000Z"},
        gallery=GalleryImages(all_images=["https://api.propelio.com/media/2.jpg"]),
    ),
    ComparableProperty(page=3, property_info={"location": "300 Main St"}),
]


def test_sanitize_location():
    assert sanitize_location("Austin, TX 78701") == "Austin__TX_78701"
    assert sanitize_location("Texas") == "Texas"


def test_filename_pattern(tmp_path):
    persister = ResultPersister(tmp_path)

    assert persister.filename_for("Austin, TX", WHEN) == "property_data_Austin__TX_2024-05-01T12-30-45-123Z.json"


def test_build_result_summary():
    result = ResultPersister().build_result("Texas", PANELS, COMPS, failed_pages=1, extracted_at=WHEN)

    assert result.extracted_at == "2024-05-01T12:30:45.123Z"
    assert result.summary.total_fields == 4
    assert result.summary.property_info_fields == 3
    assert result.summary.land_info_fields == 1
    assert result.summary.comparable_properties_count == 2
    assert result.summary.failed_pages_count == 1
    assert result.summary.has_complete_data is True


def test_result_is_immutable():
    result = ResultPersister().build_result("Texas", PANELS, COMPS)

    with pytest.raises(ValidationError):
        result.location = "Elsewhere"
    with pytest.raises(ValidationError):
        COMPS[0].page = 9


def test_save_writes_camel_case_document(tmp_path):
    out_dir = tmp_path / "property_data"
    persister = ResultPersister(out_dir)
    result = persister.build_result("Austin, TX", PANELS, COMPS, extracted_at=WHEN)

    path = persister.save(result, when=WHEN)

    assert path == out_dir / "property_data_Austin__TX_2024-05-01T12-30-45-123Z.json"
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["location"] == "Austin, TX"
    assert doc["extractedAt"] == "2024-05-01T12:30:45.123Z"
    assert doc["propertyData"]["Sq Ft"] == "1,850"
    assert doc["landInfo"] == {"Lot Size": "0.25 acres"}
    assert doc["comparableSales"][0]["propertyInfo"]["ExtractionTimestamp"] == "2024-05-01T12:00:00.000Z"
    assert doc["comparableSales"][0]["gallery"]["allImages"] == ["https://api.propelio.com/media/2.jpg"]
    assert doc["summary"]["hasCompleteData"] is True
    assert doc["summary"]["comparablePropertiesCount"] == 2
    assert list(out_dir.glob("*.tmp")) == []


def test_write_failure_is_logged_not_raised(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    persister = ResultPersister(blocker / "out")

    result = persister.build_result("Texas", PANELS, [])

    assert persister.save(result) is None
