"""
Result Persister

Writes one JSON document per completed extraction.

Filesystem Structure:
    property_data/
    ├── property_data_{location}_{timestamp}.json
    └── ...

``{location}`` has every character outside ``[A-Za-z0-9]`` replaced with
``_``; ``{timestamp}`` is the ISO-8601 extraction time with ``:`` and ``.``
replaced by ``-``.

Usage:
    persister = ResultPersister(Path("property_data"))
    result = persister.build_result("Texas", panels, comparables)
    path = persister.save(result)   # None when the write failed
"""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger

from genesis_comps.exceptions import PersistenceFailure
from genesis_comps.models import (
    ComparableProperty,
    ExtractionResult,
    ExtractionSummary,
    PropertyPanels,
)
from genesis_comps.utils.time import filename_timestamp, iso_timestamp, now_utc

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")


def sanitize_location(location: str) -> str:
    return _UNSAFE_CHARS.sub("_", location)


class ResultPersister:
    def __init__(self, output_dir: Path | str = Path("property_data")):
        self.output_dir = Path(output_dir)

    def build_result(
        self,
        location: str,
        panels: PropertyPanels,
        comparables: Optional[List[ComparableProperty]] = None,
        failed_pages: int = 0,
        extracted_at: Optional[datetime] = None,
    ) -> ExtractionResult:
        comparables = list(comparables or [])
        property_fields = len(panels.property_info)
        land_fields = len(panels.land_info)
        summary = ExtractionSummary(
            total_fields=property_fields + land_fields,
            property_info_fields=property_fields,
            land_info_fields=land_fields,
            comparable_properties_count=len(comparables),
            failed_pages_count=failed_pages,
            has_complete_data=panels.is_complete,
        )
        return ExtractionResult(
            location=location,
            extracted_at=iso_timestamp(extracted_at),
            property_data=dict(panels.property_info),
            land_info=dict(panels.land_info),
            comparable_sales=comparables,
            summary=summary,
        )

    def filename_for(self, location: str, when: Optional[datetime] = None) -> str:
        return f"property_data_{sanitize_location(location)}_{filename_timestamp(when)}.json"

    def save(self, result: ExtractionResult, when: Optional[datetime] = None) -> Optional[Path]:
        """Write ``result`` to the output directory; never raises on I/O errors."""
        path = self.output_dir / self.filename_for(result.location, when or now_utc())
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_name(path.name + ".tmp")
            tmp_path.write_text(json.dumps(result.to_json_dict(), indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            failure = PersistenceFailure(f"Failed to save data to {path}: {e}")
            logger.error(str(failure))
            return None

        logger.info(
            f"Saved {result.summary.comparable_properties_count} comparables "
            f"for {result.location!r} to {path}"
        )
        return path
