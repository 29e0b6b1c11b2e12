from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Sequence, Optional, Dict, Any

from rendering.calculation_info import CalculationInformation
from utils.errors import EncodingError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%d-%m-%Y_%H-%M-%S"


class JsonTelemetrySink:
    """
    Persists a render's aggregate and per-unit timing records as one indented
    JSON document named {Kind}_{w}x{h}_{timestamp}.json.
    """

    def __init__(self, directory: str):
        self.directory = directory

    def filename_for(self, kind: str, aggregate: CalculationInformation,
                     when: Optional[datetime] = None) -> str:
        stamp = (when or aggregate.start_time or datetime.now()).strftime(TIMESTAMP_FORMAT)
        return f"{kind}_{aggregate.resolution_x}x{aggregate.resolution_y}_{stamp}.json"

    def write(self, kind: str, aggregate: CalculationInformation,
              units: Sequence[CalculationInformation] = (),
              extra: Optional[Dict[str, Any]] = None) -> str:
        doc = {
            "kind": kind,
            "summary": str(aggregate),
            "aggregate": aggregate.to_dict(),
            "units": [u.to_dict() for u in units],
        }
        if extra:
            doc["parameters"] = extra
        path = os.path.join(self.directory, self.filename_for(kind, aggregate))
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(path, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, indent=2, default=str)
        except (OSError, TypeError, ValueError) as e:
            raise EncodingError(f"could not write telemetry {path}: {e}") from e
        logger.debug("Telemetry written to %s", path)
        return path
