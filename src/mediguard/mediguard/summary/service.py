from __future__ import annotations

import json
import logging
from typing import Optional, Protocol, Sequence

from ..core.constants import SUMMARY_SAMPLE_LIMIT
from ..attendance.model import AttendanceRecord
from ..sync.connectivity import Connectivity, StaticConnectivity

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = (
    "Offline Mode: AI analysis is unavailable without an internet connection. Please retry when online."
)
NO_RECORDS_MESSAGE = "No attendance records available to analyze."
NOT_CONFIGURED_MESSAGE = "AI analysis is not configured for this installation."
EMPTY_RESPONSE_MESSAGE = "Could not generate analysis."
FAILURE_MESSAGE = "Error generating AI analysis. Please check your API key."


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str:
        raise NotImplementedError


def sample_records(records: Sequence[AttendanceRecord], *, limit: int = SUMMARY_SAMPLE_LIMIT) -> list[dict]:
    out = []
    for r in list(records)[:limit]:
        out.append(
            {
                "staff": r.user_name,
                "hospital": r.hospital_name,
                "checkIn": r.check_in_time.isoformat(),
                "duration": f"{r.duration_minutes} mins" if r.duration_minutes is not None else "Ongoing",
                "flagged": "YES (Location Warning)" if r.flagged else "No",
                "distance": f"{round(r.distance_from_center)}m from center",
                "anomaly": r.anomaly.value if r.anomaly else "None",
            }
        )
    return out


def build_prompt(sample: list[dict]) -> str:
    return (
        "You are an HR assistant for a hospital network.\n"
        "Here is a sample of recent staff attendance logs in JSON format:\n"
        f"{json.dumps(sample, indent=2)}\n\n"
        "Write a concise, professional summary covering staff with repeated location flags or "
        "device anomalies, general adherence to schedule, and recommendations for the admin."
    )


class AttendanceSummarizer:
    """Hands a bounded sample to an external text generator.

    Every failure mode returns a placeholder string instead of raising.
    """

    def __init__(
        self,
        generator: Optional[TextGenerator],
        connectivity: Optional[Connectivity] = None,
        *,
        sample_limit: int = SUMMARY_SAMPLE_LIMIT,
    ):
        self._generator = generator
        self._connectivity = connectivity or StaticConnectivity(online=True)
        self._sample_limit = int(sample_limit)

    def summarize(self, records: Sequence[AttendanceRecord]) -> str:
        if not self._connectivity.is_online():
            return OFFLINE_MESSAGE
        if not records:
            return NO_RECORDS_MESSAGE
        if self._generator is None:
            return NOT_CONFIGURED_MESSAGE

        prompt = build_prompt(sample_records(records, limit=self._sample_limit))
        try:
            text = self._generator.generate(prompt)
        except Exception as e:
            logger.error("Summary generation failed: %s", e)
            return FAILURE_MESSAGE
        return text.strip() if text and text.strip() else EMPTY_RESPONSE_MESSAGE
