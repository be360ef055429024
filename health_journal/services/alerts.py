"""Medical alert detection over the most recent days of readings."""

from collections.abc import Sequence
from datetime import datetime

import structlog

from health_journal.config import AlertThresholds
from health_journal.domain.models import AlertKind, AlertType, MedicalAlert, Reading
from health_journal.services.risk import recent_readings
from health_journal.services.trend import sort_chronologically

logger = structlog.get_logger(__name__)

CRISIS_MESSAGE = (
    "CRITICAL: Blood pressure reading indicates hypertensive crisis. "
    "Seek immediate medical attention."
)
STAGE_2_MESSAGE = (
    "WARNING: Blood pressure reading indicates Stage 2 hypertension. "
    "Consult healthcare provider."
)


def alerts_for_reading(reading: Reading, thresholds: AlertThresholds) -> list[MedicalAlert]:
    """At most one blood pressure alert plus at most one heart-rate alert."""
    alerts = []

    if (
        reading.systolic >= thresholds.crisis_systolic
        or reading.diastolic >= thresholds.crisis_diastolic
    ):
        alerts.append(
            MedicalAlert(
                type=AlertType.CRITICAL,
                kind=AlertKind.BLOOD_PRESSURE,
                message=CRISIS_MESSAGE,
                reading=reading,
                timestamp=reading.timestamp,
            )
        )
    elif (
        reading.systolic >= thresholds.stage2_systolic
        or reading.diastolic >= thresholds.stage2_diastolic
    ):
        alerts.append(
            MedicalAlert(
                type=AlertType.WARNING,
                kind=AlertKind.BLOOD_PRESSURE,
                message=STAGE_2_MESSAGE,
                reading=reading,
                timestamp=reading.timestamp,
            )
        )

    if (
        reading.heart_rate > thresholds.heart_rate_high
        or reading.heart_rate < thresholds.heart_rate_low
    ):
        alerts.append(
            MedicalAlert(
                type=AlertType.WARNING,
                kind=AlertKind.HEART_RATE,
                message=(
                    f"Heart rate of {reading.heart_rate} BPM is outside normal range "
                    f"({thresholds.heart_rate_low:.0f}-{thresholds.heart_rate_high:.0f} BPM)."
                ),
                reading=reading,
                timestamp=reading.timestamp,
            )
        )

    return alerts


def check_medical_alerts(
    readings: Sequence[Reading], thresholds: AlertThresholds, now: datetime
) -> list[MedicalAlert]:
    """Alerts for every reading taken within the alert window, oldest first."""
    recent = sort_chronologically(recent_readings(readings, thresholds.window_days, now))
    alerts = [alert for reading in recent for alert in alerts_for_reading(reading, thresholds)]

    if alerts:
        logger.info(
            "medical_alerts_raised",
            critical=sum(1 for a in alerts if a.type == AlertType.CRITICAL),
            warning=sum(1 for a in alerts if a.type == AlertType.WARNING),
        )
    return alerts
