import logging
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel

from .models import Alert, MetricSample, VitalsSample


logger = logging.getLogger(__name__)


class AlertThresholds(BaseModel):
    max_temperature_c: float = 37.5
    max_heart_rate_bpm: int = 100
    max_weight_change_kg: float = 2.0


def newest_first(samples: Sequence) -> list:
    """Order samples by measured_at, newest first. Ties keep their given order."""
    return sorted(samples, key=lambda s: s.measured_at, reverse=True)


def _temperature_rule(vitals: List[VitalsSample], metrics, limits: AlertThresholds) -> Optional[Alert]:
    if not vitals or vitals[0].temperature <= limits.max_temperature_c:
        return None
    return Alert(
        id="temp-high",
        kind="vital",
        severity="medium",
        message="Elevated Temperature Detected",
        recommendation="Monitor temperature and rest. Contact healthcare provider if it persists.",
        detected_at=vitals[0].measured_at,
    )


def _heart_rate_rule(vitals: List[VitalsSample], metrics, limits: AlertThresholds) -> Optional[Alert]:
    if not vitals or vitals[0].heart_rate is None or vitals[0].heart_rate <= limits.max_heart_rate_bpm:
        return None
    return Alert(
        id="hr-high",
        kind="vital",
        severity="medium",
        message="Elevated Heart Rate",
        recommendation="Take a break and practice deep breathing. Monitor for other symptoms.",
        detected_at=vitals[0].measured_at,
    )


def _weight_change_rule(vitals, metrics: List[MetricSample], limits: AlertThresholds) -> Optional[Alert]:
    weights = [m for m in metrics if m.metric_type == "weight"]
    if len(weights) < 2:
        return None
    latest, previous = weights[0], weights[1]
    change = abs(latest.value - previous.value)
    if change <= limits.max_weight_change_kg:
        return None
    return Alert(
        id="weight-change",
        kind="metric",
        severity="low",
        message=f"Significant weight change detected ({change:.1f} kg)",
        recommendation="Consider reviewing your diet and exercise routine.",
        detected_at=latest.measured_at,
    )


AlertRule = Callable[[List[VitalsSample], List[MetricSample], AlertThresholds], Optional[Alert]]

# Every rule is checked; the output keeps this order.
ALERT_RULES: List[AlertRule] = [
    _temperature_rule,
    _heart_rate_rule,
    _weight_change_rule,
]


def evaluate_alerts(
    metrics_history: Sequence[MetricSample],
    vitals_history: Sequence[VitalsSample],
    thresholds: AlertThresholds | None = None,
) -> List[Alert]:
    """
    Derive the current alert list from a patient's history.

    Histories may be passed in any order; both are sorted newest-first here
    before the rules look at them.
    """
    thresholds = thresholds or AlertThresholds()
    vitals = newest_first(vitals_history)
    metrics = newest_first(metrics_history)

    alerts: List[Alert] = []
    for rule in ALERT_RULES:
        alert = rule(vitals, metrics, thresholds)
        if alert is not None:
            logger.debug("Alert rule fired: %s", alert.id)
            alerts.append(alert)
    return alerts
