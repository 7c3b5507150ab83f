"""Mapping of Sensu check results onto gauge samples."""

from typing import NamedTuple, Tuple

from .models import STATUS_CRITICAL, STATUS_OK, STATUS_WARNING, CheckResult

BASE_LABELS = ("client", "check_name")
SEVERITY_LABELS = ("check_message", "check_severity")

_SEVERITIES = {
    STATUS_OK: "ok",
    STATUS_WARNING: "warning",
    STATUS_CRITICAL: "critical",
}


class MetricSample(NamedTuple):
    labels: Tuple[str, ...]
    value: float


def check_value(status: int) -> float:
    # in Sensu 0 means OK, in Prometheus 1 means up
    return 1.0 if status == STATUS_OK else 0.0


def check_severity(status: int) -> str:
    return _SEVERITIES.get(status, "unknown")


def label_names(include_severity: bool = False) -> Tuple[str, ...]:
    if include_severity:
        return BASE_LABELS + SEVERITY_LABELS
    return BASE_LABELS


# upper bound on the check_message label length
MESSAGE_LABEL_LIMIT = 200


def _safe_label(v: str, limit: int = MESSAGE_LABEL_LIMIT) -> str:
    return v[:limit]


def translate(result: CheckResult, include_severity: bool = False) -> MetricSample:
    """Map one check result onto a gauge sample.

    With ``include_severity`` the labels also carry the check output, cut to
    ``MESSAGE_LABEL_LIMIT`` characters, and the severity name.
    """
    check = result.check
    labels: Tuple[str, ...] = (result.client, check.name)
    if include_severity:
        labels += (_safe_label(check.output), check_severity(check.status))
    return MetricSample(labels=labels, value=check_value(check.status))
