import re

import numpy as np

from querysweep.errors import MalformedMetricError, MetricMissingError
from querysweep.kinds import KIND_SPECS


NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
FLOAT32_MAX = float(np.finfo(np.float32).max)


def parse_number(text):
    """Parse a plain base-10 float literal into a 32-bit float."""
    if not NUMBER_RE.fullmatch(text):
        raise MalformedMetricError(f"metric '{text}' is not a valid number")
    value = float(text)
    if abs(value) > FLOAT32_MAX:
        raise MalformedMetricError(f"metric '{text}' does not fit a 32-bit float")
    return np.float32(value)


def extract_metric(report_text, pattern):
    match = pattern.search(report_text)
    if match is None:
        raise MetricMissingError(
            f"cannot find '{pattern.pattern}' in benchmarking report"
        )
    return parse_number(match.group(1))


def extract_kind_metric(report_text, kind):
    return extract_metric(report_text, KIND_SPECS[kind].pattern)
