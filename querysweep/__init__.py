from querysweep.errors import (
    ExtractionError,
    InvocationError,
    MalformedMetricError,
    MetricMissingError,
    RenderError,
    SweepError,
)
from querysweep.kinds import KIND_SPECS, TestKind
from querysweep.sweep import Bounds, Sample, SweepResult, TestCase, run_sweep

__version__ = "0.1.0"
