class SweepError(RuntimeError):
    pass


class InvocationError(SweepError):
    """The benchmarking tool could not be run or produced unusable output."""


class ExtractionError(SweepError):
    """The benchmarking report did not yield a metric."""


class MetricMissingError(ExtractionError):
    pass


class MalformedMetricError(ExtractionError):
    pass


class RenderError(SweepError):
    pass
