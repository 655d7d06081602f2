import logging
from collections import namedtuple

import numpy as np
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from querysweep.errors import ExtractionError, InvocationError
from querysweep.invoker import BENCH_CMD, DEFAULT_TIMEOUT, SubprocessRunner, invoke
from querysweep.kinds import KIND_SPECS
from querysweep.parser import extract_metric
from querysweep.queries import build_queries, query_uri


logger = logging.getLogger(__name__)

# The number of times the tester should re-run a route for consistency
SAMPLES = 10

DEFAULT_RETRIES = 2
DEFAULT_RETRY_DELAY = 1.0


class TestCase(
    namedtuple("TestCase", ["server_addr", "port", "dictionary", "kind", "output"])
):
    __test__ = False


Sample = namedtuple("Sample", ["x", "y"])
Bounds = namedtuple("Bounds", ["min_x", "max_x", "min_y", "max_y"])
Skipped = namedtuple("Skipped", ["step", "query", "reason"])


class SweepResult(namedtuple("SweepResult", ["case", "samples", "skipped", "sample_count"])):
    @property
    def complete(self):
        return len(self.skipped) == 0

    @property
    def bounds(self):
        return compute_bounds(self.samples)


def compute_bounds(samples):
    if len(samples) == 0:
        raise ValueError("cannot compute bounds of an empty series")
    xs = np.array([s.x for s in samples], dtype=np.float32)
    ys = np.array([s.y for s in samples], dtype=np.float32)
    return Bounds(
        min_x=xs.min(), max_x=xs.max(), min_y=ys.min(), max_y=ys.max()
    )


def _invoke_with_retries(case, query, sample_count, runner, tool, timeout, retries, retry_delay):
    def log_retry(retry_state):
        logger.warning(
            "Benchmark for '%s' failed (%s), retrying (%d/%d)",
            query,
            retry_state.outcome.exception(),
            retry_state.attempt_number,
            retries,
        )

    retrying = Retrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_fixed(retry_delay),
        retry=retry_if_exception_type(InvocationError),
        before_sleep=log_retry,
        reraise=True,
    )
    return retrying(
        invoke,
        case.server_addr,
        case.port,
        query,
        case.kind,
        sample_count,
        runner=runner,
        tool=tool,
        timeout=timeout,
    )


def run_sweep(
    case,
    sample_count=SAMPLES,
    runner=None,
    tool=BENCH_CMD,
    timeout=DEFAULT_TIMEOUT,
    retries=DEFAULT_RETRIES,
    retry_delay=DEFAULT_RETRY_DELAY,
    fail_fast=False,
):
    """Benchmark every prefix query of the case's dictionary, one after another.

    With `fail_fast` the first invocation or extraction error propagates.
    Otherwise invocation errors are retried `retries` times and a step that
    still fails, or whose report has no usable metric, is recorded in
    `SweepResult.skipped` and the sweep moves on.
    """
    if runner is None:
        runner = SubprocessRunner()
    spec = KIND_SPECS[case.kind]
    samples, skipped = [], []

    for i, query in enumerate(build_queries(case.dictionary)):
        logger.info(
            "Running query #%d: http://%s:%d%s",
            i,
            case.server_addr,
            case.port,
            query_uri(query),
        )
        try:
            report = _invoke_with_retries(
                case,
                query,
                sample_count,
                runner,
                tool,
                timeout,
                0 if fail_fast else retries,
                retry_delay,
            )
            value = extract_metric(report, spec.pattern)
        except (InvocationError, ExtractionError) as e:
            if fail_fast:
                raise
            logger.warning("Skipping query #%d ('%s'): %s", i, query, e)
            skipped.append(Skipped(step=i, query=query, reason=str(e)))
            continue

        samples.append(Sample(x=np.float32(len(query)), y=value))
        logger.info("Query #%d finished: %s - %s%s", i, spec.label, value, spec.unit)

    return SweepResult(
        case=case, samples=samples, skipped=skipped, sample_count=sample_count
    )


def run_sweeps(cases, **kwargs):
    """Run one sweep per case, strictly in order.

    Sweeps never overlap since they all load the same live server.
    """
    results = []
    for case in cases:
        logger.info("Starting %s sweep over %d words", case.kind.value, len(case.dictionary))
        results.append(run_sweep(case, **kwargs))
    return results
