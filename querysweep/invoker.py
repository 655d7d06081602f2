import logging
import subprocess

from querysweep.errors import InvocationError
from querysweep.kinds import kind_args
from querysweep.queries import query_uri


logger = logging.getLogger(__name__)

# The name of the command used to benchmark the HTTP server
BENCH_CMD = "httperf"

# Seconds a single benchmarking run may take before it is killed
DEFAULT_TIMEOUT = 300.0

STDERR_TAIL = 400


def build_command(server_addr, port, query, kind, sample_count, tool=BENCH_CMD):
    return [
        tool,
        "--server",
        server_addr,
        "--port",
        str(port),
        "--uri",
        query_uri(query),
    ] + kind_args(kind, sample_count)


class SubprocessRunner:
    """Runs a benchmarking command and returns its standard output as text."""

    def __call__(self, argv, timeout=None):
        try:
            proc = subprocess.run(argv, capture_output=True, timeout=timeout)
        except subprocess.TimeoutExpired:
            raise InvocationError(f"'{argv[0]}' did not finish within {timeout}s")
        except OSError as e:
            raise InvocationError(f"failed to execute '{argv[0]}': {e}") from e

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            raise InvocationError(
                f"'{argv[0]}' exited with status {proc.returncode}: "
                f"{stderr[-STDERR_TAIL:]}"
            )

        try:
            return proc.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvocationError(f"'{argv[0]}' output is not valid UTF-8") from e


def invoke(
    server_addr,
    port,
    query,
    kind,
    sample_count,
    runner=None,
    tool=BENCH_CMD,
    timeout=DEFAULT_TIMEOUT,
):
    """Run one benchmark for `query` and return the raw report text."""
    if runner is None:
        runner = SubprocessRunner()
    argv = build_command(server_addr, port, query, kind, sample_count, tool=tool)
    logger.debug("Executing: %s", " ".join(argv))
    return runner(argv, timeout=timeout or None)
