import sys

import pytest

from querysweep.errors import InvocationError
from querysweep.invoker import SubprocessRunner, build_command, invoke
from querysweep.kinds import TestKind


def test_build_command_latency():
    assert build_command("127.0.0.1", 8080, "cat+dog", TestKind.LATENCY, 10) == [
        "httperf",
        "--server",
        "127.0.0.1",
        "--port",
        "8080",
        "--uri",
        "/query?terms=cat+dog",
        "--num-calls",
        "10",
    ]


@pytest.mark.parametrize("kind", [TestKind.THROUGHPUT_BYTES, TestKind.THROUGHPUT_REQUESTS])
def test_build_command_throughput(kind):
    argv = build_command("localhost", 80, "cat", kind, 25, tool="/opt/httperf")
    assert argv[0] == "/opt/httperf"
    assert argv[-2:] == ["--num-conns", "25"]
    assert "--num-calls" not in argv


def test_invoke_passes_command_and_timeout_to_runner():
    seen = {}

    def runner(argv, timeout=None):
        seen["argv"] = argv
        seen["timeout"] = timeout
        return "report"

    out = invoke("127.0.0.1", 8080, "cat", TestKind.LATENCY, 3, runner=runner, timeout=5)
    assert out == "report"
    assert seen["argv"][6] == "/query?terms=cat"
    assert seen["timeout"] == 5


def test_invoke_zero_timeout_means_no_limit():
    seen = []

    def runner(argv, timeout=None):
        seen.append(timeout)
        return ""

    invoke("h", 1, "q", TestKind.LATENCY, 1, runner=runner)
    invoke("h", 1, "q", TestKind.LATENCY, 1, runner=runner, timeout=0)
    assert seen == [300.0, None]


def test_subprocess_runner_captures_stdout():
    out = SubprocessRunner()([sys.executable, "-c", "print('Request rate: 1.0 req/s')"])
    assert out.strip() == "Request rate: 1.0 req/s"


def test_subprocess_runner_missing_tool():
    with pytest.raises(InvocationError, match="failed to execute"):
        SubprocessRunner()(["querysweep-no-such-benchmark-tool", "--server", "x"])


def test_subprocess_runner_nonzero_exit():
    argv = [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
    with pytest.raises(InvocationError, match="status 3: boom"):
        SubprocessRunner()(argv)


def test_subprocess_runner_rejects_non_utf8_output():
    argv = [sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'\\xff\\xfe')"]
    with pytest.raises(InvocationError, match="UTF-8"):
        SubprocessRunner()(argv)


def test_subprocess_runner_timeout():
    argv = [sys.executable, "-c", "import time; time.sleep(10)"]
    with pytest.raises(InvocationError, match="did not finish"):
        SubprocessRunner()(argv, timeout=0.5)
