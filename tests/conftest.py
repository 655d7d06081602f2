import pytest

from querysweep.errors import InvocationError


LATENCY_REPORT = """httperf --client=0/1 --server=127.0.0.1 --port=8080 --uri=/query?terms=cat --send-buffer=4096 --recv-buffer=16384 --num-conns=1 --num-calls=10
Maximum connect burst length: 0

Total: connections 1 requests 10 replies 10 test-duration 0.006 s

Connection rate: 161.3 conn/s (6.2 ms/conn, <=1 concurrent connections)
Connection time [ms]: min 6.2 avg 12.34 max 6.2 median 6.5 stddev 0.0
Connection time [ms]: connect 0.1
Connection length [replies/conn]: 10.000

Request rate: 1612.9 req/s (0.6 ms/req)
Request size [B]: 80.0

Reply rate [replies/s]: min 0.0 avg 0.0 max 0.0 stddev 0.0 (0 samples)
Reply time [ms]: response 0.6 transfer 0.0
Reply size [B]: header 100.0 content 75.0 footer 0.0 (total 175.0)
Reply status: 1xx=0 2xx=10 3xx=0 4xx=0 5xx=0

CPU time [s]: user 0.00 system 0.00 (user 0.0% system 0.0% total 0.0%)
Net I/O: 9.1 KB/s (2.3*10^6 bps)

Errors: total 0 client-timo 0 socket-timo 0 connrefused 0 connreset 0
Errors: fd-unavail 0 addrunavail 0 ftab-full 0 other 0
"""


def httperf_report(latency="12.34", request_rate="567.8", net_io="9.1"):
    return (
        LATENCY_REPORT.replace("avg 12.34 max", f"avg {latency} max")
        .replace("Request rate: 1612.9 req/s", f"Request rate: {request_rate} req/s")
        .replace("Net I/O: 9.1 KB/s", f"Net I/O: {net_io} KB/s")
    )


class FakeRunner:
    """Replays scripted outputs in order; exceptions in the script are raised."""

    def __init__(self, outputs=None, default=None):
        self.outputs = list(outputs or [])
        self.default = default if default is not None else httperf_report()
        self.calls = []

    def __call__(self, argv, timeout=None):
        self.calls.append(list(argv))
        out = self.outputs.pop(0) if self.outputs else self.default
        if isinstance(out, Exception):
            raise out
        return out

    @property
    def uris(self):
        return [argv[argv.index("--uri") + 1] for argv in self.calls]


@pytest.fixture
def report():
    return httperf_report()


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def broken_runner():
    return FakeRunner(default=InvocationError("failed to execute 'httperf'"))
