import enum
import re
from collections import namedtuple


KindSpec = namedtuple(
    "KindSpec", ["label", "unit", "pattern", "count_flag", "default_output"]
)


class TestKind(enum.Enum):
    LATENCY = "latency"
    THROUGHPUT_BYTES = "throughput-bytes"
    THROUGHPUT_REQUESTS = "throughput-requests"

    # keeps pytest from collecting this enum as a test class
    __test__ = False


# Patterns follow httperf's report grammar, e.g.
#   Connection time [ms]: min 0.4 avg 0.6 max 1.2 median 0.5 stddev 0.2
#   Request rate: 1612.9 req/s (0.6 ms/req)
#   Net I/O: 282.8 KB/s (2.3*10^6 bps)
KIND_SPECS = {
    TestKind.LATENCY: KindSpec(
        label="Avg. Response Time",
        unit="ms",
        pattern=re.compile(r"Connection time.*avg (\S+) max"),
        count_flag="--num-calls",
        default_output="multisampled_latency.png",
    ),
    TestKind.THROUGHPUT_BYTES: KindSpec(
        label="Net I/O",
        unit="KB/s",
        pattern=re.compile(r"Net I/O: (\S+) "),
        count_flag="--num-conns",
        default_output="multisampled_throughput_bytes.png",
    ),
    TestKind.THROUGHPUT_REQUESTS: KindSpec(
        label="Request Rate",
        unit="req/s",
        pattern=re.compile(r"Request rate: (\S+) req"),
        count_flag="--num-conns",
        default_output="multisampled_throughput_requests.png",
    ),
}


def parse_kind(name):
    """Map a CLI name such as 'throughput-bytes' to its TestKind."""
    try:
        return TestKind(name.strip().lower().replace("_", "-"))
    except ValueError:
        choices = ", ".join(k.value for k in TestKind)
        raise ValueError(f"unknown test kind '{name}' (expected one of: {choices})")


def kind_args(kind, sample_count):
    """Extra benchmarking tool arguments contributed by a test kind."""
    return [KIND_SPECS[kind].count_flag, str(sample_count)]
