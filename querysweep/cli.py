import argparse
import logging
import os
import re
import sys
from pprint import pprint

from termcolor import cprint

from querysweep.errors import RenderError, SweepError
from querysweep.invoker import BENCH_CMD, DEFAULT_TIMEOUT
from querysweep.kinds import KIND_SPECS, TestKind, parse_kind
from querysweep.plot import OUT_FILE, render_result
from querysweep.queries import build_queries, query_uri
from querysweep.report import generate_report
from querysweep.sweep import (
    DEFAULT_RETRIES,
    DEFAULT_RETRY_DELAY,
    SAMPLES,
    TestCase,
    run_sweeps,
)


logger = logging.getLogger(__name__)

USAGE = "./{prog} <server_addr> <port_number> <query_word1> <query_word2> ..."

LOG_ENV = "QUERYSWEEP_LOG"
LOG_FORMAT = "[%(asctime)s %(levelname)s %(name)s] %(message)s"

PORT_RE = re.compile(r"\+?[0-9]+")
DEFAULT_PROG = "querysweep"


def port_number(text):
    # TCP port numbers are 2^16 max
    if not PORT_RE.fullmatch(text):
        raise argparse.ArgumentTypeError(f"invalid port number: '{text}'")
    port = int(text)
    if not 0 <= port <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"port number out of range: {port}")
    return port


def kind_name(text):
    try:
        return parse_kind(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def at_least(cast, minimum):
    def convert(text):
        try:
            value = cast(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid number: '{text}'")
        if value < minimum:
            raise argparse.ArgumentTypeError(f"must be at least {minimum}: {text}")
        return value

    return convert


def build_parser(prog=None):
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Sweep an HTTP search server with growing queries and plot "
        "how latency and throughput change with query length.",
    )
    parser.add_argument("server_addr", help="address of the server under test")
    parser.add_argument("port", type=port_number, help="port of the server under test")
    parser.add_argument("words", nargs="+", help="query dictionary, in order")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-k",
        "--kind",
        dest="kinds",
        action="append",
        type=kind_name,
        help="test kind to run (repeatable): "
        + ", ".join(k.value for k in TestKind)
        + "; default all",
    )
    mode.add_argument(
        "--single",
        action="store_true",
        help=f"legacy mode: latency only, written to {OUT_FILE}",
    )

    parser.add_argument("-n", "--samples", type=at_least(int, 1), default=SAMPLES)
    parser.add_argument("-o", "--output_dir", "--output-dir", type=str, default=".")
    parser.add_argument("--tool", type=str, default=BENCH_CMD)
    parser.add_argument(
        "--timeout",
        type=at_least(float, 0),
        default=DEFAULT_TIMEOUT,
        help="seconds per benchmarking run, 0 to wait forever",
    )
    parser.add_argument("--retries", type=at_least(int, 0), default=DEFAULT_RETRIES)
    parser.add_argument(
        "--retry_delay", "--retry-delay", type=at_least(float, 0), default=DEFAULT_RETRY_DELAY
    )
    parser.add_argument(
        "--fail_fast",
        "--fail-fast",
        action="store_true",
        help="abort on the first failed or unparsable benchmarking run",
    )
    parser.add_argument("--report", type=str, default=None, help="markdown summary path")
    parser.add_argument("--force", action="store_true", help="overwrite an existing report")
    parser.add_argument(
        "--log_level",
        "--log-level",
        type=str.upper,
        default=os.environ.get(LOG_ENV, "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def parse_args(argv, prog=None):
    return build_parser(prog).parse_args(argv)


def build_cases(args):
    if args.single:
        return [
            TestCase(
                args.server_addr,
                args.port,
                list(args.words),
                TestKind.LATENCY,
                os.path.join(args.output_dir, OUT_FILE),
            )
        ]

    kinds = args.kinds or list(TestKind)
    # one sweep per kind, even if repeated on the command line
    kinds = list(dict.fromkeys(kinds))
    return [
        TestCase(
            args.server_addr,
            args.port,
            list(args.words),
            kind,
            os.path.join(args.output_dir, KIND_SPECS[kind].default_output),
        )
        for kind in kinds
    ]


def expect_configurations(cases, args):
    cprint("Planned benchmark sweeps:", "yellow", attrs=["bold"])
    for case in cases:
        head = f"[{case.kind.value}]"
        cprint(f"  {head:22s}", "cyan", end="")
        print(f"  {len(case.dictionary)} queries -> {case.output}")

    queries = build_queries(cases[0].dictionary)
    print(f" Target: http://{args.server_addr}:{args.port}{query_uri('...')}")
    print(f" Longest query: {queries[-1]} ({len(queries[-1])} chars)")
    print(f" {args.tool} runs {args.samples} samples per query; keep the server")
    print(" otherwise idle while the sweep runs.")


def configure_logging(level):
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


def main(argv=None, runner=None):
    if argv is None:
        argv = sys.argv[1:]
    prog = os.path.basename(sys.argv[0])
    if prog in ("", "__main__.py"):
        prog = DEFAULT_PROG

    # Handle missing arguments, which means usage
    if len(argv) < 3 and not any(a in ("-h", "--help") for a in argv):
        print(USAGE.format(prog=prog))
        return 0

    parser = build_parser(prog)
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.report and os.path.isfile(args.report) and not args.force:
        parser.error(f"report '{args.report}' already exists, pass --force to overwrite")
    if args.report:
        report_dir = os.path.dirname(os.path.abspath(args.report))
        if not os.path.isdir(report_dir):
            parser.error(f"report directory '{report_dir}' does not exist")

    os.makedirs(args.output_dir, exist_ok=True)
    cases = build_cases(args)
    expect_configurations(cases, args)

    cprint("Running sweeps...", "yellow", attrs=["bold"])
    try:
        results = run_sweeps(
            cases,
            sample_count=args.samples,
            runner=runner,
            tool=args.tool,
            timeout=args.timeout,
            retries=args.retries,
            retry_delay=args.retry_delay,
            fail_fast=args.fail_fast,
        )
    except SweepError as e:
        cprint(f"Sweep aborted: {e}", "red", attrs=["bold"])
        return 1

    failed = False
    plots = dict()
    for result in results:
        kind = result.case.kind.value
        if not result.complete:
            cprint(
                f"[{kind}] skipped {len(result.skipped)} of "
                f"{len(result.case.dictionary)} queries",
                "red",
            )
        try:
            plots[result.case.kind] = render_result(result)
        except RenderError as e:
            logger.error("%s", e)
            failed = True

    print("Done, generated plots:")
    pprint({k.value: path for k, path in plots.items()})

    if args.report:
        cprint(f"Generating summary report to '{args.report}'...", "yellow", attrs=["bold"])
        generate_report(results, plots, args.report)
        print("Generated.")

    return 1 if failed else 0
