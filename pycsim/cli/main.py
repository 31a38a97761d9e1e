from __future__ import annotations
import argparse
import sys
from ..config import SimConfig
from ..core.address import MASK_64, block_offset, decode
from ..core.cache import CacheAllocationError
from ..core.geometry import CacheGeometry
from ..runtime.replayer import format_verbose
from ..runtime.simulator import run as run_sim
from ..trace.parser import TraceParseError
from ..utils.logging import get_logger
from ..utils.reporting import generate_report, print_summary


def _print_access(record, results):
    print(format_verbose(record, results))


def cmd_run(args, parser):
    """Handles the 'run' command."""
    config = SimConfig.from_args(args)
    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    get_logger("pycsim", config.log_level)

    try:
        stats = run_sim(config, on_access=_print_access if config.verbose else None)
        print_summary(stats, config.results_file)
        if config.report_dir:
            generate_report(stats, config)
    except (OSError, TraceParseError, CacheAllocationError) as e:
        print(f"pycsim: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_decode(args, parser):
    """Handles the 'decode' command."""
    try:
        geometry = CacheGeometry(offset_bits=args.offset_bits, set_index_bits=args.set_index_bits)
        address = int(args.address, 0)
    except ValueError as e:
        parser.error(str(e))
    if not 0 <= address <= MASK_64:
        parser.error(f"address {args.address} does not fit in 64 bits")

    set_index, tag = decode(address, geometry.offset_bits, geometry.set_index_bits)
    print(f"address: 0x{address:x}")
    print(f"  tag   : 0x{tag:x} ({geometry.tag_bits} bits)")
    print(f"  set   : {set_index} ({geometry.set_index_bits} bits)")
    print(f"  offset: {block_offset(address, geometry.offset_bits)} ({geometry.offset_bits} bits)")
    return 0


def build_parser():
    p = argparse.ArgumentParser(
        prog="pycsim",
        description="Set-associative LRU cache simulator for Valgrind memory traces",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # --- Run Command ---
    pr = sub.add_parser("run", help="Replay a trace and report hits, misses and evictions",
                        formatter_class=argparse.RawDescriptionHelpFormatter,
                        epilog="Examples:\n"
                               "  pycsim run -s 4 -E 1 -b 4 -t traces/yi.trace\n"
                               "  pycsim run -v -s 8 -E 2 -b 4 -t traces/yi.trace")

    # Config file
    pr.add_argument("-c", "--config", type=str, default=None,
                    help="Path to YAML config file to override defaults")

    # Geometry (default=None to allow override from YAML)
    pr.add_argument("-s", type=int, default=None, dest="set_index_bits", metavar="<num>",
                    help="Number of s bits for set index")
    pr.add_argument("-E", type=int, default=None, dest="lines_per_set", metavar="<num>",
                    help="Number of lines per set")
    pr.add_argument("-b", type=int, default=None, dest="offset_bits", metavar="<num>",
                    help="Number of b bits for block offsets")
    pr.add_argument("-t", type=str, default=None, dest="trace_file", metavar="<file>",
                    help="Trace file")
    pr.add_argument("-v", action="store_true", default=None, dest="verbose",
                    help="Print the outcome of every trace record")

    # Output
    pr.add_argument("--results", type=str, default=None, dest="results_file",
                    help="File to write 'hits misses evictions' to")
    pr.add_argument("--report", type=str, default=None, dest="report_dir",
                    help="Directory to save the JSON/HTML report")
    pr.add_argument("--log-level", type=str, default=None, dest="log_level",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                    help="Logging level")
    pr.set_defaults(func=cmd_run, cmd_parser=pr)

    # --- Decode Command ---
    pdc = sub.add_parser("decode", help="Split an address into tag, set index and block offset",
                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    pdc.add_argument("address", help="Address (hex with 0x prefix, or decimal)")
    pdc.add_argument("-s", type=int, required=True, dest="set_index_bits", metavar="<num>",
                    help="Number of s bits for set index")
    pdc.add_argument("-b", type=int, required=True, dest="offset_bits", metavar="<num>",
                    help="Number of b bits for block offsets")
    pdc.set_defaults(func=cmd_decode, cmd_parser=pdc)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    # usage errors are reported against the subcommand's own usage line
    return args.func(args, args.cmd_parser)


if __name__ == "__main__":
    sys.exit(main())
