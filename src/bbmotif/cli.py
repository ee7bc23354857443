import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List

from bbmotif.pipeline import run_pipeline


def setup_logging(verbose: bool):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    if verbose:
        logging.getLogger("numba").setLevel(logging.WARNING)


def create_arg_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        description="bbmotif: exact branch-and-bound search for DNA consensus motifs and alignments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
 Examples:
   # Best consensus over the widest window (2N-1)
   bbmotif consensus sequences.fa

   # Best offset alignment of the first 6 sequences, window 9, both strands
   bbmotif alignment sequences.fa -t 6 -w 9 -r

   # Human-readable report instead of JSON
   bbmotif consensus sequences.fa --report text
         """,
    )

    subparsers = parser.add_subparsers(dest="mode", help="Search method", required=True)

    consensus_parser = subparsers.add_parser(
        "consensus", help="Search over consensus symbols, one per window column (ConsensusSearch engine)."
    )
    alignment_parser = subparsers.add_parser(
        "alignment", help="Search over per-sequence offsets within the window (OffsetSearch engine)."
    )

    for sub in (consensus_parser, alignment_parser):
        sub.add_argument("fasta", help="Path to a FASTA file with sequences of identical length.")

        io_group = sub.add_argument_group("Input/Output Options")
        io_group.add_argument(
            "-t",
            "--limit",
            type=int,
            default=None,
            help="Use only the first T sequences. Values below 1 use all sequences. (default: all)",
        )
        io_group.add_argument(
            "--ignore-case",
            action="store_true",
            help="Accept lowercase nucleotides in the FASTA file.",
        )
        io_group.add_argument(
            "--report",
            choices=["json", "text"],
            default="json",
            help="Output format of the result. (default: %(default)s)",
        )

        search_group = sub.add_argument_group("Search Options")
        search_group.add_argument(
            "-w",
            "--width",
            type=int,
            default=None,
            help="Window width W in [N, 2N-1]; other values fall back to 2N-1. (default: 2N-1)",
        )
        search_group.add_argument(
            "-r",
            "--reverse",
            action="store_true",
            help="Also place sequences on the reverse-complement strand.",
        )
        search_group.add_argument(
            "--no-bound",
            action="store_true",
            help="Disable pruning and explore the full search tree (same result, slower).",
        )

        technical_group = sub.add_argument_group("Technical Options")
        technical_group.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Enable verbose logging to standard output for detailed execution tracking.",
        )

    return parser


def validate_inputs(args) -> None:
    """Validate input files and parameters."""
    logger = logging.getLogger(__name__)
    if not os.path.exists(args.fasta):
        logger.error(f"FASTA file not found: {args.fasta}")
        sys.exit(1)


def map_args_to_pipeline_kwargs(args) -> Dict[str, Any]:
    """Map CLI arguments to pipeline keyword arguments."""
    return {
        "method": args.mode,
        "width": getattr(args, "width", None),
        "reverse": getattr(args, "reverse", False),
        "limit": getattr(args, "limit", None),
        "ignore_case": getattr(args, "ignore_case", False),
        "bounded": not getattr(args, "no_bound", False),
    }


def format_text_report(result: Dict[str, Any]) -> List[str]:
    """Render a result dictionary the way the console report shows it."""
    lines = []
    alignment = [f"'{row['aligned']}'" for row in result["alignment"]]
    consensus = f"[{result['consensus']}]"
    if result["method"] == "consensus":
        lines.append(consensus)
        lines.extend(alignment)
    else:
        lines.extend(alignment)
        lines.append(consensus)
    lines.append(f"Score {result['score']} ({result['percent']:4.1f}%)")

    perf = result["perf"]
    lines.append(f"Started at {perf['started']}")
    lines.append(f"Finished at {perf['finished']}")
    lines.append(f"Time elapsed: \t{perf['elapsed']:9.2f} secs")
    lines.append(f"#ENTRY\t \t{perf['entry']}")
    lines.append("#EXIT by")
    lines.append(f"  \tleaf \t{perf['exit_leaf']}")
    lines.append(f"  \tbreak\t{perf['exit_break']}")
    lines.append(f"  \tpropg\t{perf['exit_propagate']}")
    return lines


def main_cli():
    """Main CLI entry point."""
    parser = create_arg_parser()

    if len(sys.argv) == 1:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args = parser.parse_args()

    setup_logging(args.verbose)

    validate_inputs(args)

    pipeline_kwargs = map_args_to_pipeline_kwargs(args)

    if args.verbose:
        logger = logging.getLogger(__name__)
        logger.info("=" * 60)
        logger.info(f"bbmotif - {args.mode.capitalize()} Search")
        logger.info("=" * 60)
        logger.info(f"Sequences: {args.fasta}")
        logger.info(f"Width: {args.width or '2N-1'}")
        logger.info(f"Reverse strand: {args.reverse}")
        logger.info("=" * 60)

    try:
        result = run_pipeline(args.fasta, **pipeline_kwargs)

        if args.report == "text":
            print("\n".join(format_text_report(result)))
        else:
            print(json.dumps(result))

    except Exception as e:
        print(f"ERROR: Pipeline execution failed: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main_cli()
