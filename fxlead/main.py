"""fxlead — command-line entry point.

Fetches the configured pairs, analyzes each one and writes a JSON report.
"""

import logging
import sys

logger = logging.getLogger("fxlead")


def _log_summary(results) -> None:
    from fxlead.runner import rank_actionable

    ranked = rank_actionable(results)
    logger.info(
        "Analyzed %d pair(s), %d actionable.", len(results), len(ranked),
    )
    for r in ranked:
        sig = r.trading_signal
        logger.info(
            "  %-8s %-4s score=%3d %-8s %s",
            r.pair, sig.recommendation, sig.entry_score, sig.strength, sig.entry_type,
        )


def _run_cli(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, run one batch and write the report."""
    import argparse
    import asyncio

    from fxlead.config import load_config
    from fxlead.runner import results_to_json, run_batch

    parser = argparse.ArgumentParser(description="fxlead forex candle analysis")
    parser.add_argument(
        "--pairs",
        help="Comma-separated pairs, e.g. EUR/USD,GBP/JPY (default: ANALYSIS_PAIRS)",
    )
    parser.add_argument("--output", help="Write the JSON report here (default: stdout)")
    parser.add_argument("--env-file", help="Path to a .env file")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.env_file)
    except ValueError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.error("Invalid configuration: %s", exc)
        return 1

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    pairs = None
    if args.pairs:
        pairs = [p.strip() for p in args.pairs.split(",") if p.strip()]

    results = asyncio.run(run_batch(config, pairs=pairs))
    _log_summary(results)

    report = results_to_json(results)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(report)
        logger.info("Report written to %s", args.output)
    else:
        print(report)
    return 0


if __name__ == "__main__":
    sys.exit(_run_cli())
