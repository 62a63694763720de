#!/usr/bin/env python3
"""
Main script for running the BJT output-characteristic analysis.
"""

# Pipeline overview:
# 1) Load each four-column table (V_CE, I_C, sigma_V, sigma_I), one per base
#    current.
# 2) Restrict to the active region [fit_min, fit_max] and fit I_C = a + b V_CE
#    by weighted least squares (weights 1/sigma_I^2).
# 3) Derive V_A = -a/b with propagated uncertainty, and from the axis-swapped
#    fit V_CE = a' + b' I_C the output conductance 1/b' and V_A = a'.
# 4) Evaluate beta = |Delta I_C| / Delta I_B between consecutive curves at
#    V_CE = v_eval.
# 5) Print the report, export CSV tables and save the annotated figure.

import argparse
import logging
import os
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from bjt.analysis import (
    compute_gains,
    create_results_dataframe,
    print_report,
    process_all_files,
)
from bjt.config import DEFAULT_DATASETS, AnalysisConfig, parse_dataset_option
from bjt.output import save_data_to_csv
from bjt.plotting import plot_output_characteristics


def _configure_logging(log_path):
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_path:
        handlers.append(logging.FileHandler(log_path, mode="w"))
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    defaults = AnalysisConfig()
    parser = argparse.ArgumentParser(
        description="Fit BJT output characteristics and derive V_A, g_o and beta."
    )
    parser.add_argument(
        "--data",
        action="append",
        default=None,
        metavar="IB_UA:PATH",
        help=(
            "Base current in uA and table path, e.g. 50:data/50.txt. "
            "Repeat for each curve (default: 50 and 100 uA tables in data/)."
        ),
    )
    parser.add_argument(
        "--fit-min",
        type=float,
        default=defaults.fit_min,
        help=f"Lower V_CE bound of the fit domain (default: {defaults.fit_min}).",
    )
    parser.add_argument(
        "--fit-max",
        type=float,
        default=defaults.fit_max,
        help=f"Upper V_CE bound of the fit domain (default: {defaults.fit_max}).",
    )
    parser.add_argument(
        "--v-eval",
        type=float,
        default=defaults.v_eval,
        help=f"V_CE where beta is evaluated (default: {defaults.v_eval}).",
    )
    parser.add_argument(
        "--outdir",
        default=defaults.output_dir,
        help=f"Output directory (default: {defaults.output_dir}).",
    )
    parser.add_argument(
        "--skip-malformed",
        action="store_true",
        help="Skip unparseable rows with a warning instead of failing the curve.",
    )
    parser.add_argument(
        "--absolute-sigma",
        action="store_true",
        help="Report parameter errors from the measurement errors alone.",
    )
    parser.add_argument(
        "--no-plot", action="store_true", help="Do not render the figure."
    )
    parser.add_argument(
        "--log-file",
        default="bjt_analysis.log",
        help="Log file path; empty string disables file logging.",
    )
    return parser


def main(argv=None):
    """Main execution function with stage timing logs."""
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_file)

    try:
        specs = (
            [parse_dataset_option(text) for text in args.data]
            if args.data
            else list(DEFAULT_DATASETS)
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        config = AnalysisConfig(
            fit_min=args.fit_min,
            fit_max=args.fit_max,
            v_eval=args.v_eval,
            on_malformed="skip" if args.skip_malformed else "raise",
            absolute_sigma=args.absolute_sigma,
            output_dir=args.outdir,
        )
    except ValueError as e:
        parser.error(str(e))

    start_time = time.time()
    logging.info("Initializing BJT output-characteristic analysis")
    logging.info(
        "Configured %d curves, fit domain [%g, %g] V",
        len(specs),
        config.fit_min,
        config.fit_max,
    )

    results = process_all_files(specs, config)
    fitted = [r for r in results if r["fit"] is not None]
    if not fitted:
        logging.error("No curve could be fitted. Terminating execution.")
        print_report(results, [])
        return 1
    logging.info("Successfully fitted %d of %d curves", len(fitted), len(results))

    gains = compute_gains(results, config.v_eval)
    print_report(results, gains)

    results_df = create_results_dataframe(results)
    results_csv, gain_csv = save_data_to_csv(results_df, gains, config.output_dir)

    figure_path = None
    if not args.no_plot:
        figure_path = plot_output_characteristics(results, config.output_dir)

    logging.info("Total execution time: %.2f seconds", time.time() - start_time)
    logging.info("Generated output files:")
    logging.info("  - Fit results CSV: %s", results_csv)
    logging.info("  - Current gain CSV: %s", gain_csv)
    if figure_path:
        logging.info("  - Output characteristics: %s", figure_path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
