#!/usr/bin/env python
from __future__ import annotations

import argparse
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Survival analysis over combinations of mutated genes (MAF)")
    p.add_argument("--maf", type=Path, required=True, help="MAF file (tab-separated, may be gzipped)")
    p.add_argument(
        "--clinical",
        type=Path,
        default=None,
        help="Clinical table (TSV/CSV) with Tumor_Sample_Barcode, time and status columns",
    )
    p.add_argument("--out", type=Path, default=Path("results"), help="Output directory")
    p.add_argument("--time", type=str, default="Time", help="Column containing time to event")
    p.add_argument("--status", type=str, default="Status", help="Column containing event status (1/0 or TRUE/FALSE)")
    p.add_argument("--top", type=int, default=20, help="Use the top N most frequently mutated genes")
    p.add_argument("--genes", type=str, nargs="+", default=None, help="Explicit gene list (overrides --top)")
    p.add_argument("--gene-set-size", type=int, default=2, help="Number of genes per combination")
    p.add_argument("--min-samples", type=int, default=5, help="Min samples mutated in every gene of a set")
    p.add_argument("--threads", type=int, default=1, help="Parallel workers for per-combination fits")
    p.add_argument("--plot-top", type=int, default=0, help="Write KM plots for the N best combinations")
    p.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console/file log level",
    )
    p.add_argument("--log-file", type=Path, default=None, help="Optional log file path")
    p.add_argument("--no-progress", action="store_true", help="Disable tqdm progress bars")
    return p


def main() -> None:
    args = build_parser().parse_args()
    from maf_survgroup.logging_utils import configure_logging

    configure_logging(level=args.log_level, log_file=args.log_file)
    from maf_survgroup.pipeline import run_pipeline

    run_pipeline(
        maf_path=args.maf,
        out_dir=args.out,
        clinical_path=args.clinical,
        top=args.top,
        genes=args.genes,
        gene_set_size=args.gene_set_size,
        min_samples=args.min_samples,
        time_col=args.time,
        status_col=args.status,
        threads=args.threads,
        plot_top=args.plot_top,
        show_progress=not args.no_progress,
    )


if __name__ == "__main__":
    main()
