from __future__ import annotations

from pathlib import Path

import pandas as pd


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def write_tsv(df: pd.DataFrame, path: Path) -> None:
    ensure_dir(path.parent)
    df.to_csv(path, sep="\t", index=False)


def read_table(path: Path) -> pd.DataFrame:
    """
    Read a TSV/CSV table (optionally gzipped); separator is chosen by suffix.
    Lines starting with '#' are skipped (MAF version headers).
    """
    path = Path(path)
    suffixes = [s.lower() for s in path.suffixes if s.lower() != ".gz"]
    sep = "," if suffixes and suffixes[-1] == ".csv" else "\t"
    return pd.read_csv(path, sep=sep, comment="#", low_memory=False)
