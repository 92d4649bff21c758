from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from joblib import Parallel, delayed
from tqdm import tqdm

from maf_survgroup.clinical import harmonize_clinical
from maf_survgroup.config import RESULT_COLUMNS, MafColumns, SurvGroupDefaults
from maf_survgroup.errors import CombinationFitFailure
from maf_survgroup.genesets import combination_name, gene_combinations, select_genes
from maf_survgroup.io import ensure_dir, write_tsv
from maf_survgroup.maf import MafStore, read_maf
from maf_survgroup.matrix import MutationMatrix, build_mutation_matrix
from maf_survgroup.plots import km_plot_geneset
from maf_survgroup.survival import run_surv


@dataclass(frozen=True)
class SurvGroupInputs:
    genes: list[str]
    combinations: list[tuple[str, ...]]
    clinical: pd.DataFrame
    mutations: MutationMatrix


def prepare_inputs(
    store: MafStore,
    *,
    top: int = SurvGroupDefaults.TOP,
    genes: list[str] | None = None,
    gene_set_size: int = SurvGroupDefaults.GENE_SET_SIZE,
    clinical_data: pd.DataFrame | None = None,
    time_col: str = SurvGroupDefaults.TIME,
    status_col: str = SurvGroupDefaults.STATUS,
) -> SurvGroupInputs:
    """
    Everything that can fail fatally happens here, before any combination is evaluated.
    """
    logger = logging.getLogger(__name__)
    universe = select_genes(store, top=top, genes=genes)
    combos = gene_combinations(universe, gene_set_size)
    logger.info("genes: %d; geneset size: %d; %d combinations", len(universe), gene_set_size, len(combos))

    if clinical_data is None:
        logger.info("no clinical data given; using clinical annotation attached to the MAF")
        clinical_data = store.clinical_data()
    clinical = harmonize_clinical(clinical_data, time_col=time_col, status_col=status_col)
    logger.info("clinical records usable for survival: %d", clinical.shape[0])

    mutations = build_mutation_matrix(store, universe)
    return SurvGroupInputs(genes=universe, combinations=combos, clinical=clinical, mutations=mutations)


def evaluate_combination(
    combo: tuple[str, ...],
    mutations: MutationMatrix,
    clinical: pd.DataFrame,
    *,
    min_samples: int = SurvGroupDefaults.MIN_SAMPLES,
) -> dict[str, object] | None:
    """
    One result row for `combo`, or None when too few samples carry all of its mutations.
    Raises CombinationFitFailure if the survival fit is undefined.
    """
    logger = logging.getLogger(__name__)
    name = combination_name(combo)
    tsbs = mutations.mutant_samples(combo)
    if len(tsbs) < min_samples:
        logger.debug("Geneset: %s [N=%d] below min_samples=%d; skipped", ",".join(combo), len(tsbs), min_samples)
        return None

    n_clinical = int(clinical[MafColumns.SAMPLE].isin(set(tsbs)).sum())
    if n_clinical < min_samples:
        logger.debug(
            "Geneset: %s [N=%d] only %d mutants with survival data; skipped", ",".join(combo), len(tsbs), n_clinical
        )
        return None

    logger.debug("Geneset: %s [N=%d]", ",".join(combo), len(tsbs))
    row: dict[str, object] = {"Gene_combination": name}
    row.update(run_surv(clinical, tsbs, combination=name))
    return row


def _evaluate_or_skip(
    combo: tuple[str, ...], mutations: MutationMatrix, clinical: pd.DataFrame, min_samples: int
) -> dict[str, object] | None:
    try:
        return evaluate_combination(combo, mutations, clinical, min_samples=min_samples)
    except CombinationFitFailure as e:
        logging.getLogger(__name__).warning("%s; combination omitted", e)
        return None


def aggregate_results(rows: list[dict[str, object] | None]) -> pd.DataFrame:
    kept = [r for r in rows if r is not None]
    if not kept:
        return pd.DataFrame(columns=RESULT_COLUMNS)
    out = pd.DataFrame(kept)[RESULT_COLUMNS]
    out["WT"] = out["WT"].astype(int)
    out["Mutant"] = out["Mutant"].astype(int)
    # Stable: ties keep enumeration order.
    return out.sort_values("P_value", ascending=True, kind="mergesort").reset_index(drop=True)


def evaluate_all(
    inputs: SurvGroupInputs,
    *,
    min_samples: int = SurvGroupDefaults.MIN_SAMPLES,
    n_jobs: int = 1,
    show_progress: bool = False,
) -> pd.DataFrame:
    logger = logging.getLogger(__name__)
    n_jobs = max(1, int(n_jobs))
    t0 = time.perf_counter()
    if n_jobs > 1:
        rows = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(_evaluate_or_skip)(c, inputs.mutations, inputs.clinical, min_samples)
            for c in inputs.combinations
        )
    else:
        rows = [
            _evaluate_or_skip(c, inputs.mutations, inputs.clinical, min_samples)
            for c in tqdm(inputs.combinations, desc="Gene sets", disable=not show_progress)
        ]
    out = aggregate_results(rows)
    logger.info(
        "evaluated %d combinations: %d with results (%.1fs)",
        len(inputs.combinations),
        out.shape[0],
        time.perf_counter() - t0,
    )
    return out


def surv_group(
    store: MafStore,
    *,
    top: int = SurvGroupDefaults.TOP,
    genes: list[str] | None = None,
    gene_set_size: int = SurvGroupDefaults.GENE_SET_SIZE,
    min_samples: int = SurvGroupDefaults.MIN_SAMPLES,
    clinical_data: pd.DataFrame | None = None,
    time: str = SurvGroupDefaults.TIME,
    status: str = SurvGroupDefaults.STATUS,
    n_jobs: int = 1,
    show_progress: bool = False,
) -> pd.DataFrame:
    """
    Survival (log-rank p, Cox HR) of samples mutated in every gene of each gene set vs the rest.

    Returns columns Gene_combination, P_value, hr, WT, Mutant sorted by P_value.
    hr is the hazard of the Mutant group relative to WT.
    """
    inputs = prepare_inputs(
        store,
        top=top,
        genes=genes,
        gene_set_size=gene_set_size,
        clinical_data=clinical_data,
        time_col=time,
        status_col=status,
    )
    return evaluate_all(inputs, min_samples=min_samples, n_jobs=n_jobs, show_progress=show_progress)


def run_pipeline(
    *,
    maf_path: Path,
    out_dir: Path,
    clinical_path: Path | None = None,
    top: int = SurvGroupDefaults.TOP,
    genes: list[str] | None = None,
    gene_set_size: int = SurvGroupDefaults.GENE_SET_SIZE,
    min_samples: int = SurvGroupDefaults.MIN_SAMPLES,
    time_col: str = SurvGroupDefaults.TIME,
    status_col: str = SurvGroupDefaults.STATUS,
    threads: int = 1,
    plot_top: int = 0,
    show_progress: bool = True,
) -> pd.DataFrame:
    logger = logging.getLogger(__name__)
    if out_dir.exists() and out_dir.is_file():
        raise FileExistsError(f"--out must be a directory, but got an existing file: {out_dir}")
    ensure_dir(out_dir)
    logger.info(
        "starting survGroup: maf=%s clinical=%s out=%s top=%d genes=%s gene_set_size=%d min_samples=%d threads=%d",
        maf_path,
        clinical_path,
        out_dir,
        top,
        ",".join(genes) if genes else "-",
        gene_set_size,
        min_samples,
        threads,
    )

    store = read_maf(maf_path, clinical_data=clinical_path)
    inputs = prepare_inputs(
        store,
        top=top,
        genes=genes,
        gene_set_size=gene_set_size,
        time_col=time_col,
        status_col=status_col,
    )
    if inputs.mutations.missing_samples:
        write_tsv(
            pd.DataFrame({MafColumns.SAMPLE: inputs.mutations.missing_samples}),
            out_dir / "samples_without_mutations.tsv",
        )
    res = evaluate_all(inputs, min_samples=min_samples, n_jobs=threads, show_progress=show_progress)
    write_tsv(res, out_dir / "survgroup.tsv")
    logger.info("wrote results: %s (%d rows)", out_dir / "survgroup.tsv", res.shape[0])

    for name in res["Gene_combination"].head(max(0, plot_top)).tolist():
        combo = next(c for c in inputs.combinations if combination_name(c) == name)
        fig_path = out_dir / "figures" / f"km_{name}.png"
        km_plot_geneset(
            inputs.clinical,
            inputs.mutations.mutant_samples(combo),
            title=name.replace("_", " + "),
            out_path=fig_path,
        )
        logger.info("wrote KM plot: %s", fig_path)
    return res
