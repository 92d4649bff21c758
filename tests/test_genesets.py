import logging
from math import comb

import pytest

from maf_survgroup.errors import InsufficientGenesError
from maf_survgroup.genesets import combination_name, gene_combinations, select_genes


@pytest.mark.parametrize("n,k", [(2, 1), (4, 2), (6, 3), (20, 2), (5, 5)])
def test_combination_count(n, k):
    genes = [f"G{i}" for i in range(n)]
    combos = gene_combinations(genes, k)
    assert len(combos) == comb(n, k)
    assert len({frozenset(c) for c in combos}) == len(combos)
    assert all(len(set(c)) == k for c in combos)


def test_combinations_follow_input_order():
    combos = gene_combinations(["TP53", "KRAS", "APC"], 2)
    assert combos == [("TP53", "KRAS"), ("TP53", "APC"), ("KRAS", "APC")]
    assert [combination_name(c) for c in combos] == ["TP53_KRAS", "TP53_APC", "KRAS_APC"]


def test_full_size_gives_one_combination():
    assert gene_combinations(["A", "B", "C"], 3) == [("A", "B", "C")]


@pytest.mark.parametrize("k", [0, 4])
def test_invalid_set_size(k):
    with pytest.raises(ValueError):
        gene_combinations(["A", "B", "C"], k)


def test_select_explicit_genes_preserves_order(store):
    assert select_genes(store, genes=["D", "A", "C"]) == ["D", "A", "C"]


def test_select_top_genes(store):
    assert select_genes(store, top=2) == ["B", "A"]
    assert select_genes(store, top=20) == ["B", "A", "C", "D"]


def test_select_needs_two_genes(store):
    with pytest.raises(InsufficientGenesError):
        select_genes(store, top=1)
    with pytest.raises(InsufficientGenesError):
        select_genes(store, genes=["A"])


def test_select_drops_duplicated_genes(store, caplog):
    with caplog.at_level(logging.WARNING, logger="maf_survgroup.genesets"):
        genes = select_genes(store, genes=["A", "A", "C", "A"])
    assert genes == ["A", "C"]
    assert "dropped 2 duplicated genes" in caplog.text
    assert gene_combinations(genes, 2) == [("A", "C")]


@pytest.mark.parametrize("top", [0, -1])
def test_select_rejects_non_positive_top(store, top):
    with pytest.raises(ValueError):
        select_genes(store, top=top)
