from maf_survgroup.plots import km_plot_geneset


def test_km_plot_written(tmp_path, harmonized):
    out = tmp_path / "figs" / "km_A.png"
    km_plot_geneset(harmonized, ["S01", "S02", "S03", "S04", "S05"], title="A", out_path=out)
    assert out.exists()
    assert out.stat().st_size > 0


def test_km_plot_skipped_for_single_group(tmp_path, harmonized):
    out = tmp_path / "km_B.png"
    km_plot_geneset(harmonized, harmonized["Tumor_Sample_Barcode"].tolist(), title="B", out_path=out)
    assert not out.exists()
