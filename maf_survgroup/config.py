from __future__ import annotations


class MafColumns:
    GENE = "Hugo_Symbol"
    VARIANT_CLASS = "Variant_Classification"
    SAMPLE = "Tumor_Sample_Barcode"

    REQUIRED = (GENE, VARIANT_CLASS, SAMPLE)


class SurvGroupDefaults:
    TOP = 20
    GENE_SET_SIZE = 2
    MIN_SAMPLES = 5
    TIME = "Time"
    STATUS = "Status"


class GroupEncoding:
    # WT is the Cox reference level; the fitted coefficient is Mutant vs WT.
    MUTANT = "Mutant"
    WT = "WT"
    MUTANT_CODE = 1
    WT_CODE = 0

    COVARIATE = "Mutant"


# Variant classes counted as mutations; everything else is kept aside as silent.
VC_NON_SYN = (
    "Frame_Shift_Del",
    "Frame_Shift_Ins",
    "Splice_Site",
    "Translation_Start_Site",
    "Nonsense_Mutation",
    "Nonstop_Mutation",
    "In_Frame_Del",
    "In_Frame_Ins",
    "Missense_Mutation",
)

RESULT_COLUMNS = ["Gene_combination", "P_value", "hr", "WT", "Mutant"]
