"""
Variation, variant effect and variation phenotype annotation parsers.
"""

from pathlib import Path
from typing import Any, Dict

import pandas as pd

from ..core.exceptions import ParseError
from ..core.types import PathLike
from ..serializers import RecordSerializer
from .base import RecordParser, list_input_files, open_text


VCF_COLUMNS = ("CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO")


def parse_info(info: str) -> Dict[str, Any]:
    """Parse a VCF INFO column into a dictionary; flags map to True."""
    parsed: Dict[str, Any] = {}
    if info in ("", "."):
        return parsed
    for item in info.split(";"):
        if "=" in item:
            key, value = item.split("=", 1)
            parsed[key] = value
        else:
            parsed[item] = True
    return parsed


class VariationParser(RecordParser):
    """Converts the VCF files of a directory into per-chromosome variation files."""

    def __init__(self, variation_dir: PathLike, serializer: RecordSerializer):
        super().__init__(serializer)
        self.variation_dir = Path(variation_dir)

    def parse(self) -> None:
        vcf_files = list_input_files(self.variation_dir, (".vcf", ".vcf.gz"))
        if not vcf_files:
            raise ParseError(f"No VCF file found in {self.variation_dir}", source=str(self.variation_dir))

        for vcf_file in vcf_files:
            self.logger.info(f"Reading {vcf_file}")
            with open_text(vcf_file) as handle:
                for line_number, line in enumerate(handle, 1):
                    if line.startswith("#") or not line.strip():
                        continue
                    fields = line.rstrip("\n").split("\t")
                    if len(fields) < len(VCF_COLUMNS):
                        raise ParseError("Truncated VCF line", source=str(vcf_file), line_number=line_number)
                    chromosome, pos, var_id, ref, alt, _, vcf_filter, info = fields[:8]
                    chromosome = chromosome.replace("chr", "", 1)
                    for allele in alt.split(","):
                        self.emit({
                            "id": var_id if var_id != "." else None,
                            "chromosome": chromosome,
                            "start": int(pos),
                            "end": int(pos) + len(ref) - 1,
                            "reference": ref,
                            "alternate": allele,
                            "filter": vcf_filter,
                            "attributes": parse_info(info),
                        }, f"variation_chr{chromosome}")


class VariationPhenotypeAnnotationParser(RecordParser):
    """Reads tab-delimited variation phenotype annotation exports."""

    def __init__(self, variation_dir: PathLike, serializer: RecordSerializer, chunksize: int = 50000):
        super().__init__(serializer)
        self.variation_dir = Path(variation_dir)
        self.chunksize = chunksize

    def parse(self) -> None:
        files = list_input_files(self.variation_dir, (".txt", ".txt.gz", ".tsv", ".tsv.gz"))
        if not files:
            raise ParseError(
                f"No phenotype annotation file found in {self.variation_dir}",
                source=str(self.variation_dir),
            )
        for annotation_file in files:
            self.logger.info(f"Reading {annotation_file}")
            for chunk in pd.read_csv(annotation_file, sep="\t", dtype=str, chunksize=self.chunksize):
                self.require_columns(chunk.columns, ["variation_id", "phenotype"], annotation_file)
                for record in chunk.where(chunk.notna(), None).to_dict(orient="records"):
                    record["source_file"] = annotation_file.name
                    self.emit(record)


class VariantEffectParser(RecordParser):
    """
    Reads Ensembl VEP tabular output.

    Output goes to one file per chromosome, taken from the Location column
    (chromosome:position or chromosome:start-end).
    """

    REQUIRED = ["#Uploaded_variation", "Location", "Allele", "Gene", "Feature", "Consequence"]

    def __init__(self, vep_file: PathLike, serializer: RecordSerializer, chunksize: int = 50000):
        super().__init__(serializer)
        self.vep_file = Path(vep_file)
        self.chunksize = chunksize

    def _header_line(self) -> int:
        with open_text(self.vep_file) as handle:
            for index, line in enumerate(handle):
                if line.startswith("#Uploaded_variation"):
                    return index
        raise ParseError("VEP header line not found", source=str(self.vep_file))

    def parse(self) -> None:
        reader = pd.read_csv(
            self.vep_file,
            sep="\t",
            skiprows=self._header_line(),
            dtype=str,
            chunksize=self.chunksize,
        )
        for chunk in reader:
            self.require_columns(chunk.columns, self.REQUIRED, self.vep_file)
            for row in chunk.where(chunk.notna(), None).to_dict(orient="records"):
                chromosome, _, position = (row["Location"] or "").partition(":")
                start, _, end = position.partition("-")
                if not chromosome or not start:
                    raise ParseError(f"Bad location {row['Location']!r}", source=str(self.vep_file))
                self.emit({
                    "id": row["#Uploaded_variation"],
                    "chromosome": chromosome,
                    "start": int(start),
                    "end": int(end or start),
                    "allele": row["Allele"],
                    "geneId": row["Gene"],
                    "featureId": row["Feature"],
                    "consequenceTypes": row["Consequence"].split(",") if row["Consequence"] else [],
                }, f"variant_effect_chr{chromosome}")
