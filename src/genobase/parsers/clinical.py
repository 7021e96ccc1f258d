"""
Clinical evidence and association study parsers: ClinVar, COSMIC and GWAS.
"""

from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pandas as pd

from ..core.types import PathLike
from ..serializers import RecordSerializer
from .base import RecordParser, open_text


class ClinVarParser(RecordParser):
    """Reads the ClinVar variant_summary tab export for one assembly."""

    GRCH37_ASSEMBLY = "GRCh37"
    GRCH38_ASSEMBLY = "GRCh38"
    ASSEMBLIES = (GRCH37_ASSEMBLY, GRCH38_ASSEMBLY)

    REQUIRED = ["AlleleID", "Type", "GeneSymbol", "ClinicalSignificance", "Assembly", "Chromosome", "Start", "Stop"]

    def __init__(self, clinvar_file: PathLike, assembly: str, serializer: RecordSerializer, chunksize: int = 50000):
        super().__init__(serializer)
        self.clinvar_file = Path(clinvar_file)
        self.assembly = assembly
        self.chunksize = chunksize

    def parse(self) -> None:
        reader = pd.read_csv(self.clinvar_file, sep="\t", dtype=str, chunksize=self.chunksize)
        skipped = 0
        for chunk in reader:
            chunk.columns = [c.lstrip("#") for c in chunk.columns]
            self.require_columns(chunk.columns, self.REQUIRED, self.clinvar_file)
            selected = chunk[chunk["Assembly"] == self.assembly]
            skipped += len(chunk) - len(selected)
            for row in selected.where(selected.notna(), None).to_dict(orient="records"):
                self.emit({
                    "alleleId": row["AlleleID"],
                    "type": row["Type"],
                    "gene": row["GeneSymbol"],
                    "clinicalSignificance": row["ClinicalSignificance"],
                    "phenotypes": (row.get("PhenotypeList") or "").split("|") if row.get("PhenotypeList") else [],
                    "chromosome": row["Chromosome"],
                    "start": int(row["Start"]),
                    "end": int(row["Stop"]),
                    "reference": row.get("ReferenceAllele"),
                    "alternate": row.get("AlternateAllele"),
                    "assembly": self.assembly,
                })
        self.logger.info(f"Skipped {skipped} ClinVar rows from other assemblies")


class CosmicParser(RecordParser):
    """Reads CosmicCompleteExport tab files (COSMIC v70 or later)."""

    POSITION_COLUMN = "Mutation genome position"
    REQUIRED = ["Gene name", "Mutation ID", "Mutation CDS", "Mutation AA", POSITION_COLUMN]

    def __init__(self, cosmic_file: PathLike, serializer: RecordSerializer, chunksize: int = 50000):
        super().__init__(serializer)
        self.cosmic_file = Path(cosmic_file)
        self.chunksize = chunksize
        self.invalid_positions = 0

    @staticmethod
    def parse_position(position) -> Tuple[str, int, int]:
        """Split 'chromosome:start-end' into its parts."""
        chromosome, _, span = position.partition(":")
        start, _, end = span.partition("-")
        return chromosome, int(start), int(end or start)

    def parse(self) -> None:
        for chunk in pd.read_csv(self.cosmic_file, sep="\t", dtype=str, chunksize=self.chunksize):
            self.require_columns(chunk.columns, self.REQUIRED, self.cosmic_file)
            for row in chunk.where(chunk.notna(), None).to_dict(orient="records"):
                if not row[self.POSITION_COLUMN]:
                    self.invalid_positions += 1
                    continue
                try:
                    chromosome, start, end = self.parse_position(row[self.POSITION_COLUMN])
                except ValueError:
                    self.invalid_positions += 1
                    continue
                self.emit({
                    "id": row["Mutation ID"],
                    "gene": row["Gene name"],
                    "chromosome": chromosome,
                    "start": start,
                    "end": end,
                    "mutationCds": row["Mutation CDS"],
                    "mutationAa": row["Mutation AA"],
                    "primarySite": row.get("Primary site"),
                    "primaryHistology": row.get("Primary histology"),
                    "somaticStatus": row.get("Mutation somatic status"),
                })
        if self.invalid_positions:
            self.logger.warning(f"{self.invalid_positions} COSMIC rows without a genome position were skipped")


class GwasParser(RecordParser):
    """
    Joins the GWAS catalog with dbSNP to obtain reference and alternate alleles.

    Catalog rows whose SNP identifier is not found in dbSNP are written
    without alleles. Multi-locus associations list their SNPs, chromosomes
    and positions separated by ';' and are written as one record per locus.
    Rows without a usable position are counted in skipped_rows.
    """

    REQUIRED = ["CHR_ID", "CHR_POS", "SNPS", "DISEASE/TRAIT", "P-VALUE"]

    def __init__(self, gwas_file: PathLike, dbsnp_file: PathLike, serializer: RecordSerializer):
        super().__init__(serializer)
        self.gwas_file = Path(gwas_file)
        self.dbsnp_file = Path(dbsnp_file)
        self.skipped_rows = 0

    @staticmethod
    def split_loci(value: Optional[str]) -> List[str]:
        """Split a ';' separated catalog field, e.g. 'rs2; rs3'."""
        if not value:
            return []
        return [part.strip() for part in value.split(";") if part.strip()]

    @classmethod
    def row_loci(cls, row: Dict) -> List[Tuple[str, str, int]]:
        """
        Return (snp, chromosome, position) for each locus of a catalog row.

        Raises:
            ValueError: If the fields disagree in length or a position is not a number
        """
        snps = cls.split_loci(row["SNPS"])
        chromosomes = cls.split_loci(row["CHR_ID"])
        positions = cls.split_loci(row["CHR_POS"])
        if not chromosomes or len(chromosomes) != len(positions) or len(snps) != len(positions):
            raise ValueError(f"Cannot pair SNPs {row['SNPS']!r} with positions {row['CHR_POS']!r}")
        return [(snp, chromosome, int(float(position)))
                for snp, chromosome, position in zip(snps, chromosomes, positions)]

    def _read_catalog(self) -> pd.DataFrame:
        catalog = pd.read_csv(self.gwas_file, sep="\t", dtype=str)
        catalog.columns = [c.upper() for c in catalog.columns]
        self.require_columns(catalog.columns, self.REQUIRED, self.gwas_file)
        return catalog.where(catalog.notna(), None)

    def _dbsnp_alleles(self, rs_ids: Set[str]) -> Dict[str, Tuple[str, str]]:
        alleles: Dict[str, Tuple[str, str]] = {}
        with open_text(self.dbsnp_file) as handle:
            for line in handle:
                if line.startswith("#"):
                    continue
                fields = line.split("\t", 5)
                if len(fields) < 5:
                    continue
                if fields[2] in rs_ids:
                    alleles[fields[2]] = (fields[3], fields[4])
                    if len(alleles) == len(rs_ids):
                        break
        return alleles

    def parse(self) -> None:
        catalog = self._read_catalog()
        rows = []
        for row in catalog.to_dict(orient="records"):
            try:
                rows.append((row, self.row_loci(row)))
            except ValueError as e:
                self.skipped_rows += 1
                self.logger.debug(f"Skipping GWAS row: {e}")

        rs_ids = {snp for _, loci in rows for snp, _, _ in loci}
        self.logger.info(f"Looking up {len(rs_ids)} GWAS SNPs in {self.dbsnp_file}")
        alleles = self._dbsnp_alleles(rs_ids)

        for row, loci in rows:
            for snp, chromosome, position in loci:
                reference, alternate = alleles.get(snp, (None, None))
                self.emit({
                    "id": snp,
                    "chromosome": chromosome,
                    "start": position,
                    "end": position,
                    "reference": reference,
                    "alternate": alternate,
                    "trait": row["DISEASE/TRAIT"],
                    "pValue": row["P-VALUE"],
                    "reportedGenes": row.get("REPORTED GENE(S)"),
                    "pubmedId": row.get("PUBMEDID"),
                })
        if self.skipped_rows:
            self.logger.warning(f"{self.skipped_rows} GWAS rows without a usable genome position were skipped")
