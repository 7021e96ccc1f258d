"""
Read contracts for every entity category served by the adaptor registry.

A FeatureAdaptor answers lookups by identifier, by arbitrary field and by
genomic region. Entity contracts add the lookups that are natural for their
records; storage-backed providers only implement the abstract base methods.
"""

from abc import ABC, abstractmethod
from typing import ClassVar, Dict, Iterable, Optional, Type

from ..core.types import EntityKind, Record, Records


class FeatureAdaptor(ABC):
    """Abstract base class for entity read interfaces."""

    kind: ClassVar[EntityKind]

    @abstractmethod
    def get_all(self, limit: Optional[int] = None) -> Records:
        """Return every record, or the first limit records."""

    @abstractmethod
    def get_by_field(self, field: str, values: Iterable[str]) -> Records:
        """Return records whose field equals, or for list fields contains, any of values."""

    @abstractmethod
    def get_by_region(self, chromosome: str, start: int, end: int) -> Records:
        """Return records overlapping chromosome:start-end (1-based, inclusive)."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of records."""

    def get_by_id(self, ids: Iterable[str]) -> Records:
        return self.get_by_field("id", ids)

    def get_first_by_id(self, record_id: str) -> Optional[Record]:
        found = self.get_by_id([record_id])
        return found[0] if found else None


class GeneAdaptor(FeatureAdaptor):
    kind = EntityKind.GENE

    def get_by_name(self, names: Iterable[str]) -> Records:
        return self.get_by_field("name", names)

    def get_by_biotype(self, biotypes: Iterable[str]) -> Records:
        return self.get_by_field("biotype", biotypes)


class TranscriptAdaptor(FeatureAdaptor):
    kind = EntityKind.TRANSCRIPT

    def get_by_gene_id(self, gene_ids: Iterable[str]) -> Records:
        return self.get_by_field("geneId", gene_ids)


class ChromosomeAdaptor(FeatureAdaptor):
    kind = EntityKind.CHROMOSOME

    def get_by_name(self, names: Iterable[str]) -> Records:
        return self.get_by_field("name", names)


class ExonAdaptor(FeatureAdaptor):
    kind = EntityKind.EXON


class VariantEffectAdaptor(FeatureAdaptor):
    kind = EntityKind.VARIANT_EFFECT

    def get_by_consequence_type(self, consequence_types: Iterable[str]) -> Records:
        return self.get_by_field("consequenceTypes", consequence_types)


class VariantAnnotationAdaptor(FeatureAdaptor):
    kind = EntityKind.VARIANT_ANNOTATION


class ProteinAdaptor(FeatureAdaptor):
    kind = EntityKind.PROTEIN

    def get_by_accession(self, accessions: Iterable[str]) -> Records:
        return self.get_by_field("accessions", accessions)


class SnpAdaptor(FeatureAdaptor):
    kind = EntityKind.SNP


class GenomeSequenceAdaptor(FeatureAdaptor):
    kind = EntityKind.GENOME_SEQUENCE

    def get_sequence(self, chromosome: str, start: int, end: int) -> str:
        """Assemble the sequence of chromosome:start-end from stored chunks."""
        chunks = sorted(self.get_by_region(chromosome, start, end), key=lambda c: c["start"])
        sequence = "".join(chunk["sequence"] for chunk in chunks)
        if not chunks:
            return ""
        offset = start - chunks[0]["start"]
        return sequence[max(offset, 0):max(offset, 0) + (end - start + 1)]


class CytobandAdaptor(FeatureAdaptor):
    kind = EntityKind.CYTOBAND


class XRefAdaptor(FeatureAdaptor):
    kind = EntityKind.XREF

    def get_by_db_name(self, db_names: Iterable[str]) -> Records:
        return self.get_by_field("dbName", db_names)


class TfbsAdaptor(FeatureAdaptor):
    kind = EntityKind.TFBS


class RegulatoryRegionAdaptor(FeatureAdaptor):
    kind = EntityKind.REGULATORY_REGION

    def get_by_feature_type(self, feature_types: Iterable[str]) -> Records:
        return self.get_by_field("featureType", feature_types)


class MirnaAdaptor(FeatureAdaptor):
    kind = EntityKind.MIRNA


class MutationAdaptor(FeatureAdaptor):
    kind = EntityKind.MUTATION

    def get_by_gene(self, genes: Iterable[str]) -> Records:
        return self.get_by_field("gene", genes)


class ClinVarAdaptor(FeatureAdaptor):
    kind = EntityKind.CLINVAR

    def get_by_gene(self, genes: Iterable[str]) -> Records:
        return self.get_by_field("gene", genes)

    def get_by_clinical_significance(self, significances: Iterable[str]) -> Records:
        return self.get_by_field("clinicalSignificance", significances)


class ClinicalAdaptor(FeatureAdaptor):
    kind = EntityKind.CLINICAL


class CpGIslandAdaptor(FeatureAdaptor):
    kind = EntityKind.CPG_ISLAND


class StructuralVariationAdaptor(FeatureAdaptor):
    kind = EntityKind.STRUCTURAL_VARIATION


class PathwayAdaptor(FeatureAdaptor):
    kind = EntityKind.PATHWAY


class ProteinProteinInteractionAdaptor(FeatureAdaptor):
    kind = EntityKind.PROTEIN_PROTEIN_INTERACTION

    def get_by_interactor(self, interactors: Iterable[str]) -> Records:
        interactors = list(interactors)
        found = self.get_by_field("interactorA", interactors)
        seen = {id(r) for r in found}
        found.extend(r for r in self.get_by_field("interactorB", interactors) if id(r) not in seen)
        return found


class VariationAdaptor(FeatureAdaptor):
    kind = EntityKind.VARIATION


class ConservedRegionAdaptor(FeatureAdaptor):
    kind = EntityKind.CONSERVED_REGION


class ProteinFunctionPredictorAdaptor(FeatureAdaptor):
    kind = EntityKind.PROTEIN_FUNCTION_PREDICTOR


class VariationPhenotypeAnnotationAdaptor(FeatureAdaptor):
    kind = EntityKind.VARIATION_PHENOTYPE_ANNOTATION

    def get_by_phenotype(self, phenotypes: Iterable[str]) -> Records:
        return self.get_by_field("phenotype", phenotypes)


ADAPTOR_CONTRACTS: Dict[EntityKind, Type[FeatureAdaptor]] = {
    contract.kind: contract
    for contract in [
        GeneAdaptor,
        TranscriptAdaptor,
        ChromosomeAdaptor,
        ExonAdaptor,
        VariantEffectAdaptor,
        VariantAnnotationAdaptor,
        ProteinAdaptor,
        SnpAdaptor,
        GenomeSequenceAdaptor,
        CytobandAdaptor,
        XRefAdaptor,
        TfbsAdaptor,
        RegulatoryRegionAdaptor,
        MirnaAdaptor,
        MutationAdaptor,
        ClinVarAdaptor,
        ClinicalAdaptor,
        CpGIslandAdaptor,
        StructuralVariationAdaptor,
        PathwayAdaptor,
        ProteinProteinInteractionAdaptor,
        VariationAdaptor,
        ConservedRegionAdaptor,
        ProteinFunctionPredictorAdaptor,
        VariationPhenotypeAnnotationAdaptor,
    ]
}

