"""Format-specific parsers turning raw reference datasets into records."""

from .base import RecordParser, list_input_files, open_text
from .clinical import ClinVarParser, CosmicParser, GwasParser
from .genome import GeneParser, GenomeSequenceFastaParser
from .protein import InteractionParser, ProteinParser
from .regulation import ConservedRegionParser, RegulatoryRegionParser
from .variation import VariantEffectParser, VariationParser, VariationPhenotypeAnnotationParser

__all__ = [
    "RecordParser",
    "list_input_files",
    "open_text",
    "ClinVarParser",
    "CosmicParser",
    "GwasParser",
    "GeneParser",
    "GenomeSequenceFastaParser",
    "InteractionParser",
    "ProteinParser",
    "ConservedRegionParser",
    "RegulatoryRegionParser",
    "VariantEffectParser",
    "VariationParser",
    "VariationPhenotypeAnnotationParser",
]
