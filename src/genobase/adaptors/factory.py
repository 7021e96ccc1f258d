"""
Adaptor registry.

AdaptorFactory resolves, caches and releases entity adaptors keyed by
species and assembly. Storage providers subclass it and implement the
connection and construction hooks; caching, key resolution and the
open/close lifecycle live here once for every entity kind.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from ..config.settings import get_settings
from ..core.exceptions import AdaptorNotInitializedError, ConfigurationError
from ..core.types import AdaptorKey, EntityKind, Species
from ..utils.logging import LoggerMixin, log_error_with_context
from .api import (
    ChromosomeAdaptor,
    ClinicalAdaptor,
    ClinVarAdaptor,
    ConservedRegionAdaptor,
    CpGIslandAdaptor,
    CytobandAdaptor,
    ExonAdaptor,
    FeatureAdaptor,
    GeneAdaptor,
    GenomeSequenceAdaptor,
    MirnaAdaptor,
    MutationAdaptor,
    PathwayAdaptor,
    ProteinAdaptor,
    ProteinFunctionPredictorAdaptor,
    ProteinProteinInteractionAdaptor,
    RegulatoryRegionAdaptor,
    SnpAdaptor,
    StructuralVariationAdaptor,
    TfbsAdaptor,
    TranscriptAdaptor,
    VariantAnnotationAdaptor,
    VariantEffectAdaptor,
    VariationAdaptor,
    VariationPhenotypeAnnotationAdaptor,
    XRefAdaptor,
)


class AdaptorFactory(LoggerMixin, ABC):
    """
    Abstract factory for entity adaptors.

    Lifecycle: set_configuration(), then open() for each (species, assembly)
    to be served, then any number of concurrent get_*_adaptor() calls, then
    close(). Adaptors are constructed at most once per entity kind and key.
    """

    def __init__(self, species_catalog: Optional[List[Species]] = None):
        self.species_catalog = species_catalog if species_catalog is not None else get_settings().species
        self._config: Any = None
        self._handles: Dict[AdaptorKey, Any] = {}
        self._adaptors: Dict[Tuple[EntityKind, AdaptorKey], FeatureAdaptor] = {}
        self._lock = threading.RLock()

    # Hooks for storage providers

    def _configure(self, config: Any) -> Any:
        """Validate and normalize configuration; returns what is stored."""
        return config

    @abstractmethod
    def _connect(self, key: AdaptorKey) -> Any:
        """Open whatever connection serves key and return its handle."""

    def _disconnect(self, key: AdaptorKey, handle: Any) -> None:
        """Release the handle returned by _connect."""

    @abstractmethod
    def _create_adaptor(self, kind: EntityKind, key: AdaptorKey, handle: Any) -> FeatureAdaptor:
        """Construct the adaptor of one entity kind for an open key."""

    # Lifecycle

    def set_configuration(self, config: Any) -> None:
        """Inject backing store configuration; must be called before open()."""
        self._config = self._configure(config)

    @property
    def configuration(self) -> Any:
        return self._config

    def key_for(self, species: str, assembly: Optional[str] = None) -> AdaptorKey:
        """
        Return the registry key for species and assembly.

        Raises:
            AdaptorNotInitializedError: If the species is not in the catalog or
                has no such assembly
        """
        for sp in self.species_catalog:
            if sp.matches(species):
                break
        else:
            raise AdaptorNotInitializedError(f"Unknown species '{species}'", species=species)

        if assembly is None:
            assembly = sp.default_assembly
            if assembly is None:
                raise AdaptorNotInitializedError(
                    f"No assembly given and species '{sp.id}' has no default assembly",
                    species=sp.id,
                )
        else:
            for known in sp.assemblies:
                if known.casefold() == assembly.casefold():
                    assembly = known
                    break
            else:
                if sp.assemblies:
                    raise AdaptorNotInitializedError(
                        f"Assembly '{assembly}' is not configured for species '{sp.id}'",
                        species=sp.id,
                        assembly=assembly,
                    )
        return AdaptorKey(sp.id, assembly)

    def open(self, species: str, assembly: Optional[str] = None) -> AdaptorKey:
        """Open the backing store for a key. Opening an already open key does nothing."""
        if self._config is None:
            raise ConfigurationError(
                "set_configuration() must be called before open()",
                config_key="configuration",
            )
        key = self.key_for(species, assembly)
        with self._lock:
            if key not in self._handles:
                self._handles[key] = self._connect(key)
                self.logger.info(f"Opened adaptor store for {key}")
        return key

    def is_open(self, species: str, assembly: Optional[str] = None) -> bool:
        try:
            key = self.key_for(species, assembly)
        except AdaptorNotInitializedError:
            return False
        with self._lock:
            return key in self._handles

    def close(self) -> None:
        """
        Release every adaptor and connection.

        A handle that fails to disconnect is logged and dropped; the remaining
        handles are still released.
        """
        with self._lock:
            self._adaptors.clear()
            try:
                for key, handle in self._handles.items():
                    try:
                        self._disconnect(key, handle)
                    except Exception as e:
                        log_error_with_context(e, {"species": key.species, "assembly": key.assembly}, operation="close")
                        continue
                    self.logger.info(f"Closed adaptor store for {key}")
            finally:
                self._handles.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # Resolution

    def resolve(self, kind: EntityKind, species: str, assembly: Optional[str] = None) -> FeatureAdaptor:
        """
        Return the cached adaptor of one entity kind for species and assembly.

        The single-argument form uses the species' default assembly.

        Raises:
            AdaptorNotInitializedError: If the key is unknown or was not opened
        """
        key = self.key_for(species, assembly)
        with self._lock:
            if key not in self._handles:
                raise AdaptorNotInitializedError(
                    f"Adaptors for {key} are not initialized, call open() first",
                    species=key.species,
                    assembly=key.assembly,
                )
            adaptor = self._adaptors.get((kind, key))
            if adaptor is None:
                adaptor = self._create_adaptor(kind, key, self._handles[key])
                self._adaptors[(kind, key)] = adaptor
                self.logger.debug(f"Created {kind.value} adaptor for {key}")
            return adaptor

    def get_gene_adaptor(self, species: str, assembly: Optional[str] = None) -> GeneAdaptor:
        return self.resolve(EntityKind.GENE, species, assembly)

    def get_transcript_adaptor(self, species: str, assembly: Optional[str] = None) -> TranscriptAdaptor:
        return self.resolve(EntityKind.TRANSCRIPT, species, assembly)

    def get_chromosome_adaptor(self, species: str, assembly: Optional[str] = None) -> ChromosomeAdaptor:
        return self.resolve(EntityKind.CHROMOSOME, species, assembly)

    def get_exon_adaptor(self, species: str, assembly: Optional[str] = None) -> ExonAdaptor:
        return self.resolve(EntityKind.EXON, species, assembly)

    def get_variant_effect_adaptor(self, species: str, assembly: Optional[str] = None) -> VariantEffectAdaptor:
        return self.resolve(EntityKind.VARIANT_EFFECT, species, assembly)

    def get_variant_annotation_adaptor(self, species: str, assembly: Optional[str] = None) -> VariantAnnotationAdaptor:
        return self.resolve(EntityKind.VARIANT_ANNOTATION, species, assembly)

    def get_protein_adaptor(self, species: str, assembly: Optional[str] = None) -> ProteinAdaptor:
        return self.resolve(EntityKind.PROTEIN, species, assembly)

    def get_snp_adaptor(self, species: str, assembly: Optional[str] = None) -> SnpAdaptor:
        return self.resolve(EntityKind.SNP, species, assembly)

    def get_genome_sequence_adaptor(self, species: str, assembly: Optional[str] = None) -> GenomeSequenceAdaptor:
        return self.resolve(EntityKind.GENOME_SEQUENCE, species, assembly)

    def get_cytoband_adaptor(self, species: str, assembly: Optional[str] = None) -> CytobandAdaptor:
        return self.resolve(EntityKind.CYTOBAND, species, assembly)

    def get_xref_adaptor(self, species: str, assembly: Optional[str] = None) -> XRefAdaptor:
        return self.resolve(EntityKind.XREF, species, assembly)

    def get_tfbs_adaptor(self, species: str, assembly: Optional[str] = None) -> TfbsAdaptor:
        return self.resolve(EntityKind.TFBS, species, assembly)

    def get_regulatory_region_adaptor(self, species: str, assembly: Optional[str] = None) -> RegulatoryRegionAdaptor:
        return self.resolve(EntityKind.REGULATORY_REGION, species, assembly)

    def get_mirna_adaptor(self, species: str, assembly: Optional[str] = None) -> MirnaAdaptor:
        return self.resolve(EntityKind.MIRNA, species, assembly)

    def get_mutation_adaptor(self, species: str, assembly: Optional[str] = None) -> MutationAdaptor:
        return self.resolve(EntityKind.MUTATION, species, assembly)

    def get_clinvar_adaptor(self, species: str, assembly: Optional[str] = None) -> ClinVarAdaptor:
        return self.resolve(EntityKind.CLINVAR, species, assembly)

    def get_clinical_adaptor(self, species: str, assembly: Optional[str] = None) -> ClinicalAdaptor:
        return self.resolve(EntityKind.CLINICAL, species, assembly)

    def get_cpg_island_adaptor(self, species: str, assembly: Optional[str] = None) -> CpGIslandAdaptor:
        return self.resolve(EntityKind.CPG_ISLAND, species, assembly)

    def get_structural_variation_adaptor(
        self, species: str, assembly: Optional[str] = None
    ) -> StructuralVariationAdaptor:
        return self.resolve(EntityKind.STRUCTURAL_VARIATION, species, assembly)

    def get_pathway_adaptor(self, species: str, assembly: Optional[str] = None) -> PathwayAdaptor:
        return self.resolve(EntityKind.PATHWAY, species, assembly)

    def get_protein_protein_interaction_adaptor(
        self, species: str, assembly: Optional[str] = None
    ) -> ProteinProteinInteractionAdaptor:
        return self.resolve(EntityKind.PROTEIN_PROTEIN_INTERACTION, species, assembly)

    def get_variation_adaptor(self, species: str, assembly: Optional[str] = None) -> VariationAdaptor:
        return self.resolve(EntityKind.VARIATION, species, assembly)

    def get_conserved_region_adaptor(self, species: str, assembly: Optional[str] = None) -> ConservedRegionAdaptor:
        return self.resolve(EntityKind.CONSERVED_REGION, species, assembly)

    def get_protein_function_predictor_adaptor(
        self, species: str, assembly: Optional[str] = None
    ) -> ProteinFunctionPredictorAdaptor:
        return self.resolve(EntityKind.PROTEIN_FUNCTION_PREDICTOR, species, assembly)

    def get_variation_phenotype_annotation_adaptor(
        self, species: str, assembly: Optional[str] = None
    ) -> VariationPhenotypeAnnotationAdaptor:
        return self.resolve(EntityKind.VARIATION_PHENOTYPE_ANNOTATION, species, assembly)
