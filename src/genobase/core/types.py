"""
Type definitions for the genobase build pipeline.

This module defines the shared data model: species reference data, the
enumeration of build targets and their input requirements, adaptor keys
and the entity kinds served by the adaptor registry.
"""

from typing import Dict, List, Optional, Tuple, Union, Any
from dataclasses import dataclass, field
from pathlib import Path
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Species(BaseModel):
    """A species entry from the configured catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    scientific_name: str
    common_name: str = ""
    assemblies: List[str] = Field(default_factory=list)
    default_assembly: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _default_assembly_from_list(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("default_assembly") and data.get("assemblies"):
            data = dict(data)
            data["default_assembly"] = data["assemblies"][0]
        return data

    def matches(self, name: str) -> bool:
        """Return True if name equals the id, scientific or common name, ignoring case."""
        if not name:
            return False
        wanted = name.casefold()
        return wanted in (
            self.id.casefold(),
            self.scientific_name.casefold(),
            self.common_name.casefold(),
        )


class BuildTarget(str, Enum):
    """Kinds of reference dataset transformation supported by the pipeline."""

    GENOME_SEQUENCE = "genome-sequence"
    GENE = "gene"
    REGULATION = "regulation"
    VARIATION = "variation"
    VARIATION_PHENOTYPE_ANNOTATION = "variation-phen-annot"
    VEP = "vep"
    PROTEIN = "protein"
    PPI = "ppi"
    CONSERVATION = "conservation"
    DRUG = "drug"
    CLINVAR = "clinvar"
    COSMIC = "cosmic"
    GWAS = "gwas"

    @classmethod
    def from_name(cls, name: str) -> Optional["BuildTarget"]:
        """Return the target for a CLI name, or None if it is not recognized."""
        try:
            return cls(name)
        except ValueError:
            return None


class InputKind(str, Enum):
    """Shape of the primary input a build target expects."""

    FILE = "file"
    DIRECTORY = "directory"


class BuildOption(str, Enum):
    """Auxiliary options some build targets require."""

    SPECIES = "species"
    ASSEMBLY = "assembly"
    REFERENCE_GENOME_FILE = "reference-genome-file"


@dataclass(frozen=True)
class InputSpec:
    """Fixed input requirements of a build target."""

    kind: InputKind
    mandatory_options: Tuple[BuildOption, ...] = ()
    required_files: Tuple[str, ...] = ()
    valid_assemblies: Tuple[str, ...] = ()

    @property
    def expects_directory(self) -> bool:
        return self.kind == InputKind.DIRECTORY


@dataclass
class BuildOptions:
    """Optional command line values passed through to the build strategies."""

    species: Optional[str] = None
    assembly: Optional[str] = None
    reference_genome_file: Optional[str] = None

    def get(self, option: BuildOption) -> Optional[str]:
        """Return the raw value for an option."""
        return {
            BuildOption.SPECIES: self.species,
            BuildOption.ASSEMBLY: self.assembly,
            BuildOption.REFERENCE_GENOME_FILE: self.reference_genome_file,
        }[option]


class BuildStatus(str, Enum):
    """Outcome of a dispatched build."""

    SUCCESS = "success"
    PARSE_FAILED = "parse_failed"


@dataclass
class BuildReport:
    """Summary of one build invocation."""

    target: BuildTarget
    status: BuildStatus
    output_dir: Path
    entity: Optional[str] = None
    species: Optional[Species] = None
    auxiliary_succeeded: Optional[bool] = None
    error_message: Optional[str] = None
    execution_time: Optional[float] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        """Return True if the parser completed without raising."""
        return self.status == BuildStatus.SUCCESS


class EntityKind(str, Enum):
    """Entity categories served by the adaptor registry."""

    GENE = "gene"
    TRANSCRIPT = "transcript"
    CHROMOSOME = "chromosome"
    EXON = "exon"
    VARIANT_EFFECT = "variant_effect"
    VARIANT_ANNOTATION = "variant_annotation"
    PROTEIN = "protein"
    SNP = "snp"
    GENOME_SEQUENCE = "genome_sequence"
    CYTOBAND = "cytoband"
    XREF = "xref"
    TFBS = "tfbs"
    REGULATORY_REGION = "regulatory_region"
    MIRNA = "mirna"
    MUTATION = "mutation"
    CLINVAR = "clinvar"
    CLINICAL = "clinical"
    CPG_ISLAND = "cpg_island"
    STRUCTURAL_VARIATION = "structural_variation"
    PATHWAY = "pathway"
    PROTEIN_PROTEIN_INTERACTION = "protein_protein_interaction"
    VARIATION = "variation"
    CONSERVED_REGION = "conserved_region"
    PROTEIN_FUNCTION_PREDICTOR = "protein_function_predictor"
    VARIATION_PHENOTYPE_ANNOTATION = "variation_phenotype_annotation"


@dataclass(frozen=True)
class AdaptorKey:
    """Registry key: a species id and one of its assemblies."""

    species: str
    assembly: str

    def __str__(self) -> str:
        return f"{self.species}/{self.assembly}"


# Type aliases for commonly used types
PathLike = Union[str, Path]
Record = Dict[str, Any]
Records = List[Record]
