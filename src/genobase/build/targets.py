"""
Build target strategy table.

Each BuildTarget maps to one TargetStrategy: its fixed InputSpec, the
entity name of its output, an optional auxiliary helper-script step and
the function constructing its parser. Adding a target is a table entry.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from ..config.settings import Settings
from ..core.types import (
    BuildOption,
    BuildOptions,
    BuildTarget,
    InputKind,
    InputSpec,
    Species,
)
from ..parsers import (
    ClinVarParser,
    ConservedRegionParser,
    CosmicParser,
    GeneParser,
    GenomeSequenceFastaParser,
    GwasParser,
    InteractionParser,
    ProteinParser,
    RecordParser,
    RegulatoryRegionParser,
    VariantEffectParser,
    VariationParser,
    VariationPhenotypeAnnotationParser,
)
from ..serializers import JsonSerializer


@dataclass
class BuildContext:
    """Validated inputs handed to a parser constructor."""

    target: BuildTarget
    input_path: Path
    output_dir: Path
    species: Optional[Species]
    options: BuildOptions
    settings: Settings

    def serializer(self, entity: Optional[str]) -> JsonSerializer:
        """Create the serializer for this build, bound to the output directory."""
        return JsonSerializer(self.output_dir, entity, flush_size=self.settings.build.serializer_flush_size)


@dataclass(frozen=True)
class AuxiliaryStep:
    """A helper script run before the parser is constructed."""

    description: str
    script: Callable[[Settings], str]
    output_flag: str
    output_path: Callable[[BuildContext], Path]
    log_path: Callable[[BuildContext], Path]
    expected_output: bool = False

    def arguments(self, context: BuildContext) -> Tuple[str, ...]:
        return (
            "--species", context.species.scientific_name,
            self.output_flag, str(self.output_path(context)),
            "--ensembl-libs", context.settings.tools.ensembl_libs,
        )


ParserFactory = Callable[[BuildContext, Optional[str]], RecordParser]


@dataclass(frozen=True)
class TargetStrategy:
    """How one build target is validated and executed."""

    target: BuildTarget
    input_spec: InputSpec
    entity: Optional[str]
    factory: Optional[ParserFactory]
    auxiliary: Optional[AuxiliaryStep] = None

    @property
    def implemented(self) -> bool:
        return self.factory is not None

    def create_parser(self, context: BuildContext) -> RecordParser:
        return self.factory(context, self.entity)


def _genome_sequence(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return GenomeSequenceFastaParser(ctx.input_path, ctx.serializer(entity))


def _gene(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return GeneParser(ctx.input_path, Path(ctx.options.reference_genome_file), ctx.serializer(entity))


def _regulation(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return RegulatoryRegionParser(ctx.input_path, ctx.serializer(entity))


def _variation(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return VariationParser(ctx.input_path, ctx.serializer(entity))


def _variation_phenotype_annotation(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return VariationPhenotypeAnnotationParser(ctx.input_path, ctx.serializer(entity))


def _vep(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return VariantEffectParser(ctx.input_path, ctx.serializer(entity))


def _organism(ctx: BuildContext) -> str:
    """Name matched against source organisms: the resolved scientific name, else the raw option."""
    return ctx.species.scientific_name if ctx.species is not None else ctx.options.species


def _protein(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return ProteinParser(ctx.input_path, _organism(ctx), ctx.serializer(entity))


def _ppi(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return InteractionParser(ctx.input_path, _organism(ctx), ctx.serializer(entity))


def _conservation(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    # chunk size 0 selects the parser default
    return ConservedRegionParser(ctx.input_path, 0, ctx.serializer(entity))


def _clinvar(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return ClinVarParser(ctx.input_path, ctx.options.assembly, ctx.serializer(entity))


def _cosmic(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    return CosmicParser(ctx.input_path, ctx.serializer(entity))


def _gwas(ctx: BuildContext, entity: Optional[str]) -> RecordParser:
    build = ctx.settings.build
    return GwasParser(
        ctx.input_path / build.gwas_catalog_file,
        ctx.input_path / build.dbsnp_file,
        ctx.serializer(entity),
    )


GENOME_INFO = AuxiliaryStep(
    description="Genome info",
    script=lambda settings: settings.tools.genome_info_script,
    output_flag="-o",
    output_path=lambda ctx: ctx.output_dir / "genome_info.json",
    log_path=lambda ctx: ctx.output_dir / "genome_info.log",
    expected_output=True,
)

PROTEIN_FUNCTION_MATRICES = AuxiliaryStep(
    description="Protein function prediction matrices",
    script=lambda settings: settings.tools.protein_function_script,
    output_flag="--outdir",
    output_path=lambda ctx: ctx.input_path,
    log_path=lambda ctx: ctx.input_path / "protein_function_prediction_matrices.log",
)


def default_strategies(settings: Settings) -> Dict[BuildTarget, TargetStrategy]:
    """Return the strategy table for every build target."""
    file_spec = InputSpec(InputKind.FILE)
    dir_spec = InputSpec(InputKind.DIRECTORY)
    build = settings.build

    strategies = [
        TargetStrategy(BuildTarget.GENOME_SEQUENCE, file_spec, "genome_sequence", _genome_sequence, GENOME_INFO),
        TargetStrategy(
            BuildTarget.GENE,
            InputSpec(InputKind.DIRECTORY, mandatory_options=(BuildOption.REFERENCE_GENOME_FILE,)),
            "gene",
            _gene,
            PROTEIN_FUNCTION_MATRICES,
        ),
        TargetStrategy(BuildTarget.REGULATION, dir_spec, "regulatory_region", _regulation),
        TargetStrategy(BuildTarget.VARIATION, dir_spec, None, _variation),
        TargetStrategy(
            BuildTarget.VARIATION_PHENOTYPE_ANNOTATION, dir_spec, "variation_phenotype_annotation",
            _variation_phenotype_annotation,
        ),
        TargetStrategy(BuildTarget.VEP, file_spec, None, _vep),
        TargetStrategy(
            BuildTarget.PROTEIN,
            InputSpec(InputKind.DIRECTORY, mandatory_options=(BuildOption.SPECIES,)),
            "protein",
            _protein,
        ),
        TargetStrategy(
            BuildTarget.PPI,
            InputSpec(InputKind.FILE, mandatory_options=(BuildOption.SPECIES,)),
            "protein_protein_interaction",
            _ppi,
        ),
        TargetStrategy(BuildTarget.CONSERVATION, dir_spec, None, _conservation),
        TargetStrategy(BuildTarget.DRUG, file_spec, "drug", None),
        TargetStrategy(
            BuildTarget.CLINVAR,
            InputSpec(
                InputKind.FILE,
                mandatory_options=(BuildOption.ASSEMBLY,),
                valid_assemblies=tuple(build.clinvar_assemblies),
            ),
            "clinvar",
            _clinvar,
        ),
        TargetStrategy(BuildTarget.COSMIC, file_spec, "cosmic", _cosmic),
        TargetStrategy(
            BuildTarget.GWAS,
            InputSpec(InputKind.DIRECTORY, required_files=(build.gwas_catalog_file, build.dbsnp_file)),
            "gwas",
            _gwas,
        ),
    ]
    return {strategy.target: strategy for strategy in strategies}
