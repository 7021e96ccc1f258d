"""Tests for the build dispatcher."""

import pytest

from genobase.build import BuildDispatcher
from genobase.core.exceptions import (
    ConfigurationError,
    ExternalToolError,
    InvalidAssemblyError,
    MandatoryOptionError,
    TargetNotImplementedError,
)
from genobase.core.types import BuildOptions, BuildStatus, BuildTarget
from genobase.serializers import read_records


FILE_TARGETS = ["genome-sequence", "vep", "ppi", "clinvar", "cosmic"]
DIRECTORY_TARGETS = ["gene", "regulation", "variation", "variation-phen-annot", "protein", "conservation", "gwas"]

ALL_OPTIONS = BuildOptions(species="hsapiens", assembly="GRCh38", reference_genome_file="genome.fa")


class TestOutputValidation:

    def test_missing_output_fails_first(self, dispatcher, input_file, temp_dir, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("species resolution must not run")

        monkeypatch.setattr(dispatcher, "resolve_species", fail)
        monkeypatch.setattr(dispatcher, "check_input", fail)

        with pytest.raises(ConfigurationError, match="doesn't exist"):
            dispatcher.execute("cosmic", input_file, temp_dir / "missing", "hsapiens")

    def test_output_that_is_a_file_fails(self, dispatcher, input_file, parser_recorder, monkeypatch):
        monkeypatch.setattr(dispatcher, "resolve_species", lambda name: pytest.fail("resolved species"))

        with pytest.raises(ConfigurationError, match="is not a directory"):
            dispatcher.execute("cosmic", input_file, input_file, "hsapiens")
        assert parser_recorder.constructed == 0

    def test_output_checked_before_target(self, dispatcher, input_file, temp_dir):
        with pytest.raises(ConfigurationError) as excinfo:
            dispatcher.execute("no-such-target", input_file, temp_dir / "missing", "hsapiens")
        assert excinfo.value.config_key == "output"


class TestSpeciesResolution:

    @pytest.mark.parametrize("name", ["HUMAN", "homo sapiens", "HSAPIENS", "Homo Sapiens", "human"])
    def test_any_identifier_resolves(self, dispatcher, name):
        species = dispatcher.resolve_species(name)
        assert species is not None
        assert species.id == "hsapiens"

    def test_all_identifiers_resolve_to_the_same_species(self, test_settings):
        resolved = {test_settings.find_species(n).id for n in ("HUMAN", "homo sapiens", "HSAPIENS")}
        assert resolved == {"hsapiens"}

    def test_unknown_species_is_passed_through(self, dispatcher, input_file, output_dir, parser_recorder):
        report = dispatcher.execute("cosmic", input_file, output_dir, "unicorn")

        assert report.species is None
        assert report.success
        assert parser_recorder.constructed == 1


class TestTargetSelection:

    def test_unknown_target_is_not_valid(self, dispatcher, input_file, output_dir, parser_recorder):
        with pytest.raises(ConfigurationError, match="'foo' is not valid") as excinfo:
            dispatcher.execute("foo", input_file, output_dir, "hsapiens")
        assert excinfo.value.error_code == "INVALID_TARGET"
        assert parser_recorder.constructed == 0

    def test_enum_target_is_accepted(self, dispatcher, input_file, output_dir):
        report = dispatcher.execute(BuildTarget.COSMIC, input_file, output_dir, "hsapiens")
        assert report.target == BuildTarget.COSMIC

    def test_every_target_has_a_strategy(self, dispatcher):
        assert set(dispatcher.strategies) == set(BuildTarget)


class TestInputValidation:

    @pytest.mark.parametrize("target", DIRECTORY_TARGETS)
    def test_directory_target_rejects_file(self, dispatcher, target, input_file, output_dir, parser_recorder):
        with pytest.raises(ConfigurationError, match="is not a directory"):
            dispatcher.execute(target, input_file, output_dir, "hsapiens", ALL_OPTIONS)
        assert parser_recorder.constructed == 0

    @pytest.mark.parametrize("target", FILE_TARGETS)
    def test_file_target_rejects_directory(self, dispatcher, target, input_dir, output_dir, parser_recorder):
        with pytest.raises(ConfigurationError, match="is a directory"):
            dispatcher.execute(target, input_dir, output_dir, "hsapiens", ALL_OPTIONS)
        assert parser_recorder.constructed == 0

    @pytest.mark.parametrize("target", FILE_TARGETS + DIRECTORY_TARGETS)
    def test_missing_input_fails(self, dispatcher, target, temp_dir, output_dir, parser_recorder):
        with pytest.raises(ConfigurationError, match="doesn't exist"):
            dispatcher.execute(target, temp_dir / "nothing-here", output_dir, "hsapiens", ALL_OPTIONS)
        assert parser_recorder.constructed == 0


class TestMandatoryOptions:

    @pytest.mark.parametrize("target", ["ppi", "protein"])
    def test_species_is_mandatory(self, dispatcher, target, input_file, input_dir, output_dir):
        path = input_file if target == "ppi" else input_dir
        with pytest.raises(MandatoryOptionError) as excinfo:
            dispatcher.execute(target, path, output_dir, None)
        assert str(excinfo.value.message) == f"'species' option is mandatory for '{target}' builder"

    def test_gene_requires_reference_genome(self, dispatcher, input_dir, output_dir, parser_recorder):
        with pytest.raises(MandatoryOptionError, match="'reference-genome-file' option is mandatory for 'gene'"):
            dispatcher.execute("gene", input_dir, output_dir, "hsapiens")
        assert parser_recorder.constructed == 0

    def test_clinvar_requires_assembly(self, dispatcher, input_file, output_dir):
        with pytest.raises(MandatoryOptionError, match="'assembly' option is mandatory for 'clinvar'"):
            dispatcher.execute("clinvar", input_file, output_dir, "hsapiens")


class TestClinvarAssembly:

    @pytest.mark.parametrize("assembly", ["GRCh36", "grch38", "hg19", ""])
    def test_rejects_unknown_assembly(self, dispatcher, assembly, input_file, output_dir, parser_recorder):
        with pytest.raises(InvalidAssemblyError) as excinfo:
            dispatcher.execute("clinvar", input_file, output_dir, "hsapiens", BuildOptions(assembly=assembly))
        assert "Possible values: GRCh37, GRCh38" in excinfo.value.message
        assert parser_recorder.constructed == 0

    @pytest.mark.parametrize("assembly", ["GRCh37", "GRCh38"])
    def test_accepts_known_assembly(self, dispatcher, assembly, input_file, output_dir, parser_recorder):
        report = dispatcher.execute("clinvar", input_file, output_dir, "hsapiens", BuildOptions(assembly=assembly))
        assert report.success
        assert parser_recorder.parsers[0].context.options.assembly == assembly


class TestGwas:

    @pytest.mark.parametrize("present", [[], ["gwascatalog.txt"], ["dbSnp142-00-All.vcf.gz"]])
    def test_requires_both_input_files(self, dispatcher, present, input_dir, output_dir, parser_recorder):
        for name in present:
            (input_dir / name).write_text("")
        with pytest.raises(ConfigurationError, match="doesn't exist"):
            dispatcher.execute("gwas", input_dir, output_dir, "hsapiens")
        assert parser_recorder.constructed == 0

    def test_runs_with_both_input_files(self, dispatcher, input_dir, output_dir, parser_recorder):
        (input_dir / "gwascatalog.txt").write_text("")
        (input_dir / "dbSnp142-00-All.vcf.gz").write_text("")

        report = dispatcher.execute("gwas", input_dir, output_dir, "hsapiens")

        assert report.success
        assert parser_recorder.constructed == 1


class TestDrug:

    def test_drug_is_not_implemented(self, dispatcher, input_file, output_dir, parser_recorder, tool_runner):
        with pytest.raises(TargetNotImplementedError, match="'drug' builder is not implemented yet"):
            dispatcher.execute("drug", input_file, output_dir, "hsapiens")

        assert parser_recorder.constructed == 0
        assert tool_runner.calls == []
        assert list(output_dir.iterdir()) == []

    def test_drug_fails_even_without_input(self, dispatcher, output_dir):
        with pytest.raises(TargetNotImplementedError):
            dispatcher.execute("drug", None, output_dir, "hsapiens")


class TestExecution:

    def test_records_written_under_entity_name(self, dispatcher, input_file, output_dir):
        report = dispatcher.execute("cosmic", input_file, output_dir, "hsapiens")

        assert report.status == BuildStatus.SUCCESS
        assert report.entity == "cosmic"
        assert list(read_records(output_dir / "cosmic.json.gz")) == [{"id": "record-1"}]

    def test_parse_failure_is_logged_and_cleaned_up(self, dispatcher, input_file, output_dir, parser_recorder):
        parser_recorder.error = RuntimeError("boom")

        report = dispatcher.execute("cosmic", input_file, output_dir, "hsapiens")

        parser = parser_recorder.parsers[0]
        assert parser.parse_calls == 1
        assert parser.disconnect_calls == 1
        assert report.status == BuildStatus.PARSE_FAILED
        assert report.error_message == "boom"
        assert not report.success

    def test_parser_disconnected_after_success(self, dispatcher, input_file, output_dir, parser_recorder):
        dispatcher.execute("vep", input_file, output_dir, "hsapiens")
        assert parser_recorder.parsers[0].disconnect_calls == 1

    def test_context_carries_validated_values(self, dispatcher, input_dir, output_dir, parser_recorder):
        options = BuildOptions(reference_genome_file="genome.fa")
        dispatcher.execute("gene", input_dir, output_dir, "human", options)

        context = parser_recorder.parsers[0].context
        assert context.input_path == input_dir
        assert context.output_dir == output_dir
        assert context.species.id == "hsapiens"
        assert context.options.species == "human"


class TestAuxiliaryStep:

    def test_genome_sequence_fetches_genome_info(self, dispatcher, tool_runner, test_settings, input_file, output_dir):
        report = dispatcher.execute("genome-sequence", input_file, output_dir, "human")

        assert report.auxiliary_succeeded is True
        call, = tool_runner.calls
        assert call["working_directory"] == test_settings.tools.scripts_dir
        assert call["script_path"] == "./genome_info.pl"
        assert call["arguments"] == [
            "--species", "Homo sapiens",
            "-o", str(output_dir / "genome_info.json"),
            "--ensembl-libs", "/opt/ensembl/libs",
        ]
        assert call["log_file"] == output_dir / "genome_info.log"
        assert call["expected_output"] == output_dir / "genome_info.json"

    def test_gene_fetches_protein_function_matrices(self, dispatcher, tool_runner, input_dir, output_dir):
        options = BuildOptions(reference_genome_file="genome.fa")
        dispatcher.execute("gene", input_dir, output_dir, "hsapiens", options)

        call, = tool_runner.calls
        assert call["script_path"] == "./protein_function_prediction_matrices.pl"
        assert call["arguments"][:4] == ["--species", "Homo sapiens", "--outdir", str(input_dir)]
        assert call["log_file"] == input_dir / "protein_function_prediction_matrices.log"

    def test_other_targets_run_no_tool(self, dispatcher, tool_runner, input_file, output_dir):
        report = dispatcher.execute("cosmic", input_file, output_dir, "hsapiens")
        assert report.auxiliary_succeeded is None
        assert tool_runner.calls == []

    def test_tool_failure_does_not_abort(self, dispatcher, tool_runner, parser_recorder, input_file, output_dir):
        tool_runner.result = False

        report = dispatcher.execute("genome-sequence", input_file, output_dir, "hsapiens")

        assert report.auxiliary_succeeded is False
        assert report.success
        assert parser_recorder.constructed == 1

    def test_tool_launch_error_does_not_abort(self, dispatcher, tool_runner, parser_recorder, input_file, output_dir):
        tool_runner.error = ExternalToolError("perl not found", script="./genome_info.pl")

        report = dispatcher.execute("genome-sequence", input_file, output_dir, "hsapiens")

        assert report.auxiliary_succeeded is False
        assert parser_recorder.constructed == 1

    def test_unresolved_species_skips_tool(self, dispatcher, tool_runner, parser_recorder, input_file, output_dir):
        report = dispatcher.execute("genome-sequence", input_file, output_dir, "unicorn")

        assert tool_runner.calls == []
        assert report.auxiliary_succeeded is False
        assert parser_recorder.constructed == 1


class TestExecuteMany:

    def test_configuration_errors_are_isolated(self, dispatcher, input_file, output_dir):
        reports = dispatcher.execute_many(
            ["drug", "cosmic", "foo", "vep"],
            {"drug": input_file, "cosmic": input_file, "foo": input_file, "vep": input_file},
            output_dir,
            "hsapiens",
        )
        assert [r.target for r in reports] == [BuildTarget.COSMIC, BuildTarget.VEP]

    def test_parse_failures_are_reported(self, dispatcher, parser_recorder, input_file, output_dir):
        parser_recorder.error = ValueError("bad line")
        reports = dispatcher.execute_many(["cosmic", "vep"], {"cosmic": input_file, "vep": input_file}, output_dir)
        assert [r.status for r in reports] == [BuildStatus.PARSE_FAILED, BuildStatus.PARSE_FAILED]
        assert all(p.disconnect_calls == 1 for p in parser_recorder.parsers)


PPI_ROWS = (
    "uniprotkb:P1\tuniprotkb:P2\t-\t-\t-\t-\t-\t-\t-\ttaxid:9606(Homo sapiens)\ttaxid:9606(Homo sapiens)\t-\t-\tintact:EBI-1\t-\n"
    "uniprotkb:P3\tuniprotkb:P4\t-\t-\t-\t-\t-\t-\t-\ttaxid:10090(Mus musculus)\ttaxid:10090(Mus musculus)\t-\t-\tintact:EBI-2\t-\n"
)


class TestSpeciesFilteredBuilds:
    """protein and ppi builds run with their real parsers."""

    @pytest.fixture
    def real_dispatcher(self, test_settings, tool_runner):
        return BuildDispatcher(test_settings, tool_runner=tool_runner)

    @pytest.mark.parametrize("species", ["hsapiens", "human", "Homo sapiens"])
    def test_protein_accepts_any_species_identifier(self, real_dispatcher, species, uniprot_xml, input_dir, output_dir):
        (input_dir / "uniprot_1.xml").write_text(uniprot_xml)

        report = real_dispatcher.execute("protein", input_dir, output_dir, species)

        assert report.success
        protein, = read_records(output_dir / "protein.json.gz")
        assert protein["id"] == "P12345"

    @pytest.mark.parametrize("species", ["hsapiens", "HUMAN"])
    def test_ppi_accepts_any_species_identifier(self, real_dispatcher, species, input_file, output_dir):
        input_file.write_text(PPI_ROWS)

        report = real_dispatcher.execute("ppi", input_file, output_dir, species)

        assert report.success
        interaction, = read_records(output_dir / "protein_protein_interaction.json.gz")
        assert interaction["interactorA"] == "uniprotkb:P1"

    def test_unresolved_species_is_matched_as_given(self, real_dispatcher, uniprot_xml, input_dir, output_dir):
        (input_dir / "uniprot_1.xml").write_text(uniprot_xml)

        report = real_dispatcher.execute("protein", input_dir, output_dir, "Mus")

        assert report.species is None
        protein, = read_records(output_dir / "protein.json.gz")
        assert protein["id"] == "P99999"
