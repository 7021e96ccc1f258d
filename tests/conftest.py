"""
Test configuration and fixtures for the genobase build pipeline.

This module provides common test fixtures and configuration for the test suite.
"""

import dataclasses
import tempfile
from pathlib import Path
from typing import Generator, List, Optional

import pytest

from genobase.build import BuildDispatcher, default_strategies
from genobase.config.settings import AdaptorStoreSettings, ExternalToolSettings, Settings
from genobase.core.types import Species
from genobase.parsers import RecordParser


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def output_dir(temp_dir: Path) -> Path:
    """An existing, empty output directory."""
    path = temp_dir / "output"
    path.mkdir()
    return path


@pytest.fixture
def input_file(temp_dir: Path) -> Path:
    """A plain input file."""
    path = temp_dir / "input.txt"
    path.write_text("data\n")
    return path


@pytest.fixture
def input_dir(temp_dir: Path) -> Path:
    """An existing input directory."""
    path = temp_dir / "input"
    path.mkdir()
    return path


@pytest.fixture
def species_catalog() -> List[Species]:
    return [
        Species(
            id="hsapiens",
            scientific_name="Homo sapiens",
            common_name="human",
            assemblies=["GRCh38", "GRCh37"],
        ),
        Species(
            id="mmusculus",
            scientific_name="Mus musculus",
            common_name="mouse",
            assemblies=["GRCm39"],
        ),
    ]


@pytest.fixture
def test_settings(temp_dir: Path, species_catalog: List[Species]) -> Settings:
    """Create test settings configuration."""
    return Settings(
        species=species_catalog,
        tools=ExternalToolSettings(scripts_dir=temp_dir / "scripts", ensembl_libs="/opt/ensembl/libs"),
        store=AdaptorStoreSettings(store_dir=temp_dir / "store"),
        debug=True,
    )


UNIPROT_XML = """<uniprot xmlns="http://uniprot.org/uniprot">
<entry dataset="Swiss-Prot" created="2000-01-01" modified="2020-01-01" version="10">
  <accession>P12345</accession>
  <accession>Q00001</accession>
  <name>TEST_HUMAN</name>
  <protein><recommendedName><fullName>Test protein</fullName></recommendedName></protein>
  <gene><name type="primary">TST</name></gene>
  <organism>
    <name type="scientific">Homo sapiens</name>
    <name type="common">Human</name>
    <dbReference type="NCBI Taxonomy" id="9606"/>
  </organism>
  <sequence length="4" mass="450" checksum="ABCDEF" modified="2000-01-01" version="1">MKTA</sequence>
</entry>
<entry dataset="Swiss-Prot" created="2000-01-01" modified="2020-01-01" version="3">
  <accession>P99999</accession>
  <name>TEST_MOUSE</name>
  <protein><recommendedName><fullName>Mouse protein</fullName></recommendedName></protein>
  <organism>
    <name type="scientific">Mus musculus</name>
    <name type="common">Mouse</name>
    <dbReference type="NCBI Taxonomy" id="10090"/>
  </organism>
  <sequence length="3" mass="300" checksum="FEDCBA" modified="2000-01-01" version="1">MAA</sequence>
</entry>
</uniprot>
"""


@pytest.fixture
def uniprot_xml() -> str:
    """UniProt XML with one human and one mouse entry."""
    return UNIPROT_XML


class FakeParser(RecordParser):
    """Parser recording its lifecycle calls."""

    def __init__(self, serializer, context, error: Optional[Exception] = None):
        super().__init__(serializer)
        self.context = context
        self.error = error
        self.parse_calls = 0
        self.disconnect_calls = 0

    def parse(self) -> None:
        self.parse_calls += 1
        self.emit({"id": "record-1"})
        if self.error is not None:
            raise self.error

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        super().disconnect()


class ParserRecorder:
    """Parser factory standing in for every real parser of a strategy table."""

    def __init__(self):
        self.parsers: List[FakeParser] = []
        self.error: Optional[Exception] = None

    def __call__(self, context, entity):
        parser = FakeParser(context.serializer(entity or "fake"), context, self.error)
        self.parsers.append(parser)
        return parser

    @property
    def constructed(self) -> int:
        return len(self.parsers)


class RecordingToolRunner:
    """External tool runner that records invocations instead of launching them."""

    def __init__(self, result: bool = True, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls = []

    def run(self, working_directory, script_path, arguments, log_file, expected_output=None):
        self.calls.append({
            "working_directory": Path(working_directory),
            "script_path": script_path,
            "arguments": list(arguments),
            "log_file": Path(log_file),
            "expected_output": expected_output,
        })
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def parser_recorder() -> ParserRecorder:
    return ParserRecorder()


@pytest.fixture
def tool_runner() -> RecordingToolRunner:
    return RecordingToolRunner()


@pytest.fixture
def dispatcher(test_settings: Settings, tool_runner: RecordingToolRunner, parser_recorder: ParserRecorder) -> BuildDispatcher:
    """Dispatcher whose implemented targets all build FakeParser instances."""
    strategies = {
        target: dataclasses.replace(strategy, factory=parser_recorder) if strategy.implemented else strategy
        for target, strategy in default_strategies(test_settings).items()
    }
    return BuildDispatcher(test_settings, tool_runner=tool_runner, strategies=strategies)


# Test markers for different test categories
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
