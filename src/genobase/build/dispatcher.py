"""
Build dispatcher.

Drives one build target from validated command line values to a finished
serialized output: output directory check, species lookup, target
selection, input and option validation, the optional helper-script step,
parsing and cleanup. Configuration problems raise ConfigurationError before
any parser exists; errors raised while parsing are logged and recorded in
the returned BuildReport.
"""

import time
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ..config.settings import Settings, get_settings
from ..core.exceptions import (
    ConfigurationError,
    ExternalToolError,
    InvalidAssemblyError,
    MandatoryOptionError,
    TargetNotImplementedError,
)
from ..core.types import (
    BuildOptions,
    BuildReport,
    BuildStatus,
    BuildTarget,
    PathLike,
    Species,
)
from ..parsers import RecordParser
from ..utils.logging import LoggerMixin, log_error_with_context, performance_monitor
from ..utils.process import ExternalToolRunner
from .targets import BuildContext, TargetStrategy, default_strategies


class BuildDispatcher(LoggerMixin):
    """Validates and runs build targets one at a time."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        tool_runner: Optional[ExternalToolRunner] = None,
        strategies: Optional[Dict[BuildTarget, TargetStrategy]] = None,
    ):
        """
        Args:
            settings: Settings providing the species catalog and tool configuration
            tool_runner: Runner for auxiliary helper scripts
            strategies: Strategy table; defaults to every known build target
        """
        self.settings = settings or get_settings()
        self.tool_runner = tool_runner or ExternalToolRunner(timeout=self.settings.tools.timeout)
        self.strategies = strategies if strategies is not None else default_strategies(self.settings)

    # Validation steps

    def check_output_dir(self, output: PathLike) -> Path:
        output_dir = Path(output)
        if not output_dir.exists():
            raise ConfigurationError(
                f"Output directory {output_dir} doesn't exist",
                config_key="output",
                config_value=output_dir,
            )
        if not output_dir.is_dir():
            raise ConfigurationError(
                f"{output_dir} is not a directory",
                config_key="output",
                config_value=output_dir,
            )
        return output_dir

    def resolve_species(self, name: Optional[str]) -> Optional[Species]:
        """Find a species by scientific name, common name or id, ignoring case."""
        species = self.settings.find_species(name)
        if species is None:
            self.logger.warning(f"Species '{name}' not found in the configured catalog")
        return species

    def select_strategy(self, target: Union[str, BuildTarget]) -> TargetStrategy:
        build_target = target if isinstance(target, BuildTarget) else BuildTarget.from_name(target)
        strategy = self.strategies.get(build_target) if build_target is not None else None
        if strategy is None:
            name = build_target.value if build_target is not None else target
            self.logger.error(f"Build option '{name}' is not valid")
            raise ConfigurationError(
                f"Build option '{name}' is not valid",
                config_key="build",
                config_value=name,
                error_code="INVALID_TARGET",
            )
        return strategy

    def check_input(self, strategy: TargetStrategy, input_path: Optional[PathLike]) -> Path:
        target = strategy.target.value
        if input_path is None:
            raise MandatoryOptionError("input", target)
        path = Path(input_path)

        if strategy.input_spec.expects_directory:
            if not path.exists():
                raise ConfigurationError(f"Folder '{path}' doesn't exist", config_key="input", target=target)
            if not path.is_dir():
                raise ConfigurationError(f"'{path}' is not a directory", config_key="input", target=target)
            for file_name in strategy.input_spec.required_files:
                if not (path / file_name).is_file():
                    raise ConfigurationError(
                        f"File '{path / file_name}' doesn't exist",
                        config_key="input",
                        config_value=path / file_name,
                        target=target,
                    )
        else:
            if not path.exists():
                raise ConfigurationError(f"File '{path}' doesn't exist", config_key="input", target=target)
            if path.is_dir():
                raise ConfigurationError(
                    f"{path} is a directory: it must be a file for {target} builder",
                    config_key="input",
                    target=target,
                )
        return path

    def check_options(self, strategy: TargetStrategy, options: BuildOptions) -> None:
        spec = strategy.input_spec
        for option in spec.mandatory_options:
            if options.get(option) is None:
                raise MandatoryOptionError(option.value, strategy.target.value)

        if spec.valid_assemblies and options.assembly not in spec.valid_assemblies:
            raise InvalidAssemblyError(options.assembly, spec.valid_assemblies, strategy.target.value)

    # Execution

    def run_auxiliary_step(self, strategy: TargetStrategy, context: BuildContext) -> Optional[bool]:
        """Run the target's helper script. Failures are logged and never raised."""
        step = strategy.auxiliary
        if step is None:
            return None

        if context.species is None:
            self.logger.error(f"{step.description} skipped: species '{context.options.species}' was not resolved")
            return False

        tools = self.settings.tools
        output_path = step.output_path(context)
        try:
            succeeded = self.tool_runner.run(
                tools.scripts_dir,
                step.script(self.settings),
                list(step.arguments(context)),
                step.log_path(context),
                expected_output=output_path if step.expected_output else None,
            )
        except ExternalToolError as e:
            log_error_with_context(e, {"target": strategy.target.value}, operation=step.description)
            return False

        if succeeded:
            self.logger.info(f"{step.description} created OK in {output_path}")
        else:
            self.logger.error(f"{step.description} for {context.species.scientific_name} cannot be downloaded")
        return succeeded

    @performance_monitor
    def execute(
        self,
        target: Union[str, BuildTarget],
        input_path: Optional[PathLike],
        output: PathLike,
        species: Optional[str] = None,
        options: Optional[BuildOptions] = None,
    ) -> BuildReport:
        """
        Build one target.

        Args:
            target: Build target name, e.g. 'gene' or 'clinvar'
            input_path: Input file or directory, depending on the target
            output: Existing output directory
            species: Species scientific name, common name or id
            options: Assembly and reference genome file, when the target needs them

        Returns:
            Report of the build; status is parse_failed if the parser raised

        Raises:
            ConfigurationError: If output, target, input or options are invalid
        """
        output_dir = self.check_output_dir(output)

        options = options or BuildOptions()
        if options.species is None:
            options = replace(options, species=species)
        resolved = self.resolve_species(options.species)

        strategy = self.select_strategy(target)
        if not strategy.implemented:
            raise TargetNotImplementedError(strategy.target.value)

        path = self.check_input(strategy, input_path)
        self.check_options(strategy, options)

        context = BuildContext(
            target=strategy.target,
            input_path=path,
            output_dir=output_dir,
            species=resolved,
            options=options,
            settings=self.settings,
        )
        auxiliary = self.run_auxiliary_step(strategy, context)

        report = BuildReport(
            target=strategy.target,
            status=BuildStatus.SUCCESS,
            output_dir=output_dir,
            entity=strategy.entity,
            species=resolved,
            auxiliary_succeeded=auxiliary,
        )

        start_time = time.time()
        parser: Optional[RecordParser] = None
        try:
            parser = strategy.create_parser(context)
            self.logger.info(f"Building '{strategy.target.value}' from {path} into {output_dir}")
            parser.parse()
        except Exception as e:
            report.status = BuildStatus.PARSE_FAILED
            report.error_message = str(e)
            self.logger.error(f"Error executing 'build' command {strategy.target.value}: {e}")
            log_error_with_context(e, {"target": strategy.target.value, "input": str(path)}, operation="build")
        finally:
            if parser is not None:
                parser.disconnect()
            report.execution_time = time.time() - start_time

        return report

    def execute_many(
        self,
        targets: Iterable[Union[str, BuildTarget]],
        input_paths: Dict[str, PathLike],
        output: PathLike,
        species: Optional[str] = None,
        options: Optional[BuildOptions] = None,
    ) -> List[BuildReport]:
        """
        Build several targets sequentially.

        A configuration error aborts only its own target and is logged.
        input_paths maps each target name to its input.
        """
        reports = []
        for target in targets:
            name = target.value if isinstance(target, BuildTarget) else target
            try:
                reports.append(self.execute(name, input_paths.get(name), output, species, options))
            except ConfigurationError as e:
                self.logger.error(f"Skipping '{name}': {e.message}")
        return reports
