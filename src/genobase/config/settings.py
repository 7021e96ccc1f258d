"""
Configuration settings for the genobase build pipeline.

This module provides centralized configuration management using pydantic-settings
for environment variables, file-based configuration, and defaults.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.types import Species


def _default_species() -> List[Species]:
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
            assemblies=["GRCm39", "GRCm38"],
        ),
        Species(
            id="drerio",
            scientific_name="Danio rerio",
            common_name="zebrafish",
            assemblies=["GRCz11"],
        ),
        Species(
            id="scerevisiae",
            scientific_name="Saccharomyces cerevisiae",
            common_name="yeast",
            assemblies=["R64-1-1"],
        ),
    ]


class ExternalToolSettings(BaseModel):
    """Settings for the helper scripts run before some builds."""

    scripts_dir: Path = Field(default_factory=lambda: Path.cwd() / "bin" / "ensembl-scripts")
    ensembl_libs: str = ""
    genome_info_script: str = "./genome_info.pl"
    protein_function_script: str = "./protein_function_prediction_matrices.pl"
    timeout: Optional[float] = None  # Seconds; None waits for completion


class BuildSettings(BaseModel):
    """Build dispatch policy."""

    gwas_catalog_file: str = "gwascatalog.txt"
    dbsnp_file: str = "dbSnp142-00-All.vcf.gz"
    clinvar_assemblies: List[str] = Field(default_factory=lambda: ["GRCh37", "GRCh38"])

    # Parse failures are logged; when set, the CLI also exits non-zero
    fail_on_parse_error: bool = False

    # Records per JSON chunk written before flushing
    serializer_flush_size: int = 1000


class AdaptorStoreSettings(BaseModel):
    """Backing store configuration for the adaptor registry."""

    store_dir: Path = Field(default_factory=lambda: Path.cwd() / "store")
    file_suffix: str = ".json.gz"
    id_fields: List[str] = Field(default_factory=lambda: ["id", "name"])


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    log_file: Optional[Path] = None
    log_rotation: str = "7 days"
    enable_json_logging: bool = False


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GENOBASE_",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="allow",
    )

    # Application metadata
    app_name: str = "genobase builder"
    app_version: str = "0.1.0"
    debug: bool = False

    # Species catalog
    species: List[Species] = Field(default_factory=_default_species)

    # Configuration sections
    tools: ExternalToolSettings = Field(default_factory=ExternalToolSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    store: AdaptorStoreSettings = Field(default_factory=AdaptorStoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("species")
    @classmethod
    def unique_species_ids(cls, v: List[Species]) -> List[Species]:
        """Reject catalogs that define the same species id twice."""
        seen = set()
        for sp in v:
            key = sp.id.casefold()
            if key in seen:
                raise ValueError(f"Duplicate species id in catalog: {sp.id}")
            seen.add(key)
        return v

    def find_species(self, name: Optional[str]) -> Optional[Species]:
        """Return the first catalog species matching name, ignoring case."""
        if not name:
            return None
        for sp in self.species:
            if sp.matches(name):
                return sp
        return None

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration as dictionary."""
        return self.logging.model_dump()

    def save_config(self, path: Path) -> None:
        """Save current configuration to file."""
        import json
        with open(path, 'w') as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

    @classmethod
    def load_config(cls, path: Path) -> "Settings":
        """Load configuration from file."""
        import json
        with open(path, 'r') as f:
            config_data = json.load(f)
        return cls(**config_data)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
