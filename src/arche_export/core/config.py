"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class RepositoryConfig(BaseSettings):
    """Remote repository API configuration."""

    model_config = {"env_prefix": "ARCHE_API_"}

    base_url: str = "https://arche.acdh.oeaw.ac.at/api"
    username: str = ""
    password: str = ""
    timeout_seconds: int = 60
    enabled: bool = True


class VocabularyConfig(BaseSettings):
    """Namespaces, identifier prefix and mapping table location."""

    model_config = {"env_prefix": "ARCHE_VOCAB_"}

    schema_namespace: str = "https://vocabs.acdh.oeaw.ac.at/schema#"
    api_namespace: str = "https://arche.acdh.oeaw.ac.at/api/"
    identifier_prefix: str = "https://id.acdh.oeaw.ac.at/"
    language_vocabulary: str = "https://vocabs.acdh.oeaw.ac.at/iso6393/"
    license_vocabulary: str = "https://vocabs.acdh.oeaw.ac.at/archelicenses/"
    lifecycle_vocabulary: str = "https://vocabs.acdh.oeaw.ac.at/archelifecyclestatus/"
    category_vocabulary: str = "https://vocabs.acdh.oeaw.ac.at/archecategory/"
    discipline_vocabulary: str = "https://vocabs.acdh.oeaw.ac.at/oefosdisciplines/"
    tables_path: str = "config/arche_vocabulary.yml"
    default_language: str = "de"
    default_license: str | None = None


class ExportConfig(BaseSettings):
    """Export behaviour configuration."""

    model_config = {"env_prefix": "ARCHE_EXPORT_"}

    viewer_url: str = "https://viewer.acdh.oeaw.ac.at/viewer"
    catalog_url: str = "https://permalink.obvsg.at/"
    hosting_agent: str = "https://id.acdh.oeaw.ac.at/acdh"
    used_software: str = "Goobi"
    folders: list[str] = Field(default_factory=lambda: ["master", "media", "ocr"])
    required_folders: list[str] = Field(default_factory=lambda: ["master"])
    dump_folder: str | None = None


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "ARCHE_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    vocabulary: VocabularyConfig = Field(default_factory=VocabularyConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
