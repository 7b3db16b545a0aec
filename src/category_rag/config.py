"""
Configuration Management - Centralized configuration for the category RAG service

Defaults are overridden by an optional YAML file, then by environment variables.

License: MIT
"""

import os
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from pathlib import Path
import logging

from dotenv import load_dotenv

from .exceptions import InvalidConfiguration

load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class RetrievalConfig:
    """Configuration for chunking and the RAG-vs-simple decision."""

    chunk_size: int = 1500
    chunk_overlap: int = 200
    # Cleaned text longer than this (in characters) gets semantic retrieval
    rag_threshold: int = 50000
    top_k: int = 3
    category_top_k: int = 3
    per_document_k: int = 2
    summary_chunks: int = 5
    context_separator: str = "\n\n"
    category_context_separator: str = "\n\n---\n\n"


@dataclass
class EmbeddingConfig:
    """Configuration for embedding generation.

    ``batch_size`` is the number of texts per embeddings request. Content with
    more chunks than this needs several round trips to initialize.
    """

    model: str = "text-embedding-3-small"
    batch_size: int = 2048
    max_retries: int = 3
    timeout: float = 30.0
    dimension: Optional[int] = None


@dataclass
class VectorStoreConfig:
    """Configuration for vector store."""

    backend: str = "memory"
    index_name: Optional[str] = None
    namespace_prefix: str = "category-rag"
    upsert_batch_size: int = 100

    # Pinecone specific
    api_key: Optional[str] = None

    def resolved_backend(self) -> str:
        """Pinecone is only used when both credentials and an index are configured."""
        if self.backend == "pinecone" and self.api_key and self.index_name:
            return "pinecone"
        return "memory"


@dataclass
class LLMConfig:
    """Configuration for language model."""

    model: str = "gpt-4o-mini"
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: float = 60.0
    max_retries: int = 3


@dataclass
class UploadConfig:
    """Configuration for document uploads."""

    max_upload_size: int = 52428800  # 50MB
    allowed_extensions: List[str] = field(
        default_factory=lambda: [".pdf", ".docx", ".doc", ".txt", ".md"]
    )
    web_timeout: float = 30.0


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format_type: str = "simple"
    log_file: Optional[str] = None


@dataclass
class SecurityConfig:
    """Configuration for security."""

    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    cors_methods: List[str] = field(default_factory=lambda: ["GET", "POST", "DELETE"])


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""

    prometheus_enabled: bool = True
    metrics_path: str = "/metrics"


@dataclass
class AppConfig:
    """Main service configuration."""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Component configurations
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    vector_store: VectorStoreConfig = field(default_factory=VectorStoreConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 5000


class ConfigManager:
    """
    Configuration manager for loading and validating configuration.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file (optional)
        """
        self.config_path = config_path
        self._config: Optional[AppConfig] = None

    def load_config(self) -> AppConfig:
        """
        Load configuration from environment variables and files.

        Returns:
            AppConfig instance

        Raises:
            InvalidConfiguration: If any value fails validation
        """
        if self._config is not None:
            return self._config

        config = AppConfig()

        if self.config_path and Path(self.config_path).exists():
            config = self._load_from_file(config, self.config_path)

        config = self._load_from_env(config)

        validate_config(config)

        self._config = config
        logger.info(f"Configuration loaded for environment: {config.environment}")

        return config

    def _load_from_file(self, config: AppConfig, file_path: str) -> AppConfig:
        """Load configuration from YAML file."""
        import yaml

        with open(file_path, "r", encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}

        self._update_config_from_dict(config, file_config)
        logger.info(f"Configuration loaded from file: {file_path}")

        return config

    def _load_from_env(self, config: AppConfig) -> AppConfig:
        """Load configuration from environment variables."""

        # Environment
        config.environment = os.getenv("ENVIRONMENT", config.environment)
        config.debug = os.getenv("DEBUG", str(config.debug)).lower() == "true"

        # API
        config.api_host = os.getenv("API_HOST", config.api_host)
        config.api_port = int(os.getenv("PORT", os.getenv("API_PORT", str(config.api_port))))

        # Retrieval
        config.retrieval.chunk_size = int(
            os.getenv("CHUNK_SIZE", str(config.retrieval.chunk_size))
        )
        config.retrieval.chunk_overlap = int(
            os.getenv("CHUNK_OVERLAP", str(config.retrieval.chunk_overlap))
        )
        config.retrieval.rag_threshold = int(
            os.getenv("RAG_THRESHOLD", str(config.retrieval.rag_threshold))
        )
        config.retrieval.top_k = int(os.getenv("RAG_TOP_K", str(config.retrieval.top_k)))

        # Embedding
        config.embedding.model = os.getenv("EMBEDDING_MODEL", config.embedding.model)
        config.embedding.batch_size = int(
            os.getenv("EMBEDDING_BATCH_SIZE", str(config.embedding.batch_size))
        )

        # Vector Store
        config.vector_store.backend = os.getenv("VECTOR_STORE_BACKEND", config.vector_store.backend)
        config.vector_store.index_name = os.getenv(
            "PINECONE_INDEX_NAME", config.vector_store.index_name
        )
        config.vector_store.api_key = os.getenv("PINECONE_API_KEY", config.vector_store.api_key)

        # LLM
        config.llm.model = os.getenv("LLM_MODEL", config.llm.model)
        config.llm.max_tokens = int(os.getenv("LLM_MAX_TOKENS", str(config.llm.max_tokens)))
        config.llm.temperature = float(os.getenv("LLM_TEMPERATURE", str(config.llm.temperature)))

        # Uploads
        config.upload.max_upload_size = int(
            os.getenv("MAX_UPLOAD_SIZE", str(config.upload.max_upload_size))
        )

        # Logging
        config.logging.level = os.getenv("LOG_LEVEL", config.logging.level)
        config.logging.format_type = os.getenv("LOG_FORMAT", config.logging.format_type)
        config.logging.log_file = os.getenv("LOG_FILE", config.logging.log_file)

        # Security
        cors_origins_env = os.getenv("CORS_ORIGINS")
        if cors_origins_env:
            config.security.cors_origins = [
                origin.strip() for origin in cors_origins_env.split(",")
            ]

        # Monitoring
        config.monitoring.prometheus_enabled = (
            os.getenv("PROMETHEUS_ENABLED", str(config.monitoring.prometheus_enabled)).lower()
            == "true"
        )

        return config

    def _update_config_from_dict(self, config: AppConfig, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for section_name, section_config in config_dict.items():
            if hasattr(config, section_name) and isinstance(section_config, dict):
                section_obj = getattr(config, section_name)
                for key, value in section_config.items():
                    if hasattr(section_obj, key):
                        setattr(section_obj, key, value)
            elif hasattr(config, section_name):
                setattr(config, section_name, section_config)

    def get_config(self) -> AppConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_config(self) -> AppConfig:
        """Reload configuration from sources."""
        self._config = None
        return self.load_config()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        config = self.get_config()

        def dataclass_to_dict(obj):
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    field_name: dataclass_to_dict(getattr(obj, field_name))
                    for field_name in obj.__dataclass_fields__
                }
            else:
                return obj

        return dataclass_to_dict(config)


def validate_config(config: AppConfig) -> None:
    """
    Validate configuration values.

    Raises:
        InvalidConfiguration: Listing every failed check
    """
    errors = []

    if config.api_port < 1 or config.api_port > 65535:
        errors.append("API port must be between 1 and 65535")

    # Retrieval
    retrieval = config.retrieval
    if retrieval.chunk_size < 1:
        errors.append("Chunk size must be at least 1")

    if retrieval.chunk_overlap < 0:
        errors.append("Chunk overlap cannot be negative")

    if retrieval.chunk_overlap >= retrieval.chunk_size:
        errors.append("Chunk overlap must be smaller than chunk size")

    if retrieval.rag_threshold < 0:
        errors.append("RAG threshold cannot be negative")

    for name in ("top_k", "category_top_k", "per_document_k", "summary_chunks"):
        if getattr(retrieval, name) < 1:
            errors.append(f"Retrieval {name} must be at least 1")

    # Embedding
    if config.embedding.batch_size < 1:
        errors.append("Embedding batch size must be at least 1")

    if config.embedding.dimension is not None and config.embedding.dimension < 1:
        errors.append("Embedding dimension must be at least 1")

    # Vector store
    if config.vector_store.backend not in ["memory", "pinecone"]:
        errors.append("Vector store backend must be one of: memory, pinecone")

    # LLM
    if config.llm.max_tokens < 1:
        errors.append("LLM max tokens must be at least 1")

    if not (0.0 <= config.llm.temperature <= 2.0):
        errors.append("LLM temperature must be between 0.0 and 2.0")

    # Logging
    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.logging.level.upper() not in valid_log_levels:
        errors.append(f"Log level must be one of: {', '.join(valid_log_levels)}")

    if errors:
        error_message = "Configuration validation errors:\n" + "\n".join(
            f"- {error}" for error in errors
        )
        raise InvalidConfiguration(error_message)


# Process-wide configuration manager; configuration is read-only once loaded
_config_manager = None


def get_config_manager(config_path: Optional[str] = None) -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_path or os.getenv("CONFIG_PATH"))
    return _config_manager


def get_config() -> AppConfig:
    """Get the current service configuration."""
    return get_config_manager().get_config()
