"""
Configuration for reasonkit.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from reasonkit.models.artifacts import ArtifactKind
from reasonkit.models.graph import DeploymentMode
from reasonkit.utils.exceptions import ConfigurationError


class SessionConfig(BaseModel):
    """Session lifecycle and capacity configuration."""

    max_thoughts_per_session: int = Field(default=100, ge=1, le=1000)
    # Idle timeout in seconds
    session_timeout: float = Field(default=3600.0, ge=60.0)
    # Per-kind ceilings; None means unbounded. Thoughts use max_thoughts_per_session.
    artifact_limits: dict[ArtifactKind, int | None] = Field(default_factory=dict)

    def limit_for(self, kind: ArtifactKind) -> int | None:
        """Resolve the storage ceiling for one artifact kind."""
        if kind == ArtifactKind.THOUGHT:
            return self.artifact_limits.get(kind, self.max_thoughts_per_session)
        return self.artifact_limits.get(kind)


class GraphConfig(BaseModel):
    """Knowledge graph configuration."""

    default_mode: DeploymentMode = DeploymentMode.STANDARD


class PersistenceConfig(BaseModel):
    """Unified store persistence configuration."""

    enabled: bool = False
    directory: str = ".ct-data"
    knowledge_graph_file: str = "knowledge-graph.json"
    debounce_seconds: float = 0.3


class NotebookConfig(BaseModel):
    """Ephemeral notebook and sandbox configuration."""

    default_timeout: float = 5.0
    max_cells: int = 200
    max_executions: int = 200
    max_output_bytes: int = 262144  # 256KB
    idle_ttl: float = 30 * 60.0
    sweep_interval: float = 60.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    session: SessionConfig = Field(default_factory=SessionConfig)
    graph: GraphConfig = Field(default_factory=GraphConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    notebook: NotebookConfig = Field(default_factory=NotebookConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    debug: bool = False

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            REASONKIT_DEBUG: Enable debug logging
            REASONKIT_MAX_THOUGHTS: Thought ceiling per session
            REASONKIT_SESSION_TIMEOUT: Session idle timeout (seconds)
            REASONKIT_GRAPH_MODE: Default deployment mode for knowledge graphs
            REASONKIT_PERSISTENCE_ENABLED: Persist the unified store to disk
            REASONKIT_PERSISTENCE_DIR: Directory for persistence files
            REASONKIT_KNOWLEDGE_GRAPH_FILE: Knowledge graph file name
            REASONKIT_NOTEBOOK_TIMEOUT: Default cell execution timeout (seconds)
            REASONKIT_NOTEBOOK_MAX_CELLS: Cell ceiling per notebook
            REASONKIT_NOTEBOOK_MAX_EXECUTIONS: Execution ceiling per notebook
            REASONKIT_NOTEBOOK_MAX_OUTPUT_BYTES: Output ceiling per execution
            REASONKIT_NOTEBOOK_IDLE_TTL: Notebook idle time-to-live (seconds)
            REASONKIT_LOG_LEVEL: Log level

        Raises:
            ConfigurationError: A variable cannot be parsed or is out of range
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            if value == "":
                return default
            # Convert boolean strings
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            # Convert numeric strings
            try:
                if isinstance(default, int):
                    return int(value)
                if isinstance(default, float):
                    return float(value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {key}: {value!r}", {"key": key}
                ) from e
            return value

        try:
            return cls._build_from_env(get_env)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def _build_from_env(cls, get_env) -> "Config":
        return cls(
            session=SessionConfig(
                max_thoughts_per_session=get_env("REASONKIT_MAX_THOUGHTS", 100),
                session_timeout=get_env("REASONKIT_SESSION_TIMEOUT", 3600.0),
            ),
            graph=GraphConfig(
                default_mode=get_env("REASONKIT_GRAPH_MODE", DeploymentMode.STANDARD.value),
            ),
            persistence=PersistenceConfig(
                enabled=get_env("REASONKIT_PERSISTENCE_ENABLED", False),
                directory=get_env("REASONKIT_PERSISTENCE_DIR", ".ct-data"),
                knowledge_graph_file=get_env(
                    "REASONKIT_KNOWLEDGE_GRAPH_FILE", "knowledge-graph.json"
                ),
                debounce_seconds=get_env("REASONKIT_PERSISTENCE_DEBOUNCE", 0.3),
            ),
            notebook=NotebookConfig(
                default_timeout=get_env("REASONKIT_NOTEBOOK_TIMEOUT", 5.0),
                max_cells=get_env("REASONKIT_NOTEBOOK_MAX_CELLS", 200),
                max_executions=get_env("REASONKIT_NOTEBOOK_MAX_EXECUTIONS", 200),
                max_output_bytes=get_env("REASONKIT_NOTEBOOK_MAX_OUTPUT_BYTES", 262144),
                idle_ttl=get_env("REASONKIT_NOTEBOOK_IDLE_TTL", 1800.0),
                sweep_interval=get_env("REASONKIT_NOTEBOOK_SWEEP_INTERVAL", 60.0),
            ),
            logging=LoggingConfig(
                level=get_env("REASONKIT_LOG_LEVEL", "INFO"),
                log_to_file=get_env("REASONKIT_LOG_TO_FILE", False),
                log_dir=get_env("REASONKIT_LOG_DIR", "logs"),
                file_rotation=get_env("REASONKIT_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("REASONKIT_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("REASONKIT_LOG_COMPRESSION", "zip"),
                serialize=get_env("REASONKIT_LOG_SERIALIZE", True),
            ),
            debug=get_env("REASONKIT_DEBUG", False),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls(**(data or {}))

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        # Merge: env vars override YAML
        final_dict = {**config_dict}

        # Apply env overrides (non-default values)
        default = cls()
        for section in ("session", "graph", "persistence", "notebook", "logging"):
            env_section = getattr(env_config, section)
            if env_section != getattr(default, section):
                final_dict[section] = env_section.model_dump()

        if env_config.debug != default.debug:
            final_dict["debug"] = env_config.debug

        return cls(**final_dict) if final_dict else env_config
