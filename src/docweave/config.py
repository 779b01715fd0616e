"""Configuration loader for docweave.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .errors import ConfigError

CONFIG_FILE_NAME = "docweave.toml"

DEFAULT_PROVIDER = "https://github.com"
DEFAULT_DOCS_FOLDER = "docs"
DEFAULT_HOME_FILE = "Home.md"
DEFAULT_TARGET_HOME_FILE = "index.md"
DEFAULT_MARKDOWN_EXTENSIONS = ["md"]
DEFAULT_IMAGE_EXTENSIONS = ["png", "jpg", "jpeg", "gif", "svg"]


@dataclass
class Parameters:
    """Per-repository documentation parameters; None means "not set here"."""
    docs_folder: str | None = None
    home_file: str | None = None
    auxiliary_documents: list[str] | None = None
    ignored_files: list[str] | None = None
    single_document_file: str | None = None
    private_product_website: str | None = None


@dataclass
class EffectiveParameters:
    """Parameters after merging repository, global and built-in defaults."""
    docs_folder: str
    home_file: str
    auxiliary_documents: list[str]
    ignored_files: list[str]
    single_document_file: str | None = None
    private_product_website: str | None = None

    @property
    def has_single_document(self) -> bool:
        return self.single_document_file is not None


@dataclass
class GlobalParameters:
    """Settings shared by all repositories."""
    target_home_file: str = DEFAULT_TARGET_HOME_FILE
    markdown_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_MARKDOWN_EXTENSIONS))
    image_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS))
    release_identifier: str | None = None
    default_branch: str = "develop"


@dataclass
class RepositoryConfig:
    """One source repository."""
    id: str
    remote: str
    provider: str = DEFAULT_PROVIDER
    branch: str | None = None
    tag: str | None = None
    path: str | None = None
    url: str | None = None
    source_url: str | None = None
    parameters: Parameters = field(default_factory=Parameters)

    @property
    def remote_url(self) -> str:
        """Published base URL of the repository, e.g. https://github.com/org/repo."""
        if self.url:
            return self.url.rstrip("/")
        return f"{self.provider.rstrip('/')}/{self.remote.strip('/')}"

    def ref(self, default_branch: str) -> str:
        return self.tag or self.branch or default_branch


@dataclass
class PathsConfig:
    """Working directories."""
    repositories: Path
    output: Path


@dataclass
class DocsConfig:
    """Complete docweave configuration."""
    paths: PathsConfig
    global_params: GlobalParameters
    parameters: Parameters
    repositories: dict[str, RepositoryConfig]
    source: Path | None = None

    def repository(self, repo_id: str) -> RepositoryConfig:
        try:
            return self.repositories[repo_id]
        except KeyError:
            raise ConfigError(f"Unknown repository identifier '{repo_id}'") from None

    def effective_parameters(self, repo_id: str) -> EffectiveParameters:
        repo = self.repository(repo_id).parameters
        glob = self.parameters

        def pick(name: str, default: Any) -> Any:
            value = getattr(repo, name)
            if value is None:
                value = getattr(glob, name)
            return default if value is None else value

        ignored = list(glob.ignored_files or []) + [
            p for p in (repo.ignored_files or []) if p not in (glob.ignored_files or [])
        ]
        return EffectiveParameters(
            docs_folder=_docs_folder(pick("docs_folder", DEFAULT_DOCS_FOLDER)),
            home_file=pick("home_file", DEFAULT_HOME_FILE),
            auxiliary_documents=list(pick("auxiliary_documents", [])),
            ignored_files=ignored,
            single_document_file=repo.single_document_file,
            private_product_website=pick("private_product_website", None),
        )

    def source_base_url(self, repo_id: str) -> str:
        """Base URL of the file browser for the configured branch or tag."""
        repo = self.repository(repo_id)
        if repo.source_url:
            return repo.source_url.rstrip("/")
        return f"{repo.remote_url}/blob/{repo.ref(self.global_params.default_branch)}"


def _docs_folder(value: str) -> str:
    """Documentation folder relative to the checkout; "" is the checkout root."""
    folder = value.strip("/")
    return "" if folder == "." else folder


def _parse_parameters(data: dict[str, Any]) -> Parameters:
    return Parameters(
        docs_folder=data.get("docs_folder"),
        home_file=data.get("home_file"),
        auxiliary_documents=data.get("auxiliary_documents"),
        ignored_files=data.get("ignored_files"),
        single_document_file=data.get("single_document_file"),
        private_product_website=data.get("private_product_website"),
    )


def _validate(config: DocsConfig) -> list[str]:
    issues: list[str] = []

    def check_params(where: str, params: Parameters) -> None:
        for name in ("docs_folder", "home_file", "single_document_file", "private_product_website"):
            value = getattr(params, name)
            if value is not None and not str(value).strip():
                issues.append(f"{where}: '{name}' must not be empty")
        for name in ("auxiliary_documents", "ignored_files"):
            values = getattr(params, name)
            if values is not None and any(not str(v).strip() for v in values):
                issues.append(f"{where}: '{name}' contains an empty entry")

    g = config.global_params
    if not g.target_home_file.strip():
        issues.append("global: 'target_home_file' must not be empty")
    if not g.markdown_extensions:
        issues.append("global: 'markdown_extensions' must not be empty")
    if g.release_identifier is not None and not g.release_identifier.strip():
        issues.append("global: 'release_identifier' must not be empty")
    check_params("parameters", config.parameters)

    for repo_id, repo in config.repositories.items():
        where = f"repositories.{repo_id}"
        if not repo.remote.strip() and not repo.url:
            issues.append(f"{where}: 'remote' is required")
        for name in ("branch", "tag", "path"):
            value = getattr(repo, name)
            if value is not None and not value.strip():
                issues.append(f"{where}: '{name}' must not be empty")
        check_params(f"{where}.parameters", repo.parameters)
    return issues


def load_config(config_path: Path | None = None, source_path: Path | None = None) -> DocsConfig:
    """
    Load configuration from docweave.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/docweave.toml
    3. source_path/docweave.toml

    Relative paths in the file are resolved against the file's directory.

    Raises:
        ConfigError: explicit config_path missing, or invalid values
    """
    toml_data: dict[str, Any] = {}
    found: Path | None = None

    if config_path is not None and not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_FILE_NAME)
    if source_path:
        search_paths.append(source_path / CONFIG_FILE_NAME)

    for path in search_paths:
        if path.exists():
            try:
                with open(path, "rb") as f:
                    toml_data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"{path}: {e}") from e
            found = path
            break

    base = found.parent if found else Path.cwd()

    # Parse paths
    paths_data = toml_data.get("paths", {})
    paths = PathsConfig(
        repositories=base / paths_data.get("repositories", "repos"),
        output=base / paths_data.get("output", "out"),
    )

    # Parse global settings
    global_data = toml_data.get("global", {})
    global_params = GlobalParameters(
        target_home_file=global_data.get("target_home_file", DEFAULT_TARGET_HOME_FILE),
        markdown_extensions=[
            e.lower().lstrip(".") for e in global_data.get("markdown_extensions", DEFAULT_MARKDOWN_EXTENSIONS)
        ],
        image_extensions=[
            e.lower().lstrip(".") for e in global_data.get("image_extensions", DEFAULT_IMAGE_EXTENSIONS)
        ],
        release_identifier=global_data.get("release_identifier"),
        default_branch=global_data.get("default_branch", "develop"),
    )

    # Parse repositories
    repositories: dict[str, RepositoryConfig] = {}
    for repo_id, repo_data in toml_data.get("repositories", {}).items():
        if not isinstance(repo_data, dict):
            raise ConfigError(f"repositories.{repo_id}: expected a table")
        repositories[repo_id] = RepositoryConfig(
            id=repo_id,
            remote=repo_data.get("remote", ""),
            provider=repo_data.get("provider", DEFAULT_PROVIDER),
            branch=repo_data.get("branch"),
            tag=repo_data.get("tag"),
            path=repo_data.get("path"),
            url=repo_data.get("url"),
            source_url=repo_data.get("source_url"),
            parameters=_parse_parameters(repo_data.get("parameters", {})),
        )

    config = DocsConfig(
        paths=paths,
        global_params=global_params,
        parameters=_parse_parameters(toml_data.get("parameters", {})),
        repositories=repositories,
        source=found,
    )

    issues = _validate(config)
    if issues:
        raise ConfigError("Invalid configuration:\n  " + "\n  ".join(issues))
    return config
