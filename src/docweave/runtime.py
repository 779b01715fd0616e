"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_storage import FsStorage
from .config import DocsConfig, load_config
from .diagnostics import Diagnostics
from .docset.database import DocumentationDatabase
from .docset.loader import DocumentationLoader
from .errors import ConfigError
from .passes import run_passes


@dataclass
class Runtime:
    """Container for all wired components."""
    config: DocsConfig
    diagnostics: Diagnostics
    storage: FsStorage
    repositories_dir: Path
    output_dir: Path


@dataclass
class ProcessResult:
    database: DocumentationDatabase
    passes_ok: bool
    saved: int


def build_runtime(
    config_path: Path | None = None,
    source_path: Path | None = None,
    repositories_dir: Path | None = None,
    output_dir: Path | None = None,
    diagnostics: Diagnostics | None = None,
) -> Runtime:
    """Build and wire all components for one run."""
    config = load_config(config_path=config_path, source_path=source_path)
    if not config.repositories:
        raise ConfigError("No repositories configured")

    # Use config values if CLI args not provided
    if repositories_dir is None:
        repositories_dir = config.paths.repositories
    if output_dir is None:
        output_dir = config.paths.output

    return Runtime(
        config=config,
        diagnostics=diagnostics or Diagnostics(),
        storage=FsStorage(output_dir),
        repositories_dir=repositories_dir,
        output_dir=output_dir,
    )


def assemble(rt: Runtime) -> dict[str, str]:
    """Copy all repositories into the output directory."""
    loader = DocumentationLoader(rt.config, rt.repositories_dir, rt.output_dir, rt.diagnostics)
    return loader.assemble()


def process(rt: Runtime, origins: dict[str, str] | None = None) -> ProcessResult:
    """Load the merged tree, run every pass and save modified documents."""
    database = DocumentationDatabase(rt.config, rt.storage, rt.diagnostics, origins)
    database.load()
    passes_ok = run_passes(database)
    if not passes_ok:
        rt.diagnostics.warning("Some documents could not be fully processed.")
    saved = database.save_all()
    rt.diagnostics.info(f"Saved {saved} modified documents to {rt.output_dir}")
    return ProcessResult(database=database, passes_ok=passes_ok, saved=saved)
