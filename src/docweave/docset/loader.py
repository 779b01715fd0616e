"""Assemble the merged documentation tree from local repository checkouts."""

import logging
import shutil
from pathlib import Path
from typing import Callable

from ..config import DocsConfig, EffectiveParameters
from ..diagnostics import Diagnostics
from ..errors import DocumentationError
from .repository import matches_pattern

logger = logging.getLogger(__name__)


def _ignore_patterns(patterns: list[str]) -> Callable[[str, list[str]], set[str]]:
    def ignore(_directory: str, names: list[str]) -> set[str]:
        return {name for name in names if any(matches_pattern(name, p) for p in patterns)}
    return ignore


class DocumentationLoader:
    """Copy each repository's docs folder into ``<output>/<repo_id>``.

    Home files are renamed to the target home file name on the way. The
    returned map records ``new path -> original path`` for every rename, both
    relative to the output directory.
    """

    def __init__(
        self,
        config: DocsConfig,
        repositories_dir: Path,
        output_dir: Path,
        diagnostics: Diagnostics,
    ):
        self.config = config
        self.repositories_dir = repositories_dir
        self.output_dir = output_dir
        self.diagnostics = diagnostics

    def assemble(self) -> dict[str, str]:
        if self.output_dir.exists():
            logger.debug("removing previous output %s", self.output_dir)
            shutil.rmtree(self.output_dir)
        self.output_dir.mkdir(parents=True)

        origins: dict[str, str] = {}
        for repo_id, repo in self.config.repositories.items():
            params = self.config.effective_parameters(repo_id)
            checkout = self.repositories_dir / (repo.path or repo_id)
            if not checkout.is_dir():
                raise DocumentationError(f"Repository '{repo_id}' is not available at {checkout}")
            self.diagnostics.info(f"Copying documentation of '{repo_id}'")
            destination = self.output_dir / repo_id
            if params.single_document_file:
                single = self._copy_single_document(repo_id, checkout, destination, params.single_document_file)
                origins.update(single)
            else:
                source = checkout / params.docs_folder
                if not source.is_dir():
                    raise DocumentationError(
                        f"Repository '{repo_id}' has no documentation folder '{params.docs_folder}'"
                    )
                shutil.copytree(source, destination, ignore=_ignore_patterns(params.ignored_files))
                origins.update(self._rename_home_files(repo_id, destination, params))
        return origins

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.output_dir).as_posix()

    def _copy_single_document(self, repo_id: str, checkout: Path, destination: Path, name: str) -> dict[str, str]:
        source = checkout / name
        if not source.is_file():
            raise DocumentationError(
                f"Repository '{repo_id}' has no document '{name}'"
            )
        destination.mkdir(parents=True)
        target = destination / self.config.global_params.target_home_file
        shutil.copy2(source, target)
        return {self._relative(target): f"{repo_id}/{name}"}

    def _rename_home_files(
        self, repo_id: str, destination: Path, params: EffectiveParameters
    ) -> dict[str, str]:
        home = params.home_file
        target = self.config.global_params.target_home_file
        root_home = destination / (target if home == target else home)
        if not root_home.is_file():
            raise DocumentationError(f"Repository '{repo_id}' has no home file '{home}'")
        if home == target:
            return {}

        renamed: dict[str, str] = {}
        for path in sorted(destination.rglob(home)):
            if not path.is_file():
                continue
            new_path = path.with_name(target)
            if new_path.exists():
                raise DocumentationError(
                    f"{self._relative(path.parent)}: both '{home}' and '{target}' exist"
                )
            path.rename(new_path)
            renamed[self._relative(new_path)] = self._relative(path)
        return renamed
