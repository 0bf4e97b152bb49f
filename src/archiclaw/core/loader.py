"""
archiclaw.core.loader - Landscape discovery and loading.

Walks a landscape directory, reads every record file and validates it against
the schema for its kind. Problems with individual files become issues on the
returned ``SourceFile``; the scan always continues with the next file. Only a
missing landscape root aborts.

Traversal order (stable, directory listings sorted):

1. organization settings, 2. ID sequence counters,
3. domain registry, domain folders, 4. application registry, application
folders, 5. capability registry, 6. data entity registry, data entity files,
7. integration registry, 8. change request folders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError

from archiclaw.config.defaults import DEFAULT_CONFIG
from archiclaw.core.models import RecordKind, describe_validation_error, validate_record
from archiclaw.core.rules import IssueCode, ValidationIssue, error
from archiclaw.utilities.yaml_io import describe_yaml_error, read_yaml

logger = logging.getLogger(__name__)

# Kinds whose empty document means "nothing configured yet"
_EMPTY_AS_MAPPING = {RecordKind.ORGANIZATION, RecordKind.ID_SEQUENCES}


class LandscapeNotFound(FileNotFoundError):
    """Raised when the landscape root is not a directory."""


@dataclass(frozen=True)
class LandscapeLayout:
    """
    File and directory names of a landscape.

    Defaults reproduce the standard layout::

        .archiclaw/config.yaml, .archiclaw/id-sequences.yaml
        model/<kind>/_index.yaml, model/applications/<ID>/passport.yaml, ...
        changes/<ID>/change.yaml
    """

    config_dir: str = ".archiclaw"
    organization_file: str = "config.yaml"
    sequences_file: str = "id-sequences.yaml"
    model_dir: str = "model"
    domains_dir: str = "domains"
    applications_dir: str = "applications"
    capabilities_dir: str = "capabilities"
    data_entities_dir: str = "data-entities"
    integrations_dir: str = "integrations"
    changes_dir: str = "changes"
    index_file: str = "_index.yaml"
    domain_file: str = "domain.yaml"
    passport_file: str = "passport.yaml"
    change_file: str = "change.yaml"
    record_suffix: str = ".yaml"

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]] = None) -> "LandscapeLayout":
        """Create a layout from the ``[layout]`` section of a config dict."""
        section = dict(DEFAULT_CONFIG["layout"])
        if config:
            section.update(config.get("layout", {}))
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: str(v) for k, v in section.items() if k in known})

    def organization_path(self, root: Path) -> Path:
        return root / self.config_dir / self.organization_file

    def sequences_path(self, root: Path) -> Path:
        return root / self.config_dir / self.sequences_file

    def kind_dir(self, root: Path, name: str) -> Path:
        return root / self.model_dir / name

    def changes_path(self, root: Path) -> Path:
        return root / self.changes_dir


@dataclass
class SourceFile:
    """
    One landscape file after loading.

    Attributes:
        kind: Record kind of the file
        path: Absolute path
        rel_path: Path relative to the landscape root (POSIX)
        expected_id: Identifier implied by the file's location (folder name),
            None when the location carries no identity
        record: Validated model, None when reading or validation failed
        issues: Problems found while loading this file
    """

    kind: RecordKind
    path: Path
    rel_path: str
    expected_id: Optional[str] = None
    record: Optional[BaseModel] = None
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass
class LandscapeScan:
    """All files discovered in one pass, in traversal order."""

    root: Path
    layout: LandscapeLayout
    files: List[SourceFile] = field(default_factory=list)

    def of_kind(self, kind: RecordKind) -> List[SourceFile]:
        return [f for f in self.files if f.kind == kind]

    def parsed(self, kind: RecordKind) -> Iterator[SourceFile]:
        """Successfully validated files of a kind."""
        return (f for f in self.files if f.kind == kind and f.ok)

    def first(self, kind: RecordKind) -> Optional[SourceFile]:
        for f in self.files:
            if f.kind == kind:
                return f
        return None

    @property
    def issues(self) -> List[ValidationIssue]:
        return [issue for f in self.files for issue in f.issues]


def _list_dirs(path: Path) -> List[Path]:
    if not path.is_dir():
        return []
    return sorted((p for p in path.iterdir() if p.is_dir()), key=lambda p: p.name)


def _list_files(path: Path, suffix: str, exclude: str) -> List[Path]:
    if not path.is_dir():
        return []
    return sorted(
        (p for p in path.iterdir() if p.is_file() and p.name.endswith(suffix) and p.name != exclude),
        key=lambda p: p.name,
    )


class LandscapeReader:
    """
    Discovers and loads every record file of a landscape.

    The reader applies schemas but no cross-file policy: duplicates, placement
    and references are the validator's business.
    """

    def __init__(self, root: Path, layout: Optional[LandscapeLayout] = None):
        self.root = Path(root)
        self.layout = layout or LandscapeLayout()

    def read(self) -> LandscapeScan:
        """
        Load the whole landscape.

        Returns:
            LandscapeScan with one SourceFile per discovered file

        Raises:
            LandscapeNotFound: If the root directory does not exist
        """
        if not self.root.is_dir():
            raise LandscapeNotFound(f"Landscape directory not found: {self.root}")

        layout = self.layout
        scan = LandscapeScan(root=self.root, layout=layout)
        add = scan.files.append

        add(
            self._load(
                RecordKind.ORGANIZATION,
                layout.organization_path(self.root),
                missing_message="Landscape config not found",
            )
        )
        add(self._load(RecordKind.ID_SEQUENCES, layout.sequences_path(self.root)))

        domains_dir = layout.kind_dir(self.root, layout.domains_dir)
        add(self._load(RecordKind.DOMAIN_REGISTRY, domains_dir / layout.index_file))
        for folder in _list_dirs(domains_dir):
            source = self._load_folder_record(RecordKind.DOMAIN, folder, layout.domain_file)
            if source is not None:
                add(source)

        apps_dir = layout.kind_dir(self.root, layout.applications_dir)
        add(self._load(RecordKind.APPLICATION_REGISTRY, apps_dir / layout.index_file))
        for folder in _list_dirs(apps_dir):
            source = self._load_folder_record(RecordKind.APPLICATION, folder, layout.passport_file)
            if source is not None:
                add(source)

        caps_dir = layout.kind_dir(self.root, layout.capabilities_dir)
        add(self._load(RecordKind.CAPABILITY_REGISTRY, caps_dir / layout.index_file))

        entities_dir = layout.kind_dir(self.root, layout.data_entities_dir)
        add(self._load(RecordKind.DATA_ENTITY_REGISTRY, entities_dir / layout.index_file))
        for entity_file in _list_files(entities_dir, layout.record_suffix, layout.index_file):
            add(self._load(RecordKind.DATA_ENTITY, entity_file))

        integrations_dir = layout.kind_dir(self.root, layout.integrations_dir)
        add(self._load(RecordKind.INTEGRATION_REGISTRY, integrations_dir / layout.index_file))

        for folder in _list_dirs(layout.changes_path(self.root)):
            source = self._load_folder_record(
                RecordKind.CHANGE_REQUEST, folder, layout.change_file
            )
            if source is not None:
                add(source)

        logger.debug("Scanned %d files under %s", len(scan.files), self.root)
        return scan

    def relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def _load_folder_record(
        self, kind: RecordKind, folder: Path, file_name: str
    ) -> Optional[SourceFile]:
        """Load the record of a directory-per-entity folder; skip empty folders."""
        path = folder / file_name
        if not path.is_file():
            logger.debug("Skipping %s: no %s", folder, file_name)
            return None
        return self._load(kind, path, expected_id=folder.name)

    def _load(
        self,
        kind: RecordKind,
        path: Path,
        expected_id: Optional[str] = None,
        missing_message: str = "File not found",
    ) -> SourceFile:
        """Read and schema-validate one file, capturing failures as issues."""
        rel_path = self.relative(path)
        source = SourceFile(kind=kind, path=path, rel_path=rel_path, expected_id=expected_id)

        if not path.is_file():
            source.issues.append(error(rel_path, missing_message, IssueCode.FILE_NOT_FOUND))
            return source

        try:
            data = read_yaml(path)
        except yaml.YAMLError as e:
            source.issues.append(
                error(
                    rel_path,
                    f"Schema validation failed: invalid YAML: {describe_yaml_error(e)}",
                    IssueCode.SCHEMA_VIOLATION,
                )
            )
            return source
        except UnicodeDecodeError as e:
            source.issues.append(
                error(
                    rel_path,
                    f"Schema validation failed: file is not UTF-8 text ({e.reason})",
                    IssueCode.SCHEMA_VIOLATION,
                )
            )
            return source

        if data is None and kind in _EMPTY_AS_MAPPING:
            data = {}

        try:
            source.record = validate_record(kind, data)
        except ValidationError as e:
            source.issues.append(
                error(
                    rel_path,
                    f"Schema validation failed: {describe_validation_error(e)}",
                    IssueCode.SCHEMA_VIOLATION,
                )
            )
        return source


def read_landscape(root: Path, config: Optional[Mapping[str, Any]] = None) -> LandscapeScan:
    """Convenience wrapper: build the layout from config and read the landscape."""
    return LandscapeReader(root, LandscapeLayout.from_config(config)).read()


def registry_ids(source: SourceFile) -> Dict[str, str]:
    """Map of id -> name for a registry file's entries (empty if unparsed)."""
    record = source.record
    if record is None:
        return {}
    for attr in ("domains", "applications", "entities", "capabilities"):
        entries = getattr(record, attr, None)
        if entries is not None:
            return {entry.id: entry.name for entry in entries}
    return {}
