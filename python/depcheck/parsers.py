"""Manifest loaders: decode resolved lockfiles into flat package records."""

import json
import logging
import re
import tomllib
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests

from .exceptions import CorruptedGraph, ManifestError
from .models import Manifest, PackageRecord

logger = logging.getLogger(__name__)

# "name", "name version" or "name version (source)"
CARGO_DEPENDENCY_PATTERN = re.compile(r'^(\S+)(?:\s+(\S+))?(?:\s+\((.+)\))?$')


def _is_url(path: str) -> bool:
    """Check if a path is a URL."""
    return urlparse(path).scheme in ('http', 'https')


def _read_content(path: str) -> str:
    """
    Read content from either a file path or URL.

    Raises:
        ManifestError: If the file or URL cannot be read
    """
    if _is_url(path):
        logger.info(f"Fetching manifest from URL: {path}")
        try:
            response = requests.get(path, timeout=30)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ManifestError(f"Could not fetch {path}: {e}") from e
        return response.text

    logger.info(f"Reading manifest from file: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Could not read {path}: {e}") from e


class FileParser:
    """Parser for the supported manifest formats."""

    @staticmethod
    def load(path: str, format: Optional[str] = None) -> Manifest:
        """
        Read and decode a manifest from a file path or URL.

        Args:
            path: Local path or http(s) URL
            format: 'cargo' or 'json'; detected from the path and content when omitted
        """
        content = _read_content(path)
        format = format or FileParser.detect_format(path, content)
        logger.info(f"Detected manifest format: {format}")

        if format == 'cargo':
            manifest = FileParser.parse_cargo_lock(content)
        elif format == 'json':
            manifest = FileParser.parse_package_list(content)
        else:
            raise ManifestError(f"Unknown manifest format: {format}")

        return Manifest(
            format=manifest.format,
            schema_version=manifest.schema_version,
            records=manifest.records,
            source=path,
        )

    @staticmethod
    def detect_format(path: str, content: Optional[str] = None) -> str:
        """Detect the manifest format from the file name, falling back to the content."""
        name_lower = Path(urlparse(path).path if _is_url(path) else path).name.lower()

        if name_lower.endswith('.lock'):
            return 'cargo'
        elif name_lower.endswith('.json'):
            return 'json'
        elif content is not None and content.lstrip().startswith('{'):
            return 'json'
        else:
            return 'cargo'

    @staticmethod
    def parse_cargo_lock(content: str) -> Manifest:
        """
        Parse a Cargo.lock file.

        Dependencies are listed by name alone when only one version of that
        name is locked, otherwise as "name version" (plus "(source)" when two
        sources share a version).

        Example:
            version = 3

            [[package]]
            name = "app"
            version = "0.1.0"
            dependencies = ["serde", "rand 0.8.5"]
        """
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ManifestError(f"Invalid Cargo.lock: {e}") from e

        schema_version = data.get('version')
        packages = FileParser._require_list(data.get('package', []), "Invalid Cargo.lock: 'package'")

        versions_by_name: Dict[str, List[str]] = defaultdict(list)
        for entry in packages:
            name, version = FileParser._require_identity(entry)
            versions_by_name[name].append(version)

        records = []
        for entry in packages:
            name, version = FileParser._require_identity(entry)
            dependencies = tuple(
                FileParser._parse_cargo_dependency(dep, versions_by_name)
                for dep in FileParser._require_list(
                    entry.get('dependencies', []), f"Invalid Cargo.lock: dependencies of {name} {version}"
                )
            )
            records.append(PackageRecord(
                name=name,
                version=version,
                has_external_source='source' in entry,
                dependencies=dependencies,
            ))

        logger.info(f"Parsed {len(records)} packages from Cargo.lock (version {schema_version})")
        return Manifest(format='cargo', schema_version=schema_version, records=tuple(records))

    @staticmethod
    def _require_list(value: Any, what: str) -> List[Any]:
        if not isinstance(value, list):
            raise ManifestError(f"{what} must be a list, got {type(value).__name__}")
        return value

    @staticmethod
    def _require_identity(entry: Any) -> Tuple[str, str]:
        if not isinstance(entry, dict) or 'name' not in entry or 'version' not in entry:
            raise ManifestError(f"Invalid package entry (needs name and version): {entry!r}")
        return str(entry['name']), str(entry['version'])

    @staticmethod
    def _parse_cargo_dependency(dep: str, versions_by_name: Dict[str, List[str]]) -> Tuple[str, str]:
        match = CARGO_DEPENDENCY_PATTERN.match(dep.strip()) if isinstance(dep, str) else None
        if not match:
            raise ManifestError(f"Invalid dependency entry: {dep!r}")

        name, version, _source = match.groups()
        if version is not None:
            return name, version

        versions = versions_by_name.get(name, [])
        if not versions:
            raise CorruptedGraph(name, '*')
        if len(set(versions)) > 1:
            raise ManifestError(
                f"Ambiguous dependency '{name}': locked at {', '.join(versions)} but no version given"
            )
        return name, versions[0]

    @staticmethod
    def parse_package_list(content: str) -> Manifest:
        """
        Parse a neutral JSON package list.

        Example:
            {
              "version": 1,
              "packages": [
                {"name": "app", "version": "0.1.0", "source": null,
                 "dependencies": [["serde", "1.0.200"], "rand 0.8.5"]}
              ]
            }

        A package has an external source unless "source" is null/absent and
        "has_external_source" is not true.
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Invalid JSON package list: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError("Invalid JSON package list: top level must be an object")

        records = []
        packages = FileParser._require_list(data.get('packages', []), "Invalid JSON package list: 'packages'")
        for entry in packages:
            name, version = FileParser._require_identity(entry)
            if 'has_external_source' in entry:
                external = bool(entry['has_external_source'])
            else:
                external = entry.get('source') is not None

            dependencies = []
            for dep in FileParser._require_list(
                entry.get('dependencies', []), f"Invalid JSON package list: dependencies of {name} {version}"
            ):
                if isinstance(dep, str) and len(dep.split()) == 2:
                    dep_name, dep_version = dep.split()
                elif isinstance(dep, (list, tuple)) and len(dep) == 2:
                    dep_name, dep_version = dep
                elif isinstance(dep, dict) and 'name' in dep and 'version' in dep:
                    dep_name, dep_version = dep['name'], dep['version']
                else:
                    raise ManifestError(f"Invalid dependency of {name} {version}: {dep!r}")
                dependencies.append((str(dep_name), str(dep_version)))

            records.append(PackageRecord(
                name=name,
                version=version,
                has_external_source=external,
                dependencies=tuple(dependencies),
            ))

        schema_version = data.get('version')
        logger.info(f"Parsed {len(records)} packages from JSON package list (version {schema_version})")
        return Manifest(format='json', schema_version=schema_version, records=tuple(records))
