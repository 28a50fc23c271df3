"""Output formatters for analysis results."""

import json
import logging
from collections import defaultdict
from typing import Dict, List, Optional

import click
from packageurl import PackageURL

from .models import BlameEntry, Classification, Package, PathSummary
from .results import BlamePartition, Results

logger = logging.getLogger(__name__)

STYLES: Dict[Classification, str] = {
    Classification.DIRECT_PRESENT: "red",
    Classification.INDIRECT_ONLY: "yellow",
    Classification.NO_DUPLICATION: "green",
}
TOP_LEVEL_DEP = "blue"

BLAME_MODES = ('top-level', 'all')
DEPENDENT_MODES = ('direct', 'top-level')


class OutputFormatter:
    """Formatter for text and JSON output."""

    @staticmethod
    def _paint(text: str, fg: str, color: bool) -> str:
        return click.style(text, fg=fg) if color else text

    @staticmethod
    def format_as_text(
        results: Results,
        blame_mode: Optional[str] = None,
        dependents_mode: Optional[str] = None,
        show_blame_packages: bool = False,
        color: bool = True,
    ) -> str:
        """
        Format results as a human readable report.

        Args:
            results: Analysis results
            blame_mode: None (no blame), 'top-level' or 'all' (adds interior packages)
            dependents_mode: None, 'direct' (direct dependents) or 'top-level' (path summaries)
            show_blame_packages: List the duplicated names each package is blamed for
            color: Style the report with click; click.echo strips it again off a terminal
        """
        paint = OutputFormatter._paint
        lines: List[str] = []

        if not results.has_multi_version_deps():
            lines.append(paint("No duplicate dependencies found.",
                               STYLES[Classification.NO_DUPLICATION], color))
            return '\n'.join(lines) + '\n'

        if blame_mode in BLAME_MODES and results.top_level.has_blame():
            lines.extend(["Top Level Packages with Multi Version Dependencies:", ""])
            lines.extend(OutputFormatter._format_partition(results.top_level, show_blame_packages, color))
            lines.append("")

        if blame_mode == 'all' and results.interior.has_blame():
            lines.extend(["Dependencies with Multi Version Dependencies:", ""])
            lines.extend(OutputFormatter._format_partition(results.interior, show_blame_packages, color))
            lines.append("")

        lines.extend(["Duplicate Package(s):", ""])
        for name, versions in results.multi_version_items():
            lines.append(f"  {name}:")
            for version in versions:
                pkg = Package(name, version)
                style = STYLES[results.classification(pkg)]
                lines.append(paint(f"    {version}", style, color) if blame_mode else f"    {version}")

                if dependents_mode == 'direct':
                    for dependent in results.direct_dependents(pkg):
                        lines.append(f"      {dependent}")
                elif dependents_mode == 'top-level':
                    lines.extend(OutputFormatter._format_paths(results.path_summaries(pkg), color))

        if blame_mode:
            lines.extend([
                "",
                "Blame Statistics:",
                f"  Direct only: {results.direct_count()}",
                f"  Indirect only: {results.indirect_count()}",
                f"  Both: {results.both_count()}",
                f"  None: {results.none_count()}",
                f"  Total: {results.total()}",
            ])

        return '\n'.join(lines) + '\n'

    @staticmethod
    def _format_partition(partition: BlamePartition, show_blame_packages: bool, color: bool) -> List[str]:
        lines = []
        for pkg, entry in partition.items():
            if not entry.has_blame:
                continue
            style = STYLES[entry.classification]
            lines.append(OutputFormatter._paint(
                f"  {pkg} (direct: {len(entry.direct)}, indirect: {len(entry.indirect)})", style, color
            ))

            if show_blame_packages:
                if entry.has_direct_blame:
                    lines.append(OutputFormatter._paint("    Direct:", STYLES[Classification.DIRECT_PRESENT], color))
                    for name in entry.sorted_direct():
                        lines.append(f"      {name}")
                        lines.extend(OutputFormatter._format_sources(entry, name, color))
                if entry.has_indirect_blame:
                    lines.append(OutputFormatter._paint("    Indirect:", STYLES[Classification.INDIRECT_ONLY], color))
                    lines.extend(f"      {name}" for name in entry.sorted_indirect())
        return lines

    @staticmethod
    def _format_sources(entry: BlameEntry, name: str, color: bool) -> List[str]:
        """Each version of a direct name under the dependencies bringing it in."""
        lines = []
        for version, deps in entry.sorted_sources(name):
            marker = f"        --> {', '.join(str(dep) for dep in deps)}"
            lines.append(OutputFormatter._paint(marker, TOP_LEVEL_DEP, color))
            lines.append(f"          {name} {version}")
        return lines

    @staticmethod
    def _format_paths(summaries: List[PathSummary], color: bool) -> List[str]:
        """Group summaries as direct dependent -> package below top level -> top level package."""
        grouped: Dict[Package, Dict[Optional[Package], List[Package]]] = defaultdict(lambda: defaultdict(list))
        for summary in summaries:
            grouped[summary.direct][summary.mid].append(summary.top)

        lines = []
        for direct, by_mid in grouped.items():
            lines.append(f"      {direct}")
            for mid, tops in by_mid.items():
                indent = "        "
                if mid is not None:
                    lines.append(OutputFormatter._paint(f"{indent}--> {mid}", TOP_LEVEL_DEP, color))
                    indent = "          "
                for top in tops:
                    if top != direct:
                        lines.append(f"{indent}{top}")
        return lines

    @staticmethod
    def _build_purl(pkg: Package, purl_type: str) -> str:
        return PackageURL(type=purl_type, name=pkg.name, version=pkg.version).to_string()

    @staticmethod
    def _format_entry(pkg: Package, entry: BlameEntry, purl_type: str) -> Dict:
        return {
            'name': pkg.name,
            'version': pkg.version,
            'purl': OutputFormatter._build_purl(pkg, purl_type),
            'classification': entry.classification.value,
            'direct': entry.sorted_direct(),
            'indirect': entry.sorted_indirect(),
            'sources': {
                name: [
                    {'version': version, 'via': [str(dep) for dep in deps]}
                    for version, deps in entry.sorted_sources(name)
                ]
                for name in entry.sorted_direct()
            },
        }

    @staticmethod
    def format_as_json(results: Results, purl_type: str = 'cargo') -> str:
        """Format results as JSON, identifying packages by package URL."""
        duplicates = []
        for name, versions in results.multi_version_items():
            occurrences = []
            for version in versions:
                pkg = Package(name, version)
                occurrences.append({
                    'version': version,
                    'purl': OutputFormatter._build_purl(pkg, purl_type),
                    'classification': results.classification(pkg).value,
                    'dependents': [str(dep) for dep in results.direct_dependents(pkg)],
                    'paths': [
                        {
                            'direct': str(summary.direct),
                            'mid': str(summary.mid) if summary.mid is not None else None,
                            'top': str(summary.top),
                        }
                        for summary in results.path_summaries(pkg)
                    ],
                })
            duplicates.append({'name': name, 'versions': occurrences})

        report = {
            'duplicates': duplicates,
            'top_level': [
                OutputFormatter._format_entry(pkg, entry, purl_type) for pkg, entry in results.top_level_items()
            ],
            'interior': [
                OutputFormatter._format_entry(pkg, entry, purl_type) for pkg, entry in results.interior_items()
            ],
            'counts': {
                'direct_only': results.direct_count(),
                'indirect_only': results.indirect_count(),
                'both': results.both_count(),
                'none': results.none_count(),
                'total': results.total(),
            },
        }
        logger.debug(f"JSON report with {len(duplicates)} duplicated names")
        return json.dumps(report, indent=2) + '\n'
