"""Command-line interface for the impactgraph tool."""

import json
import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.traceback import install

from .analyzers import GraphBuildError, ImpactAnalysisOptions, ImpactAnalyzer
from .config import ImpactConfiguration
from .core import RevisionReadError

# Set up rich error handling
install()
console = Console()

IMPACT_STYLES = {
    "low": "green",
    "medium": "yellow",
    "high": "red",
    "critical": "bold red",
}

format_option = click.option('--format', '-f', 'output_format', type=click.Choice(['text', 'json']),
                             default='text', help='Output format')


@click.group()
@click.option('--root', '-r', 'root_dir', type=click.Path(exists=True, file_okay=False),
              default='.', help='Project root directory')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, root_dir, verbose):
    """impactgraph - Change impact analysis for JavaScript/TypeScript source trees.

    USAGE:
        impactgraph analyze src/utils.ts            # Files affected by changing utils.ts
        impactgraph breaking src/api.ts --since HEAD # Exports removed or changed since HEAD
        impactgraph stats                            # Dependency graph statistics
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.obj = ImpactAnalyzer(root_dir, ImpactConfiguration.from_env())


def _emit_json(data):
    click.echo(json.dumps(data, indent=2, default=str))


def _fail(message: str):
    console.print(f"[red]❌ Error:[/red] {message}")
    raise click.Abort()


def _build(analyzer: ImpactAnalyzer, force: bool = False):
    try:
        return analyzer.build_graph(force_rebuild=force)
    except GraphBuildError as e:
        _fail(str(e))


@cli.command()
@click.option('--force', is_flag=True, help='Rebuild even if the cached graph is fresh')
@format_option
@click.pass_obj
def build(analyzer, force, output_format):
    """Build the dependency graph and report its size."""
    graph = _build(analyzer, force)
    stats = analyzer.get_graph_stats()

    if output_format == 'json':
        _emit_json(stats)
        return

    console.print(f"✅ Built dependency graph: [bold]{graph.file_count}[/bold] files, "
                  f"{stats['total_imports']} imports, {stats['total_exports']} exports")
    if graph.unresolved_imports:
        console.print(f"[yellow]⚠️  {graph.unresolved_imports} relative imports could not be resolved[/yellow]")


@cli.command()
@click.argument('files', nargs=-1, required=True)
@click.option('--max-depth', type=int, default=None, help='Maximum number of dependency hops')
@click.option('--exclude', '-e', multiple=True, help='Glob-like pattern of files to leave out')
@click.option('--include-tests/--no-tests', default=False, help='Include test files in the affected set')
@format_option
@click.pass_obj
def analyze(analyzer, files, max_depth, exclude, include_tests, output_format):
    """Show the files affected by changing FILES."""
    _build(analyzer)
    result = analyzer.analyze_impact(list(files), ImpactAnalysisOptions(
        max_depth=max_depth,
        exclude_patterns=list(exclude),
        include_tests=include_tests,
    ))

    if output_format == 'json':
        _emit_json(result.to_dict())
        return

    level = result.impact_level.value
    console.print(f"🎯 Impact level: [{IMPACT_STYLES[level]}]{level.upper()}[/{IMPACT_STYLES[level]}]")

    if result.details:
        table = Table(title=f"Affected files ({len(result.affected_files)})")
        table.add_column("File", style="cyan")
        table.add_column("Reason")
        table.add_column("Symbols")
        table.add_column("Depth", justify="right")
        for detail in sorted(result.details, key=lambda d: d.file):
            table.add_row(detail.file, detail.reason,
                          ", ".join(detail.imported_symbols) or "-", str(detail.depth))
        console.print(table)

    for suggestion in result.suggestions:
        console.print(f"💡 {suggestion}")


@cli.command()
@click.argument('files', nargs=-1, required=True)
@format_option
@click.pass_obj
def preview(analyzer, files, output_format):
    """Quick look at what changing FILES would touch."""
    _build(analyzer)
    result = analyzer.preview_impact(list(files))

    if output_format == 'json':
        _emit_json(result.to_dict())
        return

    level = result.impact_level.value
    console.print(f"🔍 Impact level: [{IMPACT_STYLES[level]}]{level.upper()}[/{IMPACT_STYLES[level]}]")
    console.print(f"📦 {len(result.production_files)} production file(s) affected")
    console.print(f"🧪 {len(result.test_files)} test file(s) affected")
    if not result.total_affected:
        console.print("✅ Safe to proceed with changes")


@cli.command()
@click.argument('file')
@click.option('--old', 'old_path', type=click.Path(exists=True, dir_okay=False),
              help='File holding the previous version')
@click.option('--since', 'revision', default=None, help='Git revision holding the previous version')
@format_option
@click.pass_obj
def breaking(analyzer, file, old_path, revision, output_format):
    """Detect breaking changes to the exports of FILE."""
    if old_path and revision:
        raise click.UsageError("Use either --old or --since, not both")

    _build(analyzer)
    try:
        if old_path:
            changes = _breaking_from_file(analyzer, file, old_path)
        else:
            changes = analyzer.detect_breaking_changes_since(file, revision or "HEAD")
    except (RevisionReadError, OSError) as e:
        _fail(str(e))

    if output_format == 'json':
        _emit_json([change.to_dict() for change in changes])
        return

    if not changes:
        console.print("✅ No breaking changes detected")
        return

    table = Table(title="⚠️  Breaking changes")
    table.add_column("Symbol", style="bold")
    table.add_column("Change")
    table.add_column("Affected files")
    for change in changes:
        table.add_row(change.symbol, change.change_type.value, "\n".join(change.affected_files))
    console.print(table)


def _breaking_from_file(analyzer: ImpactAnalyzer, file: str, old_path: str):
    key = analyzer.graph_builder.resolve_target(file)
    with open(old_path, 'r', encoding='utf-8') as f:
        old_content = f.read()
    new_path = os.path.join(analyzer.graph_builder.project_root, *key.split('/'))
    with open(new_path, 'r', encoding='utf-8') as f:
        new_content = f.read()
    return analyzer.detect_breaking_changes(key, old_content, new_content)


@cli.command()
@click.option('--hotspots', type=int, default=5, help='Number of most-imported files to list')
@format_option
@click.pass_obj
def stats(analyzer, hotspots, output_format):
    """Dependency graph statistics, cycles and hotspots."""
    _build(analyzer)
    summary = dict(analyzer.get_graph_stats())
    cycles = analyzer.graph_builder.find_cycles()
    top = analyzer.graph_builder.get_hotspots(hotspots)

    if output_format == 'json':
        summary['cycles'] = cycles
        summary['hotspots'] = [{'file': f, 'dependents': n} for f, n in top]
        _emit_json(summary)
        return

    file_count = summary['file_count']
    console.print("📊 [bold]Dependency Graph Statistics[/bold]")
    console.print(f"   Files: {file_count}")
    console.print(f"   Imports: {summary['total_imports']}")
    console.print(f"   Exports: {summary['total_exports']}")
    if file_count:
        console.print(f"   Avg imports/file: {summary['total_imports'] / file_count:.1f}")
    console.print(f"   Circular dependencies: {len(cycles)}")

    if top:
        table = Table(title="🎯 Most depended upon")
        table.add_column("File", style="cyan")
        table.add_column("Dependents", justify="right")
        for file, count in top:
            table.add_row(file, str(count))
        console.print(table)


if __name__ == "__main__":
    cli()
