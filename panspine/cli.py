#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for PanSpine.

This module provides the main CLI entry point and all subcommands for
inspecting pangenome graph payloads, extracting assembly walks and
assessing spine features.
"""

import sys
import json
import logging
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.parser import ConfigParser
from .config.schema import TEMPLATES, save_config_template, validate_config
from .graph_core.walk_extractor import DirectionPolicy, WalkMode
from .io_utils.report_export import export_features_tsv, export_report_json, export_walks_tsv
from .utils.pipeline import PangenomeService, setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    PanSpine: Pangenome Graph Spine & Feature Decomposition

    Decomposes a pangenome variation graph into a reference-like spine walk
    plus anchored structural features (pills, bubbles, braids, parallel
    bundles and dangling branches).
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet

    if verbose:
        setup_logging('DEBUG')
    elif quiet:
        logging.getLogger('panspine').setLevel(logging.ERROR)


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='panspine_config.yaml',
              help='Output configuration file path')
@click.option('--template', '-t', type=click.Choice(list(TEMPLATES)),
              default='default', help='Configuration template type')
def config_init(output, template):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating {template} configuration template: {output}")

    try:
        save_config_template(Path(output), template=template)
        click.echo(f"✓ Configuration file created: {output}")
        click.echo("\nThe configuration file includes:")
        click.echo("  • Graph construction settings (assembly key delimiter)")
        click.echo("  • Walk extraction mode and direction policy")
        click.echo("  • Feature analysis switches and region/path limits")
        click.echo("  • Output format and logging")
    except Exception as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = ConfigParser(config_file).to_dict()
        errors = validate_config(config)

        if errors:
            click.echo("\n✗ Configuration validation failed:")
            for error in errors:
                click.echo(f"  • {error}", err=True)
            sys.exit(1)
        else:
            click.echo("✓ Configuration is valid")

            # Show key settings
            click.echo("\nKey Settings:")
            click.echo(f"  Walk mode: {config['walk']['mode']}")
            click.echo(f"  Direction: {config['walk']['direction']}")
            click.echo(f"  Max paths per feature: {config['features']['max_paths_per_event']}")
    except Exception as e:
        click.echo(f"✗ Error validating configuration: {e}", err=True)
        sys.exit(1)


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = ConfigParser(config_file).to_dict()

        if format == 'yaml':
            click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        else:
            click.echo(f"Configuration from: {config_file}")
            click.echo("=" * 60)

            click.echo("\nGraph:")
            click.echo(f"  Assembly key delimiter: {config['graph']['assembly_key_delim']}")

            click.echo("\nWalk:")
            click.echo(f"  Mode: {config['walk']['mode']}")
            click.echo(f"  Direction: {config['walk']['direction']}")
            if config['walk'].get('start_node'):
                click.echo(f"  Start node: {config['walk']['start_node']}")

            features = config['features']
            click.echo("\nFeatures:")
            click.echo(f"  Locus start: {features['locus_start_bp']:,} bp")
            click.echo(f"  Adjacent pills: {features['include_adjacent']}")
            click.echo(f"  Upstream events: {features['include_upstream']}")
            click.echo(f"  Dangling branches: {features['include_dangling']}")
            click.echo(f"  Limits: {features['max_paths_per_event']} paths, "
                       f"{features['max_region_nodes']:,} nodes, {features['max_region_edges']:,} edges")

            click.echo("\nOutput:")
            click.echo(f"  Format: {config['output']['format']}")
            click.echo(f"  Log level: {config['output']['logging']['level']}")

    except Exception as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        sys.exit(1)


# ============================================================================
# Graph Commands
# ============================================================================

def _load_service(payload, config_file=None, overrides=None) -> PangenomeService:
    parser = ConfigParser(config_file)
    if overrides:
        parser.merge_cli_overrides(overrides)
    parser.validate()
    service = PangenomeService(parser.to_dict())
    service.load_file(payload)
    return service


@main.command()
@click.argument('payload', type=click.Path(exists=True))
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
def info(payload, config_file):
    """Show graph statistics and assembly keys for a payload."""
    try:
        service = _load_service(payload, config_file)
        stats = service.graph.statistics()

        click.echo(f"Graph: {payload}")
        click.echo("=" * 60)
        click.echo(f"  Nodes: {stats['node_count']:,}")
        click.echo(f"  Edges: {stats['edge_count']:,} ({stats['variant_count']:,} records, "
                   f"{stats['self_loop_count']} self-loops)")
        click.echo(f"  Components: {stats['component_count']}")
        click.echo(f"  Average degree: {stats['average_degree']:.2f}")
        click.echo(f"  Cyclic: {'yes' if stats['is_cyclic'] else 'no'}")
        click.echo(f"  Total length: {stats['total_length_bp']:,} bp")

        keys = service.list_assembly_keys()
        click.echo(f"\nAssembly keys ({len(keys)}):")
        for key in keys:
            click.echo(f"  • {key} ({len(service.graph.nodes_for_assembly(key))} nodes)")
    except Exception as e:
        click.echo(f"✗ Error reading graph: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument('payload', type=click.Path(exists=True))
@click.option('--assembly', '-a', 'assembly_keys', multiple=True,
              help='Assembly key (repeatable; default: all keys)')
@click.option('--mode', '-m', type=click.Choice([m.value for m in WalkMode]), default=None,
              help='Walk strategy (default from config: auto)')
@click.option('--direction', '-d', type=click.Choice([p.value for p in DirectionPolicy]), default=None,
              help='Path orientation policy (default from config: edge_flow)')
@click.option('--start-node', default=None, help="Start node for 'force_start', e.g. 2918+")
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.option('--tsv', 'tsv_path', type=click.Path(), default=None,
              help='Write walk paths to TSV')
def walk(payload, assembly_keys, mode, direction, start_node, config_file, tsv_path):
    """Extract one oriented walk per connected component of each assembly."""
    try:
        service = _load_service(payload, config_file, {
            'walk.mode': mode,
            'walk.direction': direction,
            'walk.start_node': start_node,
        })
        keys = list(assembly_keys) or service.list_assembly_keys()
        walks = [service.get_assembly_walk(key) for key in keys]

        for result in walks:
            click.echo(f"\n{result.assembly_key}: {len(result.paths)} path(s)")
            for i, path in enumerate(result.paths):
                click.echo(f"  [{i}] {path.mode}, {len(path.nodes)} nodes, {path.length_bp:,} bp: "
                           f"{path.left_endpoint} → {path.right_endpoint}")
            for warning in result.diagnostics.warnings:
                click.echo(f"  ! {warning.kind.value}: {warning.message}")

        if tsv_path:
            export_walks_tsv(walks, tsv_path)
            click.echo(f"\n✓ Walks written to {tsv_path}")
    except Exception as e:
        click.echo(f"✗ Error extracting walks: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument('payload', type=click.Path(exists=True))
@click.option('--assembly', '-a', 'assembly_key', required=True,
              help='Assembly key whose walk becomes the spine')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.option('--output', '-o', type=click.Path(), default=None,
              help='Write the feature report as JSON (default: print to stdout)')
@click.option('--tsv', 'tsv_path', type=click.Path(), default=None,
              help='Write a one-row-per-feature TSV summary')
@click.option('--max-paths', type=int, default=None,
              help='Maximum sampled alternate paths per feature')
@click.option('--locus-start', type=int, default=None,
              help='bp coordinate of the first spine node')
def features(payload, assembly_key, config_file, output, tsv_path, max_paths, locus_start):
    """Assess spine features for one assembly."""
    try:
        service = _load_service(payload, config_file, {
            'features.max_paths_per_event': max_paths,
            'features.locus_start_bp': locus_start,
        })
        report = service.get_spine_features(assembly_key)
        indent = service.config['output'].get('indent', 2)

        if output is None and tsv_path is None:
            click.echo(json.dumps(report.to_dict(), indent=indent))
            return

        click.echo(f"Spine {assembly_key}: {len(report.spine)} nodes, {report.spine.length_bp:,} bp")
        for feature_type, count in report.type_counts().items():
            if count:
                click.echo(f"  {feature_type}: {count}")
        click.echo(f"  off-spine components: {len(report.off_spine)}")

        if output:
            export_report_json(report, output, indent=indent)
            click.echo(f"✓ Feature report written to {output}")
        if tsv_path:
            export_features_tsv(report, tsv_path)
            click.echo(f"✓ Feature summary written to {tsv_path}")
    except Exception as e:
        click.echo(f"✗ Error assessing features: {e}", err=True)
        sys.exit(1)


if __name__ == '__main__':
    sys.exit(main())
