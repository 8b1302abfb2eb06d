"""
Command-line interface for fractal geometry generation.

This module provides a CLI that generates fractal geometry, previews it
as an image and reports statistics about it.
"""

import click
import sys
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import logging
import time

from .. import __version__
from ..api import BatchGenerator, FractalGenerator, GenerationConfig, JULIA_BACKENDS
from ..core.fractal_types import FractalRegistry, JULIA_PRESETS
from ..rendering.coloring import ColoringEngine

logger = logging.getLogger(__name__)


def parse_parameter(text: str) -> Tuple[str, Any]:
    """
    Parse a ``key=value`` fractal parameter.

    Values are read as JSON where possible (numbers, booleans), otherwise
    kept as strings.
    """
    if '=' not in text:
        raise click.BadParameter(f"expected KEY=VALUE, got '{text}'")
    key, raw = text.split('=', 1)
    key = key.strip().replace('-', '_')
    if not key:
        raise click.BadParameter(f"missing parameter name in '{text}'")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key, value


def parse_rgb(text: Optional[str]) -> Optional[Tuple[float, float, float]]:
    """Parse an ``r,g,b`` color with components in 0-1."""
    if text is None:
        return None
    try:
        parts = tuple(float(x.strip()) for x in text.split(','))
    except ValueError:
        raise click.BadParameter(f"invalid color '{text}', use 'r,g,b'")
    if len(parts) != 3:
        raise click.BadParameter(f"invalid color '{text}', use 'r,g,b'")
    return parts


def load_config(config_file: Optional[str]) -> GenerationConfig:
    """Load a generation configuration from a JSON file, or the defaults."""
    if not config_file:
        return GenerationConfig()
    with open(config_file, 'r') as f:
        data = json.load(f)
    logger.debug(f"Loaded configuration from {config_file}")
    return GenerationConfig.from_dict(data)


def collect_parameters(fractal_type: str, params: Tuple[str, ...],
                       preset: Optional[str]) -> Dict[str, Any]:
    """Merge a Julia preset with ``--param`` overrides."""
    parameters: Dict[str, Any] = {}
    if preset:
        if fractal_type != 'julia':
            raise click.BadParameter("--preset only applies to the julia fractal")
        if preset not in JULIA_PRESETS:
            available = ', '.join(JULIA_PRESETS.keys())
            raise click.BadParameter(f"unknown preset '{preset}'. Available: {available}")
        parameters.update(JULIA_PRESETS[preset].to_dict())
    for text in params:
        key, value = parse_parameter(text)
        parameters[key] = value
    return parameters


def _fail(ctx, error: Exception):
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='JSON configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    Fractal Geometry - recursive curve, packing and escape-time generation.

    Generate dragon curves, Koch snowflakes, Sierpinski triangles,
    Pythagoras trees, circle packings and Julia sets, and preview them
    as PNG or JPEG images.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Fractal Geometry v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


@main.command()
@click.argument('fractal_type', type=click.Choice(FractalRegistry.names()))
@click.argument('output', type=click.Path())
@click.option('--param', '-p', 'params', multiple=True, metavar='KEY=VALUE',
              help='Fractal parameter, repeatable (e.g. -p iterations=10)')
@click.option('--preset', help='Julia constant preset name')
@click.option('--mode', 'output_mode', help='Output mode (segments, path, shapes, pixels)')
@click.option('--width', '-w', type=int, help='Canvas width (defaults to the fractal recommendation)')
@click.option('--height', '-h', type=int, help='Canvas height (defaults to the fractal recommendation)')
@click.option('--stroke-width', type=float, help='Stroke width')
@click.option('--stroke-color', help='Stroke color as r,g,b in 0-1')
@click.option('--fill', help='Circle fill color as r,g,b in 0-1')
@click.option('--colorizer', help="Per-leaf colorizer: 'hue' or a palette name")
@click.option('--backend', type=click.Choice(JULIA_BACKENDS), help='Julia computation backend')
@click.option('--processes', type=int, help='Number of processes for parallel Julia computation')
@click.pass_context
def render(ctx, fractal_type, output, params, preset, output_mode, width, height,
           stroke_width, stroke_color, fill, colorizer, backend, processes):
    """
    Generate a fractal and save a preview image.

    FRACTAL_TYPE: Registered fractal name
    OUTPUT: Output image file path (.png, .jpg)
    """
    try:
        config = load_config(ctx.obj.get('config_file'))

        overrides = {
            'stroke_width': stroke_width,
            'stroke_color': parse_rgb(stroke_color),
            'fill_color': parse_rgb(fill),
            'colorizer': colorizer,
            'julia_backend': backend,
            'num_processes': processes,
        }
        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)

        parameters = collect_parameters(fractal_type, params, preset)
        generator = FractalGenerator(config)
        fractal = generator.create_fractal(fractal_type, **parameters)

        size = None
        if width or height:
            rec_width, rec_height = fractal.get_recommended_canvas()
            size = (width or rec_width, height or rec_height)

        click.echo(f"Rendering {fractal_type} fractal...")
        start_time = time.time()

        result = generator.render(fractal, Path(output), size=size, output=output_mode)

        render_time = time.time() - start_time
        click.echo(f"Render complete: {result.count} primitives in {render_time:.2f}s")
        if result.is_empty:
            click.echo("Nothing to draw for these parameters")
        click.echo(f"Saved: {output}")

    except click.BadParameter:
        raise
    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('fractal_type', type=click.Choice(FractalRegistry.names()))
@click.option('--param', '-p', 'params', multiple=True, metavar='KEY=VALUE',
              help='Fractal parameter, repeatable')
@click.option('--preset', help='Julia constant preset name')
@click.option('--generate', 'run', is_flag=True, help='Also generate and time the geometry')
@click.option('--json', 'as_json', is_flag=True, help='Print statistics as JSON')
@click.pass_context
def stats(ctx, fractal_type, params, preset, run, as_json):
    """
    Show what a fractal generation produces.

    FRACTAL_TYPE: Registered fractal name
    """
    try:
        parameters = collect_parameters(fractal_type, params, preset)
        generator = FractalGenerator(load_config(ctx.obj.get('config_file')))
        info = generator.statistics(fractal_type, **parameters)

        if run:
            result = generator.generate(fractal_type, **parameters)
            info['generated_count'] = result.count
            info['elapsed_seconds'] = round(result.elapsed_seconds, 6)
            info['backend'] = result.backend

        if as_json:
            click.echo(json.dumps(info, indent=2))
            return

        click.echo(info['description'])
        click.echo(f"  Outputs: {', '.join(info['outputs'])}")
        click.echo(f"  Expected primitives: {info['expected_count']:,}")
        click.echo(f"  Recommended canvas: {info['recommended_canvas'][0]}x{info['recommended_canvas'][1]}")
        if run:
            click.echo(f"  Generated primitives: {info['generated_count']:,} "
                       f"in {info['elapsed_seconds']:.3f}s ({info['backend']})")
        if ctx.obj.get('verbose'):
            for key, value in info['parameters'].items():
                click.echo(f"    {key}: {value}")

    except click.BadParameter:
        raise
    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--output-dir', '-o', type=click.Path(), default='batch_output',
              help='Output directory for batch renders')
@click.option('--dry-run', is_flag=True, help='Show what would be rendered without actually rendering')
@click.pass_context
def batch(ctx, config_file, output_dir, dry_run):
    """
    Execute batch rendering jobs from a JSON file.

    CONFIG_FILE: JSON file with a 'batch_jobs' list; each job has 'fractal',
    optional 'name', 'parameters' and 'config' entries.
    """
    try:
        with open(config_file, 'r') as f:
            batch_config = json.load(f)

        if 'batch_jobs' not in batch_config:
            click.echo("Error: No 'batch_jobs' section found in config file", err=True)
            sys.exit(1)

        output_path = Path(output_dir)
        base_config = load_config(ctx.obj.get('config_file'))
        batch_generator = BatchGenerator(base_config)

        for i, job in enumerate(batch_config['batch_jobs']):
            job_name = job.get('name', f"job_{i}")
            output_file = output_path / f"{job_name}.png"
            if dry_run:
                click.echo(f"Would render: {job_name} ({job['fractal']}) -> {output_file}")
                continue
            batch_generator.add_job(job['fractal'], output_file, job.get('parameters'),
                                    job.get('config'), job_name)

        if dry_run:
            click.echo(f"Dry run complete. {len(batch_config['batch_jobs'])} jobs would be executed.")
            return

        click.echo(f"Starting batch render: {len(batch_generator.jobs)} jobs")

        def progress_callback(completed, total, result):
            click.echo(f"Completed {completed}/{total}: {result['job_name']} ({result['status']})")

        batch_generator.run_batch(progress_callback)
        summary = batch_generator.get_summary()

        click.echo("\nBatch complete:")
        click.echo(f"  Jobs completed: {summary['completed']}/{summary['total_jobs']}")
        click.echo(f"  Success rate: {summary['success_rate']*100:.1f}%")
        click.echo(f"  Total time: {summary['total_render_time']:.2f}s")

        if summary['failed']:
            sys.exit(1)

    except (KeyError, ValueError, OSError) as e:
        _fail(ctx, e)


@main.command()
@click.pass_context
def list_fractals(ctx):
    """List available fractal types."""
    fractals = FractalRegistry.list_fractals()

    click.echo("Available fractal types:")
    for name, description in fractals.items():
        fractal_class = FractalRegistry.get(name)
        click.echo(f"  {name} ({', '.join(fractal_class.outputs)})")
        if ctx.obj.get('verbose'):
            click.echo(f"    {description}")


@main.command()
def list_presets():
    """List Julia constant presets."""
    click.echo("Julia set presets:")
    for name, params in JULIA_PRESETS.items():
        click.echo(f"  {name}: c = {params.c}")


@main.command()
def list_palettes():
    """List color palettes usable as colorizers."""
    engine = ColoringEngine()
    click.echo("Available palettes:")
    for name in engine.list_palettes():
        palette = engine.get_palette(name)
        click.echo(f"  {name}: {palette.name} ({len(palette)} colors)")
    click.echo("  hue: full hue wheel by leaf index")


if __name__ == '__main__':
    main()
