"""CLI for region geofence tooling.

Usage:
    regionctl fetch https://example.org/india.json -o data/india.json
    regionctl regions --dataset data/india.json
    regionctl check --dataset data/india.json -r Maharashtra -p 19.07,72.87
    regionctl render --dataset data/india.json -r Goa -o overlay.svg
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from fencegeo.coords import parse_lat_lng
from fencegeo.projection import centroid
from regionctl.fetcher import download_dataset
from regionctl.visualize import render_overlay_svg, violations_to_geojson, write_violations_csv
from regionfence.catalog import CatalogLoader, RegionCatalog
from regionfence.config import FenceSettings, GeofenceConfig, load_settings
from regionfence.country import CountryBoundary
from regionfence.errors import CatalogUnavailableError
from regionfence.sources import FileRegionSource, create_source
from regionfence.validator import GeofenceValidator
from regionfence.violations import ViolationLog


def _load_catalog(settings: FenceSettings, dataset: Path | None) -> RegionCatalog:
    if dataset is not None:
        source = FileRegionSource(dataset)
    else:
        try:
            source = create_source(settings.source)
        except ValueError as e:
            raise click.UsageError(f"{e} (pass --dataset or set it in --config)") from e
    loader = CatalogLoader(source, settings.source.name_property)
    return asyncio.run(loader.load())


dataset_option = click.option(
    "--dataset", "-d", type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Region GeoJSON file (defaults to the configured source)",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="JSON settings file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None):
    """Region geofence tools: fetch boundaries, check points, render overlays."""
    settings = load_settings(config_path)
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    ctx.obj = settings


@cli.command()
@click.argument("url")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              default=Path("regions.json"), help="Output GeoJSON path")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.pass_obj
def fetch(settings: FenceSettings, url: str, output: Path, timeout: float | None):
    """Download a region boundary dataset."""
    timeout_s = timeout if timeout is not None else settings.source.timeout_s
    try:
        count = asyncio.run(download_dataset(
            url, output, timeout_s=timeout_s,
            name_property=settings.source.name_property,
        ))
    except CatalogUnavailableError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Saved {count} regions to {output}")


@cli.command()
@dataset_option
@click.pass_obj
def regions(settings: FenceSettings, dataset: Path | None):
    """List regions in the dataset."""
    try:
        catalog = _load_catalog(settings, dataset)
    except CatalogUnavailableError as e:
        raise click.ClickException(str(e)) from e

    for feature in catalog:
        center = centroid(feature.geometry)
        where = f"{center.lat:.4f},{center.lng:.4f}" if center else "-"
        click.echo(
            f"{feature.name}\t{feature.geometry.kind}\t"
            f"{feature.geometry.vertex_count} vertices\tcenter={where}"
        )
    click.echo(f"{len(catalog)} regions")


@cli.command()
@dataset_option
@click.option("--region", "-r", "region_names", multiple=True, help="Assigned region (repeatable)")
@click.option("--point", "-p", "points", multiple=True, required=True, help="LAT,LNG (repeatable)")
@click.option("--inactive", is_flag=True, help="Check with the geofence disabled")
@click.option("--exclude-holes", is_flag=True, help="Subtract polygon holes from regions")
@click.option("--country", "restrict_to_country", is_flag=True,
              help="Reject points outside the national boundary (dataset regions)")
@click.option("--violations-out", type=click.Path(dir_okay=False, path_type=Path),
              help="Write violations to .geojson or .csv")
@click.pass_context
def check(ctx: click.Context, dataset: Path | None, region_names: tuple[str, ...],
          points: tuple[str, ...], inactive: bool, exclude_holes: bool,
          restrict_to_country: bool, violations_out: Path | None):
    """Check coordinates against assigned regions."""
    settings: FenceSettings = ctx.obj

    try:
        coords = [parse_lat_lng(p) for p in points]
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--point") from e

    base = settings.geofence
    config = GeofenceConfig(
        assigned_regions=region_names or base.assigned_regions,
        active=base.active and not inactive,
        user_id=base.user_id,
        exclude_holes=exclude_holes or base.exclude_holes,
        restrict_to_country=restrict_to_country or base.restrict_to_country,
    )

    log = ViolationLog.from_config(settings.violations)
    try:
        catalog = _load_catalog(settings, dataset)
    except CatalogUnavailableError as e:
        click.echo(f"Warning: {e}; checks fail closed", err=True)
        catalog = None

    country = CountryBoundary.from_catalog(catalog) if catalog is not None else None
    validator = GeofenceValidator(config, catalog=catalog, log=log, country=country)

    failures = 0
    for coord in coords:
        result = validator.validate(coord)
        status = "ALLOW" if result.valid else "BLOCK"
        line = f"{status} {coord.lat:.6f},{coord.lng:.6f}  {result.message}"
        if result.suggestion:
            line += f"  ({result.suggestion})"
        click.echo(line)
        if not result.valid:
            failures += 1

    if violations_out is not None:
        records = log.list()
        if violations_out.suffix.lower() == ".csv":
            write_violations_csv(records, violations_out)
        else:
            violations_to_geojson(records, violations_out)
        click.echo(f"Wrote {len(records)} violations to {violations_out}")

    click.echo(f"{len(coords) - failures}/{len(coords)} allowed")
    if failures:
        ctx.exit(1)


@cli.command()
@dataset_option
@click.option("--region", "-r", "region_names", multiple=True, help="Assigned region (repeatable)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              default=Path("overlay.svg"), help="Output SVG path")
@click.option("--width", type=int, default=None, help="Viewport width in pixels")
@click.option("--height", type=int, default=None, help="Viewport height in pixels")
@click.option("--labels/--no-labels", default=True, help="Label assigned regions")
@click.pass_obj
def render(settings: FenceSettings, dataset: Path | None, region_names: tuple[str, ...],
           output: Path, width: int | None, height: int | None, labels: bool):
    """Render region boundaries as an SVG overlay."""
    try:
        catalog = _load_catalog(settings, dataset)
    except CatalogUnavailableError as e:
        raise click.ClickException(str(e)) from e

    w = width or settings.viewport.width
    h = height or settings.viewport.height
    if w <= 0 or h <= 0:
        raise click.BadParameter("viewport must be positive", param_hint="--width/--height")

    assigned = region_names or settings.geofence.assigned_regions
    svg = render_overlay_svg(catalog, assigned, w, h, show_labels=labels)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(svg, encoding="utf-8")
    click.echo(f"Overlay written to {output} ({w}x{h})")


if __name__ == "__main__":
    cli()
