"""
Command-line interface for distance, ETA and speed-limit lookups.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import click

from .errors import InvalidArgument
from .eta import EtaService
from .integrations.google_directions import GoogleDirectionsClient
from .models import GeoPoint, Zone
from .schemas import Settings, load_config
from .service import setup_logging
from .util.haversine import bearing_degrees, haversine_km
from .zones import applicable_limit


logger = logging.getLogger(__name__)


def _load_records(path: Path) -> List[Dict[str, Any]]:
    """Read a JSON file holding a list of objects."""
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}")
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise click.ClickException(f"{path} must contain a JSON list of objects")
    return data


def _load_points(path: Path) -> List[GeoPoint]:
    """Read a JSON list of {latitude, longitude} or {lat, lng} objects."""
    points = []
    for item in _load_records(path):
        lat = item.get("latitude", item.get("lat"))
        lng = item.get("longitude", item.get("lng"))
        points.append(GeoPoint.validated(lat, lng))
    return points


@click.group()
@click.option('--config', default='config/params.yaml', help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def main(ctx, config: str, verbose: bool):
    """Droptimize courier tooling."""
    app_config = load_config(config)
    setup_logging(app_config, verbose)

    ctx.ensure_object(dict)
    ctx.obj['config'] = app_config


@main.command()
@click.argument('lat1', type=float)
@click.argument('lon1', type=float)
@click.argument('lat2', type=float)
@click.argument('lon2', type=float)
def distance(lat1: float, lon1: float, lat2: float, lon2: float):
    """Great-circle distance in km between two points."""
    click.echo(f"{haversine_km(lat1, lon1, lat2, lon2):.3f} km")


@main.command()
@click.argument('lat1', type=float)
@click.argument('lon1', type=float)
@click.argument('lat2', type=float)
@click.argument('lon2', type=float)
def bearing(lat1: float, lon1: float, lat2: float, lon2: float):
    """Initial bearing in degrees from the first point to the second."""
    click.echo(f"{bearing_degrees(GeoPoint(lat1, lon1), GeoPoint(lat2, lon2)):.1f}")


@main.command()
@click.argument('destinations_file', type=click.Path(exists=True))
@click.option('--origin', nargs=2, type=float, required=True, help='Origin latitude longitude')
@click.option('--speed', type=float, default=None, help='Average speed in km/h')
@click.option('--per-stop', type=float, default=None, help='Handling minutes per parcel')
@click.option('--offline', is_flag=True, help='Skip Google Directions')
@click.pass_context
def eta(ctx, destinations_file: str, origin, speed: float, per_stop: float, offline: bool):
    """Estimate time to deliver every destination in a JSON file."""
    config = ctx.obj['config']

    async def _eta():
        directions = None
        api_key = Settings().google_maps_api_key
        if not offline and config.dev.use_directions and api_key:
            directions = GoogleDirectionsClient(api_key, config.google)
        service = EtaService(config.eta, directions=directions)
        start = GeoPoint.validated(*origin)
        return await service.estimate(start, _load_points(Path(destinations_file)), speed, per_stop)

    try:
        result = asyncio.run(_eta())
    except InvalidArgument as e:
        raise click.ClickException(str(e))

    click.echo(f"ETA: {result.text} ({result.minutes} min) via {result.source}")
    if result.distance_km is not None:
        click.echo(f"Distance: {result.distance_km:.2f} km")
    for i, point in enumerate(result.order, 1):
        click.echo(f"  {i}. {point.latitude:.6f}, {point.longitude:.6f}")


@main.command('speed-limit')
@click.argument('zones_file', type=click.Path(exists=True))
@click.option('--at', 'position', nargs=2, type=float, required=True, help='Latitude longitude')
@click.option('--crosswalk', is_flag=True, help='Apply the crosswalk limit as well')
@click.option('--category', 'categories', multiple=True, help='Only consider these zone categories')
@click.pass_context
def speed_limit(ctx, zones_file: str, position, crosswalk: bool, categories):
    """Most restrictive speed limit at a position."""
    config = ctx.obj['config']
    zones = [Zone.from_record(z) for z in _load_records(Path(zones_file))]

    try:
        point = GeoPoint.validated(*position)
    except InvalidArgument as e:
        raise click.ClickException(str(e))

    fixed = [config.crosswalk.limit_kmh] if crosswalk else []
    limit = applicable_limit(point, zones, fixed, categories=list(categories) or None)
    if limit is None:
        click.echo("No speed limit applies")
    else:
        click.echo(f"Speed limit: {limit:g} km/h")


@main.command()
@click.option('--host', default='127.0.0.1', help='Host to bind to')
@click.option('--port', default=8000, help='Port to bind to')
@click.option('--reload', is_flag=True, help='Enable auto-reload')
def serve(host: str, port: int, reload: bool):
    """Start the API server."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException("uvicorn not installed. Run: pip install uvicorn")

    click.echo(f"Starting API server at http://{host}:{port}")
    uvicorn.run("droptimize.api:app", host=host, port=port, reload=reload)


if __name__ == '__main__':
    main()
