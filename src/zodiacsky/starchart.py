"""CLI entry point for sky map generation.

    uv run zodiacsky-chart --when 2024-03-20T12:00 --lat 60.17 --lon 24.94
    uv run zodiacsky-chart --address "Busan" --local-time "1995-01-15 00:00"
"""

import argparse
import logging
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

from zodiacsky.astronomy import CONSTELLATION_NAMES, compute_sky
from zodiacsky.catalog import fetch_catalogs, load_catalogs
from zodiacsky.compute import QueryInput, geocode_address, run
from zodiacsky.config import Settings
from zodiacsky.ephemeris import position_model
from zodiacsky.models import Observer
from zodiacsky.renderers.static import save_static_chart
from zodiacsky.timeutil import as_utc


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="zodiacsky-chart", description="Render a Sun-centred zodiac sky map."
    )
    parser.add_argument("--when", help="UTC instant, ISO 8601 (default: now)")
    parser.add_argument("--lat", type=float, help="Observer latitude")
    parser.add_argument("--lon", type=float, help="Observer longitude")
    parser.add_argument("--address", help="Place to geocode instead of --lat/--lon")
    parser.add_argument(
        "--local-time", help='Local "YYYY-MM-DD HH:MM" at --address (overrides --when)'
    )
    parser.add_argument("--rotate", type=float, default=0.0, help="View pan, degrees RA")
    parser.add_argument("--size", type=int, default=900, help="Square image size, px")
    parser.add_argument("--output", type=Path, help="PNG path (default: results/)")
    parser.add_argument("--resources", type=Path, help="Catalog/ephemeris directory")
    parser.add_argument("--ephemeris", choices=("mean", "skyfield"))
    parser.add_argument(
        "--fetch", action="store_true", help="Download and filter the catalogs first"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = _parse_args(argv)

    settings = Settings.from_env()
    if args.resources is not None or args.ephemeris is not None:
        settings = replace(
            settings,
            resources_dir=args.resources or settings.resources_dir,
            ephemeris=args.ephemeris or settings.ephemeris,
        )
    if args.fetch:
        fetch_catalogs(settings.resources_dir, settings)

    observer: Observer | None = None
    if args.address and args.local_time:
        context = run(QueryInput(address=args.address, when=args.local_time))
        observer, when = context.observer, context.utc_dt
        print(f"Location: {context.address_display}")
    elif args.address:
        location = geocode_address(args.address)
        observer, when = location.observer, datetime.now(timezone.utc)
        print(f"Location: {location.name}")
    else:
        when = (
            as_utc(datetime.fromisoformat(args.when))
            if args.when
            else datetime.now(timezone.utc)
        )
        if args.lat is not None and args.lon is not None:
            observer = Observer(lat=args.lat, lng=args.lon)

    model = position_model(settings)
    sky = compute_sky(when, observer=observer, model=model)
    print(
        f"Sun in {CONSTELLATION_NAMES[sky.constellation].common}"
        f" (tropical sign: {sky.tropical.name})"
    )

    stars, constellations = load_catalogs(settings)
    path = save_static_chart(
        when,
        stars,
        constellations,
        output_path=args.output,
        observer=observer,
        rotation_offset=args.rotate,
        size=(args.size, args.size),
        model=model,
    )
    print(f"Saved: {path}")


if __name__ == "__main__":
    main()
