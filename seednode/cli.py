"""Command-line interface for running and maintaining a SeedNode."""

import asyncio
import logging

import click

from seednode.config import get_settings
from seednode.database import SessionLocal, init_db
from seednode.errors import StoreUnavailableError
from seednode.services.content_store import get_content_store
from seednode.services.probe import get_duration_prober
from seednode.services.track import get_track_repository
from seednode.services.upload import UploadPipeline, create_upload_pipeline

logger = logging.getLogger("seednode")


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """SeedNode content-addressed audio node."""
    logging.basicConfig(
        level=get_settings().LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HOST setting)")
@click.option("--port", type=int, default=None, help="Port (default: PORT setting)")
def serve(host, port):
    """Run the HTTP API."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=host or settings.HOST, port=port or settings.PORT)


@cli.command("init-db")
def init_db_command():
    """Create missing database tables."""
    init_db()
    click.echo("Database tables ready.")


async def backfill_durations(db, pipeline: UploadPipeline) -> tuple[int, int]:
    """Probe stored content for tracks without a duration. Returns (updated, failed)."""
    store = pipeline.store
    prober = pipeline.prober
    repository = pipeline.repository
    updated = 0
    failed = 0
    tracks = repository.tracks_missing_duration(db)
    click.echo(f"Found {len(tracks)} track(s) to backfill.")

    for track in tracks:
        label = f"  {track.title} ({track.content_id[:12]}...)"
        with pipeline.transient_file() as file_path:
            try:
                with open(file_path, "wb") as f:
                    async for chunk in store.cat(track.content_id):
                        f.write(chunk)
            except (StoreUnavailableError, OSError) as e:
                logger.warning("Could not fetch %s: %s", track.content_id, e)
                click.echo(f"{label}  ERROR: {e}")
                failed += 1
                continue
            duration = await prober.probe(file_path)

        if duration is None:
            click.echo(f"{label}  no duration found")
            failed += 1
            continue

        repository.set_duration(db, track.id, duration)
        click.echo(f"{label}  {duration:.2f}s")
        updated += 1

    return updated, failed


@cli.command("backfill-durations")
def backfill_durations_command():
    """Compute missing durations for tracks that already have content."""
    init_db()
    pipeline = create_upload_pipeline(get_content_store(), get_duration_prober(), get_track_repository())

    db = SessionLocal()
    try:
        updated, failed = asyncio.run(backfill_durations(db, pipeline))
    finally:
        db.close()
    click.echo(f"Done. Updated: {updated}, Failed: {failed}")


if __name__ == "__main__":
    cli()
