"""Discharge pipeline command line: run the worker or ingest raw documents."""

import signal
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType

import typer

from discharge_pipeline.config.settings import Settings
from discharge_pipeline.database.connection import apply_schema, close_pool, init_pool
from discharge_pipeline.database.repositories.event_repository import EventRepository
from discharge_pipeline.logging.logger import Log
from discharge_pipeline.processor.coordinator import build_coordinator
from discharge_pipeline.processor.exceptions import TransportError
from discharge_pipeline.processor.ingest import build_ingestor
from discharge_pipeline.storage.locations import DOCUMENT_KINDS
from discharge_pipeline.worker.event_runner import EventRunner
from discharge_pipeline.worker.worker import Worker

app = typer.Typer(
    name="discharge-pipeline",
    help="Simplify and translate hospital discharge documents",
    add_completion=False,
)


@contextmanager
def _database(settings: Settings) -> Generator[None, None, None]:
    init_pool(settings)
    try:
        apply_schema()
        yield
    finally:
        close_pool()


@app.command()
def work(
    max_events: int | None = typer.Option(
        None, help="Exit after handling this many events"
    ),
) -> None:
    """Run the worker loop until interrupted or terminated."""
    settings = Settings()
    Log.configure(settings.log_level)

    with _database(settings):
        coordinator = build_coordinator(settings)
        event_repo = EventRepository(settings.max_delivery_attempts)
        event_runner = EventRunner(coordinator, event_repo, settings)
        worker = Worker(event_repo, event_runner, settings)

        def _on_sigterm(signum: int, frame: FrameType | None) -> None:
            Log.info("SIGTERM received, stopping after current event")
            worker.stop()

        signal.signal(signal.SIGTERM, _on_sigterm)
        worker.run(max_events=max_events)


@app.command()
def ingest(
    path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="UTF-8 text of the document"
    ),
    tenant_id: str = typer.Option(..., "--tenant", help="Tenant that owns the document"),
    composition_id: str = typer.Option(..., "--composition", help="Composition identifier"),
    kind: str = typer.Option(
        "summary", help=f"Document kind: {', '.join(DOCUMENT_KINDS)}"
    ),
    patient_id: str | None = typer.Option(None, help="Patient identifier"),
    preferred_language: str | None = typer.Option(
        None, help="Language the patient prefers, e.g. es"
    ),
) -> None:
    """Store an exported raw document and announce it to the worker."""
    if kind not in DOCUMENT_KINDS:
        raise typer.BadParameter(f"Unknown document kind '{kind}'", param_hint="--kind")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise typer.BadParameter(f"{path} is not UTF-8 text: {exc}", param_hint="PATH") from exc

    settings = Settings()
    Log.configure(settings.log_level)

    with _database(settings):
        try:
            location = build_ingestor(settings).ingest(
                tenant_id,
                composition_id,
                kind,
                text,
                patient_id=patient_id,
                preferred_language=preferred_language,
            )
        except TransportError as exc:
            Log.error("Ingest failed", path=str(path), error=str(exc))
            raise typer.Exit(code=1) from exc
    typer.echo(location.uri)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
