"""
CLI for the Pixshop studio.

Commands:
- info: Show configuration and saved state
- generate: Create an image from a text prompt
- edit: Apply one edit to an image
- batch: Apply a catalogue action to many images and zip the results
- presets: List or delete saved presets
- apply-preset: Replay a saved preset on an image
- translate: Switch the UI language
"""

import asyncio
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .config import settings
from .logging import setup_logging

app = typer.Typer(
    name="pixshop",
    help="AI-assisted image editing studio",
)
console = Console()

EDIT_KINDS = ("localized-edit", "filter", "adjustment", "remove-bg", "upscale", "expand", "style-transfer")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Pixshop - edit images by delegating every hard step to a generative model."""
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=log_level, json_output=settings.log_json)
    logger.debug("CLI initialized with log level: {}", log_level)


def _require_api_key() -> None:
    if not settings.gemini_api_key:
        logger.error("GEMINI_API_KEY not set - cannot reach the model")
        console.print("[red]Error: GEMINI_API_KEY not set[/]")
        raise typer.Exit(1)


def _open_store():
    from .storage import JsonFileStore

    return JsonFileStore(settings.storage_file)


def _parse_pair(value: str, option: str) -> tuple[float, float]:
    try:
        x, y = (float(part) for part in value.split(","))
    except ValueError:
        raise typer.BadParameter(f"{option} expects two comma-separated numbers, e.g. 120,80")
    return x, y


def _finish(session, output_dir: Path | None) -> None:
    """Report the session outcome and save the current image."""
    if session.error:
        console.print(f"[red]{escape(session.error)}[/]")
        raise typer.Exit(1)
    path = session.save_current(output_dir)
    console.print(f"[green]✓ Saved {path}[/]")


@app.command()
def info():
    """Show configuration and saved state."""
    from .presets import PresetStore
    from .storage import PromptHistory

    logger.debug("Displaying configuration and status")
    console.print("[bold blue]Pixshop Configuration[/]")

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Gemini API Key", "***" if settings.gemini_api_key else "[red]NOT SET[/]")
    table.add_row("Gemini Base URL", settings.gemini_base_url)
    table.add_row("Edit Model", settings.edit_model)
    table.add_row("Text Model", settings.text_model)
    table.add_row("Imagen Model", settings.imagen_model)
    table.add_row("Batch Concurrency", str(settings.batch_concurrency))
    table.add_row("Storage File", str(settings.storage_file))
    table.add_row("Output Directory", str(settings.output_path))

    console.print(table)

    console.print("\n[bold]Saved State[/]")
    try:
        store = _open_store()
        console.print(f"Presets: {len(PresetStore(store).load())}")
        console.print(f"Remembered prompts: {len(PromptHistory(store).entries())}")
        console.print(f"UI language: {store.get('ui_language', 'en')}")
    except OSError as e:
        logger.error("Error reading saved state: {}", e)
        console.print(f"[red]Error reading saved state: {e}[/]")


@app.command()
def generate(
    prompt: str = typer.Argument(..., help="Description of the image to create"),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Where to save the image"),
    variations: int = typer.Option(
        0, "--variations", help="Also generate this many variations of the result"
    ),
):
    """Create an image from a text prompt."""
    if not prompt.strip():
        raise typer.BadParameter("Prompt must not be empty")
    _require_api_key()
    logger.info("Generating image for prompt: '{}'", prompt[:50])

    async def run_generate():
        from .editing import EditSession
        from .models import create_default_model

        session = EditSession(create_default_model(), _open_store())
        with console.status("[blue]Generating image...[/]"):
            await session.generate_from_text(prompt)
        _finish(session, output_dir)

        if variations > 0:
            with console.status("[blue]Generating variations...[/]"):
                results = await session.generate_variations(variations)
            if not results:
                console.print(f"[red]{escape(session.error or 'Failed to generate variations.')}[/]")
                raise typer.Exit(1)
            target = output_dir or settings.output_path
            for artifact in results:
                path = target / artifact.filename
                path.write_bytes(artifact.data)
                console.print(f"[green]✓ Saved {path}[/]")

    asyncio.run(run_generate())


@app.command()
def edit(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to edit"),
    kind: str = typer.Argument(..., help=f"Edit kind: {', '.join(EDIT_KINDS)}"),
    prompt: str = typer.Argument("", help="Instruction for prompt-driven edits"),
    hotspot: str = typer.Option(None, "--hotspot", help="Focus point x,y for localized edits"),
    pixels: int = typer.Option(256, "--pixels", help="Pixels added per edge when expanding"),
    direction: str = typer.Option("all", "--direction", help="Edges to expand"),
    style: Path = typer.Option(None, "--style", exists=True, dir_okay=False, help="Style reference"),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Where to save the result"),
):
    """Apply one edit to an image."""
    from pydantic import ValidationError

    from .editing import (
        Adjustment,
        Expand,
        Filter,
        LocalizedEdit,
        RemoveBackground,
        StyleTransfer,
        Upscale,
    )
    from .raster import Artifact, ExpandDirection, Point

    _require_api_key()
    if kind not in EDIT_KINDS:
        console.print(f"[red]Unknown edit kind '{kind}'. Choose from: {', '.join(EDIT_KINDS)}[/]")
        raise typer.Exit(1)

    try:
        if kind == "localized-edit":
            if not hotspot:
                raise typer.BadParameter("--hotspot is required for localized edits")
            x, y = _parse_pair(hotspot, "--hotspot")
            action = LocalizedEdit(prompt=prompt, hotspot=Point(x=x, y=y))
        elif kind == "filter":
            action = Filter(prompt=prompt)
        elif kind == "adjustment":
            action = Adjustment(prompt=prompt)
        elif kind == "remove-bg":
            action = RemoveBackground()
        elif kind == "upscale":
            action = Upscale()
        elif kind == "expand":
            action = Expand(pixels=pixels, direction=ExpandDirection(direction), prompt=prompt)
        else:
            if style is None:
                raise typer.BadParameter("--style is required for style transfer")
            action = StyleTransfer(style=Artifact.from_file(style))
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid edit: {e}[/]")
        raise typer.Exit(1)

    logger.info("Editing {} with {}", image, action.describe())

    async def run_edit():
        from .editing import EditSession
        from .models import create_default_model

        session = EditSession(create_default_model(), _open_store())
        session.start(Artifact.from_file(image))
        with console.status(f"[blue]{action.describe()}...[/]"):
            await session.apply(action)
        _finish(session, output_dir)

    asyncio.run(run_edit())


@app.command()
def batch(
    images: list[Path] = typer.Argument(..., exists=True, dir_okay=False, help="Images to process"),
    action_name: str = typer.Option(..., "--action", "-a", help="Catalogue action name"),
    output: Path = typer.Option(None, "--output", "-o", help="Zip archive to write"),
    concurrency: int = typer.Option(
        settings.batch_concurrency, "--concurrency", "-c", help="Images processed at once"
    ),
):
    """Apply a catalogue action to many images and zip the results."""
    from .editing import BATCH_ACTIONS, find_batch_action

    try:
        named = find_batch_action(action_name)
    except KeyError:
        console.print(f"[red]Unknown action '{action_name}'.[/] Available actions:")
        for candidate in BATCH_ACTIONS:
            console.print(f"  {candidate.name}")
        raise typer.Exit(1)

    _require_api_key()
    logger.info("Batch processing {} images with '{}'", len(images), named.name)
    console.print(f"[bold blue]Batch: {named.name}[/]")

    async def run_batch():
        from .batch import BatchScheduler, JobStatus
        from .models import create_default_model
        from .raster import Artifact

        scheduler = BatchScheduler(create_default_model(), concurrency=concurrency)
        scheduler.add([Artifact.from_file(path) for path in images])

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Processing images...", total=scheduler.total_count)

            def on_update(job):
                if job.status in (JobStatus.DONE, JobStatus.ERROR):
                    progress.advance(task)

            await scheduler.process(named.action, on_update=on_update)

        table = Table(title="Batch Summary")
        table.add_column("Image", style="cyan")
        table.add_column("Status")
        table.add_column("Detail")
        for job in scheduler.jobs:
            if job.status is JobStatus.DONE:
                table.add_row(job.source.filename, "[green]done[/]", job.result.filename)
            else:
                table.add_row(job.source.filename, "[red]error[/]", job.error_message or "")
        console.print(table)

        if scheduler.done_count:
            target = output or settings.output_path / "pixshop-batch.zip"
            scheduler.write_zip(target)
            console.print(f"[green]✓ Wrote {scheduler.done_count} images to {target}[/]")
        if not scheduler.all_finished:
            console.print(f"[yellow]{scheduler.error_count} images failed[/]")
            raise typer.Exit(1)

    asyncio.run(run_batch())


@app.command()
def presets(
    delete: str = typer.Option(None, "--delete", "-d", help="Delete the preset with this name"),
):
    """List or delete saved presets."""
    from .presets import PresetStore

    store = PresetStore(_open_store())

    if delete:
        if not store.delete(delete):
            console.print(f"[red]No preset named '{delete}'[/]")
            raise typer.Exit(1)
        console.print(f"[green]✓ Deleted preset '{delete}'[/]")
        return

    saved = store.load()
    if not saved:
        console.print("You have no saved presets.")
        return

    table = Table(title="Presets")
    table.add_column("Name", style="cyan")
    table.add_column("Steps", style="green")
    for preset in saved:
        steps = "\n".join(action.prompt for action in preset.actions)
        table.add_row(escape(preset.name), escape(steps))
    console.print(table)


@app.command()
def apply_preset(
    name: str = typer.Argument(..., help="Preset to replay"),
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to edit"),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Where to save the result"),
):
    """Replay a saved preset on an image."""
    from .presets import PresetStore

    store = _open_store()
    preset = PresetStore(store).get(name)
    if preset is None:
        console.print(f"[red]No preset named '{name}'[/]")
        raise typer.Exit(1)

    _require_api_key()
    logger.info("Applying preset '{}' to {}", name, image)

    async def run_preset():
        from .editing import EditSession
        from .models import create_default_model
        from .raster import Artifact

        session = EditSession(create_default_model(), store)
        session.start(Artifact.from_file(image))

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task(f"Applying {name}...", total=len(preset.actions))

            def on_progress(step, total):
                progress.update(task, completed=step - 1, description=f"Step {step}/{total}")

            result = await session.apply_preset(preset, on_progress=on_progress)
            progress.update(task, completed=result.completed_steps)

        if result.completed_steps:
            path = session.save_current(output_dir)
            console.print(f"[green]✓ Saved {path}[/]")
        if not result.succeeded:
            console.print(f"[red]{escape(session.error)}[/]")
            raise typer.Exit(1)

    asyncio.run(run_preset())


@app.command()
def translate(
    language: str = typer.Argument(..., help="Language code, e.g. es, fr, ja"),
):
    """Switch the UI language, translating strings with the model if needed."""
    import httpx

    from .errors import EditError
    from .i18n import LANGUAGES, Translator

    if language not in LANGUAGES:
        console.print(f"[red]Unsupported language '{language}'.[/] Choose from: {', '.join(LANGUAGES)}")
        raise typer.Exit(1)

    store = _open_store()
    model = None
    if language != "en" and store.get(f"translated_ui_{language}") is None:
        _require_api_key()
        from .models import create_default_model

        model = create_default_model()

    translator = Translator(model, store)
    try:
        with console.status(f"[blue]Translating to {LANGUAGES[language]}...[/]"):
            strings = asyncio.run(translator.change_language(language))
    except (EditError, httpx.HTTPError) as e:
        logger.error("Translation failed: {}", e)
        console.print(f"[red]Translation failed: {e}[/]")
        raise typer.Exit(1)

    table = Table(title=f"UI Strings ({LANGUAGES[language]})")
    table.add_column("Key", style="cyan")
    table.add_column("Text", style="green")
    for key in ("appTitle", "undo", "redo", "reset", "batchProcess"):
        table.add_row(key, escape(strings[key]))
    console.print(table)


if __name__ == "__main__":
    app()
