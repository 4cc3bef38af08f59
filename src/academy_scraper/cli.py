"""Command-line interface for academy-scraper."""

import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from academy_scraper import __version__
from academy_scraper.config import OutputFormat, RateLimitConfig, RenderConfig, RunConfig
from academy_scraper.converter import render
from academy_scraper.discovery import ManualDiscoverer
from academy_scraper.errors import ScraperError, ValidationError
from academy_scraper.extractor import ContentExtractor
from academy_scraper.orchestrator import (
    CircuitOpenEvent,
    ItemStatus,
    Orchestrator,
    ProgressEvent,
    RunCompletedEvent,
)
from academy_scraper.pipeline import build_document
from academy_scraper.utils import load_cookie_file

app = typer.Typer(
    name="academy-scraper",
    help="Download course pages and convert them to Markdown, HTML or text.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

_STATUS_STYLES = {
    ItemStatus.DOWNLOADING: "cyan",
    ItemStatus.PROCESSING: "magenta",
    ItemStatus.COMPLETED: "green",
    ItemStatus.ERROR: "red",
}


def version_callback(value: bool):
    if value:
        console.print(f"academy-scraper version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Course page downloader and converter."""
    pass


async def _read_urls_file(path: Path) -> list[str]:
    return [discovered.url async for discovered in ManualDiscoverer(path).discover()]


def _build_config(
    config_file: Optional[Path],
    cookie: Optional[str],
    cookie_file: Optional[Path],
    output: Optional[Path],
    formats: Optional[list[OutputFormat]],
    no_callouts: bool,
    no_embed_images: bool,
    delay: Optional[float],
    threshold: Optional[int],
    js: bool,
    verbose: bool,
) -> RunConfig:
    """Load the TOML config (if any) and apply command-line overrides."""
    config = RunConfig.from_toml(config_file) if config_file else RunConfig()

    updates: dict = {"verbose": verbose or config.verbose}
    if cookie:
        updates["credential"] = cookie.strip()
    elif cookie_file:
        updates["credential"] = load_cookie_file(cookie_file, config.allowed_host)
    if output:
        updates["output_dir"] = output

    render_updates: dict = {}
    if formats:
        render_updates["formats"] = list(dict.fromkeys(formats))
    if no_callouts:
        render_updates["callouts"] = False
    if no_embed_images:
        render_updates["embed_images"] = False
    if render_updates:
        updates["render"] = RenderConfig.model_validate(
            {**config.render.model_dump(), **render_updates}
        )

    rate_updates: dict = {}
    if delay is not None:
        rate_updates["delay_seconds"] = delay
    if threshold is not None:
        rate_updates["failure_threshold"] = threshold
    if rate_updates:
        updates["rate_limit"] = RateLimitConfig.model_validate(
            {**config.rate_limit.model_dump(), **rate_updates}
        )

    if js:
        updates["fetcher"] = config.fetcher.model_copy(update={"use_js": True})

    return config.model_copy(update=updates)


async def _run_with_progress(orchestrator: Orchestrator, urls: list[str]) -> RunCompletedEvent | None:
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, orchestrator.stop)
    except (NotImplementedError, RuntimeError):
        # No signal support here (Windows loop, non-main thread): Ctrl-C
        # surfaces as KeyboardInterrupt instead
        pass

    completed: RunCompletedEvent | None = None
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    )
    task_id = progress.add_task("Starting...", total=None)

    try:
        with progress:
            async for event in orchestrator.run(urls):
                if isinstance(event, ProgressEvent):
                    style = _STATUS_STYLES[event.status]
                    if event.current == 0:
                        progress.console.print(
                            f"[red]Course expansion failed:[/red] {escape(event.url)} ({escape(event.error or '')})"
                        )
                        continue
                    description = f"[{style}]{event.status.value}[/{style}] {escape(event.filename or event.url)}"
                    if orchestrator.rate_limiter.is_throttled:
                        description += f" [yellow](throttled, {orchestrator.rate_limiter.delay_seconds:.0f}s delay)[/yellow]"
                    progress.update(task_id, total=event.total, description=description)
                    if event.status in (ItemStatus.COMPLETED, ItemStatus.ERROR):
                        progress.update(task_id, completed=event.current)
                    if event.status == ItemStatus.ERROR:
                        progress.console.print(
                            f"[red]Error:[/red] {escape(event.url)}: {escape(event.error or '')}"
                        )
                elif isinstance(event, CircuitOpenEvent):
                    progress.console.print(f"[bold red]{event.message}[/bold red]")
                elif isinstance(event, RunCompletedEvent):
                    completed = event
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass

    return completed


@app.command()
def extract(
    urls: Optional[list[str]] = typer.Argument(None, help="Section or course URLs to download"),
    cookie: Optional[str] = typer.Option(
        None,
        "--cookie",
        "-c",
        help="Cookie header value (must contain the session cookie)",
        envvar="ACADEMY_SCRAPER_COOKIE",
    ),
    cookie_file: Optional[Path] = typer.Option(
        None,
        "--cookie-file",
        help="Browser cookie export (JSON or Netscape cookies.txt)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory",
    ),
    formats: Optional[list[OutputFormat]] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format, repeatable: md, html, txt",
    ),
    no_callouts: bool = typer.Option(
        False,
        "--no-callouts",
        help="Render callout sections as plain Markdown",
    ),
    no_embed_images: bool = typer.Option(
        False,
        "--no-embed-images",
        help="Use standard Markdown image links instead of ![[embeds]]",
    ),
    delay: Optional[float] = typer.Option(
        None,
        "--delay",
        help="Delay between requests in seconds",
    ),
    threshold: Optional[int] = typer.Option(
        None,
        "--threshold",
        help="Consecutive failures before the run stops",
    ),
    js: bool = typer.Option(
        False,
        "--js",
        help="Render pages with a headless browser",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="TOML configuration file",
    ),
    urls_file: Optional[Path] = typer.Option(
        None,
        "--urls-file",
        help="File containing URLs, one per line",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
):
    """
    Download pages and write them in the requested formats.

    Examples:

        academy-scraper extract https://academy.hackthebox.com/module/15/section/142 -c "htb_academy_session=..."

        academy-scraper extract --urls-file urls.txt --cookie-file cookies.json -f md -f html
    """
    _configure_logging(verbose)

    all_urls = list(urls or [])
    try:
        if urls_file:
            all_urls.extend(asyncio.run(_read_urls_file(urls_file)))
        config = _build_config(
            config_file, cookie, cookie_file, output, formats,
            no_callouts, no_embed_images, delay, threshold, js, verbose,
        )
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    orchestrator = Orchestrator(config)

    try:
        completed = asyncio.run(_run_with_progress(orchestrator, all_urls))
    except ValidationError as e:
        console.print(f"[red]Invalid {e.field}: {e.message}[/red]")
        raise typer.Exit(2)
    except KeyboardInterrupt:
        console.print("\n[yellow]Extraction cancelled.[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)

    if completed:
        console.print(
            f"[green]Done:[/green] {completed.total_processed} processed, "
            f"{completed.total_errors} errors, {completed.remaining} remaining "
            f"→ {config.output_dir}"
        )
        if completed.total_errors:
            raise typer.Exit(1)


@app.command()
def convert(
    file: Path = typer.Argument(..., help="Saved HTML page", exists=True, dir_okay=False),
    fmt: OutputFormat = typer.Option(
        OutputFormat.MARKDOWN,
        "--format",
        "-f",
        help="Output format: md, html or txt",
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url",
        help="Original page URL (used for the title fallback and metadata)",
    ),
    no_callouts: bool = typer.Option(False, "--no-callouts"),
    no_embed_images: bool = typer.Option(False, "--no-embed-images"),
    no_metadata: bool = typer.Option(False, "--no-metadata", help="Omit front matter"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="TOML configuration file"),
):
    """Render a saved page offline and print it to stdout."""
    _configure_logging(False)

    config = RunConfig.from_toml(config_file) if config_file else RunConfig()
    render_config = RenderConfig.model_validate(
        {
            **config.render.model_dump(),
            "formats": [fmt],
            "callouts": config.render.callouts and not no_callouts,
            "embed_images": config.render.embed_images and not no_embed_images,
            "include_metadata": config.render.include_metadata and not no_metadata,
        }
    )

    try:
        raw_html = file.read_text(encoding="utf-8")
        document = build_document(
            raw_html, url or file.resolve().as_uri(), ContentExtractor(config.extractor)
        )
        outputs = render(document, render_config)
    except ScraperError as e:
        err_console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    typer.echo(outputs[fmt], nl=False)


if __name__ == "__main__":
    app()
