"""
Main module for orchestrating the listing, download and export process.
"""

import sys

from rich.console import Console
from rich.markup import escape
from rich.progress import track

from .config import load_config, ensure_directories
from .exceptions import ConfigurationError, ImageDownloadError, OutputError, PaperAPIError
from .images import ImageDownloader, iter_image_references, rewrite_references
from .models import DocumentResult
from .paper_client import PaperClient
from .security import FilenameAllocator
from .writer import image_dir_name, render_document, write_document, write_index

console = Console()
err_console = Console(stderr=True)


def report_error(result, stage, error):
    """Log a per-document failure to stderr and remember it on the result."""
    message = f"{stage}: {error}"
    result.errors.append(message)
    err_console.print(f"[bold red]{escape(result.doc_id)} {escape(stage)}:[/bold red] {escape(str(error))}")


def download_images(downloader, config, content, image_dir, result):
    """Download every image in the content and return the body with local links."""
    dest_dir = config.images_dir / image_dir
    replacements = []

    for index, reference in enumerate(iter_image_references(content.body), start=1):
        result.images_found += 1
        try:
            path = downloader.download(reference, dest_dir, index)
        except ImageDownloadError as e:
            report_error(result, f"image {reference.url}", e)
            continue
        result.images_downloaded += 1
        replacements.append((reference, f"{config.images_dir.name}/{image_dir}/{path.name}"))

    return rewrite_references(content.body, replacements)


def process_document(client, downloader, config, doc_id, names, image_dirs):
    """Run metadata, content, images and write for a single document."""
    result = DocumentResult(doc_id=doc_id, title=doc_id)

    try:
        metadata = client.get_metadata(doc_id)
    except PaperAPIError as e:
        report_error(result, "metadata", e)
        metadata = None

    if metadata is not None:
        result.owner = metadata.owner
        if metadata.title.strip():
            result.title = metadata.title

    stem = names.allocate(metadata.title if metadata else "", doc_id)
    console.print(f"Downloading [bold blue]{escape(result.title)}[/bold blue] [dim]({escape(doc_id)})[/dim]")

    try:
        content = client.get_content(doc_id)
    except PaperAPIError as e:
        report_error(result, "content", e)
        return result

    body = download_images(downloader, config, content, image_dir_name(stem, doc_id, image_dirs), result)
    if result.images_found:
        console.print(f"  → [dim]downloaded {result.images_downloaded} of {result.images_found} images[/dim]")

    try:
        result.path = write_document(
            config, stem, render_document(result.title, body, result.url, result.owner)
        )
    except OutputError as e:
        report_error(result, "write", e)

    return result


def run(config, client=None, downloader=None):
    """List all documents and export them one at a time."""
    client = client or PaperClient(config)
    downloader = downloader or ImageDownloader(config)

    console.print("[bold cyan]Listing Paper docs...[/bold cyan]")
    doc_ids = client.list_doc_ids()
    console.print(f"[bold yellow]Found {len(doc_ids)} docs[/bold yellow]")

    ensure_directories(config)

    names = FilenameAllocator()
    image_dirs = set()
    results = []
    for doc_id in track(doc_ids, description="Exporting...", console=console):
        results.append(process_document(client, downloader, config, doc_id, names, image_dirs))

    try:
        write_index(config, results)
    except OutputError as e:
        err_console.print(f"[bold red]index:[/bold red] {escape(str(e))}")

    written = sum(1 for r in results if r.written)
    failed = sum(1 for r in results if r.errors)
    images_found = sum(r.images_found for r in results)
    images_downloaded = sum(r.images_downloaded for r in results)
    console.print(
        f"[bold green]Done.[/bold green] {written} of {len(results)} docs written to "
        f"'{escape(str(config.output_dir))}', {images_downloaded} of {images_found} images downloaded"
    )
    if failed:
        console.print(f"[yellow]{failed} docs had errors; see messages above[/yellow]")
    return results


def main():
    """Entry point: export every legacy Paper doc to the docs directory."""
    try:
        config = load_config()
        run(config)
    except ConfigurationError as e:
        err_console.print(f"[bold red]Configuration Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except PaperAPIError as e:
        err_console.print(f"[bold red]Paper API Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except OutputError as e:
        err_console.print(f"[bold red]Output Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except KeyboardInterrupt:
        err_console.print("[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        err_console.print(f"[bold red]Unexpected Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
