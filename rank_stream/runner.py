"""
CLI entrypoint for the live ranking client.
"""
import sys
import typer
import asyncio
from loguru import logger
from rich.console import Console

from rank_stream.client.rank_service import RankService
from rank_stream.client.rank_stream_client import create_rank_stream_client
from rank_stream.client.visualizer import Visualizer, build_rank_table
from rank_stream.shared.config import settings

app = typer.Typer(help="Clan live ranking client")

def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())

@app.callback()
def main(log_level: str = typer.Option(settings.LOG_LEVEL, help="Loguru level for stderr output")):
    configure_logging(log_level)

@app.command()
def server():
    """Start the demo ranking backend using Uvicorn."""
    import uvicorn
    typer.echo(f"Starting server on port {settings.PORT}...")
    uvicorn.run("rank_stream.server.main:app", host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())

@app.command()
def watch(
    base_url: str = typer.Option(None, help="API base URL (defaults to API_BASE_URL)"),
    count: int = typer.Option(settings.RANK_PAGE_SIZE, min=1, help="Number of ranking rows to load"),
    duration: float = typer.Option(600.0, help="How long to keep the dashboard open, in seconds"),
    no_stream: bool = typer.Option(False, "--no-stream", help="Snapshot-only mode, no live updates"),
):
    """Run the live leaderboard dashboard."""
    client = create_rank_stream_client(base_url=base_url, page_size=count, enable_stream=not no_stream)
    # Log lines would tear the Live layout apart
    configure_logging("ERROR")
    visualizer = Visualizer(client)
    try:
        asyncio.run(visualizer.run(duration))
    except KeyboardInterrupt:
        pass

@app.command()
def snapshot(
    base_url: str = typer.Option(None, help="API base URL (defaults to API_BASE_URL)"),
    count: int = typer.Option(settings.RANK_PAGE_SIZE, min=1, help="Number of ranking rows to load"),
):
    """Fetch one ranking snapshot and print it."""
    async def fetch():
        service = RankService(base_url=base_url)
        try:
            return await service.get_rankings(count)
        finally:
            await service.aclose()

    import httpx
    try:
        rankings = asyncio.run(fetch())
    except httpx.HTTPError as e:
        typer.echo(f"Snapshot failed: {e}", err=True)
        raise typer.Exit(1)
    Console().print(build_rank_table(rankings))

if __name__ == "__main__":
    app()
