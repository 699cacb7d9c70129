"""
MODULE OVERVIEW:
The FastAPI application for the demo ranking backend.

WHAT IS HAPPENING HERE:
The `lifespan` context seeds the board and spawns the play-session generator as a
background task; on shutdown the task is cancelled and awaited so nothing leaks.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import asyncio
from contextlib import asynccontextmanager
from loguru import logger

from rank_stream.server.dummy_data import play_session_generator, seed_board
from rank_stream.server.middleware import TimingMiddleware
from rank_stream.server.rank_board import board
from rank_stream.server.routes import rank
from rank_stream.shared.config import settings

# We store our background tasks here so we can cancel them on shutdown.
background_tasks = set()

async def generator_runner(generator):
    """Drains the session generator; each step already broadcast its own notification."""
    try:
        async for notification in generator:
            logger.debug(f"protocol=sse event=rank-update version={notification['version']}")
    except asyncio.CancelledError:
        logger.debug("Play session generator cancelled")
    except Exception as e:
        logger.error(f"Generator error: {e}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # STARTUP
    logger.info("Rank demo server starting up...")
    if not board.members:
        seed_board(board)

    task = asyncio.create_task(generator_runner(play_session_generator(board, settings.RANK_UPDATE_INTERVAL_S)))
    background_tasks.add(task)
    logger.info(f"Seeded {len(board.members)} members, started {len(background_tasks)} background generators.")

    yield

    # SHUTDOWN
    logger.info("Server shutting down. Cancelling background tasks...")
    for task in background_tasks:
        task.cancel()
    if background_tasks:
        await asyncio.gather(*background_tasks, return_exceptions=True)
    background_tasks.clear()
    logger.info("Shutdown complete.")


app = FastAPI(
    title="Clan Rank Demo Server",
    description="Snapshot + SSE backend for the live ranking client",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rank.router, tags=["Ranking"])

@app.get("/healthz", tags=["Ops"])
async def health_check():
    return {"status": "ok"}

@app.get("/stats", tags=["Ops"])
async def get_stats():
    return board.get_stats()
