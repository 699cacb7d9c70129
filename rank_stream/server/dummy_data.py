"""
MODULE OVERVIEW:
Seeds the demo board and keeps it moving.

WHAT IS HAPPENING HERE:
In production the play time comes from match results recorded by the clan backend.
Here a background loop credits a random member with a session every few seconds so
the SSE stream has something to announce.
"""

import asyncio
import random

from rank_stream.server.rank_board import RankBoard

DEMO_MEMBERS = [
    ("kim01", "Kim", "Squad leader"),
    ("lee02", "Lee", "Sniper"),
    ("park03", "Park", None),
    ("choi04", "Choi", "Medic"),
    ("jung05", "Jung", None),
    ("kang06", "Kang", "Driver"),
    ("yoon07", "Yoon", None),
    ("han08", "Han", "Scout"),
]

def seed_board(board: RankBoard) -> None:
    for game_code, name, remark in DEMO_MEMBERS:
        board.add_member(game_code, name, remark, total_play_time=random.randint(0, 50_000))

async def play_session_generator(board: RankBoard, interval_s: float = 3.0):
    """Credits one random member with 1-30 minutes of play, forever."""
    while True:
        await asyncio.sleep(random.uniform(interval_s * 0.5, interval_s * 1.5))
        if not board.members:
            continue
        game_code = random.choice(list(board.members))
        yield board.record_play(game_code, random.randint(60, 1800))
