"""
Live-stream status card.

Builds the embed posted when a Twitch channel goes live, and the greyed-out
version it is edited into once the stream ends.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Optional

import discord

from core.utils import iso_to_dt, utcnow

LIVE_COLOR = discord.Color(0x9146FF)
OFFLINE_COLOR = discord.Color.greyple()

BOXART_SIZE = (288, 384)
PREVIEW_SIZE = (1280, 720)

_UPTIME_UNITS: tuple[tuple[str, int], ...] = (
    ("year", 31_557_600),
    ("month", 2_629_800),
    ("week", 604_800),
    ("day", 86_400),
    ("hour", 3_600),
    ("minute", 60),
)


def format_uptime(seconds: float, largest: int = 2) -> str:
    """
    Human readable duration using at most `largest` units.

    The smallest displayed unit is rounded, e.g. 5400s -> "1 hour, 30 minutes".
    """
    total = max(0.0, float(seconds))
    first = next(
        (i for i, (_, size) in enumerate(_UPTIME_UNITS) if total >= size),
        len(_UPTIME_UNITS) - 1,
    )
    last = min(first + largest - 1, len(_UPTIME_UNITS) - 1)
    step = _UPTIME_UNITS[last][1]
    remaining = int(round(total / step)) * step

    parts: list[str] = []
    for name, size in _UPTIME_UNITS[: last + 1]:
        count, remaining = divmod(remaining, size)
        if count and len(parts) < largest:
            parts.append(f"{count} {name}{'s' if count != 1 else ''}")

    if not parts:
        return f"0 {_UPTIME_UNITS[-1][0]}s"
    return ", ".join(parts)


def _sized(url: str, size: tuple[int, int]) -> str:
    width, height = size
    return url.replace("{width}", str(width)).replace("{height}", str(height))


def create_for_stream(
    stream: dict[str, Any],
    use_boxart: bool = False,
    now: Optional[dt.datetime] = None,
) -> discord.Embed:
    """Build the status card for a stream payload (Helix stream + user + game)."""
    now = now or utcnow()
    is_live = stream.get("type") == "live"
    user_name = stream.get("user_name") or stream.get("login") or ""
    login = (stream.get("login") or user_name).lower()
    game = stream.get("game") or None

    embed = discord.Embed(
        color=LIVE_COLOR if is_live else OFFLINE_COLOR,
        url=f"https://twitch.tv/{login}",
    )

    thumb_url = stream.get("profile_image_url")
    if use_boxart and game and game.get("box_art_url"):
        thumb_url = _sized(game["box_art_url"], BOXART_SIZE)
    if thumb_url:
        embed.set_thumbnail(url=thumb_url)

    if is_live:
        embed.title = f":red_circle: **{user_name} is live on Twitch!**"
        embed.add_field(name="Title", value=stream.get("title") or "-", inline=False)
    else:
        embed.title = f":white_circle: {user_name} was live on Twitch."
        embed.description = "The stream has ended."
        embed.add_field(name="Title", value=stream.get("title") or "-", inline=True)

    if game:
        embed.add_field(name="Game", value=game.get("name") or "-", inline=False)

    if is_live:
        embed.add_field(
            name="Status",
            value=f"Live with {stream.get('viewer_count', 0)} viewers",
            inline=True,
        )

        preview = stream.get("thumbnail_url")
        if preview:
            # Bust Discord's image cache so the preview stays current
            embed.set_image(url=f"{_sized(preview, PREVIEW_SIZE)}?t={int(now.timestamp())}")

        started_at = iso_to_dt(stream.get("started_at"))
        if started_at is not None:
            uptime = (now - started_at).total_seconds()
            embed.add_field(name="Uptime", value=format_uptime(uptime), inline=True)

    return embed
