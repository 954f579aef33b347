"""Theme helpers for embeds."""

from __future__ import annotations

from typing import Literal

import discord

__all__ = ["EmbedCategory", "get_embed_colour"]

EmbedCategory = Literal["public", "admin", "success", "failure"]

_COLOURS: dict[EmbedCategory, discord.Colour] = {
    "public": discord.Colour(0x3498DB),
    "admin": discord.Colour(0xF200E5),
    "success": discord.Colour(0x1B8009),
    "failure": discord.Colour(0xE81123),
}


def get_embed_colour(category: EmbedCategory) -> discord.Colour:
    """Return the embed colour for the given category."""

    return _COLOURS.get(category, discord.Colour.default())
