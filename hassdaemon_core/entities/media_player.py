"""Media player entities."""

from __future__ import annotations

from ..const import STATE_PAUSED, STATE_PLAYING
from .entity import Entity

MEDIA_PLAYER_DOMAIN = "media_player"


class MediaPlayer(Entity):
    """Speaker or player.

    Fires ``play`` and ``pause`` on playback changes, ``song_change`` when
    the title or artist changes, ``volume_change`` and ``seek``.
    """

    KIND = "media_player"

    @property
    def is_playing(self) -> bool:
        return self._state == STATE_PLAYING

    @property
    def is_paused(self) -> bool:
        return self._state == STATE_PAUSED

    @property
    def volume(self) -> float | None:
        return self._attributes.get("volume_level")

    @property
    def media_title(self) -> str | None:
        return self._attributes.get("media_title")

    @property
    def media_artist(self) -> str | None:
        return self._attributes.get("media_artist")

    async def play(self) -> int:
        return await self.call_service(MEDIA_PLAYER_DOMAIN, "media_play")

    async def pause(self) -> int:
        return await self.call_service(MEDIA_PLAYER_DOMAIN, "media_pause")

    async def stop(self) -> int:
        return await self.call_service(MEDIA_PLAYER_DOMAIN, "media_stop")

    async def next_track(self) -> int:
        return await self.call_service(MEDIA_PLAYER_DOMAIN, "media_next_track")

    async def previous_track(self) -> int:
        return await self.call_service(MEDIA_PLAYER_DOMAIN, "media_previous_track")

    async def set_volume(self, volume: float) -> int:
        if not 0 <= volume <= 1:
            raise ValueError("volume must be between 0 and 1")
        return await self.call_service(
            MEDIA_PLAYER_DOMAIN, "volume_set", volume_level=volume
        )

    async def mute(self) -> int:
        return await self.call_service(
            MEDIA_PLAYER_DOMAIN, "volume_mute", is_volume_muted=True
        )

    async def unmute(self) -> int:
        return await self.call_service(
            MEDIA_PLAYER_DOMAIN, "volume_mute", is_volume_muted=False
        )

    async def set_shuffle(self, shuffle: bool) -> int:
        return await self.call_service(MEDIA_PLAYER_DOMAIN, "shuffle_set", shuffle=shuffle)

    async def seek(self, position: float) -> int:
        return await self.call_service(
            MEDIA_PLAYER_DOMAIN, "media_seek", seek_position=position
        )
