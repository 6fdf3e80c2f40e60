from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class SettingsDTO:
    server_port: int = 8080
    auto_play: bool = True
    loop_playback: bool = False
    default_volume: int = 80

    def with_changes(self, **changes) -> "SettingsDTO":
        return replace(self, **changes)
