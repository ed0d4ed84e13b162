"""Map executable names to display names and productivity categories."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .models import Category
from .normalization import normalize_app_name


@dataclass(slots=True, frozen=True)
class Classification:
    display_name: str
    category: Category


_P, _D, _U = Category.PRODUCTIVE, Category.DISTRACTING, Category.UNKNOWN

DEFAULT_APPLICATIONS: Mapping[str, Classification] = MappingProxyType(
    {
        # IDEs and editors
        "idea64.exe": Classification("IntelliJ IDEA", _P),
        "pycharm64.exe": Classification("PyCharm", _P),
        "code.exe": Classification("Visual Studio Code", _P),
        "eclipse.exe": Classification("Eclipse", _P),
        "sublime_text.exe": Classification("Sublime Text", _P),
        "notepad++.exe": Classification("Notepad++", _P),
        # Browsers are categorized per website instead.
        "chrome.exe": Classification("Google Chrome", _U),
        "msedge.exe": Classification("Microsoft Edge", _U),
        "firefox.exe": Classification("Mozilla Firefox", _U),
        "brave.exe": Classification("Brave Browser", _U),
        "outlook.exe": Classification("Outlook", _P),
        "slack.exe": Classification("Slack", _P),
        # Games
        "steam.exe": Classification("Steam", _D),
        "valorant.exe": Classification("Valorant", _D),
        "csgo.exe": Classification("CS:GO", _D),
        "minecraft.exe": Classification("Minecraft", _D),
        "leagueoflegends.exe": Classification("League of Legends", _D),
        # Media
        "spotify.exe": Classification("Spotify", _D),
        "vlc.exe": Classification("VLC Media Player", _D),
    }
)


class Classifier:
    """Resolve executables against a fixed lookup table."""

    def __init__(self, extra: Optional[Mapping[str, Classification]] = None) -> None:
        table = dict(DEFAULT_APPLICATIONS)
        if extra:
            table.update({key.lower(): value for key, value in extra.items()})
        self._table: Mapping[str, Classification] = MappingProxyType(table)

    def classify(self, executable: str) -> Classification:
        known = self._table.get(executable.lower())
        if known is not None:
            return known
        return Classification(normalize_app_name(executable) or executable, _U)

    def __contains__(self, executable: str) -> bool:
        return executable.lower() in self._table
