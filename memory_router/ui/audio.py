"""Sound cues played through Qt Multimedia."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from PySide6.QtCore import QObject, QUrl
from PySide6.QtMultimedia import QSoundEffect

from memory_router.ui.tones import REVEAL_FREQUENCIES, Tone, render_wav, tones_for

logger = logging.getLogger(__name__)


class AudioCues(QObject):
    """Fire-and-forget cue player, muted when ``enabled`` is False.

    Each cue is rendered to a WAV file in ``cache_dir`` the first time it
    plays and reused afterwards.
    """

    def __init__(
        self,
        enabled: bool = True,
        cache_dir: Optional[Path] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.enabled = enabled
        self._cache_dir = cache_dir or Path(tempfile.gettempdir()) / "memory_router_cues"
        self._effects: Dict[str, QSoundEffect] = {}

    def play(self, name: str, index: int = 0) -> None:
        if not self.enabled:
            return
        key = f"reveal_{index % len(REVEAL_FREQUENCIES)}" if name == "reveal" else name
        effect = self._effects.get(key)
        if effect is None:
            effect = self._load(key, tones_for(name, index))
            if effect is None:
                return
        effect.play()

    def _load(self, key: str, tones: List[Tone]) -> Optional[QSoundEffect]:
        path = self._cache_dir / f"{key}.wav"
        if not path.exists():
            try:
                self._cache_dir.mkdir(parents=True, exist_ok=True)
                path.write_bytes(render_wav(tones))
            except OSError as e:
                logger.warning("Could not write sound cue %s: %s", path, e)
                return None
        effect = QSoundEffect(self)
        effect.setSource(QUrl.fromLocalFile(str(path)))
        self._effects[key] = effect
        return effect
