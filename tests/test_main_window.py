"""Tests for memory_router.ui.main_window – controller signals reaching the screen."""

from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

from conftest import reveal_time_ms
from memory_router.core.preferences import PreferencesStore
from memory_router.core.session import Status
from memory_router.ui.audio import AudioCues
from memory_router.ui.main_window import MainWindow


@pytest.fixture()
def window(controller, history, tmp_path: Path) -> MainWindow:
    win = MainWindow(
        controller=controller,
        history=history,
        preferences=PreferencesStore(file_path=tmp_path / "preferences.json"),
        audio=AudioCues(enabled=False, cache_dir=tmp_path / "cues"),
    )
    yield win
    win.deleteLater()


# ===========================================================================
# Level up
# ===========================================================================

class TestLevelUp:
    def test_hidden_at_start(self, window, controller):
        controller.start("ada")
        assert window._level_up_label.isHidden()

    def test_shown_after_correct_round(self, window, controller, scheduler, game_config):
        controller.start("ada")
        scheduler.advance(reveal_time_ms(game_config, len(controller.session.sequence)))
        assert controller.status == Status.INPUT

        controller.submit(list(controller.session.sequence))
        assert not window._level_up_label.isHidden()
        assert window._level_up_label.text().endswith("02")

    def test_not_shown_on_wrong_answer(self, window, controller, scheduler, game_config):
        controller.start("ada")
        scheduler.advance(reveal_time_ms(game_config, len(controller.session.sequence)))
        wrong = ["X" * len(token) for token in controller.session.sequence]
        controller.submit(wrong)
        assert window._level_up_label.isHidden()


# ===========================================================================
# Screens
# ===========================================================================

class TestScreens:
    def test_main_menu_returns_to_start(self, window, controller):
        controller.start("ada")
        assert window._stack.currentWidget() is window._game_screen
        controller.main_menu()
        assert window._stack.currentWidget() is window._start_screen


# ===========================================================================
# Module entry point
# ===========================================================================

def test_package_runs_as_module():
    spec = importlib.util.find_spec("memory_router.__main__")
    assert spec is not None
    source = Path(spec.origin).read_text(encoding="utf-8")
    assert "run()" in source
