from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QButtonGroup,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from memory_router.core.controller import RoundController
from memory_router.core.difficulty import RoundConfig
from memory_router.core.history import ScoreHistory
from memory_router.core.preferences import PreferencesStore
from memory_router.core.session import (
    MODE_DESCRIPTIONS,
    GameMode,
    GameOverSummary,
    HudState,
    RoundRecord,
    Status,
    normalize_player_name,
)
from memory_router.ui.audio import AudioCues
from memory_router.ui.colors import NeonColors, timer_color
from memory_router.ui.models import build_leaderboard_rows, format_round_record, format_score
from memory_router.ui.widgets import SequenceNodesWidget, TokenInputRow

logger = logging.getLogger(__name__)

FEEDBACK_MS = 900
LEVEL_UP_MS = 1200
WARNING_MS = 2000
BANNER_MS = 1900
ROUND_LOG_ROWS = 20


def _label(text: str = "", size: int = 13, color: str = NeonColors.TEXT_PRIMARY, bold: bool = False) -> QLabel:
    lbl = QLabel(text)
    weight = 700 if bold else 400
    lbl.setStyleSheet(f"color: {color}; font-size: {size}px; font-weight: {weight};")
    return lbl


class MainWindow(QMainWindow):
    """Start screen, game screen and game-over screen around one RoundController."""

    def __init__(
        self,
        controller: RoundController,
        history: ScoreHistory,
        preferences: PreferencesStore,
        audio: AudioCues,
    ) -> None:
        super().__init__()
        self._controller = controller
        self._history = history
        self._preferences = preferences
        self._audio = audio
        self._selected_mode: GameMode = preferences.preferences.mode

        self._stack: Optional[QStackedWidget] = None
        self._start_screen: Optional[QWidget] = None
        self._game_screen: Optional[QWidget] = None
        self._over_screen: Optional[QWidget] = None

        self.setWindowTitle("Memory Router")
        self.setMinimumSize(960, 640)
        self._build_ui()
        self._connect_controller()
        self._refresh_leaderboard()
        self._on_hud_changed(controller.hud_state())
        self._show_start_screen()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self._stack = QStackedWidget()
        self._start_screen = self._build_start_screen()
        self._game_screen = self._build_game_screen()
        self._over_screen = self._build_over_screen()
        for screen in (self._start_screen, self._game_screen, self._over_screen):
            self._stack.addWidget(screen)
        self.setCentralWidget(self._stack)
        self.setStyleSheet(
            f"""
            QMainWindow {{
                background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
                    stop:0 {NeonColors.BG_TOP}, stop:1 {NeonColors.BG_BOTTOM});
            }}
            QPushButton {{
                background: transparent;
                color: {NeonColors.CYAN};
                border: 1px solid {NeonColors.CYAN};
                border-radius: 6px;
                padding: 8px 16px;
                font-weight: 700;
            }}
            QPushButton:checked {{ background: {NeonColors.NODE_ACTIVE}; }}
            QPushButton:disabled {{ color: {NeonColors.TEXT_MUTED}; border-color: {NeonColors.TEXT_MUTED}; }}
            QListWidget {{
                background: {NeonColors.PANEL_BG};
                color: {NeonColors.TEXT_SECONDARY};
                border: 1px solid {NeonColors.PANEL_BORDER};
                font-family: monospace;
            }}
            """
        )

    def _build_start_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setAlignment(Qt.AlignCenter)
        layout.setSpacing(14)

        layout.addWidget(_label("MEMORY ROUTER", 36, NeonColors.CYAN, bold=True), 0, Qt.AlignHCenter)
        layout.addWidget(
            _label("Watch the sequence. Route it back before time runs out.", 14, NeonColors.TEXT_SECONDARY),
            0,
            Qt.AlignHCenter,
        )

        self._name_input = QLineEdit()
        self._name_input.setPlaceholderText("OPERATOR NAME")
        self._name_input.setMaxLength(12)
        self._name_input.setFixedWidth(260)
        self._name_input.setText(self._preferences.preferences.last_name)
        self._name_input.textChanged.connect(self._on_name_changed)
        self._name_input.returnPressed.connect(self._start_game)
        layout.addWidget(self._name_input, 0, Qt.AlignHCenter)

        mode_row = QHBoxLayout()
        self._mode_group = QButtonGroup(self)
        self._mode_group.setExclusive(True)
        for mode in GameMode:
            btn = QPushButton(mode.value.upper())
            btn.setCheckable(True)
            btn.setChecked(mode == self._selected_mode)
            btn.clicked.connect(lambda _checked=False, m=mode: self._select_mode(m))
            self._mode_group.addButton(btn)
            mode_row.addWidget(btn)
        layout.addLayout(mode_row)

        self._mode_desc = _label(MODE_DESCRIPTIONS[self._selected_mode], 12, NeonColors.TEXT_SECONDARY)
        layout.addWidget(self._mode_desc, 0, Qt.AlignHCenter)

        self._sound_button = QPushButton()
        self._sound_button.setCheckable(True)
        self._sound_button.setChecked(self._preferences.preferences.sound_on)
        self._sound_button.clicked.connect(self._toggle_sound)
        self._update_sound_button()
        layout.addWidget(self._sound_button, 0, Qt.AlignHCenter)

        self._start_button = QPushButton("START ROUTING")
        self._start_button.clicked.connect(self._start_game)
        layout.addWidget(self._start_button, 0, Qt.AlignHCenter)
        self._on_name_changed(self._name_input.text())

        layout.addWidget(_label("LEADERBOARD", 12, NeonColors.TEXT_MUTED, bold=True), 0, Qt.AlignHCenter)
        self._leaderboard = QListWidget()
        self._leaderboard.setFixedSize(360, 200)
        layout.addWidget(self._leaderboard, 0, Qt.AlignHCenter)
        return screen

    def _build_game_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(24, 16, 24, 16)
        layout.setSpacing(12)

        hud = QHBoxLayout()
        self._score_label = _label("0", 22, NeonColors.CYAN, bold=True)
        self._level_label = _label("01", 22, NeonColors.GREEN, bold=True)
        self._multiplier_label = _label("×1", 22, NeonColors.MAGENTA, bold=True)
        self._best_label = _label("0", 16, NeonColors.TEXT_SECONDARY)
        self._mode_badge = _label("", 12, NeonColors.TEXT_MUTED, bold=True)
        for caption, value in (
            ("SCORE", self._score_label),
            ("LEVEL", self._level_label),
            ("STREAK", self._multiplier_label),
            ("BEST", self._best_label),
        ):
            column = QVBoxLayout()
            column.addWidget(_label(caption, 10, NeonColors.TEXT_MUTED, bold=True))
            column.addWidget(value)
            hud.addLayout(column)
        hud.addStretch(1)
        hud.addWidget(self._mode_badge, 0, Qt.AlignTop)
        layout.addLayout(hud)

        self._multiplier_bar = QProgressBar()
        self._multiplier_bar.setRange(0, 100)
        self._multiplier_bar.setTextVisible(False)
        self._multiplier_bar.setFixedHeight(6)
        layout.addWidget(self._multiplier_bar)

        self._phase_banner = _label("", 18, NeonColors.MAGENTA, bold=True)
        self._phase_banner.setVisible(False)
        layout.addWidget(self._phase_banner, 0, Qt.AlignHCenter)

        self._phase_label = _label("", 20, NeonColors.TEXT_PRIMARY, bold=True)
        self._phase_sub = _label("", 12, NeonColors.TEXT_SECONDARY)
        layout.addWidget(self._phase_label, 0, Qt.AlignHCenter)
        layout.addWidget(self._phase_sub, 0, Qt.AlignHCenter)

        self._nodes = SequenceNodesWidget()
        layout.addWidget(self._nodes)

        self._feedback_label = _label("", 28, NeonColors.GREEN, bold=True)
        self._feedback_label.setVisible(False)
        layout.addWidget(self._feedback_label, 0, Qt.AlignHCenter)

        self._level_up_label = _label("LEVEL UP", 16, NeonColors.YELLOW, bold=True)
        self._level_up_label.setVisible(False)
        layout.addWidget(self._level_up_label, 0, Qt.AlignHCenter)

        self._input_zone = QFrame()
        zone_layout = QVBoxLayout(self._input_zone)
        self._token_inputs = TokenInputRow()
        self._token_inputs.entry_edited.connect(self._controller.set_entry)
        self._token_inputs.submit_requested.connect(self._submit)
        zone_layout.addWidget(self._token_inputs)

        controls = QHBoxLayout()
        self._timer_label = _label("", 28, NeonColors.CYAN, bold=True)
        self._submit_button = QPushButton("ROUTE")
        self._submit_button.clicked.connect(self._submit)
        self._boost_button = QPushButton("⚡ FREEZE ×0")
        self._boost_button.clicked.connect(self._controller.activate_boost)
        controls.addWidget(self._timer_label)
        controls.addStretch(1)
        controls.addWidget(self._boost_button)
        controls.addWidget(self._submit_button)
        zone_layout.addLayout(controls)

        self._input_warning = _label("Fill every token before routing.", 12, NeonColors.YELLOW)
        self._input_warning.setVisible(False)
        zone_layout.addWidget(self._input_warning, 0, Qt.AlignHCenter)
        layout.addWidget(self._input_zone)

        bottom = QHBoxLayout()
        self._round_log = QListWidget()
        self._round_log.setFixedHeight(140)
        bottom.addWidget(self._round_log, 1)
        menu_button = QPushButton("MENU")
        menu_button.clicked.connect(self._controller.main_menu)
        bottom.addWidget(menu_button, 0, Qt.AlignBottom)
        layout.addLayout(bottom)

        QShortcut(QKeySequence(Qt.Key_Escape), screen, activated=self._controller.main_menu)
        return screen

    def _build_over_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setAlignment(Qt.AlignCenter)
        layout.setSpacing(12)
        layout.addWidget(_label("CONNECTION LOST", 32, NeonColors.RED, bold=True), 0, Qt.AlignHCenter)
        self._over_new_best = _label("NEW BEST", 16, NeonColors.YELLOW, bold=True)
        layout.addWidget(self._over_new_best, 0, Qt.AlignHCenter)
        self._over_stats = _label("", 16, NeonColors.TEXT_PRIMARY)
        layout.addWidget(self._over_stats, 0, Qt.AlignHCenter)
        self._over_sequence = _label("", 18, NeonColors.GREEN, bold=True)
        layout.addWidget(self._over_sequence, 0, Qt.AlignHCenter)

        buttons = QHBoxLayout()
        restart = QPushButton("RESTART")
        restart.clicked.connect(self._restart)
        menu = QPushButton("MAIN MENU")
        menu.clicked.connect(self._controller.main_menu)
        buttons.addWidget(restart)
        buttons.addWidget(menu)
        layout.addLayout(buttons)
        return screen

    # ------------------------------------------------------------------
    # Controller wiring
    # ------------------------------------------------------------------

    def _connect_controller(self) -> None:
        c = self._controller
        c.status_changed.connect(self._on_status_changed)
        c.round_started.connect(self._on_round_started)
        c.phase_changed.connect(self._on_phase_changed)
        c.token_revealed.connect(lambda index, _token: self._nodes.reveal(index))
        c.token_concealed.connect(self._nodes.conceal)
        c.input_requested.connect(self._on_input_requested)
        c.timer_changed.connect(self._on_timer_changed)
        c.feedback.connect(self._on_feedback)
        c.level_up.connect(self._on_level_up)
        c.hud_changed.connect(self._on_hud_changed)
        c.boosts_changed.connect(self._on_boosts_changed)
        c.incomplete_submission.connect(self._on_incomplete)
        c.entry_checked.connect(self._token_inputs.set_entry_state)
        c.round_logged.connect(self._on_round_logged)
        c.game_over.connect(self._on_game_over)
        c.cue.connect(self._audio.play)

    def _on_status_changed(self, status: str) -> None:
        state = Status(status)
        in_input = state == Status.INPUT
        self._input_zone.setVisible(in_input or state == Status.FEEDBACK)
        self._token_inputs.set_enabled(in_input)
        self._submit_button.setEnabled(in_input)
        self._on_boosts_changed(self._controller.session.boosts, self._controller.session.boost_active)
        if state == Status.IDLE:
            self._show_start_screen()
        elif state == Status.DISPLAYING:
            self._stack.setCurrentWidget(self._game_screen)
            self._phase_label.setText("ROUTING SEQUENCE...")
            self._phase_sub.setText("Watch carefully, then enter each token")

    def _on_round_started(self, config: RoundConfig) -> None:
        self._nodes.set_tokens(self._controller.session.sequence)
        self._token_inputs.clear_boxes()

    def _on_phase_changed(self, phase: str, label: str) -> None:
        self._phase_banner.setText(f"{phase}  ·  {label}")
        self._phase_banner.setVisible(True)
        QTimer.singleShot(BANNER_MS, lambda: self._phase_banner.setVisible(False))

    def _on_input_requested(self, expected_lengths: list) -> None:
        config = self._controller.current_round
        self._nodes.mask_all()
        if config is not None:
            self._phase_label.setText(f"ENTER {config.length} TOKENS")
            self._phase_sub.setText(f"{config.label} · {config.timer_seconds}s")
        self._token_inputs.build(list(expected_lengths))

    def _on_timer_changed(self, remaining: int, total: int) -> None:
        text = "∞" if self._controller.session.mode == GameMode.PRACTICE else str(remaining)
        self._timer_label.setText(text)
        self._timer_label.setStyleSheet(
            f"color: {timer_color(remaining, total)}; font-size: 28px; font-weight: 700;"
        )

    def _on_feedback(self, kind: str) -> None:
        granted = kind == "granted"
        self._feedback_label.setText("ACCESS GRANTED" if granted else "ACCESS DENIED")
        color = NeonColors.GREEN if granted else NeonColors.RED
        self._feedback_label.setStyleSheet(f"color: {color}; font-size: 28px; font-weight: 700;")
        self._feedback_label.setVisible(True)
        if not granted:
            self._token_inputs.flash_error()
        QTimer.singleShot(FEEDBACK_MS, lambda: self._feedback_label.setVisible(False))

    def _on_level_up(self) -> None:
        self._level_up_label.setText(f"LEVEL UP  ·  {self._controller.session.level:02d}")
        self._level_up_label.setVisible(True)
        QTimer.singleShot(LEVEL_UP_MS, lambda: self._level_up_label.setVisible(False))

    def _on_hud_changed(self, hud: HudState) -> None:
        self._score_label.setText(format_score(hud.score))
        self._level_label.setText(f"{hud.level:02d}")
        self._multiplier_label.setText(f"×{hud.multiplier}")
        self._multiplier_bar.setValue(int(hud.multiplier_progress * 100))
        self._best_label.setText(format_score(hud.best))
        self._mode_badge.setText(f"{hud.phase} · {hud.mode.value.upper()}")

    def _on_boosts_changed(self, count: int, active: bool) -> None:
        in_input = self._controller.status == Status.INPUT
        self._boost_button.setText(f"⚡ FREEZE ×{count}" + (" (ACTIVE)" if active else ""))
        self._boost_button.setVisible(in_input or count > 0)
        self._boost_button.setEnabled(in_input and count > 0)

    def _on_incomplete(self) -> None:
        self._input_warning.setVisible(True)
        self._token_inputs.focus_first_empty()
        QTimer.singleShot(WARNING_MS, lambda: self._input_warning.setVisible(False))

    def _on_round_logged(self, record: RoundRecord) -> None:
        self._round_log.insertItem(0, format_round_record(record))
        while self._round_log.count() > ROUND_LOG_ROWS:
            self._round_log.takeItem(self._round_log.count() - 1)

    def _on_game_over(self, summary: GameOverSummary) -> None:
        self._over_new_best.setVisible(summary.new_best)
        self._over_stats.setText(
            f"SCORE {format_score(summary.score)}   LEVEL {summary.level}   MAX STREAK {summary.max_streak}"
        )
        self._over_sequence.setText("  ".join(summary.sequence))
        self._refresh_leaderboard()
        self._stack.setCurrentWidget(self._over_screen)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def _on_name_changed(self, text: str) -> None:
        self._start_button.setEnabled(bool(normalize_player_name(text)))

    def _select_mode(self, mode: GameMode) -> None:
        self._selected_mode = mode
        self._mode_desc.setText(MODE_DESCRIPTIONS[mode])
        self._preferences.update(mode=mode)

    def _toggle_sound(self) -> None:
        sound_on = self._sound_button.isChecked()
        self._audio.enabled = sound_on
        self._preferences.update(sound_on=sound_on)
        self._update_sound_button()

    def _update_sound_button(self) -> None:
        self._sound_button.setText("🔊 SOUND ON" if self._sound_button.isChecked() else "🔇 SOUND OFF")

    def _start_game(self) -> None:
        name = self._name_input.text()
        if not self._controller.start(name, self._selected_mode):
            return
        self._preferences.update(last_name=name)
        self._round_log.clear()
        self._stack.setCurrentWidget(self._game_screen)

    def _restart(self) -> None:
        self._round_log.clear()
        self._controller.restart()

    def _submit(self) -> None:
        self._controller.submit(self._token_inputs.values())

    def _show_start_screen(self) -> None:
        self._refresh_leaderboard()
        self._stack.setCurrentWidget(self._start_screen)
        self._name_input.setFocus()

    def _refresh_leaderboard(self) -> None:
        self._leaderboard.clear()
        rows = build_leaderboard_rows(self._history.top_n(10))
        if not rows:
            self._leaderboard.addItem("No scores yet")
            return
        for row in rows:
            self._leaderboard.addItem(f"{row.rank:>2}. {row.name:<12} {row.score:>10}  {row.level}")

    def closeEvent(self, event: QCloseEvent) -> None:
        self._controller.main_menu()
        super().closeEvent(event)
