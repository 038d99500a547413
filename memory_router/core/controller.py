"""Round lifecycle: reveal, input, evaluation and game over.

``RoundController`` owns the single live :class:`Session` and is the only
place that mutates it. Everything the presentation layer needs is emitted as
Qt signals; the UI never reaches into the session to drive the game.

    idle -> displaying -> input -> feedback -> displaying (next round)
                                            -> input      (practice retry)
                                            -> over
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from memory_router.core.config import GameConfig
from memory_router.core.difficulty import RoundConfig, is_phase_change, select_round_config
from memory_router.core.history import HistoryEntry, ScoreHistory
from memory_router.core.reveal import RevealScheduler, reveal_duration_ms
from memory_router.core.scheduling import QtScheduler, ScheduledCall, Scheduler
from memory_router.core.scoring import multiplier, multiplier_progress, points
from memory_router.core.sequence import generate_sequence
from memory_router.core.session import (
    DEFAULT_PLAYER_NAME,
    EntryState,
    GameMode,
    GameOverSummary,
    HudState,
    RoundRecord,
    Session,
    Status,
    classify_entry,
    normalize_entry,
    normalize_player_name,
)
from memory_router.core.timer import RoundTimer

logger = logging.getLogger(__name__)

STRICT_FAIL_STATES = (EntryState.PREFIX_WRONG, EntryState.FILLED_WRONG)


class RoundController(QObject):
    status_changed = Signal(str)
    round_started = Signal(object)  # RoundConfig
    phase_changed = Signal(str, str)  # phase, label
    token_revealed = Signal(int, str)
    token_concealed = Signal(int)
    input_requested = Signal(list)  # expected character count per token
    timer_changed = Signal(int, int)  # remaining, total
    feedback = Signal(str)  # "granted" | "denied"
    level_up = Signal()
    hud_changed = Signal(object)  # HudState
    boosts_changed = Signal(int, bool)
    incomplete_submission = Signal()
    entry_checked = Signal(int, str)  # index, EntryState value
    round_logged = Signal(object)  # RoundRecord
    game_over = Signal(object)  # GameOverSummary
    cue = Signal(str, int)  # cue name, index

    def __init__(
        self,
        config: GameConfig,
        history: ScoreHistory,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._config = config
        self._history = history
        self._scheduler = scheduler or QtScheduler(self)
        self._rng = rng or random.Random()
        self._session = Session()
        self._round: Optional[RoundConfig] = None
        self._pending: Dict[str, ScheduledCall] = {}

        self._timer = RoundTimer(self._scheduler, self)
        self._timer.ticked.connect(self._on_timer_tick)
        self._reveal = RevealScheduler(self._scheduler, config.timing, self)
        self._reveal.revealed.connect(self._on_token_revealed)
        self._reveal.concealed.connect(self.token_concealed)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        """The live session. Only the controller mutates it."""
        return self._session

    @property
    def status(self) -> Status:
        """Current status of the live session."""
        return self._session.status

    @property
    def current_round(self) -> Optional[RoundConfig]:
        """Config of the round in play, or None before the first round."""
        return self._round

    @property
    def timer(self) -> RoundTimer:
        """The single countdown used for the input phase."""
        return self._timer

    @property
    def reveal(self) -> RevealScheduler:
        """The single reveal sequence used for the display phase."""
        return self._reveal

    def hud_state(self) -> HudState:
        """Snapshot of score, level, multiplier and best score for the HUD."""
        s = self._session
        rules = self._config.scoring
        round_config = self._round or select_round_config(s.level, self._config.phases)
        return HudState(
            score=s.score,
            level=s.level,
            multiplier=multiplier(s.streak, rules),
            multiplier_progress=multiplier_progress(s.streak, rules),
            best=self._history.best_score(),
            phase=round_config.phase,
            mode=s.mode,
        )

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start(self, name: str, mode: GameMode = GameMode.NORMAL) -> bool:
        """Begin a new session. Refused (False) when ``name`` is blank."""
        player = normalize_player_name(name)
        if not player:
            logger.info("Start refused: empty player name")
            return False
        self._reset_session(player, mode)
        logger.info("Session started for %s in %s mode", player, mode.value)
        self._begin_round()
        return True

    def restart(self) -> None:
        """Discard the current session and start over with the same player and mode."""
        self._reset_session(self._session.player_name, self._session.mode)
        logger.info("Session restarted")
        self._begin_round()

    def main_menu(self) -> None:
        """Abort any running round and return to idle. History is kept."""
        self._cancel_all()
        if self._session.status != Status.IDLE:
            self._set_status(Status.IDLE)
        self.hud_changed.emit(self.hud_state())

    def _reset_session(self, player: str, mode: GameMode) -> None:
        self._cancel_all()
        self._session = Session(mode=mode, player_name=player or DEFAULT_PLAYER_NAME)
        self._round = None

    def _cancel_all(self) -> None:
        self._timer.clear()
        self._timer.frozen = False
        self._reveal.cancel()
        for call in self._pending.values():
            call.cancel()
        self._pending.clear()
        self._session.boost_active = False

    def _call_later(self, name: str, delay_ms: int, callback: Callable[[], None]) -> None:
        previous = self._pending.pop(name, None)
        if previous is not None:
            previous.cancel()

        def run() -> None:
            self._pending.pop(name, None)
            callback()

        self._pending[name] = self._scheduler.call_later(delay_ms, run)

    def _set_status(self, target: Status) -> None:
        current = self._session.status
        if not self._session.can_transition(target):
            raise RuntimeError(f"Illegal status transition {current.value} -> {target.value}")
        self._session.status = target
        logger.debug("Status %s -> %s", current.value, target.value)
        self.status_changed.emit(target.value)

    # ------------------------------------------------------------------
    # Round flow
    # ------------------------------------------------------------------

    def _begin_round(self) -> None:
        s = self._session
        self._set_status(Status.DISPLAYING)
        round_config = select_round_config(s.level, self._config.phases)
        self._round = round_config

        if is_phase_change(s.last_phase_label, round_config):
            logger.info("Entering %s (%s)", round_config.phase, round_config.label)
            self.phase_changed.emit(round_config.phase, round_config.label)
        s.last_phase_label = round_config.label

        s.sequence = generate_sequence(
            round_config.length,
            round_config.alphabet,
            round_config.token_length,
            self._rng,
        )
        s.entries = []
        logger.info(
            "Round started: level %d, %s, %d tokens",
            s.level,
            round_config.label,
            round_config.length,
        )
        self.round_started.emit(round_config)
        self.hud_changed.emit(self.hud_state())
        self.boosts_changed.emit(s.boosts, s.boost_active)
        self._call_later("round", self._config.timing.pre_reveal_pause_ms, self._start_reveal)

    def _start_reveal(self) -> None:
        s = self._session
        if s.status != Status.DISPLAYING:
            return
        display_ms = reveal_duration_ms(s.level, s.mode == GameMode.SPEED, self._config.timing)
        self._reveal.start(s.sequence, display_ms, self._begin_input)

    def _on_token_revealed(self, index: int, token: str) -> None:
        self.token_revealed.emit(index, token)
        self.cue.emit("reveal", index)

    def _begin_input(self) -> None:
        self._set_status(Status.INPUT)
        self._open_input()

    def _open_input(self) -> None:
        s = self._session
        s.entries = [""] * len(s.sequence)
        self.input_requested.emit(s.expected_lengths())
        self.boosts_changed.emit(s.boosts, s.boost_active)
        self._timer.clear()
        self._timer.start(self._time_budget(), self._on_timer_expired)

    def _time_budget(self) -> int:
        if self._session.mode == GameMode.PRACTICE:
            return self._config.timing.practice_timer_seconds
        return self._round.timer_seconds if self._round else 0

    def _on_timer_tick(self, remaining: int, total: int) -> None:
        s = self._session
        s.timer_left = remaining
        s.timer_total = total
        self.timer_changed.emit(remaining, total)
        if 0 < remaining <= self._config.timing.tick_warning_seconds:
            self.cue.emit("tick", 0)

    def _on_timer_expired(self) -> None:
        if self._session.status != Status.INPUT:
            return
        logger.info("Time expired at level %d", self._session.level)
        self._handle_wrong()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def set_entry(self, index: int, text: str) -> Optional[EntryState]:
        """Record what the player typed for token ``index``.

        Returns the entry's classification, or None when input is not open.
        In strict mode a character that breaks the expected prefix fails the
        round immediately.
        """
        s = self._session
        if s.status != Status.INPUT or not 0 <= index < len(s.sequence):
            return None
        expected = s.sequence[index].upper()
        value = normalize_entry(text, expected)
        s.entries[index] = value
        state = classify_entry(value, expected)
        self.entry_checked.emit(index, state.value)

        if s.mode == GameMode.STRICT and state in STRICT_FAIL_STATES:
            logger.info("Strict mode: wrong character in token %d", index)
            self.cue.emit("wrong_key", index)
            self._timer.clear()
            self._handle_wrong()
        return state

    def submit(self, entries: Optional[List[str]] = None) -> bool:
        """Evaluate the current entries. Returns False if nothing was evaluated."""
        s = self._session
        if s.status != Status.INPUT:
            return False
        if entries is not None:
            for index, text in enumerate(entries[: len(s.sequence)]):
                s.entries[index] = normalize_entry(text, s.sequence[index])

        if not s.is_complete():
            logger.debug("Incomplete submission rejected")
            self.incomplete_submission.emit()
            return False

        self._timer.clear()
        if s.is_correct():
            self._handle_correct()
        else:
            self._handle_wrong()
        return True

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    def _handle_correct(self) -> None:
        s = self._session
        rules = self._config.scoring
        self._set_status(Status.FEEDBACK)
        self.cue.emit("success", 0)
        self.feedback.emit("granted")

        round_config = self._round
        earned = points(s.level, multiplier(s.streak, rules), s.timer_left, s.timer_total, rules)
        played_level = s.level
        granted = s.record_correct(earned, rules.boost_every)
        self.level_up.emit()
        logger.info("Level %d cleared: +%d (score %d, streak %d)", played_level, earned, s.score, s.streak)
        if granted:
            logger.info("Boost granted (%d available)", s.boosts)
            self.cue.emit("boost", 0)
            self.boosts_changed.emit(s.boosts, s.boost_active)

        self._log_round(RoundRecord(played_level, round_config.label if round_config else "", True, earned))
        self.hud_changed.emit(self.hud_state())
        self.cue.emit("level_up", 0)
        self._call_later("feedback", self._config.timing.correct_feedback_ms, self._begin_round)

    def _handle_wrong(self) -> None:
        s = self._session
        self._set_status(Status.FEEDBACK)
        self._timer.clear()
        self.cue.emit("fail", 0)
        self.feedback.emit("denied")
        round_config = self._round
        self._log_round(RoundRecord(s.level, round_config.label if round_config else "", False, 0))

        if s.mode == GameMode.PRACTICE:
            s.record_wrong()
            self.hud_changed.emit(self.hud_state())
            self._call_later("feedback", self._config.timing.practice_retry_ms, self._retry_input)
        else:
            self._trigger_game_over()

    def _retry_input(self) -> None:
        if self._session.status != Status.FEEDBACK:
            return
        self._set_status(Status.INPUT)
        self._open_input()

    def _log_round(self, record: RoundRecord) -> None:
        self._session.log_round(record, self._config.scoring.round_log_limit)
        self.round_logged.emit(record)

    def _trigger_game_over(self) -> None:
        s = self._session
        self._set_status(Status.OVER)
        self._timer.clear()
        self._reveal.cancel()
        self._end_boost()

        previous_best = self._history.best_score()
        self._history.append(
            HistoryEntry.now(
                name=s.player_name or DEFAULT_PLAYER_NAME,
                score=s.score,
                level=s.level,
                max_streak=s.max_streak,
                mode=s.mode.value,
            )
        )
        summary = GameOverSummary(
            name=s.player_name,
            score=s.score,
            level=s.level,
            max_streak=s.max_streak,
            mode=s.mode,
            sequence=list(s.sequence),
            new_best=s.score > previous_best and s.score > 0,
        )
        logger.info("Game over: %s scored %d at level %d", s.player_name, s.score, s.level)

        def announce() -> None:
            self.hud_changed.emit(self.hud_state())
            self.game_over.emit(summary)

        self._call_later("game_over", self._config.timing.game_over_delay_ms, announce)

    # ------------------------------------------------------------------
    # Boosts
    # ------------------------------------------------------------------

    def activate_boost(self) -> bool:
        """Freeze the countdown for ``boost_duration_ms``. Only legal during input."""
        s = self._session
        if s.status != Status.INPUT or s.boosts <= 0:
            return False
        s.boosts -= 1
        s.boost_active = True
        self._timer.frozen = True
        logger.info("Boost activated (%d left)", s.boosts)
        self.cue.emit("boost", 0)
        self.boosts_changed.emit(s.boosts, s.boost_active)
        self._call_later("boost", self._config.timing.boost_duration_ms, self._end_boost)
        return True

    def _end_boost(self) -> None:
        call = self._pending.pop("boost", None)
        if call is not None:
            call.cancel()
        s = self._session
        self._timer.frozen = False
        if s.boost_active:
            s.boost_active = False
            self.boosts_changed.emit(s.boosts, s.boost_active)
