"""Game screen widgets: sequence nodes and per-token input boxes."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QEvent, QObject, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QKeyEvent, QKeySequence, QPainter, QPen
from PySide6.QtWidgets import QHBoxLayout, QLineEdit, QWidget

from memory_router.core.session import EntryState
from memory_router.ui.colors import NeonColors, blend_hex

HIDDEN = 0
ACTIVE = 1
DONE = 2


class SequenceNodesWidget(QWidget):
    """Row of nodes; one lights up while its token is being revealed."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._tokens: list[str] = []
        self._states: list[int] = []
        self._masked = False
        self.setFixedHeight(84)
        self.setMinimumWidth(320)

    def set_tokens(self, tokens: list[str]) -> None:
        self._tokens = list(tokens)
        self._states = [HIDDEN] * len(self._tokens)
        self._masked = False
        self.update()

    def reveal(self, index: int) -> None:
        if 0 <= index < len(self._states):
            self._states[index] = ACTIVE
            self.update()

    def conceal(self, index: int) -> None:
        if 0 <= index < len(self._states):
            self._states[index] = DONE
            self.update()

    def mask_all(self) -> None:
        """Replace every token with '?' once the reveal is over."""
        self._states = [HIDDEN] * len(self._tokens)
        self._masked = True
        self.update()

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        if not self._tokens:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        wide = any(len(t) > 1 for t in self._tokens)
        box_w = 64 if wide else 52
        box_h = 60
        spacing = 10
        total_width = len(self._tokens) * (box_w + spacing) - spacing
        start_x = max(0, (self.width() - total_width) // 2)
        y = (self.height() - box_h) // 2

        for i, token in enumerate(self._tokens):
            x = start_x + i * (box_w + spacing)
            state = self._states[i]
            if state == ACTIVE:
                painter.setBrush(QColor(NeonColors.NODE_ACTIVE))
                painter.setPen(QPen(QColor(NeonColors.CYAN), 2))
                text_color = QColor(NeonColors.CYAN)
                display = token
            elif state == DONE:
                painter.setBrush(QColor(NeonColors.NODE_DONE))
                painter.setPen(QPen(QColor(blend_hex(NeonColors.GREEN, NeonColors.NODE_DONE, 0.5)), 1))
                text_color = QColor(blend_hex(NeonColors.GREEN, NeonColors.TEXT_MUTED, 0.3))
                display = "•"
            else:
                painter.setBrush(QColor(NeonColors.NODE_IDLE))
                painter.setPen(QPen(QColor(NeonColors.PANEL_BORDER), 1))
                text_color = QColor(NeonColors.TEXT_MUTED)
                display = "?" if self._masked else "•"
            painter.drawRoundedRect(x, y, box_w, box_h, 8, 8)
            painter.setPen(text_color)
            font = painter.font()
            font.setPointSize(20 if state == ACTIVE else 14)
            font.setBold(state == ACTIVE)
            painter.setFont(font)
            painter.drawText(x, y, box_w, box_h, Qt.AlignCenter, display)


_ENTRY_BORDERS = {
    EntryState.EMPTY: NeonColors.PANEL_BORDER,
    EntryState.PREFIX_MATCH: NeonColors.CYAN,
    EntryState.PREFIX_WRONG: NeonColors.RED,
    EntryState.FILLED_CORRECT: NeonColors.GREEN,
    EntryState.FILLED_WRONG: NeonColors.RED,
}


class TokenInputRow(QWidget):
    """One input box per token with auto-advance and auto-submit."""

    entry_edited = Signal(int, str)
    submit_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._boxes: list[QLineEdit] = []
        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(8)
        self._layout.setAlignment(Qt.AlignCenter)

    def build(self, expected_lengths: list[int]) -> None:
        self.clear_boxes()
        for i, length in enumerate(expected_lengths):
            box = QLineEdit()
            box.setMaxLength(length)
            box.setAlignment(Qt.AlignCenter)
            box.setFixedSize(64 if length > 1 else 48, 56)
            box.setAccessibleName(f"Token {i + 1} of {len(expected_lengths)}")
            box.setContextMenuPolicy(Qt.NoContextMenu)
            box.installEventFilter(self)
            box.textEdited.connect(lambda text, index=i: self._on_text_edited(index, text))
            self._boxes.append(box)
            self._layout.addWidget(box)
            self.set_entry_state(i, EntryState.EMPTY.value)
        self.focus_first_empty()

    def clear_boxes(self) -> None:
        for box in self._boxes:
            self._layout.removeWidget(box)
            box.deleteLater()
        self._boxes = []

    def reset_values(self) -> None:
        for i, box in enumerate(self._boxes):
            box.clear()
            self.set_entry_state(i, EntryState.EMPTY.value)
        self.focus_first_empty()

    def values(self) -> list[str]:
        return [box.text().upper() for box in self._boxes]

    def set_enabled(self, enabled: bool) -> None:
        for box in self._boxes:
            box.setEnabled(enabled)

    def focus_first_empty(self) -> None:
        for box in self._boxes:
            if not box.text():
                box.setFocus()
                return
        if self._boxes:
            self._boxes[0].setFocus()

    def set_entry_state(self, index: int, state: str) -> None:
        if not 0 <= index < len(self._boxes):
            return
        border = _ENTRY_BORDERS.get(EntryState(state), NeonColors.PANEL_BORDER)
        self._boxes[index].setStyleSheet(
            f"""
            QLineEdit {{
                background: {NeonColors.NODE_IDLE};
                color: {NeonColors.TEXT_PRIMARY};
                border: 2px solid {border};
                border-radius: 8px;
                font-size: 22px;
                font-weight: 700;
            }}
            """
        )

    def flash_error(self) -> None:
        for i in range(len(self._boxes)):
            self.set_entry_state(i, EntryState.PREFIX_WRONG.value)

    def _on_text_edited(self, index: int, text: str) -> None:
        box = self._boxes[index]
        cleaned = "".join(text.split()).upper()
        if cleaned != text:
            box.setText(cleaned)
        self.entry_edited.emit(index, cleaned)
        if len(cleaned) >= box.maxLength():
            if index < len(self._boxes) - 1:
                QTimer.singleShot(40, lambda nxt=self._boxes[index + 1]: nxt.setFocus())
            else:
                QTimer.singleShot(120, lambda: self.submit_requested.emit())

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if event.type() == QEvent.KeyPress and obj in self._boxes:
            key_event: QKeyEvent = event
            index = self._boxes.index(obj)
            if key_event.matches(QKeySequence.Paste):
                return True
            if key_event.key() in (Qt.Key_Return, Qt.Key_Enter):
                self.submit_requested.emit()
                return True
            if key_event.key() == Qt.Key_Backspace and not obj.text() and index > 0:
                previous = self._boxes[index - 1]
                previous.clear()
                self.set_entry_state(index - 1, EntryState.EMPTY.value)
                self.entry_edited.emit(index - 1, "")
                previous.setFocus()
                return True
        return super().eventFilter(obj, event)
