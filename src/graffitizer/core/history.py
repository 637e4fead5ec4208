"""Customization history with undo/redo.

The HistoryManager is the only writer of CustomizationOptions. It separates
two kinds of edits:

- Discrete edits (toggles, swatches, presets, text changes) append exactly
  one history entry each.
- Continuous edits (slider or color-wheel drags) update a working copy that
  listeners see as transient changes; the whole gesture appends exactly one
  entry when it ends or is interrupted.

Undo/redo restore a stored entry while in the RESTORING state, during which
discrete edits are ignored, so a listener reacting to the restore cannot
append a new entry.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from graffitizer.config import HistoryConfig
from graffitizer.domain import DEFAULT_OPTIONS, CustomizationOptions, get_preset

logger = logging.getLogger(__name__)


class HistoryState(str, Enum):
    """State of the history manager."""

    IDLE = "idle"
    DRAGGING = "dragging"
    RESTORING = "restoring"


class ChangeSource(str, Enum):
    """What triggered an options change notification."""

    DISCRETE = "discrete"
    PRESET = "preset"
    TEXT = "text"
    DRAG = "drag"
    COMMIT = "commit"
    RESTORE = "restore"


@dataclass(frozen=True)
class HistoryEntry:
    """Snapshot of the editable state.

    Attributes:
        input_text: Text being rendered
        options: Customization snapshot
    """

    input_text: str
    options: CustomizationOptions


@dataclass(frozen=True)
class DiscreteUpdate:
    """Edit that is recorded immediately as one history entry."""

    changes: Mapping[str, Any] = field(default_factory=dict)
    preset_id: str | None = None


@dataclass(frozen=True)
class DraggingUpdate:
    """Intermediate value of a continuous gesture; never recorded on its own."""

    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CommitDrag:
    """End of a continuous gesture."""


@dataclass(frozen=True)
class TextUpdate:
    """New input text."""

    text: str


HistoryUpdate = DiscreteUpdate | DraggingUpdate | CommitDrag | TextUpdate


@dataclass(frozen=True)
class OptionsChange:
    """Notification sent to listeners whenever the visible state changes.

    Attributes:
        options: Options to render
        input_text: Text to render
        transient: True for intermediate drag frames that are not recorded
        source: What caused the change
    """

    options: CustomizationOptions
    input_text: str
    transient: bool
    source: ChangeSource


Listener = Callable[[OptionsChange], None]


class HistoryManager:
    """Owner of the current options, input text and their history.

    Args:
        options: Starting options (defaults to the CLASSIC preset)
        input_text: Starting text
        config: History configuration
    """

    def __init__(
        self,
        options: CustomizationOptions | None = None,
        input_text: str = "",
        config: HistoryConfig | None = None,
    ) -> None:
        self.config = config or HistoryConfig()
        self._options = options if options is not None else DEFAULT_OPTIONS
        self._input_text = input_text
        # Drag working copy; only shown while DRAGGING
        self._working = self._options
        self._state = HistoryState.IDLE
        self._listeners: list[Listener] = []

        self._entries: list[HistoryEntry] = []
        self._index = -1
        if self.config.record_initial_state:
            self._entries.append(HistoryEntry(input_text, self._options))
            self._index = 0

    # Read accessors

    @property
    def options(self) -> CustomizationOptions:
        """Options currently shown, including an uncommitted drag."""
        if self._state == HistoryState.DRAGGING:
            return self._working
        return self._options

    @property
    def input_text(self) -> str:
        """Text currently shown."""
        return self._input_text

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        """Recorded entries, oldest first."""
        return tuple(self._entries)

    @property
    def length(self) -> int:
        """Number of recorded entries."""
        return len(self._entries)

    @property
    def current_index(self) -> int:
        """Index of the entry matching the committed state (-1 when empty)."""
        return self._index

    @property
    def state(self) -> HistoryState:
        """Current state of the manager."""
        return self._state

    @property
    def can_undo(self) -> bool:
        """True when an older entry exists."""
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        """True when a newer entry exists."""
        return 0 <= self._index < len(self._entries) - 1

    # Listeners

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, transient: bool, source: ChangeSource) -> None:
        change = OptionsChange(
            options=self.options,
            input_text=self._input_text,
            transient=transient,
            source=source,
        )
        for listener in list(self._listeners):
            listener(change)

    # Update messages

    def dispatch(self, update: HistoryUpdate) -> bool:
        """Route a tagged update message to the matching edit operation.

        Returns:
            True when the update changed the manager's state
        """
        if isinstance(update, DiscreteUpdate):
            return self.commit_discrete(update.changes, preset_id=update.preset_id)
        if isinstance(update, DraggingUpdate):
            return self.update_drag(update.changes)
        if isinstance(update, CommitDrag):
            return self.end_drag()
        if isinstance(update, TextUpdate):
            return self.set_input_text(update.text)
        raise TypeError(f"Unsupported history update: {update!r}")

    # Discrete edits

    def commit_discrete(
        self,
        changes: Mapping[str, Any],
        preset_id: str | None = None,
        source: ChangeSource = ChangeSource.DISCRETE,
    ) -> bool:
        """Merge changes and record them as one history entry.

        An active drag is committed first. While restoring, the edit is
        ignored.

        Args:
            changes: Option fields to replace
            preset_id: Preset the change came from, if any
            source: Reported to listeners

        Returns:
            True when an entry was appended

        Raises:
            OptionsError: If a key is unknown or a value is invalid
        """
        if self._state == HistoryState.RESTORING:
            logger.debug("Ignoring discrete edit while restoring")
            return False
        if self._state == HistoryState.DRAGGING:
            self.end_drag()

        self._options = self._options.merged({**changes, "preset_id": preset_id})
        self._append()
        self._notify(transient=False, source=source)
        return True

    def apply_preset(self, preset_id: str) -> bool:
        """Apply a named style preset as one discrete edit.

        Raises:
            PresetNotFoundError: If the preset does not exist
        """
        preset = get_preset(preset_id)
        return self.commit_discrete(
            preset.changes(), preset_id=preset.id, source=ChangeSource.PRESET
        )

    def set_input_text(self, text: str) -> bool:
        """Change the input text as one discrete edit.

        Returns:
            True when an entry was appended (False if unchanged or restoring)
        """
        if self._state == HistoryState.RESTORING:
            logger.debug("Ignoring text edit while restoring")
            return False
        if self._state == HistoryState.DRAGGING:
            self.end_drag()
        if text == self._input_text:
            return False

        self._input_text = text
        self._append()
        self._notify(transient=False, source=ChangeSource.TEXT)
        return True

    # Continuous edits

    def begin_drag(self) -> bool:
        """Enter the DRAGGING state with a working copy of the options.

        Returns:
            True when a new gesture started
        """
        if self._state != HistoryState.IDLE:
            return False
        self._state = HistoryState.DRAGGING
        self._working = self._options
        logger.debug("Drag started")
        return True

    def update_drag(self, changes: Mapping[str, Any]) -> bool:
        """Apply an intermediate drag value without recording it.

        Starts a gesture when none is active.

        Raises:
            OptionsError: If a key is unknown or a value is invalid
        """
        if self._state == HistoryState.RESTORING:
            return False
        if self._state == HistoryState.IDLE:
            self.begin_drag()

        self._working = self._working.merged(changes)
        self._notify(transient=True, source=ChangeSource.DRAG)
        return True

    def end_drag(self) -> bool:
        """Finish the gesture and record its final value as one entry.

        Returns:
            True when an entry was appended
        """
        if self._state != HistoryState.DRAGGING:
            return False

        self._options = self._working.merged({"preset_id": None})
        self._working = self._options
        self._state = HistoryState.IDLE
        self._append()
        self._notify(transient=False, source=ChangeSource.COMMIT)
        return True

    def interrupt_drag(self) -> bool:
        """Commit a gesture that ended without a release (pointer left the control)."""
        if self._state == HistoryState.DRAGGING:
            logger.debug("Drag interrupted, committing last value")
        return self.end_drag()

    # Undo / redo

    def undo(self) -> bool:
        """Restore the previous entry."""
        self.end_drag()
        return self.go_to(self._index - 1)

    def redo(self) -> bool:
        """Restore the next entry."""
        self.end_drag()
        return self.go_to(self._index + 1)

    def go_to(self, index: int) -> bool:
        """Restore the entry at ``index``.

        Invalid indices and the current index are ignored.

        Returns:
            True when an entry was restored
        """
        self.end_drag()
        if not 0 <= index < len(self._entries) or index == self._index:
            logger.debug("Ignoring restore of index %d (current %d)", index, self._index)
            return False

        entry = self._entries[index]
        self._state = HistoryState.RESTORING
        try:
            self._options = entry.options
            self._input_text = entry.input_text
            self._index = index
            self._notify(transient=False, source=ChangeSource.RESTORE)
        finally:
            self._state = HistoryState.IDLE
        return True

    def _append(self) -> None:
        # A new edit discards the redo tail
        del self._entries[self._index + 1 :]
        self._entries.append(HistoryEntry(self._input_text, self._options))
        self._index = len(self._entries) - 1

        limit = self.config.max_entries
        if limit is not None and len(self._entries) > limit:
            excess = len(self._entries) - limit
            del self._entries[:excess]
            self._index -= excess
