"""
Session Manager - Holds loaded banks and running playthroughs.

LIFECYCLE:
1. User uploads a CSV -> bank is validated, shuffled and registered
2. User picks a mode and config -> a playthrough starts with a fresh Session
3. During play the game loop replaces the Session after every step
4. Reset -> same bank, mode and config, fresh Session
5. Picking a new mode starts a new playthrough; earlier playthroughs
   on the same bank are ended

PERSISTENCE RULES:
- Everything is in memory only
- Nothing survives the process
"""

from __future__ import annotations
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..bank.question import Question
from ..engine_core.reducer import TerminalReason
from ..engine_core.state import Mode, QuizConfig, Session

logger = logging.getLogger(__name__)


class PlaythroughStatus(Enum):
    """State of a playthrough."""
    ACTIVE = "active"
    FINISHED = "finished"  # Reached Terminal, review available
    ABANDONED = "abandoned"  # Ended by the user or cleanup


@dataclass
class BankEntry:
    """A loaded, shuffled question bank."""
    bank_id: str
    questions: list[Question]
    source_name: str | None = None
    created_at: float = 0.0

    @property
    def total(self) -> int:
        return len(self.questions)


@dataclass
class Playthrough:
    """
    One run through a bank in one mode.

    Holds the latest Session value; the game loop swaps it after
    every transition.
    """
    playthrough_id: str
    bank_id: str
    bank: list[Question]
    mode: Mode
    config: QuizConfig
    session: Session
    created_at: float

    status: PlaythroughStatus = PlaythroughStatus.ACTIVE
    terminal_reason: TerminalReason | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.status == PlaythroughStatus.ACTIVE

    def is_finished(self) -> bool:
        return self.status == PlaythroughStatus.FINISHED

    def finish(self, reason: TerminalReason):
        self.status = PlaythroughStatus.FINISHED
        self.terminal_reason = reason
        logger.info(
            "Playthrough %s finished (%s): %d/%d correct",
            self.playthrough_id,
            reason.value,
            self.session.correct_count,
            self.session.total,
        )


class SessionManager:
    """
    Manages banks and playthroughs.

    No persistence - in-memory only.
    """

    def __init__(self):
        self._banks: dict[str, BankEntry] = {}
        self._playthroughs: dict[str, Playthrough] = {}

    def register_bank(self, questions: list[Question], source_name: str | None = None) -> BankEntry:
        """Store a built bank and return its entry."""
        if not questions:
            raise ValueError("Cannot register an empty bank")

        entry = BankEntry(
            bank_id=str(uuid.uuid4()),
            questions=list(questions),
            source_name=source_name,
            created_at=time.time(),
        )
        self._banks[entry.bank_id] = entry
        logger.info("Registered bank %s with %d question(s)", entry.bank_id, entry.total)
        return entry

    def get_bank(self, bank_id: str) -> BankEntry | None:
        return self._banks.get(bank_id)

    def create_playthrough(
        self,
        bank_id: str,
        mode: Mode = Mode.CLASSIC,
        config: QuizConfig | None = None,
    ) -> Playthrough:
        """
        Start a playthrough with a fresh Session.

        Earlier playthroughs on the same bank are ended first.

        Raises:
            ValueError: unknown bank_id
        """
        bank = self._banks.get(bank_id)
        if not bank:
            raise ValueError(f"Unknown bank: {bank_id}")

        replaced = [pid for pid, p in self._playthroughs.items() if p.bank_id == bank_id]
        for pid in replaced:
            self.end(pid, reason="replaced")

        config = config or QuizConfig()
        playthrough = Playthrough(
            playthrough_id=str(uuid.uuid4()),
            bank_id=bank_id,
            bank=bank.questions,
            mode=mode,
            config=config,
            session=Session.create(mode, bank.total, config),
            created_at=time.time(),
        )
        self._playthroughs[playthrough.playthrough_id] = playthrough
        logger.info(
            "Started playthrough %s: mode=%s, %d question(s), %s",
            playthrough.playthrough_id,
            mode.value,
            bank.total,
            config,
        )
        return playthrough

    def get(self, playthrough_id: str) -> Playthrough | None:
        return self._playthroughs.get(playthrough_id)

    def reset(self, playthrough_id: str) -> Playthrough | None:
        """Start the same playthrough over with a fresh Session."""
        playthrough = self._playthroughs.get(playthrough_id)
        if not playthrough:
            return None

        playthrough.session = Session.create(
            playthrough.mode, len(playthrough.bank), playthrough.config
        )
        playthrough.status = PlaythroughStatus.ACTIVE
        playthrough.terminal_reason = None
        logger.info("Reset playthrough %s", playthrough_id)
        return playthrough

    def end(self, playthrough_id: str, reason: str = "completed") -> bool:
        """
        End a playthrough and drop it from memory.

        Returns False if it did not exist.
        """
        playthrough = self._playthroughs.pop(playthrough_id, None)
        if not playthrough:
            return False

        if playthrough.is_active():
            playthrough.status = PlaythroughStatus.ABANDONED
        logger.info("Ended playthrough %s (%s)", playthrough_id, reason)
        return True

    def list_active(self) -> list[str]:
        """List IDs of playthroughs still in progress."""
        return [
            pid for pid, playthrough in self._playthroughs.items()
            if playthrough.is_active()
        ]

    def cleanup_stale(self, max_age_seconds: int = 3600) -> int:
        """
        Drop finished or abandoned playthroughs older than max_age.

        Returns the number removed.
        """
        now = time.time()
        stale = [
            pid for pid, playthrough in self._playthroughs.items()
            if now - playthrough.created_at > max_age_seconds and not playthrough.is_active()
        ]
        for pid in stale:
            self.end(pid, reason="stale")
        return len(stale)
