# ============================================================================
# Progress Service
# ============================================================================
"""
Orchestrates one progress operation for a student.

The sequence for every activity is:

1. run the mutator with a fresh XpLedger as its ``add_xp`` sink;
2. apply the summed XP delta to the new record exactly once;
3. evaluate badges on the in-memory record, merge the earned ids and
   collect the topic medals the operation added;
4. compare levels before/after the whole operation (one level-up at most);
5. hand the final record to the store.

Events are derived from the in-memory record, never from what the store
returns, so a slow or failed save cannot change what the student is shown.
Callers must serialise operations per student.
"""
from typing import Callable, Dict, List, Optional, Protocol
import inspect
import logging

from studyboard.core.clock import ReferenceClock, get_clock
from studyboard.core.exceptions import ProgressPersistenceError
from studyboard.schemas.catalog import Flashcard, Subject
from studyboard.schemas.events import ProgressUpdate, XpAward
from studyboard.schemas.progress import StudentProgress
from studyboard.services.gamification.achievements import (
    check_and_award_badges, merge_earned_badges, newly_earned_medals
)
from studyboard.services.gamification.levels import detect_level_up
from studyboard.services.gamification.srs import due_item_ids
from studyboard.services.gamification.xp_system import XpLedger, apply_xp

logger = logging.getLogger(__name__)

class ProgressStore(Protocol):
    async def save(self, progress: StudentProgress) -> None:
        ...

class InMemoryProgressStore:
    """Dict-backed store, keyed by student id"""

    def __init__(self):
        self.records: Dict[str, StudentProgress] = {}

    async def save(self, progress: StudentProgress) -> None:
        self.records[progress.student_id] = progress

    async def get(self, student_id: str) -> Optional[StudentProgress]:
        return self.records.get(student_id)

class ProgressService:
    """Applies activity results to a student's progress and derives events"""

    def __init__(
        self,
        store: ProgressStore,
        subjects: Optional[List[Subject]] = None,
        clock: Optional[ReferenceClock] = None
    ):
        self.store = store
        self.subjects = subjects or []
        self.clock = clock or get_clock()

    async def apply(
        self,
        progress: StudentProgress,
        mutator: Callable[..., StudentProgress],
        *args,
        all_progress: Optional[Dict[str, StudentProgress]] = None,
        **kwargs
    ) -> ProgressUpdate:
        """Run a mutator that reports XP through an add_xp sink"""
        ledger = XpLedger()
        if _accepts_clock(mutator):
            kwargs.setdefault("clock", self.clock)
        mutated = mutator(progress, *args, add_xp=ledger, **kwargs)
        return await self._commit(progress, mutated, ledger.awards, all_progress)

    async def update(
        self,
        progress: StudentProgress,
        mutator: Callable[..., StudentProgress],
        *args,
        all_progress: Optional[Dict[str, StudentProgress]] = None,
        **kwargs
    ) -> ProgressUpdate:
        """Run an edit that grants no XP (flashcard grading, incremental saves...)"""
        if _accepts_clock(mutator):
            kwargs.setdefault("clock", self.clock)
        mutated = mutator(progress, *args, **kwargs)
        return await self._commit(progress, mutated, [], all_progress)

    async def award_xp(
        self,
        progress: StudentProgress,
        amount: int,
        message: Optional[str] = None,
        all_progress: Optional[Dict[str, StudentProgress]] = None
    ) -> ProgressUpdate:
        """Standalone XP grant or penalty outside any mutator"""
        awards = [XpAward(amount=amount, message=message)] if amount else []
        return await self._commit(progress, progress, awards, all_progress)

    async def _commit(
        self,
        before: StudentProgress,
        mutated: StudentProgress,
        awards: List[XpAward],
        all_progress: Optional[Dict[str, StudentProgress]]
    ) -> ProgressUpdate:
        delta = sum(award.amount for award in awards)
        after = apply_xp(mutated, delta)

        if all_progress is not None:
            # Rank against the record being committed, not the stale cohort copy
            all_progress = {**all_progress, after.student_id: after}

        new_badges = check_and_award_badges(after, self.subjects, all_progress, self.clock)
        after = merge_earned_badges(after, new_badges)
        level_up = detect_level_up(before.xp, after.xp)

        if delta:
            logger.info(f"Student {after.student_id} gained {delta} XP (total {after.xp})")

        try:
            await self.store.save(after)
        except Exception as e:
            logger.error(f"Failed to save progress for {after.student_id}: {e}")
            raise ProgressPersistenceError(after.student_id, str(e)) from e

        return ProgressUpdate(
            progress=after,
            xp_awards=list(awards),
            new_badges=new_badges,
            new_medals=newly_earned_medals(before, after),
            level_up=level_up,
        )

    # ------------------------------------------------------------------------
    # Review queues
    # ------------------------------------------------------------------------
    def due_question_ids(self, progress: StudentProgress) -> List[str]:
        """Questions whose SRS review is due today"""
        return due_item_ids(progress.srs_data, self.clock.today())

    def due_flashcards(self, progress: StudentProgress) -> List[Flashcard]:
        """Known flashcards (catalog + AI generated) whose review is due today"""
        due = set(due_item_ids(progress.srs_flashcard_data, self.clock.today()))
        seen = set()
        flashcards = []
        candidates = list(progress.ai_generated_flashcards)
        for subject in self.subjects:
            for item in subject.content_items():
                candidates.extend(item.flashcards)

        for card in candidates:
            if card.id in due and card.id not in seen:
                seen.add(card.id)
                flashcards.append(card)
        return flashcards


def _accepts_clock(func: Callable) -> bool:
    try:
        return "clock" in inspect.signature(func).parameters
    except (TypeError, ValueError):
        return False
