# ============================================================================
# Student Progress Analytics
# ============================================================================
from typing import Dict, List, Optional
from datetime import date, timedelta

from studyboard.core.clock import to_iso
from studyboard.schemas.catalog import Subject
from studyboard.schemas.progress import QuestionAttempt, StudentProgress
from studyboard.services.gamification.levels import get_level_info
from studyboard.services.gamification.streaks import consecutive_activity_days

def _percent(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0

def _rate(part: int, total: int) -> float:
    return round(part / total, 4) if total else 0.0

class StudentProgressAnalytics:
    """Analytics over a single student's progress record"""

    def __init__(self, progress: StudentProgress, subjects: Optional[List[Subject]] = None):
        self.progress = progress
        self.subjects = subjects or []

    def _all_attempts(self) -> List[QuestionAttempt]:
        attempts = [
            attempt
            for subject_progress in self.progress.progress_by_topic.values()
            for topic in subject_progress.values()
            for attempt in topic.last_attempt
        ]
        for review in self.progress.review_sessions:
            attempts.extend(review.attempts or [])
        return attempts

    def overview(self, today: date) -> Dict:
        """Get overview stats"""
        attempts = self._all_attempts()
        correct = sum(1 for a in attempts if a.is_correct)
        streak = self.progress.daily_challenge_streak

        return {
            "level": get_level_info(self.progress.xp),
            "total_attempts": len(attempts),
            "correct_answers": correct,
            "accuracy": _rate(correct, len(attempts)),
            "topics_completed": sum(
                1
                for subject_progress in self.progress.progress_by_topic.values()
                for topic in subject_progress.values()
                if topic.completed
            ),
            "games_completed": self.progress.games_completed_count,
            "badges_earned": len(self.progress.earned_badge_ids),
            "activity_streak": self.activity_streak(today),
            "challenge_streak": streak.current,
            "longest_challenge_streak": streak.longest,
        }

    def topic_performance(self) -> List[Dict]:
        """Per-topic attempt counts with success and error rates"""
        names = {}
        for subject in self.subjects:
            for item in subject.content_items():
                names[(subject.id, item.id)] = item.name

        rows = []
        for subject_id, subject_progress in self.progress.progress_by_topic.items():
            for topic_id, topic in subject_progress.items():
                total = len(topic.last_attempt)
                correct = sum(1 for a in topic.last_attempt if a.is_correct)
                rows.append({
                    "subject_id": subject_id,
                    "topic_id": topic_id,
                    "topic_name": names.get((subject_id, topic_id), topic_id),
                    "attempts": total,
                    "correct": correct,
                    "success_rate": _rate(correct, total),
                    "error_rate": _rate(total - correct, total),
                    "score": topic.score,
                    "completed": topic.completed,
                })

        return rows

    def subject_performance(self) -> Dict[str, List[Dict]]:
        """
        Per-subject aggregates for the performance view.

        ``by_subject`` has one row per catalog subject: average score (percent)
        over topics with recorded attempts, and completion (percent) over the
        subject's topics and subtopics. ``by_success_rate`` lists subjects with
        at least one attempt and their correct/total ratio.
        """
        by_subject = []
        by_success_rate = []

        for subject in self.subjects:
            subject_progress = self.progress.progress_by_topic.get(subject.id)
            if subject_progress is None:
                by_subject.append({"subject_id": subject.id, "name": subject.name, "score": 0.0, "completion": 0.0})
                continue

            score_sum = 0.0
            scored_topics = 0
            total = 0
            correct = 0
            for topic in subject_progress.values():
                if not topic.last_attempt:
                    continue
                total += len(topic.last_attempt)
                correct += sum(1 for a in topic.last_attempt if a.is_correct)
                score_sum += topic.score
                scored_topics += 1

            if total:
                by_success_rate.append({
                    "subject_id": subject.id,
                    "name": subject.name,
                    "success_rate": _percent(correct, total),
                    "total_attempts": total,
                    "correct_attempts": correct,
                })

            items = subject.content_items()
            completed = sum(
                1 for item in items
                if item.id in subject_progress and subject_progress[item.id].completed
            )
            by_subject.append({
                "subject_id": subject.id,
                "name": subject.name,
                "score": round(score_sum / scored_topics * 100, 1) if scored_topics else 0.0,
                "completion": _percent(completed, len(items)),
            })

        return {"by_subject": by_subject, "by_success_rate": by_success_rate}

    def recent_activity(self, today: date, days: int = 7) -> List[Dict]:
        """Questions answered per day over the last `days` days, oldest first"""
        rows = []
        for offset in range(days - 1, -1, -1):
            day = to_iso(today - timedelta(days=offset))
            bucket = self.progress.daily_activity.get(day)
            rows.append({"date": day, "questions": bucket.questions_answered if bucket else 0})
        return rows

    def incorrect_question_ids(self) -> List[str]:
        """Questions missed at least once and never answered correctly"""
        correct_ids = set()
        incorrect_ids = []
        for attempt in self._all_attempts():
            if attempt.is_correct:
                correct_ids.add(attempt.question_id)
            elif attempt.question_id not in incorrect_ids:
                incorrect_ids.append(attempt.question_id)

        return [qid for qid in incorrect_ids if qid not in correct_ids]

    def activity_streak(self, today: date) -> int:
        return consecutive_activity_days(self.progress.daily_activity, today)
