"""
Academy Quiz Sessions Package

Timed quiz and exam attempts: creation, answer saving, manual submission,
forced termination at the deadline and scoring.

Features:
- One ongoing session per user and quiz (DB constraint)
- Immutable question snapshot per session
- Exactly-once close via conditional update
- Deadline job in the scheduler table, cancelled on manual submission
- Pure scoring function with ratio and weighted modes

Struktur:
- models.py: QuizSession
- scoring.py: score_answers, normalize_answers
- store.py: SessionStore
- manager.py: SessionLifecycleManager, build_session_manager
- serializers.py / views.py: REST API

Author: Academy Development Team
Version: 1.0.0
"""
