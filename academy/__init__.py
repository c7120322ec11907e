"""
Academy Package

Timed quiz and exam sessions for the education platform: question bank,
quiz/exam definitions, session lifecycle with scheduled auto-close,
notifications and capability checks.

Struktur:
- access/: Capability checks
- catalog/: Question bank and quiz/exam definitions
- scheduling/: Durable job table and polling worker
- quiz_sessions/: Session lifecycle, scoring and REST API
- notifications/: Per-user event inbox
- management/: Django Management Commands

Author: Academy Development Team
Version: 1.0.0
"""
