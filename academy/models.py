"""
Academy Application Models Registry

This module serves as the central models registry for the academy app.
It imports all models from the logical sub-packages (catalog, scheduling,
quiz_sessions) so they are registered with Django's ORM under the
``academy`` app label.

Architecture:
- catalog/: Question bank and quiz/exam definitions
- scheduling/: Durable scheduler job table
- quiz_sessions/: Timed session records

Author: Academy Development Team
Version: 1.0.0
"""

from .catalog.models import *  # noqa: F401,F403
from .scheduling.models import *  # noqa: F401,F403
from .quiz_sessions.models import *  # noqa: F401,F403
