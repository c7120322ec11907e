"""
Academy Application URL Configuration

URL Structure:
- /api/academy/token/: Authentication endpoints (JWT token management)
- /api/academy/sessions/: Timed quiz/exam sessions
- /api/academy/notifications/: Pending events of the current user

Author: Academy Development Team
Version: 1.0.0
"""

from typing import List

from django.urls import URLPattern, include, path
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

from .notifications import views as notification_views
from .quiz_sessions import views as session_views

app_name = "academy"

# --- Session URL Patterns ---

sessions_urlpatterns: List[URLPattern] = [
    path("", session_views.SessionListView.as_view(), name="session-list"),
    path("start/", session_views.StartSessionView.as_view(), name="session-start"),
    path("<int:session_id>/", session_views.SessionDetailView.as_view(), name="session-detail"),
    path("<int:session_id>/answers/", session_views.SaveAnswersView.as_view(), name="session-answers"),
    path("<int:session_id>/submit/", session_views.SubmitSessionView.as_view(), name="session-submit"),
]

# --- Main URL Configuration for the Academy Application ---

urlpatterns: List[URLPattern] = [
    path("token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("token/verify/", TokenVerifyView.as_view(), name="token_verify"),
    path("sessions/", include((sessions_urlpatterns, "sessions"))),
    path("notifications/", notification_views.NotificationInboxView.as_view(), name="notifications"),
]
