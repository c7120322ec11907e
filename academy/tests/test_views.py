"""
API-Tests für die Session-Endpunkte unter /api/academy/.

Die Views bauen den Manager mit der echten Uhr, daher laufen Abgaben hier
immer innerhalb der Bearbeitungszeit.
"""

from unittest import mock

from django.core.cache import cache
from django.db import OperationalError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from academy.catalog.services import SourceCatalog
from academy.exceptions import api_exception_handler
from academy.quiz_sessions.models import QuizSession

from .factories import OrderedCatalog, make_quiz, make_user

BASE = "/api/academy"


class SessionApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.other = make_user("Erika")
        cls.quiz = make_quiz(keys=("A", "B", "C"), duration=600)

    def setUp(self):
        cache.clear()
        # Fragen in Anlage-Reihenfolge ziehen, damit Index 0 immer Lösung "A" hat
        patcher = mock.patch.object(
            SourceCatalog, "sample_questions", OrderedCatalog.sample_questions
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def start(self, quiz=None):
        return self.client.post(
            f"{BASE}/sessions/start/", {"quiz_id": (quiz or self.quiz).pk}, format="json"
        )

    def test_start_returns_session_without_answer_keys(self):
        response = self.start()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertEqual(body["status"], "ongoing")
        self.assertEqual(body["quiz_name"], "Python Basics")
        self.assertEqual(len(body["questions"]), 3)
        self.assertTrue(all("answer_key" not in q for q in body["questions"]))
        self.assertGreater(body["remaining_seconds"], 590)

    def test_second_start_conflicts(self):
        self.start()
        response = self.start()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"], "conflict")

    def test_start_requires_quiz_id(self):
        response = self.client.post(f"{BASE}/sessions/start/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"], "validation_error")

    def test_start_unknown_quiz(self):
        response = self.client.post(f"{BASE}/sessions/start/", {"quiz_id": 999999}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["error"], "not_found")

    def test_save_and_submit(self):
        session_id = self.start().json()["id"]

        saved = self.client.put(
            f"{BASE}/sessions/{session_id}/answers/", {"answers": {"0": "A"}}, format="json"
        )
        self.assertEqual(saved.status_code, status.HTTP_200_OK)
        self.assertEqual(saved.json()["answers"], {"0": "A"})

        submitted = self.client.post(
            f"{BASE}/sessions/{session_id}/submit/", {"answers": {"1": "X"}}, format="json"
        )
        self.assertEqual(submitted.status_code, status.HTTP_200_OK)
        body = submitted.json()
        self.assertEqual(body["status"], "finished")
        self.assertEqual(body["closed_by"], "submission")
        self.assertAlmostEqual(body["score"], 1 / 3)
        self.assertEqual(body["remaining_seconds"], 0)
        # Nach Abschluss sind die Lösungen sichtbar
        self.assertEqual([q["answer_key"] for q in body["questions"]], ["A", "B", "C"])

    def test_submit_twice_is_rejected(self):
        session_id = self.start().json()["id"]
        self.client.post(f"{BASE}/sessions/{session_id}/submit/", {}, format="json")
        response = self.client.post(f"{BASE}/sessions/{session_id}/submit/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error"], "invalid_state")

    def test_invalid_answers_payload(self):
        session_id = self.start().json()["id"]

        response = self.client.post(
            f"{BASE}/sessions/{session_id}/submit/", {"answers": {"5": "A"}}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"], "validation_error")

        response = self.client.put(
            f"{BASE}/sessions/{session_id}/answers/", {"answers": {"\u00b2": "A"}}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"], "validation_error")

        response = self.client.post(
            f"{BASE}/sessions/{session_id}/submit/", {"answers": {"\u00b2": "A"}}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            f"{BASE}/sessions/{session_id}/submit/", {"answers": ["A"]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            QuizSession.objects.get(pk=session_id).status, QuizSession.Status.ONGOING
        )

    def test_detail_is_scoped_to_owner(self):
        session_id = self.start().json()["id"]
        self.assertEqual(
            self.client.get(f"{BASE}/sessions/{session_id}/").status_code, status.HTTP_200_OK
        )

        intruder = APIClient()
        intruder.force_authenticate(user=self.other)
        response = intruder.get(f"{BASE}/sessions/{session_id}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["error"], "forbidden")

        response = intruder.post(f"{BASE}/sessions/{session_id}/submit/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_session(self):
        response = self.client.get(f"{BASE}/sessions/999999/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unauthenticated_requests_are_rejected(self):
        response = APIClient().get(f"{BASE}/sessions/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()["error"], "not_authenticated")

    def test_list_is_paginated(self):
        self.start()
        self.start(make_quiz(keys=("A",), name="SQL"))

        response = self.client.get(f"{BASE}/sessions/", {"pageSize": 1})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["total"], 2)
        self.assertEqual(body["pageCount"], 2)
        self.assertEqual(body["pageSize"], 1)
        self.assertEqual(len(body["result"]), 1)
        self.assertEqual(body["result"][0]["quiz_name"], "SQL")

    def test_list_without_pagination_and_filters(self):
        session_id = self.start().json()["id"]
        self.client.post(f"{BASE}/sessions/{session_id}/submit/", {}, format="json")
        self.start()

        response = self.client.get(
            f"{BASE}/sessions/", {"pagination": "false", "status": "finished"}
        )
        body = response.json()
        self.assertEqual(body["total"], 1)
        self.assertEqual(body["result"][0]["id"], session_id)
        self.assertEqual(body["result"][0]["question_count"], 3)

    def test_list_rejects_unknown_status(self):
        response = self.client.get(f"{BASE}/sessions/", {"status": "paused"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_only_shows_own_sessions(self):
        self.start()
        intruder = APIClient()
        intruder.force_authenticate(user=self.other)
        self.assertEqual(intruder.get(f"{BASE}/sessions/").json()["total"], 0)


class NotificationApiTests(TestCase):
    def setUp(self):
        cache.clear()
        self.user = make_user()
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_inbox_is_drained(self):
        from academy.notifications.notifier import CacheNotifier

        CacheNotifier().notify_user_session_closed(self.user.pk, 42)

        first = self.client.get(f"{BASE}/notifications/").json()
        self.assertEqual(first["total"], 1)
        self.assertEqual(first["result"][0]["type"], "session_closed")
        self.assertEqual(first["result"][0]["session_id"], 42)

        self.assertEqual(self.client.get(f"{BASE}/notifications/").json()["total"], 0)


class TokenApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()

    def test_token_pair_and_cookie_authentication(self):
        response = self.client.post(
            f"{BASE}/token/", {"username": "Max", "password": "Musterpassword"}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        access = response.json()["access"]

        header_client = APIClient()
        header_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        self.assertEqual(header_client.get(f"{BASE}/sessions/").status_code, status.HTTP_200_OK)

        cookie_client = APIClient()
        cookie_client.cookies["access_token"] = access
        self.assertEqual(cookie_client.get(f"{BASE}/sessions/").status_code, status.HTTP_200_OK)

    def test_wrong_password(self):
        response = self.client.post(f"{BASE}/token/", {"username": "Max", "password": "falsch"})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class ExceptionHandlerTests(TestCase):
    def test_database_errors_become_retryable_503(self):
        response = api_exception_handler(OperationalError("connection refused"), {"view": None})

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["error"], "service_unavailable")
        self.assertTrue(response.data["retryable"])
        self.assertEqual(response["Retry-After"], "5")

    def test_unhandled_errors_are_left_to_django(self):
        self.assertIsNone(api_exception_handler(RuntimeError("boom"), {}))

    def test_database_outage_in_view(self):
        user = make_user()
        client = APIClient()
        client.force_authenticate(user=user)
        with mock.patch(
            "academy.quiz_sessions.store.SessionStore.get_by_id",
            side_effect=OperationalError("server closed the connection"),
        ):
            response = client.get(f"{BASE}/sessions/1/")
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
