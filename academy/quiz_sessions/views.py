from rest_framework import generics, permissions, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..exceptions import ValidationError
from ..pagination import AcademyPagination
from .manager import build_session_manager
from .models import QuizSession
from .serializers import (
    AnswersSerializer,
    QuizSessionListSerializer,
    QuizSessionSerializer,
    StartSessionSerializer,
)


class SessionManagerMixin:
    """Baut pro Request einen Lifecycle-Manager mit den Standard-Abhängigkeiten."""

    def get_session_manager(self):
        if not hasattr(self, "_session_manager"):
            self._session_manager = build_session_manager()
        return self._session_manager

    def get_answers(self, request: Request):
        serializer = AnswersSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError("Invalid answers payload.", details=serializer.errors)
        return serializer.validated_data["answers"]


class StartSessionView(SessionManagerMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = StartSessionSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError("quiz_id is required.", details=serializer.errors)

        session = self.get_session_manager().start_session(
            request.user, serializer.validated_data["quiz_id"]
        )
        return Response(QuizSessionSerializer(session).data, status=status.HTTP_201_CREATED)


class SessionListView(SessionManagerMixin, generics.ListAPIView):
    serializer_class = QuizSessionListSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = AcademyPagination

    def get_queryset(self):
        params = self.request.query_params
        status_filter = params.get("status")
        if status_filter and status_filter not in QuizSession.Status.values:
            raise ValidationError(f"Unknown status '{status_filter}'.")
        filters = {
            "quiz": params.get("quiz"),
            "status": status_filter,
            "kind": params.get("kind"),
        }
        if filters["quiz"] and not filters["quiz"].isdigit():
            raise ValidationError("quiz must be an integer.")
        return self.get_session_manager().list_sessions(self.request.user, filters)

    def list(self, request, *args, **kwargs):
        if request.query_params.get("pagination") == "false":
            result = self.get_serializer(self.get_queryset(), many=True).data
            return Response({"total": len(result), "result": result})
        return super().list(request, *args, **kwargs)


class SessionDetailView(SessionManagerMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, session_id):
        session = self.get_session_manager().get_session(request.user, session_id)
        return Response(QuizSessionSerializer(session).data)


class SaveAnswersView(SessionManagerMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, session_id):
        session = self.get_session_manager().save_answers(
            request.user, session_id, self.get_answers(request)
        )
        return Response(QuizSessionSerializer(session).data)


class SubmitSessionView(SessionManagerMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, session_id):
        session = self.get_session_manager().submit_answers(
            request.user, session_id, self.get_answers(request)
        )
        return Response(QuizSessionSerializer(session).data, status=status.HTTP_200_OK)
