from django.utils import timezone
from rest_framework import serializers

from .models import QuizSession

# Felder, die der Client erst nach Abschluss sehen darf
HIDDEN_WHILE_ONGOING = ("answer_key",)


class QuizSessionSerializer(serializers.ModelSerializer):
    """
    Client view of a session.

    Answer keys are stripped from the question snapshot while the session is
    ongoing; finished sessions expose them for review.
    """

    quiz_name = serializers.CharField(source="quiz.name", read_only=True)
    ends_at = serializers.DateTimeField(read_only=True)
    remaining_seconds = serializers.SerializerMethodField()
    questions = serializers.SerializerMethodField()

    class Meta:
        model = QuizSession
        fields = [
            "id",
            "owner",
            "quiz",
            "quiz_name",
            "kind",
            "status",
            "start_time",
            "duration",
            "ends_at",
            "remaining_seconds",
            "questions",
            "answers",
            "score",
            "correct_count",
            "closed_by",
            "created_at",
            "finished_at",
        ]
        read_only_fields = fields

    def get_remaining_seconds(self, obj):
        if not obj.is_ongoing:
            return 0
        return obj.remaining_seconds(timezone.now())

    def get_questions(self, obj):
        questions = obj.questions or []
        if not obj.is_ongoing:
            return questions
        return [
            {key: value for key, value in question.items() if key not in HIDDEN_WHILE_ONGOING}
            for question in questions
        ]


class QuizSessionListSerializer(serializers.ModelSerializer):
    quiz_name = serializers.CharField(source="quiz.name", read_only=True)
    question_count = serializers.SerializerMethodField()

    class Meta:
        model = QuizSession
        fields = [
            "id",
            "quiz",
            "quiz_name",
            "kind",
            "status",
            "start_time",
            "duration",
            "question_count",
            "score",
            "correct_count",
            "closed_by",
            "finished_at",
        ]
        read_only_fields = fields

    def get_question_count(self, obj):
        return len(obj.questions or [])


class StartSessionSerializer(serializers.Serializer):
    quiz_id = serializers.IntegerField(min_value=1)


class AnswersSerializer(serializers.Serializer):
    # Inhalt wird im Manager gegen den Fragen-Snapshot validiert
    answers = serializers.DictField(child=serializers.JSONField(allow_null=True), required=False, default=dict)
