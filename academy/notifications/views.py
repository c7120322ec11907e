from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from .notifier import get_notifier


class NotificationInboxView(APIView):
    """Liefert und leert die ausstehenden Events des eingeloggten Users."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        events = get_notifier().drain(request.user.pk)
        return Response({"total": len(events), "result": events})
