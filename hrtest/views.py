from django.db import connection
from django.http import JsonResponse


def healthz(request):
    """Liveness probe that also checks the database connection."""
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
    return JsonResponse({"status": "ok"})
