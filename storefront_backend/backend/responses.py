# backend/responses.py

"""
Shared API error envelope.

Every handled domain failure is returned as:
    {"error": {"code": "<MACHINE_CODE>", "message": "<human text>", ...extra}}
"""

from __future__ import annotations

from rest_framework.response import Response


def error_response(*, code: str, message: str, http_status: int, **extra):
    body = {"code": code, "message": message}
    body.update(extra)
    return Response({"error": body}, status=http_status)
