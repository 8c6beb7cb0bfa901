"""ASGI middleware."""

from permit_workflow.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
