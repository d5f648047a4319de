"""
Centralized Email Client for service-to-service email communication.

The Communications Service is the single source of truth for email templates
and delivery. This client only enqueues a request with it and reports whether
the hand-off was accepted. It never raises: callers treat email as best
effort.

Usage:
    from libs.common.emails.client import get_email_client

    email_client = get_email_client()

    await email_client.send_template(
        template_type="order_confirmation",
        to_email="user@example.com",
        subject="Order Confirmation - BBM-1700000000000-42",
        template_data={"order_number": "BBM-1700000000000-42"},
        metadata={"user_id": "abc", "email_type": "order_confirmation"},
    )
"""

import time
from typing import Any, Optional

import httpx
from jose import jwt
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger

logger = get_logger(__name__)


def _service_role_jwt(subject: str, ttl_seconds: int = 60) -> str:
    """Short-lived service-role token accepted by internal endpoints."""
    settings = get_settings()
    now = int(time.time())
    claims = {
        "sub": subject,
        "role": "service_role",
        "iat": now,
        "exp": now + ttl_seconds,
    }
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


class EmailClient:
    """
    HTTP client for sending templated emails through the Communications Service.

    Authenticates with a short-lived service-role JWT. Connection errors and
    non-200 responses are logged and reported as ``False``.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = 30.0):
        settings = get_settings()
        self.base_url = base_url or settings.COMMUNICATIONS_SERVICE_URL
        self.timeout = timeout

    def _get_auth_headers(self) -> dict[str, str]:
        token = _service_role_jwt("email_client")
        return {"Authorization": f"Bearer {token}"}

    async def send_template(
        self,
        template_type: str,
        to_email: str,
        template_data: dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> bool:
        """
        Send a templated email through the Communications Service.

        Available template types:
        - order_confirmation: Store order placed

        Args:
            template_type: The template identifier
            to_email: Recipient email address
            template_data: Dict of template variables
            subject: Optional subject override
            metadata: Optional bookkeeping fields stored with the request

        Returns:
            True if the request was accepted, False otherwise
        """
        payload: dict[str, Any] = {
            "template_type": template_type,
            "to_email": to_email,
            "template_data": template_data,
            "metadata": {
                **(metadata or {}),
                "sent_at": utc_now().isoformat(),
                "source": "bbm-backend",
            },
        }
        if subject:
            payload["subject"] = subject

        try:
            headers = self._get_auth_headers()
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/email/template",
                    json=payload,
                    headers=headers,
                )
                if response.status_code == 200:
                    result = response.json()
                    return bool(result.get("success", False))
                logger.error(
                    "Template email API returned %s: %s",
                    response.status_code,
                    response.text,
                )
                return False
        except httpx.RequestError as e:
            logger.error("Failed to connect to Communications Service: %s", e)
            return False
        except Exception as e:
            logger.error("Error sending template email via API: %s", e)
            return False


# Singleton instance for convenience
_email_client: Optional[EmailClient] = None


def get_email_client() -> EmailClient:
    """Get or create the singleton EmailClient instance."""
    global _email_client
    if _email_client is None:
        _email_client = EmailClient()
    return _email_client
