"""
Submission Workflow Client

Posts a Brand campaign to the external approval workflow. Any 2xx response
counts as acceptance; the caller-supplied acknowledgment callback then moves
the owning subscription forward.
"""

import logging
from typing import Awaitable, Callable, Optional

import httpx

from reseller.core.conf import settings
from reseller.src.billing.domain import Campaign
from reseller.src.billing.shared.exceptions import GatewayUnavailableError, SubmissionError

logger = logging.getLogger(__name__)

AcknowledgeCallback = Callable[[Campaign], Awaitable[None]]


class SubmitService:
    """
    Client for the campaign approval endpoint.

    The endpoint and shared secret are passed in at construction; use
    ``SubmitService.from_settings()`` to build one from process configuration.
    """

    SECRET_HEADER = "app-secret"

    def __init__(
        self,
        approval_url: str,
        app_secret: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.approval_url = approval_url
        self.app_secret = app_secret
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "SubmitService":
        return cls(
            approval_url=settings.SUBMISSION_APPROVAL_URL,
            app_secret=settings.SUBMISSION_APP_SECRET,
            timeout=settings.SUBMISSION_TIMEOUT_SECONDS,
        )

    @staticmethod
    def build_payload(campaign: Campaign) -> dict:
        return {
            "campaignCode": campaign.campaign_code,
            "customerId": campaign.customer_id,
        }

    async def process(self, campaign: Campaign, on_acknowledged: AcknowledgeCallback) -> None:
        """
        Submit a campaign and acknowledge it on success.

        Raises:
            GatewayUnavailableError: endpoint unreachable or timed out
            SubmissionError: endpoint answered with an error status
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.approval_url,
                    json=self.build_payload(campaign),
                    headers={self.SECRET_HEADER: self.app_secret},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"[SUBMIT] Campaign {campaign.campaign_code} rejected with {e.response.status_code}"
            )
            raise SubmissionError(
                message=f"Approval workflow rejected campaign: {e.response.status_code}",
                campaign_code=campaign.campaign_code,
                status_code=e.response.status_code
            ) from e
        except httpx.TransportError as e:
            logger.error(f"[SUBMIT] Approval workflow unreachable for {campaign.campaign_code}: {e}")
            raise GatewayUnavailableError(
                message="Approval workflow unreachable",
                service_name="submission",
                details={'campaign_code': campaign.campaign_code, 'error': str(e)}
            ) from e

        logger.info(f"[SUBMIT] Campaign {campaign.campaign_code} accepted")
        await on_acknowledged(campaign)
