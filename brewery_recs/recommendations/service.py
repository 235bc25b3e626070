from __future__ import annotations

import logging

from ..upstream.client import UpstreamClient, UpstreamError
from .errors import RecommendationError, normalize_upstream_error
from .matcher import MAX_RECOMMENDATIONS, match_taste_profile
from .models import AuthenticatedUser, RecommendationResponse

logger = logging.getLogger(__name__)

PERSONALIZED_MESSAGE = "Personalized recommendations"
DEFAULT_MESSAGE = "Default recommendations"
RELATED_MESSAGE = "Related product recommendations"


class RecommendationService:
    """
    Builds recommendations from brewery API data.

    Upstream calls within one request run one after another; the first failure
    ends the request with a ``RecommendationError`` and no partial result.
    """

    def __init__(self, client: UpstreamClient):
        self.client = client

    async def get_recommendations(
        self,
        user: AuthenticatedUser | None,
        authorization: str | None = None,
    ) -> RecommendationResponse:
        try:
            if user is not None:
                profile = await self.client.fetch_user_profile(user.id, authorization)
                inventory = await self.client.fetch_inventory(authorization)
                return RecommendationResponse(
                    message=PERSONALIZED_MESSAGE,
                    recommendations=match_taste_profile(profile.taste_profile, inventory),
                )

            inventory = await self.client.fetch_inventory(authorization)
            return RecommendationResponse(
                message=DEFAULT_MESSAGE,
                recommendations=inventory[:MAX_RECOMMENDATIONS],
            )
        except UpstreamError as e:
            raise self._fail(e) from e

    async def get_product_recommendations(
        self,
        product_id: int,
        authorization: str | None = None,
    ) -> RecommendationResponse:
        try:
            product = await self.client.fetch_inventory_item(product_id, authorization)
            inventory = await self.client.fetch_inventory(authorization)
            others = [item for item in inventory if item.id != product_id]
            return RecommendationResponse(
                message=RELATED_MESSAGE,
                recommendations=match_taste_profile(product.taste_profile, others),
            )
        except UpstreamError as e:
            raise self._fail(e) from e

    @staticmethod
    def _fail(exc: UpstreamError) -> RecommendationError:
        logger.error(
            "Error fetching recommendations: %s",
            exc.response_body if exc.response_body is not None else exc.message,
        )
        return normalize_upstream_error(exc)
