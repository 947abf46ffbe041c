from dataclasses import dataclass

from google.ads.googleads.client import GoogleAdsClient

from .config import Config
from .logger import GenerationLogger


@dataclass(frozen=True)
class AdGroup:
    id: str
    name: str
    customer_id: str


AD_GROUP_QUERY = """
    SELECT
      customer.id,
      ad_group.id,
      ad_group.name
    FROM ad_group
    WHERE ad_group.status = 'ENABLED'
      AND campaign.status = 'ENABLED'
"""

KEYWORD_QUERY = """
    SELECT
      ad_group_criterion.keyword.text
    FROM ad_group_criterion
    WHERE ad_group.id = {ad_group_id}
      AND ad_group_criterion.type = 'KEYWORD'
      AND ad_group_criterion.negative = FALSE
      AND ad_group_criterion.status != 'REMOVED'
"""


class AdGroupLoader:
    """Reads ad groups and their keywords from the Google Ads API."""

    def __init__(self, config: Config, logger: GenerationLogger, client: GoogleAdsClient = None):
        self.config = config
        self.logger = logger
        self._client = client

    @property
    def client(self) -> GoogleAdsClient:
        # Credentials come from the GOOGLE_ADS_* environment variables.
        if self._client is None:
            self._client = GoogleAdsClient.load_from_env()
        return self._client

    @property
    def customer_id(self) -> str:
        return str(self.config.ACCOUNT_ID).replace("-", "")

    def list_ad_groups(self):
        """Return the enabled ad groups of the configured account, in API order."""
        rows = self._search(AD_GROUP_QUERY)
        ad_groups = [
            AdGroup(
                id=str(row.ad_group.id),
                name=row.ad_group.name,
                customer_id=str(row.customer.id),
            )
            for row in rows
        ]
        self.logger.info(f"Found {len(ad_groups)} ad group(s) in account {self.customer_id}")
        return ad_groups

    def list_keywords(self, ad_group_id: str):
        """Return the positive keyword texts of an ad group."""
        if not str(ad_group_id).isdigit():
            raise ValueError(f"Invalid ad group id: {ad_group_id!r}")

        rows = self._search(KEYWORD_QUERY.format(ad_group_id=ad_group_id))
        return [row.ad_group_criterion.keyword.text for row in rows]

    def _search(self, query: str):
        ga_service = self.client.get_service("GoogleAdsService")
        try:
            return list(ga_service.search(customer_id=self.customer_id, query=query))
        except Exception as e:
            self.logger.error(f"Google Ads query failed for account {self.customer_id}: {e}")
            raise
