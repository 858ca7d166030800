"""Price fetching from external market APIs.

One adapter per asset class: CoinMarketCap quotes for crypto symbols and
OpenSea collection stats for NFT floor prices. Every fetch is a single
attempt; any failure is logged and reported as ``None`` so the caller can
skip that asset for the cycle.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from assetwatch.core.config import settings
from assetwatch.models.asset import Asset, AssetType

logger = logging.getLogger(__name__)


class PriceService:
    """Service for fetching current asset prices."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    async def fetch_price(self, asset: Asset) -> Optional[float]:
        """Fetch the market price matching the asset's variant."""
        if asset.asset_type == AssetType.CRYPTO:
            return await self.fetch_crypto_price(asset.symbol)
        return await self.fetch_nft_floor_price(asset.collection_name)

    async def fetch_crypto_price(self, symbol: str) -> Optional[float]:
        """Get the USD price of a crypto symbol from CoinMarketCap."""
        api_key = settings.COINMARKETCAP_API_KEY
        if not api_key:
            logger.warning("CoinMarketCap API key not configured, skipping price fetch")
            return None

        symbol_upper = symbol.upper()
        try:
            data = await self._get_json(
                f"{settings.COINMARKETCAP_BASE_URL}/v1/cryptocurrency/quotes/latest",
                params={"symbol": symbol_upper, "convert": "USD"},
                headers={"X-CMC_PRO_API_KEY": api_key},
            )
            entry = data.get("data", {}).get(symbol_upper)
            if not entry:
                logger.warning(f"CoinMarketCap returned no quote for {symbol_upper}")
                return None
            # Newer API versions return a list of matches per symbol
            if isinstance(entry, list):
                entry = entry[0]
            return float(entry["quote"]["USD"]["price"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError, IndexError) as e:
            logger.error(f"Error fetching CoinMarketCap price for {symbol_upper}: {e}")
            return None

    async def fetch_nft_floor_price(self, collection_name: str) -> Optional[float]:
        """Get the floor price of an NFT collection from OpenSea."""
        api_key = settings.OPENSEA_API_KEY
        if not api_key:
            logger.warning("OpenSea API key not configured, skipping price fetch")
            return None

        try:
            data = await self._get_json(
                f"{settings.OPENSEA_BASE_URL}/api/v2/collections/{collection_name}/stats",
                headers={"X-API-KEY": api_key},
            )
            stats = data.get("total") or data.get("stats") or {}
            floor_price = stats.get("floor_price")
            if floor_price is None:
                logger.warning(f"OpenSea returned no floor price for {collection_name}")
                return None
            return float(floor_price)
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error fetching OpenSea floor price for {collection_name}: {e}")
            return None

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            timeout=settings.PRICE_API_TIMEOUT_SECONDS,
            headers={"Accept": "application/json"},
            transport=self.transport,
        ) as client:
            response = await client.get(url, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected payload type: {type(data).__name__}")
        return data


# Singleton instance
price_service = PriceService()
