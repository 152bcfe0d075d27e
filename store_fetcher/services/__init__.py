"""Пакет сервисов бизнес-логики.

Предоставляет все этапы конвейера:
    from store_fetcher.services import (
        UpstreamGateway,
        StockEnricher,
        PipelineService,
    )
"""

from store_fetcher.services.converter_service import (
    convert_products,
    parse_release_year,
    to_product,
)
from store_fetcher.services.enricher_service import (
    StockEnricher,
    filter_blacklisted,
    merge_stock,
)
from store_fetcher.services.gateway_service import (
    TransportError,
    UpstreamError,
    UpstreamGateway,
)
from store_fetcher.services.pipeline_service import PipelineService
from store_fetcher.services.titles import get_titles

__all__ = [
    "PipelineService",
    "StockEnricher",
    "TransportError",
    "UpstreamError",
    "UpstreamGateway",
    "convert_products",
    "filter_blacklisted",
    "get_titles",
    "merge_stock",
    "parse_release_year",
    "to_product",
]
