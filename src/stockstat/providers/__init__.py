"""History and quote provider registry."""

from __future__ import annotations

import importlib

from stockstat.config import ProviderType
from stockstat.errors import StatError, StatErrorCode
from stockstat.providers.base import HistoryProvider, QuoteProvider

# Lazy registry: classes are imported on demand so the optional
# baostock SDK is only needed when it is used.
HISTORY_PROVIDER_CLASSES: dict[ProviderType, str] = {
    ProviderType.BAOSTOCK: "stockstat.providers.baostock.BaoStockProvider",
    ProviderType.MOCK: "stockstat.providers.mock.MockHistoryProvider",
}

QUOTE_PROVIDER_CLASSES: dict[ProviderType, str] = {
    ProviderType.SINA: "stockstat.providers.sina.SinaQuoteProvider",
    ProviderType.MOCK: "stockstat.providers.mock.MockQuoteProvider",
}


def _instantiate(registry: dict[ProviderType, str], provider_type: ProviderType, kind: str, **kwargs):
    dotted = registry.get(provider_type)
    if dotted is None:
        raise StatError(
            f"{provider_type.value} is not a {kind} provider. Valid: "
            f"{[p.value for p in registry]}",
            code=StatErrorCode.CONFIG_INVALID,
        )
    module_path, cls_name = dotted.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls = getattr(module, cls_name)
    return cls(**kwargs)


def create_history_provider(provider_type: ProviderType, **kwargs) -> HistoryProvider:
    """Instantiate a history provider by type, forwarding kwargs."""
    return _instantiate(HISTORY_PROVIDER_CLASSES, provider_type, "history", **kwargs)


def create_quote_provider(provider_type: ProviderType, **kwargs) -> QuoteProvider:
    """Instantiate a quote provider by type, forwarding kwargs."""
    return _instantiate(QUOTE_PROVIDER_CLASSES, provider_type, "quote", **kwargs)


__all__ = [
    "HistoryProvider",
    "QuoteProvider",
    "HISTORY_PROVIDER_CLASSES",
    "QUOTE_PROVIDER_CLASSES",
    "create_history_provider",
    "create_quote_provider",
]
