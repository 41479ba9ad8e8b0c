"""
kardex_services -- orchestration over the pure Kardex engines.

Services receive settings explicitly and compose engines; they never
fetch, persist or render.
"""

from kardex_services.view_service import (
    KardexViewService,
    PageView,
    ProductView,
    VariantView,
)

__all__ = [
    "KardexViewService",
    "PageView",
    "ProductView",
    "VariantView",
]
