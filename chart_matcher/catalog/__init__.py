"""
Catalog module for chart-matcher.

Provides the Candidate model, immutable access credentials and the search
capability the matcher consumes.
"""

from chart_matcher.catalog.client import CatalogSearch, SpotifyCatalog
from chart_matcher.catalog.credentials import AccessCredential
from chart_matcher.catalog.models import Candidate

__all__ = [
    "AccessCredential",
    "Candidate",
    "CatalogSearch",
    "SpotifyCatalog",
]
