"""Research and enrichment steps: sources, images and categories."""

from .sources import SourceFinder
from .images import ImageFinder, OpenverseImageFinder, SuggestedImageFinder
from .categorizer import Categorizer, HierarchicalCategorizer, LineListCategorizer, MAX_CATEGORIES

__all__ = [
    "SourceFinder",
    "ImageFinder",
    "OpenverseImageFinder",
    "SuggestedImageFinder",
    "Categorizer",
    "HierarchicalCategorizer",
    "LineListCategorizer",
    "MAX_CATEGORIES",
]
