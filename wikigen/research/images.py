"""Image discovery. Best effort: every failure yields an empty list."""

import logging
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError

from ..models.article import ArticleImage
from ..providers.base import ProviderClient, ProviderError, Temperature, parse_json_response
from ..providers.openverse import OpenverseAuthError, OpenverseClient


logger = logging.getLogger(__name__)


class ImageFinder(ABC):
    @abstractmethod
    async def find_images(self, topic: str) -> list[ArticleImage]:
        """Return images for the topic; never raises."""


class OpenverseImageFinder(ImageFinder):
    """Openly licensed images from Openverse."""

    def __init__(self, client: OpenverseClient, max_images: int = 5):
        self.client = client
        self.max_images = max_images

    async def find_images(self, topic: str) -> list[ArticleImage]:
        try:
            images = await self.client.search_images(topic, max_images=self.max_images)
        except (OpenverseAuthError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching Openverse images: {e}")
            return []

        logger.info(f"Fetched {len(images)} Openverse images for '{topic}'")
        return [
            ArticleImage(
                url=image.url,
                description=image.title,
                attribution=image.attribution,
                index=index,
            )
            for index, image in enumerate(images)
        ]


class SuggestedImageFinder(ImageFinder):
    """Free-to-use images suggested by the language model."""

    SYSTEM_PROMPT = """You are an image research assistant. Search for relevant, free-to-use images from:
1. Wikimedia Commons
2. Unsplash
3. Pexels
4. Creative Commons sources

Return ONLY a JSON object in this format:
{
  "images": [{
    "url": "direct image url",
    "attribution": "credit and license info",
    "description": "brief description for alt text"
  }]
}

Ensure all images are:
- Free to use
- Properly attributed
- High quality and relevant
- From reputable sources

Return at least 2-3 relevant images per article."""

    def __init__(self, provider: ProviderClient):
        self.provider = provider

    async def find_images(self, topic: str) -> list[ArticleImage]:
        try:
            response = await self.provider.generate(
                self.SYSTEM_PROMPT,
                f"Find relevant free images for an article about: {topic}",
                Temperature.RESEARCH,
                json_mode=True,
            )
        except ProviderError as e:
            logger.error(f"Error searching images: {e}")
            return []

        data = parse_json_response(response.text)
        raw_images = data.get("images") if isinstance(data, dict) else None
        if not isinstance(raw_images, list):
            logger.warning("Error parsing images JSON: no 'images' array")
            return []

        images = []
        for item in raw_images:
            if not isinstance(item, dict):
                continue
            try:
                images.append(ArticleImage.model_validate({**item, "index": len(images)}))
            except ValidationError as e:
                logger.debug(f"Skipping malformed image: {e}")
        return images
