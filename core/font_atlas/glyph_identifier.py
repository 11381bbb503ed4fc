"""
AI-based character identification for detected glyphs.

Each glyph is cropped onto a small white tile and sent, in batches, to a
vision model that names the character in every tile. Supports:
- Google Gemini (default, JSON response mode)
- Anthropic Claude
"""

import base64
import io
import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from PIL import Image

from .errors import IdentificationError
from .models import Glyph
from .pixels import PixelGrid

logger = logging.getLogger(__name__)
console = logging.getLogger("console")

# Glyphs per request; keeps payloads under upstream size limits
DEFAULT_BATCH_SIZE = 50

# White border around each crop sent for identification
CROP_PADDING = 2

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


@dataclass
class IdentificationReport:
    """Outcome of identifying a glyph list in batches."""

    # Input glyphs with identified chars applied (new objects)
    glyphs: List[Glyph]

    # Original index -> identified character
    labels: Dict[int, str] = field(default_factory=dict)

    total_batches: int = 0
    batches_completed: int = 0

    # Set when a batch failed and the remaining batches were skipped
    error: Optional[str] = None

    @property
    def identified_count(self) -> int:
        return len(self.labels)

    @property
    def complete(self) -> bool:
        return self.error is None and self.batches_completed == self.total_batches


def extract_glyph_images(
    grid: PixelGrid,
    glyphs: List[Glyph],
    padding: int = CROP_PADDING,
) -> List[Image.Image]:
    """
    Crop each glyph onto a white tile with a small border.

    Args:
        grid: Sheet pixels
        glyphs: Glyphs to crop, in the order results are wanted
        padding: Border width in pixels

    Returns:
        RGB PIL images, one per glyph
    """
    source = grid.to_pil()
    tiles = []
    for g in glyphs:
        crop = source.crop((g.x, g.y, g.right, g.bottom))
        tile = Image.new("RGB", (g.width + padding * 2, g.height + padding * 2), "white")
        # Alpha-composite so transparent sheets come out dark-on-white
        tile.paste(crop, (padding, padding), crop)
        tiles.append(tile)
    return tiles


def _png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def parse_identification_response(response_text: Optional[str], expected_count: int) -> List[str]:
    """
    Parse a model response into one character per image.

    Accepts a JSON array of strings (``["A", "b", ""]``) or of objects with
    ``index`` and ``char``/``character`` keys. Missing entries become "".

    Raises:
        ValueError: If the text is not a JSON array
    """
    text = _FENCE_RE.sub("", (response_text or "").strip())
    data = json.loads(text or "[]")
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array, got {type(data).__name__}")

    chars = [""] * expected_count
    for position, item in enumerate(data):
        if isinstance(item, dict):
            index = item.get("index", position)
            value = item.get("character", item.get("char", ""))
        else:
            index, value = position, item

        if not isinstance(index, int) or not 0 <= index < expected_count:
            continue
        value = str(value or "").strip()
        chars[index] = value[0] if value else ""

    return chars


class GlyphIdentifier:
    """
    Identifies glyph images with a vision model.

    The client is created lazily; a pre-built client can be injected for
    testing or to share one across identifiers.
    """

    PROVIDER_GEMINI = "gemini"
    PROVIDER_ANTHROPIC = "anthropic"

    DEFAULT_MODELS = {
        PROVIDER_GEMINI: "gemini-2.5-flash",
        PROVIDER_ANTHROPIC: "claude-opus-4-5-20251101",
    }

    ENV_KEYS = {
        PROVIDER_GEMINI: ["GOOGLE_API_KEY", "GEMINI_API_KEY"],
        PROVIDER_ANTHROPIC: ["ANTHROPIC_API_KEY"],
    }

    def __init__(
        self,
        provider: str = "gemini",
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client=None,
    ):
        """
        Args:
            provider: "gemini" (default) or "anthropic"
            api_key: API key (optional, falls back to environment/config)
            model: Model name (optional, provider default otherwise)
            client: Ready-made SDK client; skips lazy initialization
        """
        self.provider = provider.lower()
        if self.provider not in self.DEFAULT_MODELS:
            raise ValueError(f"Unknown identification provider: {provider}")
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODELS[self.provider]
        self._client = client

    def _resolve_api_key(self) -> Optional[str]:
        if self.api_key:
            return self.api_key
        for var in self.ENV_KEYS[self.provider]:
            key = os.environ.get(var)
            if key:
                return key
        try:
            from ..config import ConfigManager
            return ConfigManager().get_api_key(self.provider)
        except Exception as e:
            logger.debug(f"Could not get API key from config: {e}")
            return None

    def _ensure_client(self) -> bool:
        """Ensure the SDK client for the configured provider exists."""
        if self._client is not None:
            return True

        api_key = self._resolve_api_key()
        if not api_key:
            logger.error(f"No {self.provider} API key available for glyph identification")
            return False

        try:
            if self.provider == self.PROVIDER_ANTHROPIC:
                import anthropic
                self._client = anthropic.Anthropic(api_key=api_key)
            else:
                from google import genai
                self._client = genai.Client(api_key=api_key)
        except ImportError as e:
            logger.error(f"Failed to import {self.provider} SDK: {e}")
            return False

        logger.info(f"Initialized {self.provider} client (model: {self.model})")
        return True

    def _build_prompt(self, count: int) -> str:
        return (
            f"I have provided {count} images. Each image contains exactly one character "
            "(letter, number, or symbol).\n\n"
            "Please identify the character in each image in the exact order they were provided.\n\n"
            "Return a JSON array of strings, where each string is the character found.\n"
            'If an image is just noise or unreadable, use empty string "".\n\n'
            'Example Output: ["A", "B", "C", "1", "?"]'
        )

    def identify(self, images: List[Image.Image]) -> List[str]:
        """
        Identify one batch of glyph images in a single request.

        Args:
            images: Glyph tiles in order

        Returns:
            One character per image ("" = unrecognized). An unparseable
            response yields all-empty results rather than an error.

        Raises:
            IdentificationError: If no client is available
            Exception: Whatever the SDK raises for a failed request
        """
        if not images:
            return []
        if not self._ensure_client():
            raise IdentificationError(f"{self.provider.title()} client not available")

        prompt = self._build_prompt(len(images))

        logger.info("=" * 60)
        logger.info("AI GLYPH IDENTIFICATION REQUEST")
        logger.info(f"  Provider: {self.provider}")
        logger.info(f"  Model: {self.model}")
        logger.info(f"  Glyph count: {len(images)}")
        logger.info("=" * 60)

        if self.provider == self.PROVIDER_ANTHROPIC:
            response_text = self._request_anthropic(images, prompt)
        else:
            response_text = self._request_gemini(images, prompt)

        logger.info("AI GLYPH IDENTIFICATION RESPONSE")
        logger.info(f"  Response: {(response_text or '')[:200]}")

        try:
            chars = parse_identification_response(response_text, len(images))
        except ValueError as e:
            logger.warning(f"Could not parse identification response: {e}")
            chars = [""] * len(images)

        logger.info(f"  Identified {sum(1 for c in chars if c)} of {len(images)}")
        logger.info("=" * 60)
        return chars

    def _request_gemini(self, images: List[Image.Image], prompt: str) -> str:
        from google.genai import types

        parts = [
            types.Part.from_bytes(data=_png_bytes(img), mime_type="image/png")
            for img in images
        ]
        parts.append(prompt)

        response = self._client.models.generate_content(
            model=self.model,
            contents=parts,
            config=types.GenerateContentConfig(
                temperature=0.1,
                response_mime_type="application/json",
            ),
        )
        return response.text if response and response.text else "[]"

    def _request_anthropic(self, images: List[Image.Image], prompt: str) -> str:
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": "image/png",
                    "data": base64.b64encode(_png_bytes(img)).decode("utf-8"),
                },
            }
            for img in images
        ]
        content.append({"type": "text", "text": prompt + "\nRespond with the JSON array only."})

        response = self._client.messages.create(
            model=self.model,
            max_tokens=max(256, len(images) * 8),
            messages=[{"role": "user", "content": content}],
        )
        if response and response.content:
            return response.content[0].text
        return "[]"

    def identify_glyphs(
        self,
        grid: PixelGrid,
        glyphs: List[Glyph],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> IdentificationReport:
        """
        Label glyphs in batches.

        A failing batch stops the remaining ones; labels from batches that
        already succeeded are kept.

        Args:
            grid: Sheet pixels the glyphs refer to
            glyphs: Glyphs to label, results are matched by index
            batch_size: Glyphs per request

        Returns:
            IdentificationReport with relabeled copies of ``glyphs``

        Raises:
            IdentificationError: If no client can be created
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        report = IdentificationReport(glyphs=[g.copy() for g in glyphs])
        if not glyphs:
            return report

        if not self._ensure_client():
            raise IdentificationError(
                f"No {self.provider} client available; configure an API key"
            )

        images = extract_glyph_images(grid, glyphs)
        report.total_batches = (len(images) + batch_size - 1) // batch_size

        for batch_start in range(0, len(images), batch_size):
            batch = images[batch_start:batch_start + batch_size]
            try:
                chars = self.identify(batch)
            except Exception as e:
                logger.error(f"Identification batch at {batch_start} failed: {e}", exc_info=True)
                console.error(f"Identification stopped after {report.batches_completed} batch(es): {e}")
                report.error = str(e)
                break

            for index, char in enumerate(chars):
                if char:
                    report.labels[batch_start + index] = char
            report.batches_completed += 1
            console.info(
                f"Identified batch {report.batches_completed}/{report.total_batches}"
            )

        for index, char in report.labels.items():
            report.glyphs[index].char = char

        logger.info(
            f"Identification finished: {report.identified_count}/{len(glyphs)} labeled, "
            f"{report.batches_completed}/{report.total_batches} batches"
        )
        return report
