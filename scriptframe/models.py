"""
Request and result types shared by the provider adapters.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Dict, Any, Optional, Protocol, Union, runtime_checkable


FEWER_IMAGES_ERROR = "API returned fewer images than requested."


class AspectRatio(str, Enum):
    """Aspect ratios accepted by both image backends."""

    SQUARE = "1:1"
    WIDESCREEN = "16:9"
    PORTRAIT = "9:16"
    LANDSCAPE = "4:3"
    TALL = "3:4"

    @classmethod
    def coerce(cls, value: Union["AspectRatio", str]) -> "AspectRatio":
        """Accept either a member or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(f"Unsupported aspect ratio {value!r}; expected one of {allowed}")


@dataclass
class GenerationRequest:
    """A script to break down into image prompts."""

    script: str
    style: str
    niche: Optional[str] = None
    num_prompts: int = 1

    def __post_init__(self):
        if self.num_prompts < 1:
            raise ValueError("num_prompts must be at least 1")


@dataclass
class PromptResult:
    """Prompts in scene order plus the instruction that produced them."""

    prompts: List[str]
    request_prompt: str


@dataclass
class ReferenceImage:
    """Base64 image used to derive a style description."""

    base64: str
    mime_type: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReferenceImage":
        """Create from a ``{"base64", "mimeType"}`` mapping (``mime_type`` also accepted)."""
        return cls(
            base64=data["base64"],
            mime_type=data.get("mime_type") or data["mimeType"],
        )


@dataclass
class ImageRequest:
    """Parameters for a single image-generation call."""

    prompt: str
    aspect_ratio: AspectRatio = AspectRatio.SQUARE
    negative_prompt: Optional[str] = None
    num_images: int = 1

    def __post_init__(self):
        self.aspect_ratio = AspectRatio.coerce(self.aspect_ratio)
        if self.num_images < 1:
            raise ValueError("num_images must be at least 1")

    @property
    def cleaned_negative_prompt(self) -> Optional[str]:
        """Trimmed negative prompt, or None when blank."""
        if self.negative_prompt and self.negative_prompt.strip():
            return self.negative_prompt.strip()
        return None


@dataclass(frozen=True)
class ImageResult:
    """One requested image slot: either encoded data or a failure reason."""

    base64: Optional[str] = None
    error: Optional[str] = None

    def __post_init__(self):
        if bool(self.base64) == bool(self.error):
            raise ValueError("ImageResult needs exactly one of base64 or error")

    @classmethod
    def success(cls, base64: str) -> "ImageResult":
        return cls(base64=base64)

    @classmethod
    def failure(cls, error: str) -> "ImageResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.base64 is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"base64": self.base64, "error": self.error}


ImageResultBatch = List[ImageResult]


def pad_results(results: ImageResultBatch, num_images: int) -> ImageResultBatch:
    """Trim or fill the batch so it has exactly ``num_images`` entries."""
    padded = list(results)[:num_images]
    while len(padded) < num_images:
        padded.append(ImageResult.failure(FEWER_IMAGES_ERROR))
    return padded


def failed_batch(num_images: int, message: str) -> ImageResultBatch:
    """A batch where every slot carries the same failure reason."""
    return [ImageResult.failure(message) for _ in range(num_images)]


@runtime_checkable
class ImageGenerator(Protocol):
    """Protocol shared by the image backends."""

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: Union[AspectRatio, str],
        negative_prompt: Optional[str],
        num_images: int,
    ) -> ImageResultBatch:
        """
        Generate ``num_images`` images for one prompt.

        Never raises: every failure is reported inside the returned batch,
        which always has exactly ``num_images`` entries.
        """
        ...
