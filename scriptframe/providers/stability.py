"""
Stability AI image generation over the v2beta REST API.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple, Union

import aiohttp

from ..config import StabilityConfig
from ..errors import StabilityAPIError, TransientError, retry
from ..models import (
    AspectRatio,
    ImageRequest,
    ImageResult,
    ImageResultBatch,
    failed_batch,
    pad_results,
)
from ..utils.logger import LoggerMixin


NOT_CONFIGURED_MESSAGE = "Stability AI API key is not configured."
NO_IMAGES_MESSAGE = "Stability AI did not return any images."
EMPTY_IMAGE_MESSAGE = "Stability AI returned an image without data."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred with Stability AI."
ERROR_PREFIX = "Stability AI Error: "


def build_form_fields(request: ImageRequest) -> List[Tuple[str, str]]:
    """
    Form fields for a generation request, in the order they are sent.

    ``samples`` is only sent for multi-image requests and ``negative_prompt``
    only when it is not blank.
    """
    fields = [
        ("prompt", request.prompt),
        ("aspect_ratio", request.aspect_ratio.value),
        ("output_format", "jpeg"),
    ]
    if request.num_images > 1:
        fields.append(("samples", str(request.num_images)))

    negative_prompt = request.cleaned_negative_prompt
    if negative_prompt:
        fields.append(("negative_prompt", negative_prompt))

    return fields


def _multipart_body(fields: List[Tuple[str, str]]) -> aiohttp.MultipartWriter:
    writer = aiohttp.MultipartWriter("form-data")
    for name, value in fields:
        part = writer.append(value)
        part.set_content_disposition("form-data", name=name)
    return writer


class StabilityImageGenerator(LoggerMixin):
    """
    Image generation through Stability AI.

    A missing API key is not fatal: every call then answers with a
    "not configured" batch without touching the network.
    """

    def __init__(
        self, config: StabilityConfig, session: Optional[aiohttp.ClientSession] = None
    ):
        super().__init__()
        self.config = config
        self.session = session

        if not self.is_configured:
            self.log_warning("Stability AI API key is not configured")

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: Union[AspectRatio, str],
        negative_prompt: Optional[str],
        num_images: int,
    ) -> ImageResultBatch:
        """
        Generate images with Stability AI.

        Returns exactly ``num_images`` results; failures are reported per slot
        and never raised.
        """
        request = ImageRequest(
            prompt=prompt,
            aspect_ratio=aspect_ratio,
            negative_prompt=negative_prompt,
            num_images=num_images,
        )

        if not self.is_configured:
            return failed_batch(request.num_images, NOT_CONFIGURED_MESSAGE)

        try:
            payload = await self._request(request)

            results = self._parse_images(payload)
            if not results:
                self.log_warning("Stability AI returned no images", prompt=prompt[:50])
                return failed_batch(request.num_images, NO_IMAGES_MESSAGE)

            self.log_info(
                "Images generated with Stability AI",
                prompt=prompt[:50],
                requested=request.num_images,
                received=len(results),
            )
            return pad_results(results, request.num_images)

        except Exception as e:
            self.log_error("Stability AI request failed", error=e, prompt=prompt[:50])
            message = str(e) or UNKNOWN_ERROR_MESSAGE
            return failed_batch(request.num_images, f"{ERROR_PREFIX}{message}")

    async def _request(self, request: ImageRequest) -> Dict[str, Any]:
        """POST the request, retrying transient failures when configured."""

        @retry(
            (TransientError,),
            retries=self.config.max_retries,
            backoff_factor=self.config.retry_backoff,
        )
        async def attempt() -> Dict[str, Any]:
            try:
                if self.session is not None:
                    return await self._post(self.session, request)
                async with aiohttp.ClientSession() as session:
                    return await self._post(session, request)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise TransientError(str(e) or "Connection to Stability AI failed") from e

        return await attempt()

    async def _post(
        self, session: aiohttp.ClientSession, request: ImageRequest
    ) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
        }

        async with session.post(
            self.config.endpoint,
            data=_multipart_body(build_form_fields(request)),
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=self.config.timeout),
        ) as response:
            if not 200 <= response.status < 300:
                message = await self._error_message(response)
                self.log_error("Stability AI Error", status=response.status, detail=message)
                error = StabilityAPIError(message, status=response.status)
                if response.status >= 500:
                    raise TransientError(message) from error
                raise error

            return await response.json(content_type=None)

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse) -> str:
        try:
            body = await response.json(content_type=None)
        except ValueError:
            body = None

        errors = body.get("errors") if isinstance(body, dict) else None
        if isinstance(errors, list) and errors:
            return str(errors[0])
        return f"Unknown Stability AI error ({response.status})"

    @staticmethod
    def _parse_images(payload: Dict[str, Any]) -> List[ImageResult]:
        images = payload.get("images")
        if images is None and payload.get("image"):
            # Single-image responses carry the data at the top level
            images = [{"base64": payload["image"]}]

        results = []
        for image in images or []:
            encoded = image.get("base64")
            if encoded:
                results.append(ImageResult.success(encoded))
            else:
                results.append(ImageResult.failure(EMPTY_IMAGE_MESSAGE))
        return results
