"""
Gemini adapters: script-to-prompt generation, reference style analysis and
Imagen image generation, all through the official google-genai SDK.
"""

import base64
import json
from typing import Any, Dict, List, Optional, Union

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import GeminiConfig
from ..errors import (
    ConfigurationError,
    PromptGenerationError,
    StyleAnalysisError,
    TransientError,
    retry,
)
from ..models import (
    AspectRatio,
    GenerationRequest,
    ImageRequest,
    ImageResult,
    ImageResultBatch,
    PromptResult,
    ReferenceImage,
    failed_batch,
    pad_results,
)
from ..utils.logger import LoggerMixin
from .prompts import PROMPT_SCHEMA, STYLE_ANALYSIS_INSTRUCTION, build_prompt_request
from .safety import (
    SafetyClassifier,
    describe_empty_response,
    finish_reason_name,
    is_safety_block,
)


INVALID_JSON_MESSAGE = (
    "The AI returned a response that was not valid JSON. "
    "This may be a temporary issue, please try again."
)
INVALID_STRUCTURE_MESSAGE = (
    "The AI returned a response with an invalid structure. Please try again."
)
UNEXPECTED_PROMPT_ERROR = (
    "Failed to generate prompts from the script due to an unexpected AI service error."
)
STYLE_ANALYSIS_FAILED = "Failed to analyze the reference image style."

NO_IMAGE_MESSAGE = "The API did not return an image."
SAFETY_BLOCKED_MESSAGE = "This prompt was blocked for safety reasons. Please try rephrasing it."
IMAGE_FAILED_MESSAGE = "Image generation failed."


class GeminiService(LoggerMixin):
    """
    Prompt generation, style analysis and Imagen generation over one Gemini client.

    The client is created from ``config`` unless one is passed in, which lets
    tests substitute a fake transport.
    """

    def __init__(
        self,
        config: GeminiConfig,
        client: Optional[genai.Client] = None,
        safety_classifier: SafetyClassifier = is_safety_block,
    ):
        super().__init__()
        self.config = config
        self.client = client if client is not None else self._configure_client()
        self.safety_classifier = safety_classifier

    def _configure_client(self) -> genai.Client:
        """Configure Google Gen AI client."""
        if not self.config.api_key:
            raise ConfigurationError("Gemini API key is required (set GEMINI_API_KEY)")

        http_options = None
        if self.config.timeout_ms:
            http_options = types.HttpOptions(timeout=self.config.timeout_ms)

        client = genai.Client(api_key=self.config.api_key, http_options=http_options)
        self.log_info("Gemini client configured successfully", model=self.config.chat_model)
        return client

    async def _call(self, method, **kwargs) -> Any:
        """Run one SDK call, retrying server-side failures when configured."""

        @retry(
            (TransientError,),
            retries=self.config.max_retries,
            backoff_factor=self.config.retry_backoff,
        )
        async def attempt():
            try:
                return await method(**kwargs)
            except genai_errors.ServerError as e:
                self.log_warning("Gemini server error", error=str(e))
                raise TransientError(str(e)) from e

        return await attempt()

    async def generate_prompts(
        self, script: str, style: str, niche: Optional[str], num_prompts: int
    ) -> PromptResult:
        """
        Break a script into image-generation prompts.

        Args:
            script: Narrative script to visualize
            style: Visual style for every prompt
            niche: Optional storytelling topic
            num_prompts: Minimum number of prompts to request

        Returns:
            PromptResult with prompts in provider order and the rendered instruction

        Raises:
            PromptGenerationError: With a user-facing message for every failure
        """
        request = GenerationRequest(
            script=script, style=style, niche=niche, num_prompts=num_prompts
        )
        request_prompt = build_prompt_request(
            request.script, request.style, request.niche, request.num_prompts
        )

        try:
            response = await self._call(
                self.client.aio.models.generate_content,
                model=self.config.chat_model,
                contents=request_prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=PROMPT_SCHEMA,
                ),
            )
            prompts = self._parse_prompts(response)

        except PromptGenerationError:
            raise
        except Exception as e:
            self.log_error("Error during prompt generation", error=e)
            raise PromptGenerationError(UNEXPECTED_PROMPT_ERROR) from e

        self.log_info(
            "Generated prompts from script",
            requested=request.num_prompts,
            received=len(prompts),
        )
        return PromptResult(prompts=prompts, request_prompt=request_prompt)

    def _parse_prompts(self, response: types.GenerateContentResponse) -> List[str]:
        json_text = response.text

        if not json_text:
            reason = self._finish_reason(response)
            self.log_error(
                "Gemini returned an empty response",
                finish_reason=finish_reason_name(reason),
            )
            raise PromptGenerationError(describe_empty_response(reason))

        try:
            result = json.loads(json_text)
        except json.JSONDecodeError as e:
            self.log_error(
                "Failed to parse AI response as JSON", error=e, response=json_text[:200]
            )
            raise PromptGenerationError(INVALID_JSON_MESSAGE) from e

        prompts = result.get("prompts") if isinstance(result, dict) else None
        if not isinstance(prompts, list):
            self.log_error("AI response has no prompts array", response=json_text[:200])
            raise PromptGenerationError(INVALID_STRUCTURE_MESSAGE)

        return prompts

    @staticmethod
    def _finish_reason(response: types.GenerateContentResponse) -> Any:
        candidates = response.candidates or []
        if not candidates:
            return None
        return candidates[0].finish_reason

    async def analyze_image_style(
        self, image: Union[ReferenceImage, Dict[str, Any]]
    ) -> str:
        """
        Describe the artistic style of a reference image as comma-separated keywords.

        Raises:
            StyleAnalysisError: On any failure, including an empty answer
        """
        try:
            if not isinstance(image, ReferenceImage):
                image = ReferenceImage.from_dict(image)

            image_part = types.Part.from_bytes(
                data=base64.b64decode(image.base64), mime_type=image.mime_type
            )
            response = await self._call(
                self.client.aio.models.generate_content,
                model=self.config.chat_model,
                contents=[image_part, STYLE_ANALYSIS_INSTRUCTION],
            )

            text = response.text
            if not text or not text.strip():
                raise StyleAnalysisError("Gemini returned no style description")

            return text.strip()

        except Exception as e:
            self.log_error("Error analyzing image style", error=e)
            raise StyleAnalysisError(STYLE_ANALYSIS_FAILED) from e

    def build_image_config(self, request: ImageRequest) -> types.GenerateImagesConfig:
        """Imagen config for a request; the negative prompt is omitted when blank."""
        options: Dict[str, Any] = {
            "number_of_images": request.num_images,
            "output_mime_type": "image/jpeg",
            "aspect_ratio": request.aspect_ratio.value,
        }

        negative_prompt = request.cleaned_negative_prompt
        if negative_prompt:
            options["negative_prompt"] = negative_prompt

        return types.GenerateImagesConfig(**options)

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: Union[AspectRatio, str],
        negative_prompt: Optional[str],
        num_images: int,
    ) -> ImageResultBatch:
        """
        Generate images with Imagen.

        Returns exactly ``num_images`` results; failures are reported per slot
        and never raised.
        """
        request = ImageRequest(
            prompt=prompt,
            aspect_ratio=aspect_ratio,
            negative_prompt=negative_prompt,
            num_images=num_images,
        )

        try:
            response = await self._call(
                self.client.aio.models.generate_images,
                model=self.config.image_model,
                prompt=request.prompt,
                config=self.build_image_config(request),
            )

            generated = response.generated_images or []
            if not generated:
                self.log_warning("Imagen returned no images", prompt=prompt[:50])
                return failed_batch(request.num_images, NO_IMAGE_MESSAGE)

            results = [self._to_result(image) for image in generated]
            self.log_info(
                "Images generated with Imagen",
                prompt=prompt[:50],
                requested=request.num_images,
                received=len(results),
            )
            return pad_results(results, request.num_images)

        except Exception as e:
            self.log_error(
                "Image generation failed for prompt", error=e, prompt=prompt[:50]
            )
            if self.safety_classifier(str(e)):
                return failed_batch(request.num_images, SAFETY_BLOCKED_MESSAGE)
            return failed_batch(request.num_images, IMAGE_FAILED_MESSAGE)

    @staticmethod
    def _to_result(generated: types.GeneratedImage) -> ImageResult:
        image_bytes = generated.image.image_bytes if generated.image else None
        if not image_bytes:
            return ImageResult.failure(NO_IMAGE_MESSAGE)
        return ImageResult.success(base64.b64encode(image_bytes).decode())
