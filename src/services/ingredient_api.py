import re
import json
import asyncio
import logging
import requests
from typing import Any, Dict, Optional
from nicegui import core, run

from src.core import config_manager
from src.core.errors import NetworkError, MalformedResponseError, MissingCredentialsError
from src.core.models import AnalysisRequest, AnalysisResult, parse_analysis_result
from src.core.prompts import INGREDIENT_ANALYSIS_PROMPT
from src.services.capture import CapturedImage

logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\n?")

def extract_text(body: Any) -> str:
    """Returns the first text part of a messages-API response body."""
    content = body.get("content") if isinstance(body, dict) else None
    if not isinstance(content, list):
        raise MalformedResponseError("Response has no content list")

    for part in content:
        if isinstance(part, dict) and part.get("type") == "text":
            text = part.get("text")
            if isinstance(text, str):
                return text
    raise MalformedResponseError("No response from API")

def strip_code_fences(text: str) -> str:
    return CODE_FENCE_PATTERN.sub("", text.strip()).strip()

def parse_result(text: str) -> AnalysisResult:
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e
    return parse_analysis_result(data)

class IngredientAnalysisService:
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._config = config

    @property
    def config(self) -> Dict[str, Any]:
        # Re-read each time so edits to data/config.json apply without a restart
        return self._config if self._config is not None else config_manager.load_config()

    def build_request(self, image: CapturedImage, config: Optional[Dict[str, Any]] = None) -> AnalysisRequest:
        config = config or self.config
        return AnalysisRequest(
            prompt=INGREDIENT_ANALYSIS_PROMPT,
            image_data=image.base64_data,
            media_type=image.media_type,
            model=config["model"],
            max_tokens=int(config["max_tokens"]),
        )

    def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: Optional[float]) -> requests.Response:
        return requests.post(url, json=payload, headers=headers, timeout=timeout)

    async def analyze(self, image: CapturedImage) -> AnalysisResult:
        """
        Sends one request for the given image and decodes the answer.
        Raises NetworkError, MalformedResponseError or MissingCredentialsError.
        """
        api_key = config_manager.get_api_key()
        if not api_key:
            logger.error(f"Analysis skipped: {config_manager.API_KEY_ENV} is not set")
            raise MissingCredentialsError(f"{config_manager.API_KEY_ENV} is not set")

        config = self.config
        request = self.build_request(image, config)
        headers = {
            "content-type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": config["anthropic_version"],
        }
        url = config["api_url"]
        timeout = config.get("request_timeout")

        logger.info(f"Sending analysis request ({request.media_type}, model={request.model})")
        try:
            if core.loop is not None:
                response = await run.io_bound(self._post, url, request.to_payload(), headers, timeout)
            else:
                # NiceGUI app not started (scripts, tests): plain worker thread
                response = await asyncio.to_thread(self._post, url, request.to_payload(), headers, timeout)
        except requests.RequestException as e:
            logger.error(f"Analysis request failed: {e}")
            raise NetworkError(str(e)) from e

        if response is None:
            # io_bound returns None when the app is shutting down
            raise NetworkError("Request was cancelled")

        if not 200 <= response.status_code < 300:
            logger.error(f"Analysis API returned {response.status_code}: {response.text[:200]}")
            raise NetworkError(f"API Error: {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Analysis API returned a non-JSON body: {e}")
            raise MalformedResponseError("Response body is not JSON") from e

        try:
            result = parse_result(extract_text(body))
        except MalformedResponseError as e:
            logger.error(f"Malformed analysis response: {e}")
            raise

        logger.info(f"Analysis finished: {result.kind} ({len(result.ingredients)} ingredients)")
        return result

ingredient_service = IngredientAnalysisService()
