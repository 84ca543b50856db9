"""
Project Image Generation
========================

Generates a project thumbnail from its title and summary with the Google
Gemini image model. Each call is a single attempt; failures raise
GenerationFailure for the caller to report.
"""

import logging

import requests

from folio.core import get_config_value
from .errors import GenerationFailure

logger = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = 'gemini-2.0-flash-preview-image-generation'
DEFAULT_TIMEOUT = 60

PROMPT_TEMPLATE = (
    "Create a visually appealing, modern thumbnail image for a software project "
    "portfolio. Do not include any text in the image.\n\n"
    "Project title: {title}\n"
    "Project summary: {summary}"
)


def build_prompt(title, summary):
    return PROMPT_TEMPLATE.format(title=title.strip(), summary=summary.strip())


def _extract_image(data):
    """Return the first inline image of a generateContent response as a data URI"""
    for candidate in data.get('candidates') or []:
        parts = (candidate.get('content') or {}).get('parts') or []
        for part in parts:
            inline = part.get('inlineData') or part.get('inline_data')
            if inline and inline.get('data'):
                mime_type = inline.get('mimeType') or inline.get('mime_type') or 'image/png'
                return f"data:{mime_type};base64,{inline['data']}"
    return None


class ImageGenerator:
    """Gemini image generation client"""

    def __init__(self, api_key=None, model=None, timeout=None):
        self.api_key = api_key
        self.model = model or DEFAULT_MODEL
        self.timeout = timeout or DEFAULT_TIMEOUT

    @classmethod
    def from_config(cls):
        """Build a client from app config > Config > env var"""
        return cls(
            api_key=get_config_value('GOOGLE_API_KEY'),
            model=get_config_value('IMAGE_MODEL', DEFAULT_MODEL),
            timeout=int(get_config_value('IMAGE_TIMEOUT', DEFAULT_TIMEOUT)),
        )

    def generate(self, title, summary):
        """
        Generate one image for a project.

        Returns:
            dict with {image_url} holding a data URI

        Raises:
            GenerationFailure: missing/invalid credentials (message mentions
            the API key) or any other service failure.
        """
        if not self.api_key:
            raise GenerationFailure(
                'No API key configured for image generation (GOOGLE_API_KEY is not set).',
                kind=GenerationFailure.CREDENTIALS,
            )

        url = f"{API_BASE}/models/{self.model}:generateContent"
        headers = {
            'x-goog-api-key': self.api_key,
            'Content-Type': 'application/json',
        }
        payload = {
            'contents': [{'parts': [{'text': build_prompt(title, summary)}]}],
            'generationConfig': {'responseModalities': ['TEXT', 'IMAGE']},
        }

        try:
            resp = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise GenerationFailure(f'Image service request failed: {e}') from e

        if resp.status_code in (401, 403):
            raise GenerationFailure(
                f'API key rejected by the image service (status {resp.status_code}): {resp.text}',
                kind=GenerationFailure.CREDENTIALS,
            )
        if resp.status_code != 200:
            kind = GenerationFailure.CREDENTIALS if 'API key' in resp.text else GenerationFailure.SERVICE
            raise GenerationFailure(
                f'Image request failed with status {resp.status_code}: {resp.text}',
                kind=kind,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise GenerationFailure('The image service returned an invalid response.') from e

        image_url = _extract_image(data)
        if not image_url:
            raise GenerationFailure('The AI model did not return an image.')

        logger.debug("Generated image for %r with %s", title, self.model)
        return {'image_url': image_url}


def generate_project_image(params, generator=None):
    """Generate a project image from {'title', 'summary'}"""
    generator = generator or ImageGenerator.from_config()
    return generator.generate(params.get('title', ''), params.get('summary', ''))
