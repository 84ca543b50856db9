"""
Project field validation.

The same rules guard the edit form, the create form, the JSON update
endpoint and the store itself.
"""

from typing import Optional
from urllib.parse import urlparse

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from .errors import ValidationFailure

TITLE_MIN_LENGTH = 2
SUMMARY_MIN_LENGTH = 10

FIELD_MESSAGES = {
    'title': f'Title must be at least {TITLE_MIN_LENGTH} characters.',
    'summary': f'Summary must be at least {SUMMARY_MIN_LENGTH} characters.',
    'url': 'Please enter a valid URL.',
    'image_url': 'Image must be a data URI or an absolute URL.',
    'featured': 'Featured must be true or false.',
}

# Loc names pydantic may report for aliased fields
_ALIASES = {'imageUrl': 'image_url'}


def is_absolute_url(value):
    """True when value has both a scheme and a host"""
    if not isinstance(value, str) or not value or any(c.isspace() for c in value):
        return False
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def is_data_uri(value):
    return isinstance(value, str) and value.startswith('data:') and ',' in value


class ProjectFields(BaseModel):
    """Editable fields of a Project"""

    model_config = ConfigDict(extra='ignore')

    title: str
    summary: str
    url: str
    image_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices('image_url', 'imageUrl')
    )
    featured: bool = False

    @field_validator('title')
    @classmethod
    def _title_length(cls, value):
        if len(value) < TITLE_MIN_LENGTH:
            raise PydanticCustomError('title_too_short', FIELD_MESSAGES['title'])
        return value

    @field_validator('summary')
    @classmethod
    def _summary_length(cls, value):
        if len(value) < SUMMARY_MIN_LENGTH:
            raise PydanticCustomError('summary_too_short', FIELD_MESSAGES['summary'])
        return value

    @field_validator('url')
    @classmethod
    def _absolute_url(cls, value):
        if not is_absolute_url(value):
            raise PydanticCustomError('url_invalid', FIELD_MESSAGES['url'])
        return value

    @field_validator('image_url', mode='before')
    @classmethod
    def _image_uri(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if is_data_uri(value) or is_absolute_url(value):
            return value
        raise PydanticCustomError('image_url_invalid', FIELD_MESSAGES['image_url'])

    @field_validator('featured', mode='before')
    @classmethod
    def _featured_flag(cls, value):
        # Unchecked HTML checkboxes are simply absent or empty
        if value is None or value == '':
            return False
        return value


def validate_project(data):
    """
    Validate raw project fields.

    Returns a dict with title, summary, url, image_url and featured.
    Raises ValidationFailure carrying one message per offending field.
    """
    try:
        fields = ProjectFields.model_validate(data or {})
    except ValidationError as e:
        field_errors = {}
        for err in e.errors():
            loc = err['loc'][0] if err['loc'] else '__all__'
            field = _ALIASES.get(loc, loc)
            if field in field_errors:
                continue
            if err['type'].endswith(('_too_short', '_invalid')):
                field_errors[field] = err['msg']
            else:
                field_errors[field] = FIELD_MESSAGES.get(field, err['msg'])
        raise ValidationFailure(field_errors) from e
    return fields.model_dump()
