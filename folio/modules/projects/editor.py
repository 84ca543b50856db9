"""
Project Edit Controller
=======================

Drives one project's editable fields through load, image upload, image
generation and submission. The controller's `state` is an explicit tag:
an operation can only start from READY, so two operations can never
overlap on the same form.

Every finished upload, generation or submission leaves exactly one
notification in `notifications`; submit validation errors are reported
per field in `field_errors` instead.
"""

import logging
import os
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from enum import Enum

from folio.core import logger as app_logger
from .errors import (
    CodecFailure, GenerationFailure, LoadFailure, OperationInProgress,
    PersistFailure, UploadConstraintFailure, ValidationFailure,
)
from .database import UPDATE_NOT_FOUND_MESSAGE
from .generation import generate_project_image
from .imaging import ALLOWED_MIME_TYPES, MAX_UPLOAD_BYTES, compress_image, encode_data_uri
from .schema import validate_project

logger = logging.getLogger(__name__)

CREDENTIAL_MARKER = 'API key'
CREDENTIALS_GUIDANCE = (
    'Authentication error. Please check that your GOOGLE_API_KEY is configured '
    'correctly in your environment variables (e.g. in your .env file or your '
    'hosting provider settings) and that the server has been restarted.'
)

EDITABLE_FIELDS = ('title', 'summary', 'url', 'image_url', 'featured')
DEFAULT_VALUES = {
    'title': '',
    'summary': '',
    'url': '',
    'image_url': None,
    'featured': False,
}


class EditState(Enum):
    LOADING = 'loading'
    READY = 'ready'
    UPLOADING = 'uploading'
    GENERATING = 'generating'
    SUBMITTING = 'submitting'
    NOT_FOUND = 'not_found'
    LOAD_ERROR = 'load_error'


@dataclass(frozen=True)
class Notification:
    """A user-facing message: the server-side version of a toast"""
    title: str
    description: str
    variant: str = 'default'

    @property
    def category(self):
        """Flask flash category"""
        return 'error' if self.variant == 'destructive' else 'success'

    def to_dict(self):
        return asdict(self)


def describe_generation_error(error):
    """Rewrite credential failures into configuration guidance"""
    message = str(error) or type(error).__name__
    if CREDENTIAL_MARKER in message:
        return CREDENTIALS_GUIDANCE
    return message


class ImageUpload:
    """A selected file whose size and type are known before it is read"""

    def __init__(self, filename, mimetype, size, reader):
        self.filename = filename
        self.mimetype = mimetype
        self.size = size
        self._reader = reader

    def read(self):
        return self._reader()

    @classmethod
    def from_file_storage(cls, storage):
        """Wrap a werkzeug FileStorage without consuming its stream"""
        stream = storage.stream
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(0)
        return cls(storage.filename, storage.mimetype, size, storage.read)

    @classmethod
    def from_bytes(cls, data, mimetype, filename='upload'):
        return cls(filename, mimetype, len(data), lambda: data)


class EditFormController:
    """Editable representation of one Project and its submission lifecycle"""

    def __init__(self, project_id, store, generator=None, codec=None):
        self.project_id = project_id
        self.store = store
        self.generate_image = generator or generate_project_image
        self.codec = codec or compress_image

        self.state = EditState.LOADING
        self.values = dict(DEFAULT_VALUES)
        self.field_errors = {}
        self.notifications = []
        self.failure = None
        self.redirect_to_listing = False

    # ----- helpers -----

    def _notify(self, title, description, variant='default'):
        self.notifications.append(Notification(title, description, variant))

    def _fail(self, error, title, description=None):
        self.failure = error
        self._notify(title, description or str(error), 'destructive')
        return False

    @contextmanager
    def _operation(self, state):
        if self.state is not EditState.READY:
            raise OperationInProgress(
                f'Cannot start {state.value} while the form is {self.state.value}'
            )
        self.state = state
        self.failure = None
        try:
            yield
        finally:
            self.state = EditState.READY

    @property
    def is_ready(self):
        return self.state is EditState.READY

    # ----- operations -----

    def load(self):
        """Fetch the record and populate the form"""
        if self.state is not EditState.LOADING:
            raise OperationInProgress('Project already loaded')

        try:
            project = self.store.get(self.project_id)
        except LoadFailure as e:
            self.state = EditState.LOAD_ERROR
            self._fail(e, 'Error Loading Project')
            return self.state

        if project is None:
            self.state = EditState.NOT_FOUND
            self.redirect_to_listing = True
            self._fail(LoadFailure('Project not found.'), 'Error')
            return self.state

        self.values = {field: project.get(field, DEFAULT_VALUES[field]) for field in EDITABLE_FIELDS}
        self.values['featured'] = bool(project.get('featured') or False)
        self.state = EditState.READY
        return self.state

    def set_values(self, changes):
        """Apply user edits to the form; no state transition"""
        if not self.is_ready:
            raise OperationInProgress(f'Form is {self.state.value}')
        for field in EDITABLE_FIELDS:
            if field in changes:
                self.values[field] = changes[field]

    def _check_upload(self, upload):
        if upload.size > MAX_UPLOAD_BYTES:
            raise UploadConstraintFailure(
                'File too large', 'Please upload an image smaller than 10MB.'
            )
        if upload.mimetype not in ALLOWED_MIME_TYPES:
            raise UploadConstraintFailure(
                'Unsupported file type', 'Please upload a PNG, JPEG or WebP image.'
            )

    def upload(self, upload):
        """Validate, read and compress a selected file into image_url"""
        with self._operation(EditState.UPLOADING):
            try:
                self._check_upload(upload)
            except UploadConstraintFailure as e:
                return self._fail(e, e.title)

            try:
                data = upload.read()
            except (OSError, ValueError) as e:
                logger.warning("Could not read upload %s: %s", upload.filename, e)
                return self._fail(e, 'File Read Error', 'Could not read the selected file.')

            try:
                compressed = self.codec(encode_data_uri(data, upload.mimetype))
            except CodecFailure as e:
                app_logger.warning('projects', f"Image processing failed for project {self.project_id}",
                                   {'filename': upload.filename, 'error': str(e)})
                return self._fail(e, 'Image Processing Failed')

            self.values['image_url'] = compressed
            self._notify('Image Uploaded!', 'Your new image is ready to be saved.')
            return True

    def generate(self):
        """Generate a new image from the current title and summary"""
        with self._operation(EditState.GENERATING):
            title = self.values.get('title') or ''
            summary = self.values.get('summary') or ''
            if not title or not summary:
                missing = {}
                if not title:
                    missing['title'] = 'Title is required to generate an image.'
                if not summary:
                    missing['summary'] = 'Summary is required to generate an image.'
                return self._fail(ValidationFailure(missing), 'Missing Information',
                                  'Please enter a project title and summary first.')

            try:
                result = self.generate_image({'title': title, 'summary': summary})
                image_url = (result or {}).get('image_url') or (result or {}).get('imageUrl')
                if not image_url:
                    raise GenerationFailure('The AI model did not return an image.')
                compressed = self.codec(image_url)
            except Exception as e:
                message = describe_generation_error(e)
                app_logger.log_error_with_traceback('projects', e, {
                    'operation': 'generate_image',
                    'project_id': self.project_id,
                    'kind': getattr(e, 'kind', None),
                })
                failure = e if isinstance(e, GenerationFailure) else GenerationFailure(str(e))
                return self._fail(failure, 'Image Generation Failed', message)

            self.values['image_url'] = compressed
            self._notify('Image Generated!', 'The AI-powered image has been re-created.')
            return True

    def submit(self, changes=None):
        """Validate all fields and persist them through the store"""
        with self._operation(EditState.SUBMITTING):
            if changes:
                for field in EDITABLE_FIELDS:
                    if field in changes:
                        self.values[field] = changes[field]

            try:
                fields = validate_project(self.values)
            except ValidationFailure as e:
                self.failure = e
                self.field_errors = e.field_errors
                return False
            self.field_errors = {}

            result = self.store.update(self.project_id, fields)
            if result.get('success'):
                self.values.update(fields)
                self.redirect_to_listing = True
                app_logger.log_user_action('projects', f"Updated project {self.project_id}")
                self._notify('Project Updated!', 'Your changes have been saved.')
                return True

            error = PersistFailure(result.get('error') or UPDATE_NOT_FOUND_MESSAGE)
            app_logger.warning('projects', f"Update failed for project {self.project_id}", {'error': str(error)})
            return self._fail(error, 'Error')
