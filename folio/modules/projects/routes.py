"""
Projects Admin Routes
=====================

Pages:
- /admin/projects/new              create a project
- /admin/projects/edit/<id>        edit form; POST submits it

JSON:
- /admin/projects/edit/<id>/upload-image     compress an uploaded file
- /admin/projects/edit/<id>/generate-image   generate a thumbnail with AI
- /admin/projects/api/projects/<id>          read / update / delete
"""

from flask import render_template, request, redirect, url_for, jsonify, flash

from folio.core import admin_required, admin_api_required, logger as app_logger
from . import projects_bp
from .database import ProjectStore
from .editor import EditFormController, EditState, ImageUpload
from .errors import (
    CodecFailure, GenerationFailure, LoadFailure, OperationInProgress,
    PersistFailure, UploadConstraintFailure, ValidationFailure,
)
from .generation import generate_project_image
from .imaging import ALLOWED_MIME_TYPES, MAX_UPLOAD_BYTES
from .schema import validate_project

FAILURE_STATUS = {
    ValidationFailure: 400,
    UploadConstraintFailure: 400,
    CodecFailure: 422,
    GenerationFailure: 502,
    PersistFailure: 404,
    LoadFailure: 500,
}


# ===== Helpers =====

def get_store():
    """Project store for the current app's PROJECTS_DB"""
    return ProjectStore()


def _form_values(form):
    """Project fields posted by the edit/create page"""
    values = {
        'title': form.get('title', ''),
        'summary': form.get('summary', ''),
        'url': form.get('url', ''),
        'featured': 'featured' in form,
    }
    # No image_url input keeps the stored image; an empty one clears it
    if 'image_url' in form:
        values['image_url'] = form['image_url'] or None
    return values


def _json_values(data):
    """Project fields sent as JSON; camelCase imageUrl is accepted too"""
    values = {key: data[key] for key in ('title', 'summary', 'url', 'featured') if key in data}
    if 'image_url' in data:
        values['image_url'] = data['image_url']
    elif 'imageUrl' in data:
        values['image_url'] = data['imageUrl']
    return values


def _flash_notifications(controller):
    for note in controller.notifications:
        flash(f"{note.title}: {note.description}", note.category)


def _status_for(failure):
    for error_type, status in FAILURE_STATUS.items():
        if isinstance(failure, error_type):
            return status
    return 500


def _controller_response(controller, ok, **payload):
    """JSON body for an upload/generate/update outcome"""
    notification = controller.notifications[-1].to_dict() if controller.notifications else None
    if ok:
        return jsonify({'success': True, 'notification': notification, **payload})
    body = {
        'success': False,
        'error': notification['description'] if notification else str(controller.failure),
        'notification': notification,
    }
    if controller.field_errors:
        body['field_errors'] = controller.field_errors
    return jsonify(body), _status_for(controller.failure)


def _load_controller(project_id):
    """Build a controller for project_id and load it"""
    controller = EditFormController(project_id, get_store(), generator=generate_project_image)
    controller.load()
    return controller


def _load_error_response(controller):
    """JSON response when the record could not be loaded, else None"""
    if controller.state is EditState.NOT_FOUND:
        return jsonify({'error': 'Project not found'}), 404
    if controller.state is EditState.LOAD_ERROR:
        return jsonify({'error': str(controller.failure)}), 500
    return None


def _render_editor(controller, status=200):
    return render_template(
        'projects/edit.html',
        controller=controller,
        project_id=controller.project_id,
        values=controller.values,
        field_errors=controller.field_errors,
        max_upload_bytes=MAX_UPLOAD_BYTES,
        accepted_types=', '.join(ALLOWED_MIME_TYPES),
    ), status


# ===== Pages =====

@projects_bp.route('/')
@admin_required
def projects_index():
    """Projects are listed on the admin dashboard"""
    return redirect(url_for('admin.dashboard'))


@projects_bp.route('/new', methods=['GET', 'POST'])
@admin_required
def new_project():
    """Create a project, then continue on its edit page to add an image"""
    values = {'title': '', 'summary': '', 'url': '', 'image_url': None, 'featured': False}
    field_errors = {}

    if request.method == 'POST':
        values = _form_values(request.form)
        try:
            project = get_store().create(values)
        except ValidationFailure as e:
            field_errors = e.field_errors
        except Exception as e:
            app_logger.log_error_with_traceback('projects', e, {'operation': 'create'})
            flash(f'Error: Could not create project: {e}', 'error')
        else:
            app_logger.log_user_action('projects', f"Created project {project['id']}")
            flash('Project Created!: Add an image or publish as is.', 'success')
            return redirect(url_for('projects_admin.edit_project', project_id=project['id']))

    status = 400 if field_errors else 200
    return render_template('projects/new.html', values=values, field_errors=field_errors), status


@projects_bp.route('/edit/<project_id>', methods=['GET', 'POST'])
@admin_required
def edit_project(project_id):
    """Edit form; POST validates and saves it"""
    controller = _load_controller(project_id)

    if controller.state is EditState.NOT_FOUND:
        _flash_notifications(controller)
        return redirect(url_for('admin.dashboard'))
    if controller.state is EditState.LOAD_ERROR:
        _flash_notifications(controller)
        return _render_editor(controller, 500)

    if request.method == 'POST':
        if controller.submit(_form_values(request.form)):
            _flash_notifications(controller)
            return redirect(url_for('admin.dashboard'))
        _flash_notifications(controller)
        return _render_editor(controller, 400 if controller.field_errors else _status_for(controller.failure))

    return _render_editor(controller)


# ===== Image endpoints =====

@projects_bp.route('/edit/<project_id>/upload-image', methods=['POST'])
@admin_api_required
def upload_image(project_id):
    """Compress an uploaded image; the form saves it on submit"""
    if 'image' not in request.files:
        return jsonify({'error': 'No image file provided'}), 400

    file = request.files['image']
    if file.filename == '':
        return jsonify({'error': 'No file selected'}), 400

    try:
        controller = _load_controller(project_id)
        error_response = _load_error_response(controller)
        if error_response:
            return error_response

        ok = controller.upload(ImageUpload.from_file_storage(file))
        return _controller_response(controller, ok, image_url=controller.values['image_url'])
    except OperationInProgress as e:
        return jsonify({'error': str(e)}), 409
    except Exception as e:
        app_logger.log_error_with_traceback('projects', e, {'operation': 'upload_image'})
        return jsonify({'error': 'Failed to process image'}), 500


@projects_bp.route('/edit/<project_id>/generate-image', methods=['POST'])
@admin_api_required
def generate_image(project_id):
    """Generate a thumbnail from the title and summary currently in the form"""
    data = request.get_json(silent=True) or request.form.to_dict()

    try:
        controller = _load_controller(project_id)
        error_response = _load_error_response(controller)
        if error_response:
            return error_response

        controller.set_values({
            'title': data.get('title', ''),
            'summary': data.get('summary', ''),
        })
        ok = controller.generate()
        return _controller_response(controller, ok, image_url=controller.values['image_url'])
    except OperationInProgress as e:
        return jsonify({'error': str(e)}), 409
    except Exception as e:
        app_logger.log_error_with_traceback('projects', e, {'operation': 'generate_image'})
        return jsonify({'error': str(e)}), 500


# ===== JSON record API =====

@projects_bp.route('/api/projects', methods=['GET'])
@admin_api_required
def list_projects():
    """All projects, image payloads stripped"""
    try:
        projects = get_store().list()
        for p in projects:
            p['has_image'] = bool(p.pop('image_url', None))
        return jsonify(projects)
    except LoadFailure as e:
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/projects', methods=['POST'])
@admin_api_required
def create_project():
    """Create project"""
    data = request.get_json(silent=True) or {}
    try:
        project = get_store().create(_json_values(data))
        app_logger.log_user_action('projects', f"Created project {project['id']}")
        return jsonify({'success': True, 'project': project}), 201
    except ValidationFailure as e:
        return jsonify({'success': False, 'error': str(e), 'field_errors': e.field_errors}), 400
    except Exception as e:
        app_logger.log_error_with_traceback('projects', e, {'operation': 'create'})
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/projects/<project_id>', methods=['GET'])
@admin_api_required
def get_project(project_id):
    """Get single project"""
    try:
        project = get_store().get(project_id)
    except LoadFailure as e:
        return jsonify({'error': str(e)}), 500
    if project:
        return jsonify(project)
    return jsonify({'error': 'Project not found'}), 404


@projects_bp.route('/api/projects/<project_id>', methods=['PUT'])
@admin_api_required
def update_project(project_id):
    """Update project"""
    data = request.get_json(silent=True) or {}

    try:
        controller = _load_controller(project_id)
        error_response = _load_error_response(controller)
        if error_response:
            return error_response

        ok = controller.submit(_json_values(data))
        if ok:
            return _controller_response(controller, ok, redirect=url_for('admin.dashboard'))
        return _controller_response(controller, ok)
    except Exception as e:
        app_logger.log_error_with_traceback('projects', e, {'operation': 'update'})
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/projects/<project_id>', methods=['DELETE'])
@admin_api_required
def delete_project(project_id):
    """Delete project"""
    try:
        if get_store().delete(project_id):
            app_logger.log_user_action('projects', f"Deleted project {project_id}")
            return jsonify({'success': True})
        return jsonify({'error': 'Project not found'}), 404
    except Exception as e:
        app_logger.log_error_with_traceback('projects', e, {'operation': 'delete'})
        return jsonify({'error': str(e)}), 500


@projects_bp.route('/api/validate', methods=['POST'])
@admin_api_required
def validate_fields():
    """Validate form fields without saving; used for inline errors"""
    data = request.get_json(silent=True) or {}
    try:
        validate_project(_json_values(data))
    except ValidationFailure as e:
        return jsonify({'valid': False, 'field_errors': e.field_errors})
    return jsonify({'valid': True, 'field_errors': {}})
