"""
HTTP tests for the admin edit flow, admin auth and the public pages.
Run with: pytest tests/test_projects_routes.py -v
"""

import io
from unittest.mock import patch

from conftest import make_image_bytes, truncated_png_bytes
from folio.modules.projects.editor import CREDENTIALS_GUIDANCE
from folio.modules.projects.errors import GenerationFailure
from folio.modules.projects.imaging import encode_data_uri

GENERATOR = 'folio.modules.projects.routes.generate_project_image'

FORM = {
    'title': 'New',
    'summary': 'Old summary text',
    'url': 'https://x.com',
    'image_url': '',
}


# ---------------------------------------------------------------------------
# Edit page
# ---------------------------------------------------------------------------

def test_edit_page_renders_project(admin_client, seeded_store):
    response = admin_client.get('/admin/projects/edit/p1')
    assert response.status_code == 200
    assert b'value="Old"' in response.data
    assert b'upload-image' in response.data


def test_edit_page_missing_project_redirects(admin_client, store):
    response = admin_client.get('/admin/projects/edit/ghost')
    assert response.status_code == 302

    followed = admin_client.get(response.headers['Location'])
    assert b'Project not found.' in followed.data


def test_edit_submit_saves_and_redirects(admin_client, seeded_store):
    response = admin_client.post('/admin/projects/edit/p1', data=FORM)
    assert response.status_code == 302

    project = seeded_store.get('p1')
    assert project['title'] == 'New'
    assert project['featured'] is False


def test_edit_submit_featured_checkbox(admin_client, seeded_store):
    admin_client.post('/admin/projects/edit/p1', data={**FORM, 'featured': 'on'})
    assert seeded_store.get('p1')['featured'] is True


def test_edit_submit_without_image_input_keeps_image(admin_client, seeded_store):
    seeded_store.update('p1', {**FORM, 'image_url': 'https://cdn.example.com/a.jpg'})
    form = {k: v for k, v in FORM.items() if k != 'image_url'}

    assert admin_client.post('/admin/projects/edit/p1', data=form).status_code == 302
    assert seeded_store.get('p1')['image_url'] == 'https://cdn.example.com/a.jpg'


def test_edit_submit_empty_image_input_clears_image(admin_client, seeded_store):
    seeded_store.update('p1', {**FORM, 'image_url': 'https://cdn.example.com/a.jpg'})

    assert admin_client.post('/admin/projects/edit/p1', data=FORM).status_code == 302
    assert seeded_store.get('p1')['image_url'] is None


def test_edit_submit_invalid_shows_field_errors(admin_client, seeded_store):
    response = admin_client.post('/admin/projects/edit/p1', data={**FORM, 'title': 'A'})
    assert response.status_code == 400
    assert b'Title must be at least 2 characters.' in response.data
    assert seeded_store.get('p1')['title'] == 'Old'


def test_new_project_redirects_to_edit(admin_client, store):
    response = admin_client.post('/admin/projects/new', data=FORM)
    assert response.status_code == 302
    assert '/admin/projects/edit/' in response.headers['Location']
    assert len(store.list()) == 1


def test_new_project_invalid(admin_client, store):
    response = admin_client.post('/admin/projects/new', data={**FORM, 'url': 'nope'})
    assert response.status_code == 400
    assert b'Please enter a valid URL.' in response.data
    assert store.list() == []


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

def test_upload_returns_compressed_image(admin_client, seeded_store):
    data = {'image': (io.BytesIO(make_image_bytes(size=(1600, 800))), 'shot.png', 'image/png')}
    response = admin_client.post('/admin/projects/edit/p1/upload-image',
                                 data=data, content_type='multipart/form-data')

    assert response.status_code == 200
    body = response.get_json()
    assert body['success'] is True
    assert body['image_url'].startswith('data:image/jpeg;base64,')
    assert body['notification']['title'] == 'Image Uploaded!'
    # Saved only on submit
    assert seeded_store.get('p1')['image_url'] is None


def test_upload_too_large(admin_client, seeded_store):
    big = io.BytesIO(b'\0' * (12 * 1024 * 1024))
    response = admin_client.post('/admin/projects/edit/p1/upload-image',
                                 data={'image': (big, 'huge.png', 'image/png')},
                                 content_type='multipart/form-data')

    assert response.status_code == 400
    body = response.get_json()
    assert body['notification']['title'] == 'File too large'
    assert body['success'] is False


def test_upload_wrong_type(admin_client, seeded_store):
    response = admin_client.post('/admin/projects/edit/p1/upload-image',
                                 data={'image': (io.BytesIO(b'GIF89a'), 'a.gif', 'image/gif')},
                                 content_type='multipart/form-data')
    assert response.status_code == 400
    assert response.get_json()['notification']['title'] == 'Unsupported file type'


def test_upload_corrupt_image(admin_client, seeded_store):
    response = admin_client.post('/admin/projects/edit/p1/upload-image',
                                 data={'image': (io.BytesIO(b'nope'), 'a.png', 'image/png')},
                                 content_type='multipart/form-data')
    assert response.status_code == 422
    assert response.get_json()['notification']['title'] == 'Image Processing Failed'


def test_upload_truncated_png_header(admin_client, seeded_store):
    response = admin_client.post('/admin/projects/edit/p1/upload-image',
                                 data={'image': (io.BytesIO(truncated_png_bytes()), 'a.png', 'image/png')},
                                 content_type='multipart/form-data')
    assert response.status_code == 422
    assert response.get_json()['notification']['title'] == 'Image Processing Failed'


def test_upload_without_file(admin_client, seeded_store):
    response = admin_client.post('/admin/projects/edit/p1/upload-image', data={},
                                 content_type='multipart/form-data')
    assert response.status_code == 400


def test_upload_missing_project(admin_client, store):
    response = admin_client.post('/admin/projects/edit/ghost/upload-image',
                                 data={'image': (io.BytesIO(b'x'), 'a.png', 'image/png')},
                                 content_type='multipart/form-data')
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Generate
# ---------------------------------------------------------------------------

def test_generate_uses_current_form_values(admin_client, seeded_store):
    generated = encode_data_uri(make_image_bytes(size=(1536, 1536)), 'image/png')
    with patch(GENERATOR, return_value={'image_url': generated}) as generator:
        response = admin_client.post('/admin/projects/edit/p1/generate-image',
                                     json={'title': 'New', 'summary': 'A fresh summary'})

    assert response.status_code == 200
    generator.assert_called_once_with({'title': 'New', 'summary': 'A fresh summary'})
    body = response.get_json()
    assert body['image_url'].startswith('data:image/jpeg;base64,')
    assert body['notification']['title'] == 'Image Generated!'


def test_generate_missing_information(admin_client, seeded_store):
    with patch(GENERATOR) as generator:
        response = admin_client.post('/admin/projects/edit/p1/generate-image',
                                     json={'title': '', 'summary': 'A fresh summary'})

    generator.assert_not_called()
    assert response.status_code == 400
    assert response.get_json()['notification']['title'] == 'Missing Information'


def test_generate_credentials_failure(admin_client, seeded_store):
    failure = GenerationFailure('API key not valid. Please pass a valid API key.',
                                kind=GenerationFailure.CREDENTIALS)
    with patch(GENERATOR, side_effect=failure):
        response = admin_client.post('/admin/projects/edit/p1/generate-image',
                                     data={'title': 'New', 'summary': 'A fresh summary'})

    assert response.status_code == 502
    body = response.get_json()
    assert body['error'] == CREDENTIALS_GUIDANCE
    assert body['notification']['title'] == 'Image Generation Failed'


# ---------------------------------------------------------------------------
# JSON record API
# ---------------------------------------------------------------------------

def test_api_get_and_list(admin_client, seeded_store):
    assert admin_client.get('/admin/projects/api/projects/p1').get_json()['title'] == 'Old'
    assert admin_client.get('/admin/projects/api/projects/ghost').status_code == 404

    listing = admin_client.get('/admin/projects/api/projects').get_json()
    assert listing[0]['id'] == 'p1'
    assert listing[0]['has_image'] is False
    assert 'image_url' not in listing[0]


def test_api_create(admin_client, store):
    response = admin_client.post('/admin/projects/api/projects', json={
        'title': 'Folio', 'summary': 'A portfolio site', 'url': 'https://folio.dev',
        'imageUrl': 'https://cdn.example.com/f.jpg', 'featured': True,
    })
    assert response.status_code == 201
    project = response.get_json()['project']
    assert project['image_url'] == 'https://cdn.example.com/f.jpg'
    assert project['featured'] is True


def test_api_update(admin_client, seeded_store):
    response = admin_client.put('/admin/projects/api/projects/p1',
                                json={'title': 'New', 'imageUrl': 'data:image/jpeg;base64,Qg=='})
    assert response.status_code == 200
    body = response.get_json()
    assert body['success'] is True
    assert body['notification']['title'] == 'Project Updated!'

    project = seeded_store.get('p1')
    assert project['title'] == 'New'
    assert project['summary'] == 'Old summary text'
    assert project['image_url'] == 'data:image/jpeg;base64,Qg=='


def test_api_update_invalid(admin_client, seeded_store):
    response = admin_client.put('/admin/projects/api/projects/p1', json={'summary': 'short'})
    assert response.status_code == 400
    body = response.get_json()
    assert body['field_errors'] == {'summary': 'Summary must be at least 10 characters.'}
    assert body['notification'] is None


def test_api_update_missing(admin_client, store):
    response = admin_client.put('/admin/projects/api/projects/ghost', json={'title': 'New'})
    assert response.status_code == 404


def test_api_delete(admin_client, seeded_store):
    assert admin_client.delete('/admin/projects/api/projects/p1').status_code == 200
    assert admin_client.delete('/admin/projects/api/projects/p1').status_code == 404


def test_api_validate(admin_client):
    body = admin_client.post('/admin/projects/api/validate', json={'title': 'A'}).get_json()
    assert body['valid'] is False
    assert set(body['field_errors']) == {'title', 'summary', 'url'}


# ---------------------------------------------------------------------------
# Admin accounts
# ---------------------------------------------------------------------------

def test_first_admin_then_login(client, seeded_store):
    response = client.post('/admin/create-admin', data={
        'email': 'Admin@Example.com', 'password': 'secret1', 'confirm_password': 'secret1',
    })
    assert response.status_code == 302

    # Once an admin exists the page is closed to anonymous users
    assert client.get('/admin/create-admin').status_code == 302

    bad = client.post('/admin/login', data={'email': 'admin@example.com', 'password': 'wrong'})
    assert bad.status_code == 401

    ok = client.post('/admin/login?next=/admin/projects/edit/p1',
                     data={'email': 'admin@example.com', 'password': 'secret1'})
    assert ok.status_code == 302
    assert ok.headers['Location'].endswith('/admin/projects/edit/p1')

    assert client.get('/admin/').status_code == 200
    assert client.get('/admin/status').get_json()['logged_in'] is True


def test_login_ignores_external_next(client):
    client.post('/admin/create-admin', data={
        'email': 'a@b.co', 'password': 'secret1', 'confirm_password': 'secret1',
    })
    response = client.post('/admin/login?next=//evil.example.com',
                           data={'email': 'a@b.co', 'password': 'secret1'})
    assert 'evil.example.com' not in response.headers['Location']


def test_create_admin_password_mismatch(client):
    response = client.post('/admin/create-admin', data={
        'email': 'a@b.co', 'password': 'secret1', 'confirm_password': 'secret2',
    })
    assert response.status_code == 400


def test_logout(admin_client):
    admin_client.get('/admin/logout')
    assert admin_client.get('/admin/').status_code == 302


# ---------------------------------------------------------------------------
# Public site
# ---------------------------------------------------------------------------

def test_home_page(client, seeded_store):
    response = client.get('/')
    assert response.status_code == 200
    assert b'Test Folio' in response.data
    assert b'SCROLL TO EXPLORE' in response.data
    assert b'Old summary text' in response.data


def test_about_and_projects_pages(client, seeded_store):
    assert client.get('/about').status_code == 200
    response = client.get('/projects/')
    assert response.status_code == 200
    assert b'Old summary text' in response.data


def test_public_feed_allows_cross_origin(client, seeded_store):
    response = client.get('/projects/api/projects', headers={'Origin': 'https://elsewhere.dev'})
    assert response.status_code == 200
    assert 'Access-Control-Allow-Origin' in response.headers
    assert response.get_json()[0]['title'] == 'Old'
