import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from volunteer_api.database import engine
from volunteer_api.main import app
from volunteer_api import models, repositories, services
from volunteer_api.errors import UserProjectError

client = TestClient(app)


def test_apply_to_project_and_list_applicants(make_user, make_project):
    pid = make_project()
    u1 = make_user()
    u2 = make_user()
    r = client.post(f'/api/projects/{pid}/users/{u1}')
    assert r.status_code == 201
    assert r.headers['Location'].endswith(f'/api/projects/{pid}/users/{u1}')
    assert client.post(f'/api/projects/{pid}/users/{u2}').status_code == 201

    applicants = client.get(f'/api/projects/applicant/{pid}')
    assert applicants.status_code == 200
    body = applicants.json()
    assert [a['id'] for a in body] == [u1, u2]
    assert body[0]['first_name'] == 'Val'


def test_applicants_empty_is_404(make_project):
    pid = make_project()
    r = client.get(f'/api/projects/applicant/{pid}')
    assert r.status_code == 404
    assert r.json()['detail'] == 'Applicants not found'


def test_apply_with_invalid_references(make_user, make_project):
    pid = make_project()
    uid = make_user()
    missing_user = client.post(f'/api/projects/{pid}/users/888888')
    assert missing_user.status_code == 404
    assert missing_user.json()['detail'] == 'ID of project or user invalid'
    missing_project = client.post(f'/api/projects/888888/users/{uid}')
    assert missing_project.status_code == 404
    # a second application for the same pair is rejected the same way
    assert client.post(f'/api/projects/{pid}/users/{uid}').status_code == 201
    duplicate = client.post(f'/api/projects/{pid}/users/{uid}')
    assert duplicate.status_code == 404


def test_projects_by_user_and_applied(make_user, make_project, set_application_status):
    uid = make_user()
    applied = make_project()
    accepted = make_project()
    client.post(f'/api/projects/{applied}/users/{uid}')
    client.post(f'/api/projects/{accepted}/users/{uid}')
    set_application_status(uid, accepted, models.APPLICATION_ACCEPTED)

    all_projects = client.get(f'/api/projects/users/{uid}')
    assert all_projects.status_code == 200
    assert [p['id'] for p in all_projects.json()] == [applied, accepted]

    only_applied = client.get(f'/api/projects/applied/users/{uid}')
    assert only_applied.status_code == 200
    assert [p['id'] for p in only_applied.json()] == [applied]


def test_projects_by_unknown_user_is_404():
    r = client.get('/api/projects/users/777777')
    assert r.status_code == 404
    assert r.json()['detail'] == 'ID of user invalid'


def test_bookmark_project(make_user, make_project):
    pid = make_project()
    uid = make_user()
    r = client.post(f'/api/projects/bookmark/projects/{pid}/users/{uid}')
    assert r.status_code == 201
    assert r.headers['Location'].endswith(f'/api/projects/bookmark/projects/{pid}/users/{uid}')
    again = client.post(f'/api/projects/bookmark/projects/{pid}/users/{uid}')
    assert again.status_code == 400
    assert again.json()['detail'] == 'The user already bookmarked this project'
    # bookmarking does not make the user an applicant
    assert client.get(f'/api/projects/applicant/{pid}').status_code == 404


def test_bookmark_with_missing_references(make_user, make_project):
    pid = make_project()
    uid = make_user()
    missing_user = client.post(f'/api/projects/bookmark/projects/{pid}/users/666666')
    assert missing_user.status_code == 404
    assert missing_user.json()['detail'] == 'Invalid user id'
    missing_project = client.post(f'/api/projects/bookmark/projects/666666/users/{uid}')
    assert missing_project.status_code == 404
    assert missing_project.json()['detail'] == 'Invalid project id'


def test_bookmark_repository_find_by_pair(make_user, make_project):
    pid = make_project()
    uid = make_user()
    other = make_user()
    client.post(f'/api/projects/bookmark/projects/{pid}/users/{uid}')
    with Session(engine) as s:
        repo = repositories.BookmarkRepository(s)
        found = repo.find_by_user_and_project(uid, pid)
        assert len(found) == 1
        assert found[0].user_id == uid and found[0].project_id == pid
        assert repo.find_by_user_and_project(other, pid) == []


def test_delete_project_removes_relations(make_user, make_project):
    pid = make_project()
    uid = make_user()
    client.post(f'/api/projects/{pid}/users/{uid}')
    client.post(f'/api/projects/bookmark/projects/{pid}/users/{uid}')
    assert client.delete(f'/api/projects/{pid}').status_code == 204
    with Session(engine) as s:
        assert repositories.BookmarkRepository(s).find_by_user_and_project(uid, pid) == []
        assert repositories.UserProjectRepository(s).find_by_user_and_project(uid, pid) == []
    assert client.get(f'/api/projects/users/{uid}').json() == []


def test_concurrent_duplicate_relations_are_rejected(monkeypatch, make_user, make_project):
    pid = make_project()
    uid = make_user()
    # skip the existence pre-check so the second insert hits the unique constraint
    monkeypatch.setattr(repositories.BookmarkRepository, "find_by_user_and_project", lambda self, u, p: [])
    monkeypatch.setattr(repositories.UserProjectRepository, "find_by_user_and_project", lambda self, u, p: [])
    with Session(engine) as s:
        svc = services.ProjectService(s)
        svc.save_user_project_bookmark(uid, pid)
        with pytest.raises(UserProjectError, match="already bookmarked"):
            svc.save_user_project_bookmark(uid, pid)
        svc.save_user_project(uid, pid)
        with pytest.raises(UserProjectError, match="already exists in that project"):
            svc.save_user_project(uid, pid)
        # the session is still usable after the rollback
        assert [u.id for u in services.UserService(s).get_applicants(pid)] == [uid]
