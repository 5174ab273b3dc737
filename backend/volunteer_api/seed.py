"""Demo data loader.

Organizations, users and projects are normally owned by other services;
for local development `seed_demo_data` fills an empty database with a
small, consistent data set. Running it twice does not duplicate rows.
"""

import json
from pathlib import Path
from typing import Optional
from sqlmodel import Session, select
from . import models, repositories

DEMO_DATA = {
    'organizations': [
        {'name': 'Code for Good', 'description': 'Volunteer developers for nonprofits'},
        {'name': 'Green Streets', 'description': 'Urban gardening collective'},
    ],
    'users': [
        {'username': 'alice', 'email': 'alice@example.org', 'first_name': 'Alice', 'last_name': 'Moreau'},
        {'username': 'bob', 'email': 'bob@example.org', 'first_name': 'Bob', 'last_name': 'Okafor'},
    ],
    'projects': [
        {'name': 'Food bank inventory app', 'organization': 'Code for Good',
         'description': 'Track donations and stock levels', 'remote': True},
        {'name': 'Volunteer scheduling', 'organization': 'Code for Good',
         'description': 'Shift planning for weekend events', 'remote': True},
        {'name': 'Community garden map', 'organization': 'Green Streets',
         'description': 'Map of plots and watering rota', 'location': 'Lyon'},
    ],
}


def load_seed_file(path: Path) -> dict:
    """Read a seed data set from a JSON file with the same shape as `DEMO_DATA`."""
    return json.loads(Path(path).read_text(encoding='utf-8'))


def seed_demo_data(session: Session, data: Optional[dict] = None) -> dict:
    """Insert organizations, users and projects that are not present yet.

    Returns a dictionary of created/skipped counts per entity type. Raises
    ValueError when a project references an organization missing from
    both the data set and the database.
    """
    if data is None:
        data = DEMO_DATA
    org_repo = repositories.OrganizationRepository(session)
    user_repo = repositories.UserRepository(session)
    project_repo = repositories.ProjectRepository(session)
    summary = {'organizations': 0, 'users': 0, 'projects': 0, 'skipped': 0}

    for o in data.get('organizations', []):
        if org_repo.get_by_name(o['name']):
            summary['skipped'] += 1
            continue
        org_repo.create(models.Organization(name=o['name'], description=o.get('description')))
        summary['organizations'] += 1

    for u in data.get('users', []):
        if user_repo.get_by_username(u['username']):
            summary['skipped'] += 1
            continue
        user_repo.create(models.User(**u))
        summary['users'] += 1

    for p in data.get('projects', []):
        org = org_repo.get_by_name(p['organization'])
        if org is None:
            raise ValueError(f"unknown organization for project {p['name']!r}: {p['organization']}")
        existing = session.exec(
            select(models.Project).where(models.Project.name == p['name'], models.Project.organization_id == org.id)
        ).first()
        if existing:
            summary['skipped'] += 1
            continue
        fields = {k: v for k, v in p.items() if k != 'organization'}
        project_repo.save(models.Project(organization_id=org.id, **fields))
        summary['projects'] += 1
    return summary
