"""
Shared Test Fixtures

Centralized factories and generators used across all test layers.

Structure:
    - common.py: Base ID generators, timestamps
    - generators.py: Random data generators
    - {service}_fixtures.py: Per-service factories
"""

# Common utilities
from .common import (
    make_id,
    make_timestamp,
)

# Random generators
from .generators import (
    random_string,
    random_user_name,
    random_email,
)

# Identity service fixtures
from .identity_fixtures import (
    make_identity_user,
    make_user_doc,
    make_role,
    make_role_doc,
    make_organization_unit,
    make_organization_unit_doc,
    make_user_create_request,
)

# CMS kit service fixtures
from .cms_fixtures import (
    make_blog,
    make_blog_post,
    make_cms_user,
)

__all__ = [
    'make_id', 'make_timestamp',
    'random_string', 'random_user_name', 'random_email',
    'make_identity_user', 'make_user_doc', 'make_role', 'make_role_doc',
    'make_organization_unit', 'make_organization_unit_doc', 'make_user_create_request',
    'make_blog', 'make_blog_post', 'make_cms_user',
]
