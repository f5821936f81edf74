"""Unit tests for ORM model structure.

Verifies table names, nullability, constraints, relationships and
package registration. No database connection is required.
"""

import src.infrastructure.persistence  # noqa: F401  registers all mappers
from src.infrastructure.database import Base
from src.infrastructure.persistence.models import __all__ as models_all
from src.infrastructure.persistence.models.users import Post, User


# --- Table names ---

def test_user_tablename():
    assert User.__tablename__ == "users"


def test_post_tablename():
    assert Post.__tablename__ == "posts"


# --- Nullable / not-null columns ---

def test_user_email_is_not_nullable():
    assert User.__table__.c["email"].nullable is False


def test_user_name_is_nullable():
    assert User.__table__.c["name"].nullable is True


def test_post_author_id_is_nullable():
    # Posts outlive their author.
    assert Post.__table__.c["author_id"].nullable is True


def test_post_contents_is_nullable():
    assert Post.__table__.c["contents"].nullable is True


def test_post_title_is_not_nullable():
    assert Post.__table__.c["title"].nullable is False


# --- Defaults ---

def test_post_published_has_server_default():
    assert Post.__table__.c["published"].server_default is not None


def test_post_view_count_has_server_default():
    assert Post.__table__.c["view_count"].server_default is not None


def test_post_update_at_refreshes_on_update():
    assert Post.__table__.c["update_at"].onupdate is not None


# --- Constraints ---

def test_user_email_is_unique():
    constraint_names = {c.name for c in User.__table__.constraints}
    assert "uq_users_email" in constraint_names


def test_post_author_fk_sets_null_on_delete():
    (fk,) = Post.__table__.c["author_id"].foreign_keys
    assert fk.target_fullname == "users.id"
    assert fk.ondelete == "SET NULL"
    assert fk.onupdate == "CASCADE"


# --- Relationships ---

def test_user_posts_relationship_is_a_list():
    assert User.__mapper__.relationships["posts"].uselist is True


def test_post_author_relationship_is_scalar():
    assert Post.__mapper__.relationships["author"].uselist is False


# --- Package registration ---

def test_all_models_registered_in_base_metadata():
    registered = set(Base.metadata.tables.keys())
    assert {"users", "posts"} <= registered


def test_models_package_exports_2_classes():
    assert len(models_all) == 2
