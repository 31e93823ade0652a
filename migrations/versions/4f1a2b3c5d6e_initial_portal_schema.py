"""initial portal schema

Revision ID: 4f1a2b3c5d6e
Revises:
Create Date: 2026-01-10 09:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1a2b3c5d6e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create platform tables (users/roles/permissions/audit) and pages, scholarships, contact_inquiries."""
    conn = op.get_bind()
    inspector = sa.inspect(conn)
    existing_tables = set(inspector.get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(320), nullable=False, unique=True),
            sa.Column("password_hash", sa.String(255), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if "roles" not in existing_tables:
        op.create_table(
            "roles",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("key", sa.String(64), nullable=False, unique=True),
            sa.Column("name", sa.String(128), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if "permissions" not in existing_tables:
        op.create_table(
            "permissions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("key", sa.String(128), nullable=False, unique=True),
            sa.Column("name", sa.String(128), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if "user_roles" not in existing_tables:
        op.create_table(
            "user_roles",
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
            sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
        )

    if "role_permissions" not in existing_tables:
        op.create_table(
            "role_permissions",
            sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
            sa.Column("permission_id", sa.Integer(), sa.ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
        )

    if "audit_events" not in existing_tables:
        op.create_table(
            "audit_events",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("request_id", sa.String(64), nullable=True),
            sa.Column("client_ip", sa.String(64), nullable=True),
            sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("actor_user_email", sa.String(320), nullable=True),
            sa.Column("action", sa.String(128), nullable=False),
            sa.Column("entity_type", sa.String(128), nullable=True),
            sa.Column("entity_id", sa.String(128), nullable=True),
            sa.Column("reason", sa.String(512), nullable=True),
            sa.Column("metadata_json", sa.Text(), nullable=True),
        )

    if "pages" not in existing_tables:
        op.create_table(
            "pages",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("slug", sa.String(200), nullable=False, unique=True),
            sa.Column("title", sa.String(500), nullable=False),
            sa.Column("hero_image_url", sa.String(1000), nullable=True),
            sa.Column("content_html", sa.Text(), nullable=False),
            sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("seo_description", sa.String(500), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("last_updated", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if "scholarships" not in existing_tables:
        op.create_table(
            "scholarships",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("title", sa.String(200), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("country", sa.String(100), nullable=False),
            sa.Column("field_of_study", sa.String(100), nullable=False),
            sa.Column("degree_level", sa.String(50), nullable=False),
            sa.Column("deadline", sa.DateTime(), nullable=False),
            sa.Column("amount", sa.Numeric(18, 2), nullable=False),
            sa.Column("currency", sa.String(10), nullable=False, server_default="USD"),
            sa.Column("eligibility", sa.Text(), nullable=False),
            sa.Column("required_documents", sa.Text(), nullable=False),
            sa.Column("application_url", sa.String(500), nullable=True),
            sa.Column("official_website", sa.String(500), nullable=True),
            sa.Column("additional_info", sa.String(1000), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("last_updated", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_scholarships_active_deadline", "scholarships", ["is_active", "deadline"])
        op.create_index("idx_scholarships_country", "scholarships", ["country"])
        op.create_index("idx_scholarships_field_of_study", "scholarships", ["field_of_study"])
        op.create_index("idx_scholarships_degree_level", "scholarships", ["degree_level"])

    if "contact_inquiries" not in existing_tables:
        op.create_table(
            "contact_inquiries",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("full_name", sa.String(100), nullable=False),
            sa.Column("email_address", sa.String(100), nullable=False),
            sa.Column("subject", sa.String(200), nullable=False),
            sa.Column("message", sa.Text(), nullable=False),
            sa.Column("phone_number", sa.String(20), nullable=True),
            sa.Column("inquiry_type", sa.String(50), nullable=False, server_default="General"),
            sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("read_date", sa.DateTime(), nullable=True),
            sa.Column("admin_notes", sa.String(500), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("last_updated", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_contact_inquiries_created_at", "contact_inquiries", ["created_at"])
        op.create_index("idx_contact_inquiries_read_archived", "contact_inquiries", ["is_read", "is_archived"])


def downgrade() -> None:
    for table in (
        "contact_inquiries",
        "scholarships",
        "pages",
        "audit_events",
        "role_permissions",
        "user_roles",
        "permissions",
        "roles",
        "users",
    ):
        op.drop_table(table)
