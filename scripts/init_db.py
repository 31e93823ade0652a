import os
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.portal.models import Permission, Role, User  # noqa: E402
from app.portal.modules.pages.models import Page  # noqa: E402
from app.portal.modules.scholarships.models import Scholarship  # noqa: E402
from app.portal.utils import utcnow  # noqa: E402
from scripts._db_utils import default_database_url, script_session  # noqa: E402

PERMISSIONS = (
    ("admin.view", "Admin: view dashboard"),
    ("pages.view", "Pages: view"),
    ("pages.create", "Pages: create"),
    ("pages.edit", "Pages: edit"),
    ("pages.delete", "Pages: delete"),
    ("scholarships.view", "Scholarships: view"),
    ("scholarships.create", "Scholarships: create"),
    ("scholarships.edit", "Scholarships: edit"),
    ("scholarships.delete", "Scholarships: delete"),
    ("inquiries.view", "Inquiries: view"),
    ("inquiries.edit", "Inquiries: triage (read/archive/notes)"),
    ("inquiries.delete", "Inquiries: delete"),
)

SAMPLE_PAGES = (
    {
        "slug": "home",
        "title": "Welcome Home",
        "content_html": "<h1>Welcome to PortalBase</h1><p>This is your home page. You can edit this content from the admin panel.</p>",
        "seo_description": "Welcome to PortalBase - Your portal solution",
    },
    {
        "slug": "faq",
        "title": "Frequently Asked Questions",
        "content_html": (
            "<div><h3>How do I apply for a scholarship?</h3>"
            "<p>Browse the scholarships list and click 'Apply now' on any scholarship that interests you. "
            "Each scholarship has its own application process.</p></div>"
            "<div><h3>What services do you offer?</h3>"
            "<p>Study abroad admissions, visa support, accommodation advisory and relocation assistance.</p></div>"
        ),
    },
    {
        "slug": "privacy-policy",
        "title": "Privacy Policy",
        "content_html": "<h1>Privacy Policy</h1><p>How we handle the information you send us.</p>",
    },
    {
        "slug": "terms-of-service",
        "title": "Terms of Service",
        "content_html": "<h1>Terms of Service</h1><p>The terms that apply to using this site.</p>",
    },
)


def _sample_scholarships(now):
    return [
        Scholarship(
            title="Fulbright Foreign Student Program",
            description=(
                "The Fulbright Program is the flagship international educational exchange program sponsored by "
                "the U.S. government."
            ),
            country="USA",
            field_of_study="ARTS",
            degree_level="MASTER'S DEGREE",
            amount=Decimal("50000"),
            currency="USD",
            deadline=now + timedelta(days=180),
            eligibility="Open to international students from eligible countries with a completed undergraduate degree.",
            required_documents="1. Application form\n2. Academic transcripts\n3. Letters of recommendation\n4. Statement of purpose",
            application_url="https://foreign.fulbrightonline.org",
            official_website="https://fulbrightprogram.org",
            is_active=True,
            is_featured=True,
        ),
        Scholarship(
            title="Chevening Scholarships",
            description="Chevening Scholarships are the UK government's global scholarship programme.",
            country="UNITED KINGDOM",
            field_of_study="BUSINESS, MANAGEMENT AND ECONOMICS",
            degree_level="MASTER'S DEGREE",
            amount=Decimal("35000"),
            currency="GBP",
            deadline=now + timedelta(days=120),
            eligibility="Citizens of Chevening-eligible countries with an undergraduate degree and two years of work experience.",
            required_documents="1. Online application\n2. Academic transcripts\n3. Two references\n4. English language results",
            application_url="https://www.chevening.org",
            official_website="https://www.chevening.org",
            is_active=True,
        ),
        Scholarship(
            title="DAAD Study Scholarships",
            description="Scholarships for graduates from all disciplines to complete a postgraduate degree in Germany.",
            country="GERMANY",
            field_of_study="ENGINEERING AND TECHNOLOGY",
            degree_level="MASTER'S DEGREE",
            amount=Decimal("25000"),
            currency="EUR",
            deadline=now + timedelta(days=150),
            eligibility="Graduates holding a bachelor's degree completed no more than six years ago.",
            required_documents="1. Application form\n2. CV\n3. Motivation letter\n4. Language certificates",
            application_url="https://www.daad.de",
            official_website="https://www.daad.de",
            is_active=True,
        ),
    ]


def _ensure_perm(s: Session, key: str, name: str) -> Permission:
    p = s.query(Permission).filter(Permission.key == key).one_or_none()
    if not p:
        p = Permission(key=key, name=name)
        s.add(p)
    return p


def seed_only(*, database_url: str | None = None, with_samples: bool = True) -> None:
    """
    Seed permissions/role/admin user and sample content in an idempotent way.
    Does NOT overwrite an existing admin user's password.
    """
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@portal.com").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"
    db_url = (database_url or default_database_url()).strip()

    with script_session(db_url) as s:
        perms = [_ensure_perm(s, key, name) for key, name in PERMISSIONS]

        role_admin = s.query(Role).filter(Role.key == "admin").one_or_none()
        if not role_admin:
            role_admin = Role(key="admin", name="Administrator")
            s.add(role_admin)
        for p in perms:
            if p not in role_admin.permissions:
                role_admin.permissions.append(p)

        user = s.query(User).filter(User.email == admin_email).one_or_none()
        if not user:
            user = User(email=admin_email, password_hash=generate_password_hash(admin_password), is_active=True)
            s.add(user)
        if role_admin not in user.roles:
            user.roles.append(role_admin)

        if with_samples:
            now = utcnow()
            for values in SAMPLE_PAGES:
                if not s.query(Page.id).filter(Page.slug == values["slug"]).first():
                    s.add(Page(**values, is_published=True, created_at=now, last_updated=now))
            if not s.query(Scholarship.id).first():
                for sch in _sample_scholarships(now):
                    sch.created_at = now
                    sch.last_updated = now
                    s.add(sch)

    print("Initialized database (seed_only).")
    print(f"Admin email: {admin_email}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
