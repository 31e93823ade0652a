"""
Central constants for the portal.

Filter vocabularies are presentation data: they drive the dropdowns on the
public scholarship listing. Filtering itself accepts any string.
"""
from __future__ import annotations

COUNTRIES = (
    "UNITED KINGDOM",
    "IRELAND",
    "GERMANY",
    "AUSTRALIA",
    "USA",
    "CANADA",
)

FIELDS_OF_STUDY = (
    "ARTS",
    "BUSINESS, MANAGEMENT AND ECONOMICS",
    "ENGINEERING AND TECHNOLOGY",
    "HEALTH SCIENCES, MEDICINE, NURSING, PARAMEDIC AND KINESIOLOGY",
    "LAW, POLITICS, SOCIAL, and SCIENCES",
)

DEGREE_LEVELS = (
    "4-YEAR BACHELOR'S DEGREE",
    "TOP-UP DEGREE",
    "2-YEAR UNDERGRADUATE DIPLOMA",
    "INTEGRATED MASTERS",
    "MASTER'S DEGREE",
    "DOCTORAL/PHD",
    "POSTGRADUATE DIPLOMA",
    "POSTGRADUATE CERTIFICATE",
)

# (key, label) pairs; an empty key means the default ordering (soonest deadline)
SORT_OPTIONS = (
    ("", "Deadline (Soonest)"),
    ("deadline_desc", "Deadline (Latest)"),
    ("amount_desc", "Amount (Highest)"),
    ("amount_asc", "Amount (Lowest)"),
    ("country_asc", "Country (A-Z)"),
)

FILTER_OPTIONS = {
    "countries": COUNTRIES,
    "fields_of_study": FIELDS_OF_STUDY,
    "degree_levels": DEGREE_LEVELS,
    "sort_options": SORT_OPTIONS,
}

INQUIRY_TYPES = ("General", "Scholarship", "Travel", "Education")

DEFAULT_CURRENCY = "USD"
