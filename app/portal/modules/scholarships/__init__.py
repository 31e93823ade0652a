"""
Scholarship directory.

- Public listing: active scholarships with an open deadline, filtered, sorted and paginated
- Public detail: any active scholarship by id, plus up to 3 related ones
- Admin: full CRUD plus internal notes, every change recorded to the audit trail
"""
