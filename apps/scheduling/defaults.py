"""
Default board columns.

Installed by migration 0002 when the category table is empty, and reloaded by
the seed_data command, so a new board always has at least one column.
"""

# (id, name, colour tag), in column order
DEFAULT_WARDS = [
    ("male-ward", "Male Ward", "bg-blue-50 border-blue-200"),
    ("female-ward", "Female Ward", "bg-pink-50 border-pink-200"),
    ("private-ward", "Private Ward", "bg-green-50 border-green-200"),
]
