"""Persisted UI preferences (theme, default sort, page size)."""
from dataclasses import dataclass

from leet_tracker.db import get_connection
from leet_tracker.pipeline import PAGE_SIZE, SORT_FIELDS, SORT_ORDERS, ListConfig

THEMES = ("light", "dark", "cupcake")


@dataclass
class Preferences:
    theme: str = "light"
    sort_by: str = "date_attempted"
    sort_order: str = "desc"
    page_size: int = PAGE_SIZE

    def list_config(self) -> ListConfig:
        return ListConfig(sort_by=self.sort_by, sort_order=self.sort_order, page_size=self.page_size)


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def load_preferences(db_path: str) -> Preferences:
    """Read stored preferences, falling back to defaults for missing or bad values."""
    defaults = Preferences()
    theme = get_setting(db_path, "theme", defaults.theme)
    sort_by = get_setting(db_path, "sort_by", defaults.sort_by)
    sort_order = get_setting(db_path, "sort_order", defaults.sort_order)
    try:
        page_size = int(get_setting(db_path, "page_size", str(defaults.page_size)))
    except ValueError:
        page_size = defaults.page_size
    return Preferences(
        theme=theme if theme in THEMES else defaults.theme,
        sort_by=sort_by if sort_by in SORT_FIELDS else defaults.sort_by,
        sort_order=sort_order if sort_order in SORT_ORDERS else defaults.sort_order,
        page_size=page_size if page_size > 0 else defaults.page_size,
    )


def save_preferences(db_path: str, prefs: Preferences) -> None:
    if prefs.theme not in THEMES:
        raise ValueError(f"Unknown theme {prefs.theme!r}")
    if prefs.sort_by not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by {prefs.sort_by!r}")
    if prefs.sort_order not in SORT_ORDERS:
        raise ValueError(f"Invalid sort order {prefs.sort_order!r}")
    if prefs.page_size <= 0:
        raise ValueError("Page size must be positive")
    set_setting(db_path, "theme", prefs.theme)
    set_setting(db_path, "sort_by", prefs.sort_by)
    set_setting(db_path, "sort_order", prefs.sort_order)
    set_setting(db_path, "page_size", str(prefs.page_size))
