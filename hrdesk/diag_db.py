# diag_db.py
from sqlalchemy import text

from .core.database import get_engine, table_names

_COUNTED = ("leave_types", "leave_balances", "leave_requests", "overtime_requests")


def run(url: str | None = None) -> dict:
    eng = get_engine(url)
    print("DB URL:", eng.url.render_as_string(hide_password=True))

    names = table_names(url)
    print("Tables:", ", ".join(names) or "<none>")

    counts: dict[str, int] = {}
    with eng.connect() as conn:
        for name in _COUNTED:
            if name not in names:
                print(f"{name} present: False")
                continue
            counts[name] = conn.execute(text(f"SELECT COUNT(*) FROM {name}")).scalar() or 0
            print(f"{name} rows:", counts[name])

        if "leave_requests" in names:
            by_status = conn.execute(text(
                "SELECT status, COUNT(*) FROM leave_requests GROUP BY status ORDER BY status"
            )).fetchall()
            print("leave requests by status:", [tuple(r) for r in by_status])
    return counts
