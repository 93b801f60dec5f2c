"""Command-line entry point for the HR desk leave and overtime workflows."""

from __future__ import annotations

import argparse
import logging
from datetime import date
from typing import Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, get_settings
from .exceptions import DatabaseOperationError, HRDeskError

logger = logging.getLogger(__name__)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {value!r}") from exc


def _leave_type(value: str) -> int | str:
    return int(value) if value.strip().isdigit() else value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hrdesk",
        description="File, review and report employee leave and overtime requests.",
    )
    parser.add_argument("--database-url", help="Override HRDESK_DATABASE_URL for this run.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables and the default leave types.")
    sub.add_parser("diag-db", help="Print table names and row counts.")

    p = sub.add_parser("init-balances", help="Open leave balances for an employee.")
    p.add_argument("--employee", type=int, required=True)
    p.add_argument("--year", type=int)
    p.add_argument("--days", type=int, help="Allocation per type (defaults to the catalog value).")

    p = sub.add_parser("submit-leave", help="Validate and file a leave request.")
    p.add_argument("--employee", type=int, required=True)
    p.add_argument("--type", dest="leave_type", type=_leave_type, required=True,
                   help="Leave type id or name, e.g. 'Vacation Leave'.")
    p.add_argument("--start", type=_iso_date)
    p.add_argument("--end", type=_iso_date)
    p.add_argument("--reason")

    for name, help_text in (("approve-leave", "Approve a pending leave request."),
                            ("reject-leave", "Reject a pending leave request.")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("request_id", type=int)
        p.add_argument("--notes")

    p = sub.add_parser("cancel-leave", help="Withdraw a leave request.")
    p.add_argument("request_id", type=int)
    p.add_argument("--employee", type=int, required=True)

    for name in ("list-leave", "list-overtime"):
        p = sub.add_parser(name, help="List requests.")
        p.add_argument("--employee", type=int)
        p.add_argument("--from", dest="start", type=_iso_date)
        p.add_argument("--to", dest="end", type=_iso_date)
        p.add_argument("--status", choices=["Pending", "Approved", "Rejected"])

    p = sub.add_parser("balances", help="Show balances and the yearly summary.")
    p.add_argument("--employee", type=int, required=True)
    p.add_argument("--year", type=int)

    p = sub.add_parser("carry-over", help="Open next year's balances from unused days.")
    p.add_argument("--year", type=int, required=True, help="Year being closed.")
    p.add_argument("--max", dest="max_days", type=int)

    p = sub.add_parser("submit-overtime", help="Validate and file an overtime request.")
    p.add_argument("--employee", type=int, required=True)
    p.add_argument("--date", dest="day")
    p.add_argument("--start")
    p.add_argument("--end")
    p.add_argument("--reason")

    for name, help_text in (("approve-overtime", "Approve a pending overtime request."),
                            ("reject-overtime", "Reject a pending overtime request.")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("request_id", type=int)
        p.add_argument("--notes")

    p = sub.add_parser("export", help="Write request history to an .xlsx workbook.")
    p.add_argument("kind", choices=["leave", "overtime"])
    p.add_argument("--out", required=True)
    p.add_argument("--employee", type=int)
    p.add_argument("--from", dest="start", type=_iso_date)
    p.add_argument("--to", dest="end", type=_iso_date)

    return parser


def _print_leave(r) -> None:
    print(f"#{r.id} emp={r.employee_id} type={r.leave_type_id} {r.start_date}..{r.end_date} "
          f"days={r.working_days} {r.status}")


def _print_overtime(r) -> None:
    print(f"#{r.id} emp={r.employee_id} {r.overtime_start:%Y-%m-%d %H:%M}-{r.overtime_end:%H:%M} "
          f"hours={r.hours:.2f} {r.status}")


def _run(args: argparse.Namespace, settings: Settings) -> int:
    from .core.database import init_db
    from .services import LeaveService, OvertimeService

    init_db(settings.database_url)
    leave = LeaveService(settings=settings)
    overtime = OvertimeService(settings=settings)
    cmd = args.command

    if cmd == "init-db":
        for lt in leave.setup_leave_types():
            print(f"{lt.id}: {lt.name} ({lt.max_days_per_year} days/year)")
        return 0

    if cmd == "diag-db":
        from .diag_db import run as run_db_diagnostics

        run_db_diagnostics(settings.database_url)
        return 0

    if cmd == "init-balances":
        for b in leave.initialize_balances(args.employee, args.year, args.days):
            print(f"type={b.leave_type_id} year={b.year} total={b.total_days} remaining={b.remaining_days}")
        return 0

    if cmd == "submit-leave":
        result = leave.submit(args.employee, args.leave_type, args.start, args.end, args.reason)
        if not result.ok:
            for msg in result.verdict.messages:
                print(msg)
            return 1
        print(f"Leave request #{result.request.id} submitted: {result.verdict.working_days} working day(s).")
        return 0

    if cmd == "approve-leave":
        _print_leave(leave.approve(args.request_id, args.notes))
        return 0
    if cmd == "reject-leave":
        _print_leave(leave.reject(args.request_id, args.notes))
        return 0
    if cmd == "cancel-leave":
        leave.cancel(args.request_id, args.employee)
        print(f"Leave request #{args.request_id} cancelled.")
        return 0

    if cmd == "list-leave":
        for r in leave.list_requests(args.employee, args.start, args.end, args.status):
            _print_leave(r)
        return 0

    if cmd == "balances":
        s = leave.summary(args.employee, args.year)
        for b in s.balances:
            print(f"type={b.leave_type_id} total={b.total_days} used={b.used_days} "
                  f"carry={b.carry_over_days} remaining={b.remaining_days}")
        print(f"{s.year}: allocated={s.total_allocated_days} used={s.total_used_days} "
              f"remaining={s.total_remaining_days} usage={s.usage_percentage:.2f}%")
        return 0

    if cmd == "carry-over":
        created = leave.carry_over(args.year, args.max_days)
        print(f"Opened {len(created)} balance(s) for {args.year + 1}.")
        return 0

    if cmd == "submit-overtime":
        result = overtime.submit(args.employee, args.day, args.start, args.end, args.reason)
        if not result.ok:
            for msg in result.verdict.messages:
                print(msg)
            return 1
        print(f"Overtime request #{result.request.id} submitted: {result.verdict.hours:.2f} hour(s).")
        return 0

    if cmd == "approve-overtime":
        _print_overtime(overtime.approve(args.request_id, args.notes))
        return 0
    if cmd == "reject-overtime":
        _print_overtime(overtime.reject(args.request_id, args.notes))
        return 0

    if cmd == "list-overtime":
        for r in overtime.list_requests(args.employee, args.start, args.end, args.status):
            _print_overtime(r)
        return 0

    if cmd == "export":
        from .services.export import export_leave_requests, export_overtime_requests

        if args.kind == "leave":
            names = {lt.id: lt.name for lt in leave.leave_types()}
            path = export_leave_requests(leave.list_requests(args.employee, args.start, args.end),
                                         args.out, names)
        else:
            path = export_overtime_requests(overtime.list_requests(args.employee, args.start, args.end),
                                            args.out)
        print(f"Wrote {path}")
        return 0

    raise AssertionError(f"unhandled command {cmd}")


def main(argv: Sequence[str] | None = None) -> int:
    """Parse CLI arguments and dispatch to the requested workflow."""

    args = _build_parser().parse_args(None if argv is None else list(argv))

    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"Invalid configuration: {exc}")
        return 1
    if args.database_url:
        settings = settings.model_copy(update={"database_url": args.database_url})
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return _run(args, settings)
    except (DatabaseOperationError, SQLAlchemyError):
        logger.exception("Database operation failed")
        print("A database error occurred; see the log for details.")
        return 1
    except HRDeskError as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
