from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import isoformat, parse_iso_date
from ..common.web import admin_required, current_owner_id, error_response
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import AttendanceRecord, DailyWorkerRow


def record_to_json(r: AttendanceRecord) -> dict:
    return {
        "attendanceId": r.attendance_id,
        "workDate": r.work_date.isoformat(),
        "checkInTime": isoformat(r.check_in_time),
        "checkOutTime": isoformat(r.check_out_time),
        "status": r.status.value,
        "isLate": r.is_late,
        "scannerId": r.scanner_id,
        "note": r.note,
    }


def row_to_json(r: DailyWorkerRow) -> dict:
    return {
        "workerId": r.worker_id,
        "workerName": r.worker_name,
        "status": r.status.value,
        "checkInTime": isoformat(r.check_in_time),
        "checkOutTime": isoformat(r.check_out_time),
        "isLate": r.is_late,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @admin_required
    def attendance_summary():
        try:
            raw = request.args.get("date")
            try:
                work_date = parse_iso_date(raw) if raw else container.clock.today()
            except ValueError:
                raise ValidationError("date must be YYYY-MM-DD")

            summary = container.report_service.daily_summary(current_owner_id(), work_date)
            return jsonify(
                {
                    "date": summary.work_date.isoformat(),
                    "totals": summary.totals,
                    "workers": [row_to_json(r) for r in summary.rows],
                }
            ), 200
        except Exception as e:
            return error_response(e)

    @app.route("/workers/<int:worker_id>/history", methods=["GET"], endpoint="worker_history")
    @admin_required
    def worker_history(worker_id: int):
        try:
            worker = container.workers_repo.get_by_id(worker_id)
            if worker is None:
                raise NotFoundError(f"worker {worker_id} not found")
            if worker.owner_id != current_owner_id():
                raise AuthorizationError("worker belongs to another tenant")

            limit = request.args.get("limit", DEFAULT_HISTORY_LIMIT, type=int)
            records = container.report_service.history(worker_id, limit=max(1, min(int(limit), 500)))
            return jsonify({"workerId": worker_id, "workerName": worker.name, "records": [record_to_json(r) for r in records]}), 200
        except Exception as e:
            return error_response(e)
