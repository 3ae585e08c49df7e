from __future__ import annotations

import csv
import io

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.web import current_institute_id, login_required, ok
from ..container import Container
from .service import REPORT_FIELDS


def register(app: Flask, container: Container) -> None:
    def _range():
        start = parse_optional_date(request.args.get("start"), "start")
        end = parse_optional_date(request.args.get("end"), "end")
        return start, end

    def _write_report_csv(*, rows, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/classes/<int:class_id>/report", methods=["GET"], endpoint="class_report")
    @login_required
    def class_report(class_id: int):
        container.class_service.get(class_id, current_institute_id=current_institute_id())
        start, end = _range()
        data = container.report_service.build_class_report(class_id, start=start, end=end)
        return ok(rows=data.rows, summary=data.summary)

    @app.route("/api/classes/<int:class_id>/report.csv", methods=["GET"], endpoint="class_report_csv")
    @login_required
    def class_report_csv(class_id: int):
        cls = container.class_service.get(class_id, current_institute_id=current_institute_id())
        start, end = _range()
        rows = container.report_service.class_report_rows(class_id, start=start, end=end)

        suffix = ""
        if start and end:
            suffix = f"_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}"
        return _write_report_csv(rows=rows, filename=f"attendance_class_{cls.class_id}{suffix}.csv")
