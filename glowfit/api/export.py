# glowfit/api/export.py
from typing import Any, Dict, List

from fastapi.responses import JSONResponse, Response

from glowfit.core.config import utc_now
from glowfit.services.dashboard import Columns, ExportFormat, export_filename, render_csv


def export_response(
    rows: List[Dict[str, Any]], columns: Columns, export_type: str, fmt: ExportFormat
) -> Response:
    """Wrap exported rows as a JSON envelope or a downloadable CSV file."""
    if fmt == ExportFormat.csv:
        return Response(
            content=render_csv(rows, columns).encode("utf-8"),
            media_type="text/csv; charset=utf-8",
            headers={
                "Content-Disposition": f'attachment; filename="{export_filename(export_type, fmt)}"'
            },
        )

    return JSONResponse(
        {
            "success": True,
            "data": rows,
            "total": len(rows),
            "exportedAt": utc_now().isoformat(),
            "type": export_type,
        }
    )
