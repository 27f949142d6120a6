"""
Salary slip documents.

Generation runs in two phases:
  1. render the PDF and write it to <documents_dir>/slip-<id>.pdf
  2. attach: record that file name as the slip's pdf_path

Phase 2 is idempotent and can be re-run alone when the file is already on
disk. Regenerating the same slip overwrites the same file; concurrent
regenerations race and the last writer wins.
"""
import logging
import os
import uuid
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Union

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from backoffice.core.exceptions import InternalError, NotFoundError
from backoffice.repositories.base import SalarySlipStore
from backoffice.schemas.salary_slip import SalarySlipRecord

logger = logging.getLogger(__name__)

# Fixed order of the breakdown on every slip
BREAKDOWN = (
    ("Basic", "basic"),
    ("HRA", "hra"),
    ("Allowances", "allowances"),
    ("PF", "pf"),
    ("Tax", "tax"),
    ("Other Deductions", "other_deductions"),
)


def document_name(slip_id: str) -> str:
    return f"slip-{slip_id}.pdf"


class SlipDocumentGenerator:
    def __init__(
        self,
        store: SalarySlipStore,
        documents_dir: Union[str, Path],
        currency_symbol: str = "Rs."
    ):
        self.store = store
        self.documents_dir = Path(documents_dir)
        self.currency_symbol = currency_symbol

    def _money(self, amount: float) -> str:
        return f"{self.currency_symbol} {amount:,.2f}"

    def render(self, slip: SalarySlipRecord) -> bytes:
        """Single A4 page: identity, period, breakdown, net pay."""
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=A4)
        width, height = A4
        left = 25 * mm
        right = width - 25 * mm

        c.setAuthor("HR Back Office")
        c.setTitle(f"Salary Slip - {slip.employee_name or slip.id}")

        # Header
        c.setFont("Helvetica-Bold", 18)
        c.drawCentredString(width / 2, height - 25 * mm, "Salary Slip")

        # Identity and period
        c.setFont("Helvetica", 12)
        y = height - 45 * mm
        period = " ".join(str(p) for p in (slip.month, slip.year) if p)
        for label, value in (
            ("Employee", slip.employee_name),
            ("Employee ID", slip.emp_id),
            ("Designation", slip.designation),
            ("Month/Year", period),
        ):
            c.drawString(left, y, f"{label}: {value or ''}")
            y -= 7 * mm

        y -= 5 * mm
        c.setStrokeColorRGB(0.85, 0.85, 0.85)
        c.line(left, y + 4 * mm, right, y + 4 * mm)

        for label, attr in BREAKDOWN:
            c.drawString(left, y, label)
            c.drawRightString(right, y, self._money(getattr(slip, attr)))
            y -= 7 * mm

        c.line(left, y + 4 * mm, right, y + 4 * mm)
        y -= 3 * mm

        # Net pay, underlined
        c.setFont("Helvetica-Bold", 13)
        net_text = f"Net Pay: {self._money(slip.net_pay)}"
        c.drawString(left, y, net_text)
        c.setStrokeColorRGB(0, 0, 0)
        c.line(left, y - 1.5 * mm, left + c.stringWidth(net_text, "Helvetica-Bold", 13), y - 1.5 * mm)

        c.setFont("Helvetica-Oblique", 9)
        c.drawCentredString(
            width / 2,
            20 * mm,
            f"Computer-generated document. Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}"
        )

        c.showPage()
        c.save()
        return buffer.getvalue()

    def _write(self, name: str, content: bytes) -> Path:
        self.documents_dir.mkdir(parents=True, exist_ok=True)
        target = self.documents_dir / name
        tmp = self.documents_dir / f".{name}.{uuid.uuid4().hex}.tmp"
        try:
            tmp.write_bytes(content)
            os.replace(tmp, target)
        finally:
            if tmp.exists():
                tmp.unlink()
        return target

    def generate(self, slip_id: str) -> str:
        """Render, write, attach. Returns the slip's pdf_path."""
        slip = self.store.get(slip_id)
        if slip is None:
            raise NotFoundError("Salary slip", slip_id)

        name = document_name(slip.id)
        try:
            content = self.render(slip)
            self._write(name, content)
        except OSError as e:
            logger.exception(f"Could not write document for slip {slip_id}")
            raise InternalError("Failed to store salary slip document") from e
        except Exception as e:
            logger.exception(f"Could not render document for slip {slip_id}")
            raise InternalError("Failed to render salary slip document") from e

        logger.info(f"Salary slip document written: {name} ({len(content)} bytes)")
        return self.attach(slip.id).pdf_path

    def attach(self, slip_id: str) -> SalarySlipRecord:
        """Record an already-written document on the slip. Safe to repeat."""
        name = document_name(slip_id)
        if not (self.documents_dir / name).is_file():
            raise NotFoundError("Salary slip document", slip_id)
        updated = self.store.set_pdf_path(slip_id, name)
        if updated is None:
            raise NotFoundError("Salary slip", slip_id)
        return updated

    def open_document(self, slip_id: str) -> Path:
        """Absolute path of the stored document, for streaming."""
        slip = self.store.get(slip_id)
        if slip is None or not slip.pdf_path:
            raise NotFoundError("Salary slip document", slip_id)

        root = self.documents_dir.resolve()
        path = (root / slip.pdf_path).resolve()
        if root not in path.parents or not path.is_file():
            # Referenced but missing on disk, or pointing outside the documents directory
            raise NotFoundError("Salary slip document", slip_id)
        return path
