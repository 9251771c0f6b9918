"""PDF generation for weekly plans.

This module creates printable PDF reports showing:
- The weekly grid of representatives by day, colored by status and badge
- The slot ledger of a weekly snapshot
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from shiftledger.audit.models import WeeklySnapshot
from shiftledger.domain.models import (
    AssignmentType,
    Badge,
    DailyPresence,
    DayStatus,
    Representative,
    WeeklyPlan,
)

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "working": (0.6, 0.8, 0.6),  # Green
    "off": (0.92, 0.92, 0.92),  # Light gray
    Badge.AUSENCIA: (0.9, 0.5, 0.5),  # Red
    Badge.VACACIONES: (0.5, 0.7, 0.9),  # Blue
    Badge.LICENCIA: (0.7, 0.6, 0.9),  # Purple
    Badge.CUBIERTO: (1.0, 0.9, 0.5),  # Yellow
    Badge.CUBRIENDO: (0.9, 0.7, 0.4),  # Orange
}

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def cell_label(presence: Optional[DailyPresence]) -> str:
    """Short text for one grid cell."""
    if presence is None:
        return ""
    if presence.type is not None and presence.status == DayStatus.OFF:
        return presence.type.value[:3]
    assignment = presence.assignment
    if assignment.type == AssignmentType.BOTH:
        shifts = "D+N"
    elif assignment.type == AssignmentType.SINGLE:
        shifts = assignment.shift.value[0]
    else:
        shifts = "-"
    if presence.badge is not None:
        return f"{shifts} {presence.badge.value[:3]}"
    return shifts


def cell_color(presence: Optional[DailyPresence]) -> tuple[float, float, float]:
    if presence is None:
        return COLORS["off"]
    if presence.badge in COLORS:
        return COLORS[presence.badge]
    return COLORS["working"] if presence.status == DayStatus.WORKING else COLORS["off"]


class PDFGenerator:
    """Generates printable PDF weekly reports.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(plan, representatives_map, "week.pdf", snapshot=snapshot)
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        plan: WeeklyPlan,
        representatives_map: dict[str, Representative],
        output_path: Union[str, Path],
        snapshot: Optional[WeeklySnapshot] = None,
    ) -> None:
        """Generate the PDF report and save to file.

        Args:
            plan: The weekly plan to render.
            representatives_map: Dict mapping representative IDs to Representatives.
            output_path: Path to save the PDF.
            snapshot: Optional snapshot; adds a slot ledger page.
        """
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw_plan_pages(c, plan, representatives_map)
        if snapshot is not None:
            self._draw_snapshot_page(c, snapshot, representatives_map)
        c.save()

    def generate_to_buffer(
        self,
        plan: WeeklyPlan,
        representatives_map: dict[str, Representative],
        snapshot: Optional[WeeklySnapshot] = None,
    ) -> BytesIO:
        """Generate the PDF report and return it as a bytes buffer."""
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw_plan_pages(c, plan, representatives_map)
        if snapshot is not None:
            self._draw_snapshot_page(c, snapshot, representatives_map)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_plan_pages(
        self,
        c,
        plan: WeeklyPlan,
        representatives_map: dict[str, Representative],
    ) -> None:
        """Draw the weekly grid, paginated by representative."""
        row_height = 22
        header_height = 60
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))

        grid_left = self.margin + 140  # Space for names
        column_width = (self.page_width - self.margin - grid_left) / 7
        dates = plan.dates

        agents = plan.agents or []
        total_pages = max(1, (len(agents) + rows_per_page - 1) // rows_per_page)
        for page_index in range(total_pages):
            page_agents = agents[page_index * rows_per_page : (page_index + 1) * rows_per_page]

            c.setFont("Helvetica-Bold", 16)
            c.drawString(
                self.margin,
                self.page_height - self.margin - 20,
                f"Weekly Plan - {plan.week_start.strftime('%B %d, %Y')}",
            )
            c.setFont("Helvetica", 10)
            c.drawString(
                self.margin,
                self.page_height - self.margin - 35,
                f"Representatives: {len(agents)}",
            )

            y = self.page_height - self.margin - header_height
            c.setFont("Helvetica-Bold", 9)
            for i, d in enumerate(dates):
                x = grid_left + i * column_width
                c.drawCentredString(
                    x + column_width / 2,
                    y,
                    f"{DAY_NAMES[d.weekday()]} {d.day:02d}",
                )

            for agent in page_agents:
                y -= row_height
                rep = representatives_map.get(agent.representative_id)
                name = rep.name if rep else agent.representative_id
                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica", 9)
                c.drawString(self.margin, y + row_height / 2 - 3, name[:24])

                for i, d in enumerate(dates):
                    presence = agent.days.get(d)
                    x = grid_left + i * column_width
                    c.setFillColorRGB(*cell_color(presence))
                    c.setStrokeColorRGB(0.6, 0.6, 0.6)
                    c.rect(x, y, column_width, row_height - 2, fill=1, stroke=1)
                    c.setFillColorRGB(0, 0, 0)
                    c.setFont("Helvetica", 8)
                    c.drawCentredString(
                        x + column_width / 2, y + row_height / 2 - 4, cell_label(presence)
                    )

            self._draw_legend(c, self.margin, self.margin + 10)

            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"Page {page_index + 1} of {total_pages}",
            )
            c.showPage()

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [
            ("working", "Working"),
            ("off", "Off"),
            (Badge.AUSENCIA, "Absence"),
            (Badge.VACACIONES, "Vacation"),
            (Badge.LICENCIA, "Leave"),
            (Badge.CUBIERTO, "Covered"),
            (Badge.CUBRIENDO, "Covering"),
        ]

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for key, label in items:
            c.setFillColorRGB(*COLORS[key])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 70

    def _draw_snapshot_page(
        self,
        c,
        snapshot: WeeklySnapshot,
        representatives_map: dict[str, Representative],
    ) -> None:
        """Draw the slot ledger table with totals."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Slot Ledger - {snapshot.iso_week} ({snapshot.week_start} to {snapshot.week_end})",
        )

        headers = ["Representative", "Planned", "Executed", "Absence", "Covered", "Covering", "Uncovered"]
        widths = [180, 80, 80, 80, 80, 80, 80]

        y = self.page_height - self.margin - 60
        c.setFont("Helvetica-Bold", 10)
        x = self.margin
        for header, width in zip(headers, widths):
            c.drawString(x, y, header)
            x += width

        c.setFont("Helvetica", 10)
        for rep in snapshot.by_representative:
            y -= 15
            if y < self.margin + 40:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 10)
            representative = representatives_map.get(rep.rep_id)
            name = representative.name if representative else rep.rep_id
            values = [
                name[:28],
                rep.planned_slots,
                rep.executed_slots,
                rep.absence_slots,
                rep.covered_slots,
                rep.covering_slots,
                rep.uncovered_slots,
            ]
            x = self.margin
            for value, width in zip(values, widths):
                c.drawString(x, y, str(value))
                x += width

        totals = snapshot.totals
        y -= 25
        c.setFont("Helvetica-Bold", 10)
        c.drawString(
            self.margin,
            y,
            f"Totals: planned {totals.planned_slots}, executed {totals.executed_slots}, "
            f"absence {totals.absence_slots}, coverage {totals.coverage_slots}, "
            f"uncovered {totals.uncovered_slots}",
        )
        c.showPage()
