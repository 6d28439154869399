from __future__ import annotations

from datetime import datetime, timezone

PAGE_WIDTH = 612
PAGE_HEIGHT = 792
LINE_HEIGHT = 14
FONT_SIZE = 10


def _escape_pdf_text(value: str) -> str:
    escaped = value.replace("\\", "\\\\")
    escaped = escaped.replace("(", "\\(")
    escaped = escaped.replace(")", "\\)")
    # Base-14 fonts only cover Latin-1.
    return escaped.encode("latin-1", "replace").decode("latin-1")


def _page_stream(lines: list[str], *, page_no: int, page_count: int) -> bytes:
    commands = ["BT", f"/F1 {FONT_SIZE} Tf", f"{LINE_HEIGHT} TL", f"40 {PAGE_HEIGHT - 50} Td"]
    for line in lines:
        commands.append(f"({_escape_pdf_text(line)}) Tj T*")
    commands.append("ET")
    commands.extend(
        [
            "BT",
            "/F1 8 Tf",
            f"{PAGE_WIDTH - 110} 30 Td",
            f"(Page {page_no} of {page_count}) Tj",
            "ET",
        ]
    )
    return "\n".join(commands).encode("latin-1")


def paginate(lines: list[str], *, lines_per_page: int) -> list[list[str]]:
    if not lines:
        return [[]]
    return [lines[i : i + lines_per_page] for i in range(0, len(lines), lines_per_page)]


def build_text_pdf(
    *,
    title: str,
    lines: list[str],
    generated_at: datetime | None = None,
    lines_per_page: int = 50,
) -> bytes:
    """
    Render monospaced text lines into a minimal multi-page PDF.

    The title and timestamp head the first page; long reports flow onto
    further pages instead of being cut off.
    """
    timestamp = generated_at or datetime.now(timezone.utc)
    content_lines = [title, f"Generated: {timestamp.strftime('%Y-%m-%d %H:%M UTC')}", ""]
    content_lines.extend(line.rstrip() for line in lines)
    pages = paginate(content_lines, lines_per_page=lines_per_page)

    # 1: catalog, 2: pages, 3: font, then (page, content) pairs.
    page_obj_ids = [4 + 2 * i for i in range(len(pages))]
    kids = " ".join(f"{obj_id} 0 R" for obj_id in page_obj_ids)
    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode("ascii"),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Courier /Encoding /WinAnsiEncoding >>",
    ]
    for index, page_lines in enumerate(pages):
        content_id = page_obj_ids[index] + 1
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {PAGE_WIDTH} {PAGE_HEIGHT}] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {content_id} 0 R >>"
            ).encode("ascii")
        )
        stream = _page_stream(page_lines, page_no=index + 1, page_count=len(pages))
        objects.append(b"<< /Length %d >>\nstream\n%s\nendstream" % (len(stream), stream))

    pdf = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"
    offsets: list[int] = []
    for index, obj in enumerate(objects, start=1):
        offsets.append(len(pdf))
        pdf += f"{index} 0 obj\n".encode("ascii")
        pdf += obj + b"\nendobj\n"

    xref_offset = len(pdf)
    pdf += f"xref\n0 {len(objects) + 1}\n".encode("ascii")
    pdf += b"0000000000 65535 f \n"
    for offset in offsets:
        pdf += f"{offset:010d} 00000 n \n".encode("ascii")
    pdf += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF"
    ).encode("ascii")
    return pdf
