# backend/csv_export.py
import csv
import io

CSV_HEADER = ["title", "amount", "category", "date"]


def export_csv(expenses):
    """Render expenses (models.Expense) as CSV text with a header row.

    Fields holding commas, quotes or line breaks are quoted so the output
    parses back with any CSV reader.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for e in expenses:
        writer.writerow([
            e.title,
            f"{float(e.amount):.2f}",
            e.category_name or "",
            str(e.date)[:10],
        ])
    return buf.getvalue()
