import base64
import io
import json
import random
import re
import time
from datetime import date, datetime, timedelta, timezone

import qrcode


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today():
    return utcnow().date()


def validate_email(email):
    return re.match(r'^[\w\.\+-]+@[\w\.-]+\.\w+$', email or "") is not None


def parse_iso(value):
    """
    Parse an ISO-8601 date or datetime string.
    Aware values are converted to naive UTC; returns None when unparseable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        text = str(value or "").strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def add_months(start, months):
    """
    Add months while keeping day in valid range (e.g., Jan 31 + 1 month => Feb 28/29).
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    if m == 12:
        next_month = date(y + 1, 1, 1)
    else:
        next_month = date(y, m + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return start.replace(year=y, month=m, day=min(start.day, last_day))


def add_years(start, years=1):
    return add_months(start, 12 * years)


def month_start(day):
    return datetime(day.year, day.month, 1)


def isoformat(value):
    return value.isoformat() if value else None


def money(value):
    return float(value) if value is not None else 0.0


def ordinal(n):
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def long_date(value):
    """'June 15th 2024'"""
    return f"{value.strftime('%B')} {ordinal(value.day)} {value.year}"


def long_datetime(value):
    """'June 15th 2024, 10:00 am'"""
    hour = value.hour % 12 or 12
    meridiem = "am" if value.hour < 12 else "pm"
    return f"{long_date(value)}, {hour}:{value.minute:02d} {meridiem}"


def _timestamp_code(prefix):
    return f"{prefix}{int(time.time() * 1000)}{random.randint(0, 999)}"


def generate_member_id():
    return _timestamp_code("MEM")


def generate_transaction_id():
    return _timestamp_code("TXN")


def build_qr_code(member_id, first_name, last_name, membership_type):
    """
    Encode the member identity as a QR PNG and return it as a data URL.
    """
    payload = json.dumps({
        "memberId": member_id,
        "name": f"{first_name} {last_name}",
        "type": membership_type,
    }, separators=(",", ":"))

    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=4,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, "PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def paginate(query, page, limit):
    """Run a LIMIT/OFFSET page over a Flask-SQLAlchemy query."""
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else 10
    result = query.paginate(page=page, per_page=limit, error_out=False, count=True)
    return result.items, {
        "currentPage": page,
        "totalPages": result.pages,
        "totalItems": result.total,
        "itemsPerPage": limit,
    }
