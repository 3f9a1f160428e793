#=======================================================================================
#      REQUEST FIELD VALIDATION
#=======================================================================================
from flask import request
from exceptions import ValidationFailed
from utils import validate_email, parse_iso


def request_data():
    """JSON body, or the form fields of a multipart/form request."""
    if request.mimetype in ("multipart/form-data", "application/x-www-form-urlencoded"):
        return request.form.to_dict()
    return request.get_json(silent=True) or {}


class RequestValidator:
    """
    Collects field errors the way the mobile and admin clients expect them:
    a list of {param, msg, value, location} objects.
    Fields that pass land in `cleaned`, already converted.
    """

    def __init__(self, data, location="body"):
        self.data = data if isinstance(data, dict) else {}
        self.location = location
        self.errors = []
        self.cleaned = {}

    def _fail(self, field, msg, value=None):
        self.errors.append({
            "param": field,
            "msg": msg,
            "value": value,
            "location": self.location,
        })

    def _present(self, field, required):
        value = self.data.get(field)
        if value is None:
            if required:
                self._fail(field, f"{field} is required")
            return False, None
        return True, value

    def string(self, field, required=True, min_len=None, max_len=None, lower=False):
        present, value = self._present(field, required)
        if not present:
            return self
        if not isinstance(value, str):
            self._fail(field, f"{field} must be a string", value)
            return self

        value = value.strip()
        if required and not value:
            self._fail(field, f"{field} is required", value)
            return self
        if min_len is not None and len(value) < min_len:
            self._fail(field, f"{field} must be at least {min_len} characters", value)
            return self
        if max_len is not None and len(value) > max_len:
            self._fail(field, f"{field} must be at most {max_len} characters", value)
            return self

        self.cleaned[field] = value.lower() if lower else value
        return self

    def email(self, field="email", required=True):
        present, value = self._present(field, required)
        if not present:
            return self
        value = str(value).strip().lower()
        if not validate_email(value):
            self._fail(field, "Invalid email address", value)
            return self
        self.cleaned[field] = value
        return self

    def iso_date(self, field, required=True, date_only=False):
        present, value = self._present(field, required)
        if not present:
            return self
        parsed = parse_iso(value)
        if parsed is None:
            self._fail(field, f"{field} must be a valid ISO 8601 date", value)
            return self
        self.cleaned[field] = parsed.date() if date_only else parsed
        return self

    def choice(self, field, options, required=True):
        present, value = self._present(field, required)
        if not present:
            return self
        if value not in options:
            self._fail(field, f"{field} must be one of: {', '.join(options)}", value)
            return self
        self.cleaned[field] = value
        return self

    def integer(self, field, required=True, min_value=None):
        present, value = self._present(field, required)
        if not present:
            return self
        try:
            if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
                raise ValueError(value)
            number = int(str(value).strip()) if not isinstance(value, (int, float)) else int(value)
        except (TypeError, ValueError):
            self._fail(field, f"{field} must be an integer", value)
            return self
        if min_value is not None and number < min_value:
            self._fail(field, f"{field} must be at least {min_value}", value)
            return self
        self.cleaned[field] = number
        return self

    def number(self, field, required=True, min_value=None):
        present, value = self._present(field, required)
        if not present:
            return self
        try:
            if isinstance(value, bool):
                raise ValueError(value)
            number = float(value)
        except (TypeError, ValueError):
            self._fail(field, f"{field} must be a number", value)
            return self
        if min_value is not None and number < min_value:
            self._fail(field, f"{field} must be at least {min_value}", value)
            return self
        self.cleaned[field] = number
        return self

    def array(self, field, required=True, min_items=0):
        present, value = self._present(field, required)
        if not present:
            return self
        if not isinstance(value, list) or len(value) < min_items:
            self._fail(field, f"{field} must be a list with at least {min_items} item(s)", value)
            return self
        self.cleaned[field] = value
        return self

    def validate(self):
        if self.errors:
            raise ValidationFailed(self.errors)
        return self.cleaned
