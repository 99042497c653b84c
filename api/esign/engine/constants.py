from .state import FieldType

SIGNER_COLORS = (
    "#3B82F6",  # blue
    "#F97316",  # orange
    "#10B981",  # green
    "#8B5CF6",  # purple
    "#EC4899",  # pink
    "#F59E0B",  # amber
    "#06B6D4",  # cyan
    "#EF4444",  # red
)

# percent of page width/height
DEFAULT_FIELD_SIZES = {
    FieldType.SIGNATURE: (20.0, 6.0),
    FieldType.INITIALS: (8.0, 6.0),
    FieldType.DATE: (15.0, 4.0),
    FieldType.NAME: (25.0, 4.0),
    FieldType.EMAIL: (25.0, 4.0),
    FieldType.COMPANY: (25.0, 4.0),
    FieldType.TITLE: (20.0, 4.0),
    FieldType.TEXTBOX: (30.0, 4.0),
    FieldType.CHECKBOX: (3.0, 3.0),
    FieldType.DROPDOWN: (20.0, 4.0),
    FieldType.RADIO: (15.0, 8.0),
}

FIELD_LABELS = {
    FieldType.SIGNATURE: "Signature",
    FieldType.INITIALS: "Initials",
    FieldType.DATE: "Date Signed",
    FieldType.NAME: "Full Name",
    FieldType.EMAIL: "Email Address",
    FieldType.COMPANY: "Company",
    FieldType.TITLE: "Title",
    FieldType.TEXTBOX: "Text Field",
    FieldType.CHECKBOX: "Checkbox",
    FieldType.DROPDOWN: "Dropdown",
    FieldType.RADIO: "Radio Group",
}

SIGNATURE_MARK_TYPES = frozenset({FieldType.SIGNATURE, FieldType.INITIALS})

MAX_X_PERCENT = 80.0
MAX_Y_PERCENT = 90.0
MIN_FIELD_SIZE = 1.0
MAX_FIELD_SIZE = 100.0

ALLOWED_CONTENT_TYPES = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
}
DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024
