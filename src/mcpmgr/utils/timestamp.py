# ABOUTME: Bidirectional codec between backup ids and timestamps
# ABOUTME: Ids look like 2026-10-18T14-03-05 or 2026-10-18T14-03-05-001
import re
from datetime import datetime

# ABOUTME: Colons are not allowed in Windows filenames, so time parts use '-'
ID_FORMAT = "%Y-%m-%dT%H-%M-%S"
DISPLAY_FORMAT = "%Y-%m-%dT%H:%M:%S"

ID_PATTERN = re.compile(
    r"^(?P<stamp>\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2})(?:-(?P<seq>\d{3}))?$"
)

MAX_SEQUENCE = 999


def encode_id(moment: datetime, sequence: int = 0) -> str:
    """Format a timestamp as a filesystem-safe backup id.

    ABOUTME: sequence > 0 adds a zero-padded suffix for same-second ids
    ABOUTME: Zero padding keeps lexicographic order == chronological order

    Examples:
        >>> encode_id(datetime(2026, 10, 18, 14, 3, 5))
        '2026-10-18T14-03-05'
        >>> encode_id(datetime(2026, 10, 18, 14, 3, 5), 2)
        '2026-10-18T14-03-05-002'
    """
    if not 0 <= sequence <= MAX_SEQUENCE:
        raise ValueError(f"Backup sequence out of range: {sequence}")
    stamp = moment.strftime(ID_FORMAT)
    if sequence:
        return f"{stamp}-{sequence:03d}"
    return stamp


def decode_id(backup_id: str) -> tuple[datetime, int]:
    """Parse a backup id back into (timestamp, sequence).

    Raises:
        ValueError: If backup_id is not a valid id
    """
    match = ID_PATTERN.match(backup_id)
    if not match:
        raise ValueError(f"Not a backup id: {backup_id!r}")
    moment = datetime.strptime(match.group("stamp"), ID_FORMAT)
    return moment, int(match.group("seq") or 0)


def is_valid_id(backup_id: str) -> bool:
    try:
        decode_id(backup_id)
    except ValueError:
        return False
    return True


def to_display(backup_id: str) -> str:
    """Human-readable form of an id (colons restored)."""
    moment, sequence = decode_id(backup_id)
    text = moment.strftime(DISPLAY_FORMAT)
    return f"{text} #{sequence}" if sequence else text
