import re

_RESERVED_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_WINDOWS_RESERVED_RE = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_MAX_LEN = 255


def is_valid_file_name(name: object) -> bool:
    """
    True for a bare, portable file name: no directory part, no characters
    that Windows/macOS refuse, not a reserved device name.
    """
    if not isinstance(name, str) or not name:
        return False
    if len(name) > _MAX_LEN:
        return False
    if name in (".", ".."):
        return False
    if name.strip() != name or name.endswith("."):
        return False
    if _RESERVED_CHARS_RE.search(name):
        return False
    if _WINDOWS_RESERVED_RE.match(name):
        return False
    return True
