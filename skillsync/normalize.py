import re
from types import MappingProxyType
from typing import Any, Optional


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_header(header: str) -> str:
    return re.sub(r"\s+", "_", header.strip().lower())


_FLOAT_CODE = re.compile(r"^\d+\.0$")


def normalize_code(value: str) -> str:
    code = value.strip()
    # Spreadsheets hand back numeric codes as floats ("1040.0")
    if _FLOAT_CODE.match(code):
        return code[:-2]
    return code


LEVEL_TOKENS = {
    0: ("none", "no", "0"),
    1: ("beginner", "nybörjare", "1"),
    2: ("can handle", "självständig", "2"),
    3: ("skilled", "erfaren", "3"),
    4: ("expert", "coach", "handledare", "4"),
}

SKILL_LEVELS = MappingProxyType(
    {token: level for level, tokens in LEVEL_TOKENS.items() for token in tokens}
)


def normalize_skill_level(raw: Any) -> int:
    """
    Map a raw skill-level cell to the 0-4 ordinal scale.

    Accepts numbers, numeral strings and English/Swedish level words.
    Missing or unrecognized values map to 0.
    """
    if raw is None:
        return 0
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    return SKILL_LEVELS.get(str(raw).strip().lower(), 0)


UNRATED_MARKERS = {"", "n", "-"}


def parse_rating(value: Optional[str]) -> Optional[int]:
    """Rating cell to an ordinal level, or None when the cell marks 'not rated'."""
    if value is None:
        return None
    text = value.strip()
    if text.lower() in UNRATED_MARKERS:
        return None
    return normalize_skill_level(normalize_code(text))


TRUE_SYNS = {"true", "1", "yes", "y", "ja"}
FALSE_SYNS = {"false", "0", "no", "n", "nej"}


def parse_bool(value: Optional[str], default: bool = True) -> bool:
    text = normalize_text(value or "")
    if text in TRUE_SYNS:
        return True
    if text in FALSE_SYNS:
        return False
    return default
