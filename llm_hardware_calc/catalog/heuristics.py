"""VRAM extraction and inference heuristics for raw catalog records.

The researched constants live in the ordered tables below; the functions
only walk them. Matching is done on lower-cased strings and the first
matching row wins, so more specific patterns must precede general ones.
"""

import math
import re
from typing import Any, Mapping, Optional, Pattern, Sequence, Tuple

# Memory fields in priority order
MEMORY_FIELDS: Tuple[str, ...] = (
    "Memory Size (GB)",
    "Memory Size",
    "Memory (GB)",
    "Memory",
    "VRAM",
    "Video RAM",
    "Graphics Memory",
    "Video Memory",
    "VRAM Size",
    "Memory.Size",
)

MODEL_FIELD = "Model"
VENDOR_FIELD = "Vendor"
LAUNCH_FIELDS: Tuple[str, ...] = ("Launch", "Launch Date", "Release Date")

# Unit-less values above this are assumed to be MB
MB_HEURISTIC_THRESHOLD = 100

# Used when no table matches
FLOOR_VRAM_GB = 6.0

VramRule = Tuple[Pattern[str], float]


def _rules(rows: Sequence[Tuple[str, float]]) -> Tuple[VramRule, ...]:
    return tuple((re.compile(pattern), float(vram)) for pattern, vram in rows)


# Known products. Matched against "<vendor> <model>".
KNOWN_MODEL_VRAM: Tuple[VramRule, ...] = _rules([
    # NVIDIA Quadro (before the GeForce rows: "quadro rtx 4000" is not an RTX 40)
    (r"quadro\s*rtx\s*8000", 48),
    (r"quadro\s*rtx\s*6000", 24),
    (r"quadro\s*rtx\s*5000", 16),
    (r"quadro\s*rtx\s*4000", 8),
    (r"quadro\s*p6000", 24),
    (r"quadro\s*p5000", 16),
    (r"quadro\s*p4000", 8),
    # NVIDIA workstation
    (r"rtx\s*6000\s*ada", 48),
    (r"\b(rtx\s*)?a6000\b", 48),
    (r"\b(rtx\s*)?a5000\b", 24),
    (r"\b(rtx\s*)?a4000\b", 16),
    # NVIDIA RTX 50
    (r"rtx\s*5090", 32),
    (r"rtx\s*5080", 16),
    (r"rtx\s*5070\s*ti", 16),
    (r"rtx\s*5070", 12),
    (r"rtx\s*5060", 8),
    # NVIDIA RTX 40
    (r"rtx\s*4090", 24),
    (r"rtx\s*4080", 16),
    (r"rtx\s*4070\s*ti\s*super", 16),
    (r"rtx\s*4070", 12),
    (r"rtx\s*4060", 8),
    # NVIDIA RTX 30
    (r"rtx\s*3090", 24),
    (r"rtx\s*3080\s*ti", 12),
    (r"rtx\s*3080", 10),
    (r"rtx\s*3070", 8),
    (r"rtx\s*3060\s*ti", 8),
    (r"rtx\s*3060", 12),
    (r"rtx\s*3050", 8),
    # NVIDIA RTX 20
    (r"rtx\s*2080\s*ti", 11),
    (r"rtx\s*2080", 8),
    (r"rtx\s*2070", 8),
    (r"rtx\s*2060\s*super", 8),
    (r"rtx\s*2060", 6),
    # NVIDIA GTX
    (r"gtx\s*1080\s*ti", 11),
    (r"gtx\s*1080", 8),
    (r"gtx\s*1070", 8),
    (r"gtx\s*1060", 3),
    (r"gtx\s*1050\s*ti", 4),
    (r"gtx\s*1050", 2),
    (r"gtx\s*1660", 6),
    (r"gtx\s*1650", 4),
    # NVIDIA data center
    (r"\bh100\b", 80),
    (r"\ba100\b", 40),
    (r"\bv100\b", 16),
    (r"\bl40s?\b", 48),
    (r"\ba40\b", 48),
    (r"\ba30\b", 24),
    (r"\ba10g?\b", 24),
    (r"\bl4\b", 24),
    (r"\bt4\b", 16),
    # AMD Radeon RX 7000
    (r"rx\s*7900\s*xtx", 24),
    (r"rx\s*7900\s*xt\b", 20),
    (r"rx\s*7900\s*gre", 16),
    (r"rx\s*7800\s*xt", 16),
    (r"rx\s*7700\s*xt", 12),
    (r"rx\s*7600", 8),
    # AMD Radeon RX 6000
    (r"rx\s*6950\s*xt", 16),
    (r"rx\s*6900\s*xt", 16),
    (r"rx\s*6800", 16),
    (r"rx\s*67[05]0\s*xt", 12),
    (r"rx\s*6650\s*xt", 8),
    (r"rx\s*6600", 8),
    # AMD Radeon RX 5000
    (r"rx\s*5700", 8),
    (r"rx\s*5600\s*xt", 6),
    (r"rx\s*5500\s*xt", 8),
    # Intel data center
    (r"intel.*max\s*1550", 128),
    (r"intel.*max\s*1100", 48),
    # Apple silicon; configurations named explicitly win over the base size
    (r"apple.*\bm1\s*ultra\b.*\b128\b", 128),
    (r"apple.*\bm1\s*ultra\b", 64),
    (r"apple.*\bm1\s*max\b.*\b64\b", 64),
    (r"apple.*\bm1\s*max\b", 32),
    (r"apple.*\bm1\s*pro\b.*\b32\b", 32),
    (r"apple.*\bm1\s*pro\b", 16),
    (r"apple.*\bm1\b.*\b16\b", 16),
    (r"apple.*\bm1\b", 8),
    (r"apple.*\bm2\s*ultra\b.*\b192\b", 192),
    (r"apple.*\bm2\s*ultra\b.*\b128\b", 128),
    (r"apple.*\bm2\s*ultra\b", 64),
    (r"apple.*\bm2\s*max\b.*\b96\b", 96),
    (r"apple.*\bm2\s*max\b.*\b64\b", 64),
    (r"apple.*\bm2\s*max\b", 32),
    (r"apple.*\bm2\s*pro\b.*\b32\b", 32),
    (r"apple.*\bm2\s*pro\b", 16),
    (r"apple.*\bm2\b.*\b24\b", 24),
    (r"apple.*\bm2\b.*\b16\b", 16),
    (r"apple.*\bm2\b", 8),
    (r"apple.*\bm3\s*ultra\b.*\b192\b", 192),
    (r"apple.*\bm3\s*ultra\b", 128),
    (r"apple.*\bm3\s*max\b.*\b128\b", 128),
    (r"apple.*\bm3\s*max\b.*\b64\b", 64),
    (r"apple.*\bm3\s*max\b", 36),
    (r"apple.*\bm3\s*pro\b.*\b36\b", 36),
    (r"apple.*\bm3\s*pro\b", 18),
    (r"apple.*\bm3\b.*\b24\b", 24),
    (r"apple.*\bm3\b.*\b16\b", 16),
    (r"apple.*\bm3\b", 8),
])

# Family / generation defaults, tried when no known product matched
FAMILY_DEFAULT_VRAM: Tuple[VramRule, ...] = _rules([
    (r"quadro|\brtx\s*a\d", 16),
    (r"tesla", 32),
    (r"rtx\s*5\d{3}", 16),
    (r"rtx\s*4\d{3}", 12),
    (r"rtx\s*3\d{3}", 8),
    (r"rtx\s*2\d{3}", 6),
    (r"\brtx\b", 12),
    (r"\bgtx\b", 4),
    (r"\brx\s*[89]\d{3}", 24),
    (r"\brx\s*7\d{3}", 16),
    (r"\brx\s*6\d{3}", 8),
    (r"\brx\s*5\d{3}", 8),
    (r"radeon|\brx\b", 8),
    (r"intel.*\bmax\b", 48),
    (r"\barc\b", 8),
    (r"nvidia|geforce", 8),
    (r"\bamd\b", 8),
])

# Unified memory architectures, matched against "<vendor> <model>"
UNIFIED_MEMORY_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"\bapple\b",
        # AMD mobile APUs (7840U, 7940HS, 6900HX) and their iGPUs
        r"\bryzen\b.*\b\d{4}(u|h|hs|hx)\b",
        r"\bryzen\s*ai\b",
        r"\bradeon\s*\d{3}m\b",
        # Intel integrated graphics
        r"\bintel\b.*\b(iris|uhd)\b",
        r"\bcore\b.*\b(iris|uhd)\b",
        r"\bcore\s*ultra\b",
        # Qualcomm
        r"\bsnapdragon\b",
    )
)

# Professional, workstation and data center products
WORKSTATION_PATTERNS: Tuple[Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"\brtx\s*a\d{3,4}\b",
        r"\ba\d{4}\b",
        r"\b(tesla|quadro)\b",
        r"\b(a10g?|a16|a30|a40|a100|h100|h200|l40s?|p100|v100)\b",
        r"\b(a2|l4|t4)\b",
        r"\bradeon\s*pro\b",
        r"\bfirepro\b",
        r"\binstinct\b",
        r"\bw\d{4}\b",
        r"\bxeon\b",
        r"\b(workstation|professional)\b",
        r"\bdata\s*center\b",
        r"\bdatacenter\b",
    )
)

# Vendor guess for records without a vendor field
VENDOR_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = tuple(
    (re.compile(p), vendor)
    for p, vendor in (
        (r"\bapple\b", "Apple"),
        (r"snapdragon|adreno|qualcomm", "Qualcomm"),
        (r"intel|\barc\b|\biris\b|\buhd\b|\bcore\b", "Intel"),
        (r"geforce|\brtx\b|\bgtx\b|quadro|tesla|nvidia|\b[ahlv]\d{2,3}\b|\bt4\b", "NVIDIA"),
        (r"radeon|\brx\b|ryzen|instinct|\bamd\b", "AMD"),
    )
)

_NUM = r"(\d+(?:\.\d+)?)"
_UNIT = r"(gib|gb|g|mib|mb)\b"
_RANGE_RE = re.compile(rf"{_NUM}\s*-\s*{_NUM}\s*{_UNIT}", re.IGNORECASE)
_SLASH_RE = re.compile(rf"{_NUM}\s*/\s*{_NUM}\s*{_UNIT}", re.IGNORECASE)
_SIZE_RE = re.compile(rf"{_NUM}\s*{_UNIT}", re.IGNORECASE)
_BARE_RE = re.compile(_NUM)
_NAME_SIZE_RE = re.compile(r"(\d+)\s*gb\b", re.IGNORECASE)
_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3}\b)")


def is_missing(value: Any) -> bool:
    """True for None, empty strings, "nan" placeholders and float NaN."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip().lower() in ("", "nan", "none", "null", "n/a"):
        return True
    return False


def _to_gb(number: float, unit: Optional[str], field_name: str) -> float:
    unit = (unit or "").lower()
    if unit in ("mb", "mib"):
        return number / 1024
    if not unit and "gb" not in field_name.lower() and number > MB_HEURISTIC_THRESHOLD:
        # Mis-scaled value, most likely MB
        return number / 1024
    return number


def parse_memory_value(value: Any, field_name: str = "") -> Optional[float]:
    """Parse a raw memory value into GB.

    Accepts numbers and strings such as "24GB", "8192 MB", "4-8 GB",
    "8/16 GB", "8 GB, 16 GB" (largest option wins) or a bare "24".

    Returns:
        Positive size in GB, or None if nothing usable was found
    """
    if isinstance(value, bool) or is_missing(value):
        return None

    if isinstance(value, (int, float)):
        result = _to_gb(float(value), None, field_name)
    elif isinstance(value, str):
        # "4,096 MB" is one number, not a list
        text = _THOUSANDS_RE.sub("", value.strip())
        candidates = []
        for regex in (_RANGE_RE, _SLASH_RE):
            match = regex.search(text)
            if match:
                low, high, unit = match.groups()
                candidates.append(_to_gb(max(float(low), float(high)), unit, field_name))
        for number, unit in _SIZE_RE.findall(text):
            candidates.append(_to_gb(float(number), unit, field_name))

        if candidates:
            result = max(candidates)
        else:
            match = _BARE_RE.search(text)
            if not match:
                return None
            result = _to_gb(float(match.group(1)), None, field_name)
    else:
        return None

    if not math.isfinite(result) or result <= 0:
        return None
    return result


def _lookup_field(record: Mapping[str, Any], field_name: str) -> Any:
    if field_name in record:
        return record[field_name]
    # "Memory.Size" may also arrive nested as {"Memory": {"Size": ...}}
    if "." in field_name:
        node: Any = record
        for part in field_name.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node
    return None


def extract_memory_size(record: Mapping[str, Any]) -> Tuple[Optional[float], Optional[str]]:
    """Read VRAM from the first memory field that parses.

    Returns:
        (size in GB, field name), or (None, None) if no field matched
    """
    for field_name in MEMORY_FIELDS:
        value = _lookup_field(record, field_name)
        if isinstance(value, Mapping):
            continue
        size = parse_memory_value(value, field_name)
        if size is not None:
            return size, field_name
    return None, None


def _first_match(rules: Sequence[VramRule], text: str) -> Optional[float]:
    for pattern, vram in rules:
        if pattern.search(text):
            return vram
    return None


def infer_vram_from_name(name: str) -> Optional[float]:
    """Infer VRAM from a product name.

    A size spelled out in the name ("RTX 3080 12GB") wins over the known
    product table.
    """
    if not name:
        return None
    text = name.lower()

    match = _NAME_SIZE_RE.search(text)
    if match:
        size = float(match.group(1))
        if size > 0:
            return size

    return _first_match(KNOWN_MODEL_VRAM, text)


def family_default_vram(name: str) -> Tuple[float, bool]:
    """Best-guess VRAM from product family / generation.

    Returns:
        (size in GB, matched) where matched is False when the floor was used
    """
    vram = _first_match(FAMILY_DEFAULT_VRAM, (name or "").lower())
    if vram is None:
        return FLOOR_VRAM_GB, False
    return vram, True


def detect_unified_memory(name: str, vendor: str = "") -> bool:
    """True for Apple silicon, AMD APUs, Intel iGPUs and Snapdragon SoCs."""
    text = f"{vendor} {name}".strip().lower()
    return any(pattern.search(text) for pattern in UNIFIED_MEMORY_PATTERNS)


def guess_vendor(name: str) -> str:
    """Guess the vendor from a product name; empty string if unknown."""
    text = (name or "").lower()
    for pattern, vendor in VENDOR_PATTERNS:
        if pattern.search(text):
            return vendor
    return ""


def clean_model_name(model: str, vendor: str = "") -> str:
    """Strip a duplicated leading vendor and parenthetical notes."""
    name = model.strip()
    if vendor:
        name = re.sub(rf"^{re.escape(vendor)}\s+", "", name, flags=re.IGNORECASE)
    name = re.sub(r"\s*\(.*?\)", "", name)
    return re.sub(r"\s{2,}", " ", name).strip()


def is_workstation_gpu(name: str, vendor: str = "") -> bool:
    """True for professional, workstation and data center products."""
    text = f"{vendor} {name}".strip().lower()
    return any(pattern.search(text) for pattern in WORKSTATION_PATTERNS)
