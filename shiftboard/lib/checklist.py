"""
Checklist text parser for task descriptions.

Checklist lines are markdown checkboxes ("- [ ] item" / "- [x] item") embedded
in a task description. Lines have no stable id: callers address them by their
0-based line index. Every function here is total and never raises on
malformed markdown.
"""

from dataclasses import dataclass

from shiftboard.lib.constants import CHECKED_MARKER, CHECKLIST_LINE_RE


@dataclass
class ChecklistLine:
    index: int
    checked: bool
    text: str


def _split(description: str) -> list[str]:
    return description.split("\n")


def parse_checklist(description: str | None) -> list[ChecklistLine]:
    """Return every checklist line with its position in the description."""
    if not description:
        return []

    items = []
    for index, line in enumerate(_split(description)):
        match = CHECKLIST_LINE_RE.match(line)
        if match:
            items.append(ChecklistLine(
                index=index,
                checked=match.group(1).lower() == "x",
                text=match.group(2),
            ))
    return items


def has_checklist(description: str | None) -> bool:
    """True if the description contains at least one checklist line."""
    return bool(parse_checklist(description))


def checklist_progress(description: str | None) -> dict:
    """Count checked vs. total checklist lines.

    Returns {"total", "checked", "percentage"}; percentage is rounded and
    0 when there are no lines.
    """
    items = parse_checklist(description)
    total = len(items)
    checked = sum(1 for item in items if item.checked)
    percentage = round(checked * 100 / total) if total else 0
    return {"total": total, "checked": checked, "percentage": percentage}


def toggle_line(description: str, line_index: int, suffix: str = "") -> str:
    """Check the unchecked line at `line_index` and append `suffix` to it.

    No-op (returns the text unchanged) if the index is out of range, the line
    is not a checklist line, or the line is already checked. Applying it twice
    never appends the suffix twice.
    """
    lines = _split(description)
    if line_index < 0 or line_index >= len(lines):
        return description

    line = lines[line_index]
    match = CHECKLIST_LINE_RE.match(line)
    if not match or match.group(1) != " ":
        return description

    # Marker is rewritten canonically; indent and item text are kept
    indent = line[:len(line) - len(line.lstrip())]
    text = match.group(2)
    lines[line_index] = f"{indent}{CHECKED_MARKER}{' ' + text if text else ''}{suffix}"
    return "\n".join(lines)


def normalize_name(text: str) -> str:
    """Strip a leading checkbox marker and remove all whitespace."""
    match = CHECKLIST_LINE_RE.match(text)
    if match:
        text = match.group(2)
    return "".join(text.split())


def contains_name(haystack: str, needle: str) -> bool:
    """`needle` occurs in `haystack` without splitting a number.

    "1번베드" is inside "1번베드(교체대상)" but not inside "11번베드".
    """
    start = haystack.find(needle)
    while start != -1:
        end = start + len(needle)
        cuts_before = start > 0 and haystack[start - 1].isdigit() and needle[0].isdigit()
        cuts_after = end < len(haystack) and haystack[end].isdigit() and needle[-1].isdigit()
        if not cuts_before and not cuts_after:
            return True
        start = haystack.find(needle, start + 1)
    return False


def names_match(line_text: str, target: str) -> bool:
    """Whitespace-insensitive match in either direction.

    "1번 베드 (교체 대상)" matches "1번베드" and "1번 베드" matches "1번 베드 커버",
    but "1번 베드" never matches "11번 베드".
    """
    line_norm = normalize_name(line_text)
    target_norm = normalize_name(target)
    if not line_norm or not target_norm:
        return False
    return contains_name(line_norm, target_norm) or contains_name(target_norm, line_norm)


def find_matching_line(description: str | None, target_name: str) -> int | None:
    """Index of the first unchecked line matching `target_name`, or None.

    Preference order: a line that is exactly the target, then a line that
    contains the target, then a line the target contains. Within each pass
    the first line wins.
    """
    target_norm = normalize_name(target_name)
    if not target_norm:
        return None

    open_lines = [(item.index, normalize_name(item.text)) for item in parse_checklist(description)
                  if not item.checked and item.text.strip()]
    passes = (
        lambda line_norm: line_norm == target_norm,
        lambda line_norm: contains_name(line_norm, target_norm),
        lambda line_norm: contains_name(target_norm, line_norm),
    )
    for accepts in passes:
        for index, line_norm in open_lines:
            if accepts(line_norm):
                return index
    return None
