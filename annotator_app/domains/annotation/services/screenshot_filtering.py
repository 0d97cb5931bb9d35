"""
Annotation Domain - Screenshot Filtering & Ordering

Read-side projections over a module's screenshot sequence. Nothing here
touches the store; callers persist a reordered sequence themselves.
"""
import re
from typing import List, Optional, Sequence, Tuple

from annotator_app.domains.annotation.models.annotation_models import Screenshot, ScreenshotStatus
from annotator_app.shared.exceptions import ValidationError, ScreenshotNotFoundError

_TOKEN_SEPARATORS = re.compile(r"[\s-]+")


def search_tokens(search_term: Optional[str]) -> List[str]:
    """Lower-cased tokens of a search term, split on whitespace and hyphen runs"""
    if not search_term:
        return []
    return [token for token in _TOKEN_SEPARATORS.split(search_term.lower()) if token]


def filter_screenshots(screenshots: Sequence[Screenshot], search_term: Optional[str] = None,
                       label_id: Optional[str] = None,
                       status: Optional[ScreenshotStatus] = None) -> List[Screenshot]:
    """
    Stable filter: a screenshot survives when every search token is a
    substring of its lower-cased name and, if given, its label and status
    match. Input order is preserved.
    """
    tokens = search_tokens(search_term)
    result = []
    for screenshot in screenshots:
        name = screenshot.name.lower()
        if not all(token in name for token in tokens):
            continue
        if label_id and screenshot.label_id != label_id:
            continue
        if status is not None and screenshot.status != status:
            continue
        result.append(screenshot)
    return result


def highlight_spans(text: str, search_term: Optional[str]) -> List[Tuple[int, int]]:
    """Merged (start, end) spans of ``text`` matched by the search tokens"""
    lowered = text.lower()
    spans = []
    for token in search_tokens(search_term):
        start = lowered.find(token)
        while start != -1:
            spans.append((start, start + len(token)))
            start = lowered.find(token, start + 1)

    merged: List[Tuple[int, int]] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def can_reorder(screenshots: Sequence[Screenshot], drag_mode: bool) -> bool:
    """Dragging needs an explicit drag mode and something to reorder"""
    return drag_mode and len(screenshots) > 1


def reorder(screenshots: Sequence[Screenshot], moved_id: str, new_index: int) -> List[Screenshot]:
    """New sequence with ``moved_id`` taken out and reinserted at ``new_index``"""
    ordered = list(screenshots)
    position = next((i for i, s in enumerate(ordered) if s.id == moved_id), None)
    if position is None:
        raise ScreenshotNotFoundError(f"Screenshot not found: {moved_id}", resource_id=moved_id)
    if not 0 <= new_index < len(ordered):
        raise ValidationError(
            f"Index {new_index} is outside 0..{len(ordered) - 1}", field="newIndex", value=new_index
        )

    moved = ordered.pop(position)
    ordered.insert(new_index, moved)
    return ordered
