"""Extraction of the best candidate from a recognition event."""

from typing import Any

from .models import RecognitionResult


def classify(event: Any) -> RecognitionResult | None:
    """
    Returns the first result's first alternative as a RecognitionResult.

    Interim events legitimately carry no usable candidate, so any missing
    piece (no transcript, no results, no alternatives, empty text) yields
    None instead of an error.
    """
    transcript = getattr(event, "transcript", None)
    results = getattr(transcript, "results", None)
    if not results:
        return None

    first_result = results[0]
    alternatives = getattr(first_result, "alternatives", None)
    if not alternatives:
        return None

    text = getattr(alternatives[0], "transcript", None)
    if not text:
        return None

    return RecognitionResult(
        result_id=getattr(first_result, "result_id", None) or None,
        is_partial=bool(getattr(first_result, "is_partial", False)),
        start_time=getattr(first_result, "start_time", None),
        end_time=getattr(first_result, "end_time", None),
        text=text,
    )
