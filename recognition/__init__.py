"""Audio/URL recognition and canonical record mapping."""

from recognition.audd import AuddClient, RecognitionError
from recognition.mapper import CanonicalTrackRecord, map_recognition_result

__all__ = ["AuddClient", "CanonicalTrackRecord", "RecognitionError", "map_recognition_result"]
