import logging
from typing import List, Optional, Protocol, Sequence

from scoring import Annotation

logger = logging.getLogger(__name__)

# What the development stub "sees" in every photo.
DEFAULT_STUB_ANNOTATIONS = (
    Annotation('tree', 0.90),
    Annotation('plant', 0.82),
    Annotation('environment', 0.75),
)


class Labeler(Protocol):
    """Anything that can label an uploaded image."""

    def detect_labels(self, image_url: str) -> List[Annotation]:
        ...


class StubLabeler:
    """
    Stand-in for an image labeling service.
    Returns the same annotations for every image so the scoring pipeline can
    run without a vision model. Swap it for a real implementation through the
    LABELER app config key.
    """

    def __init__(self, annotations: Optional[Sequence[Annotation]] = None):
        self.annotations = list(annotations or DEFAULT_STUB_ANNOTATIONS)

    def detect_labels(self, image_url: str) -> List[Annotation]:
        logger.info(f"Stub labeler returning {len(self.annotations)} annotations for {image_url}")
        return list(self.annotations)
