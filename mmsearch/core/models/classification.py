"""Group classification domain models."""
from dataclasses import dataclass, field
from enum import Enum


class Modality(Enum):
    """Evidence channel used to classify content."""
    TEXT = "text"
    IMAGE = "image"


@dataclass
class GroupScore:
    """Evidence accumulated for one group label within a single call."""
    label: str
    accumulated: float = 0.0
    sources_contributing: int = 0


@dataclass(frozen=True)
class ClassificationResult:
    """Final group decision."""
    label: str
    confidence: float
    used_default: bool
    modalities: tuple[Modality, ...] = ()  # modalities that produced evidence
    candidates: tuple[GroupScore, ...] = field(default=(), compare=False)
