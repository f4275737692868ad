from dataclasses import dataclass, field
from typing import Dict, List, Tuple

@dataclass(slots=True)
class Palette:
    """Canonical piece colors stored on the singleton state entity.

    ``colors`` maps a color name to its RGB triple; insertion order is the draw order
    used by the seeded generator.
    """
    colors: Dict[str, Tuple[int,int,int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.colors:
            raise ValueError("Palette needs at least one color")

    def rgb_for(self, name: str) -> Tuple[int,int,int]:
        return self.colors[name]

    def names(self) -> List[str]:
        return list(self.colors.keys())

    def __contains__(self, name: object) -> bool:
        return name in self.colors
