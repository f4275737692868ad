from dataclasses import dataclass

@dataclass(slots=True)
class ScoreBoard:
    """Current score, session best and the consecutive scoring-turn counter."""
    score: int = 0
    best_score: int = 0
    combo: int = 0

    def record_best(self) -> None:
        if self.score > self.best_score:
            self.best_score = self.score
