"""Pattern-based language detection for job titles and descriptions."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern

from ..core.constants import (
    LANGUAGE_CONFIDENCE_FLOOR,
    LANGUAGE_FALLBACK_CONFIDENCE,
    LANGUAGE_ORDER,
    LANGUAGE_PATTERNS,
)
from ..models.quality import DetectedLanguage


@dataclass(frozen=True)
class LanguageDetection:
    """Result of language detection."""
    language: DetectedLanguage
    confidence: float


UNKNOWN_DETECTION = LanguageDetection(DetectedLanguage.UNKNOWN, 0.0)


class LanguageDetector:
    """
    Scores text against per-language regex tables.

    Each language's score is the number of pattern matches in the
    lower-cased text. The winner's share of all matches is its
    confidence. Below the confidence floor the detector answers English
    with the fallback confidence, so that short ambiguous strings are not
    reported as unknown.
    """

    def __init__(self,
                 patterns: Optional[Dict[str, List[Pattern]]] = None,
                 confidence_floor: float = LANGUAGE_CONFIDENCE_FLOOR,
                 fallback_confidence: float = LANGUAGE_FALLBACK_CONFIDENCE):
        self.patterns = patterns if patterns is not None else LANGUAGE_PATTERNS
        self.confidence_floor = confidence_floor
        self.fallback_confidence = fallback_confidence

    def score_text(self, text: str) -> Dict[str, int]:
        """Raw match counts per language, in detection order."""
        scores = {lang: 0 for lang in LANGUAGE_ORDER}
        for lang in LANGUAGE_ORDER:
            for pattern in self.patterns.get(lang, []):
                scores[lang] += len(pattern.findall(text))
        return scores

    def detect_text(self, text: str) -> LanguageDetection:
        """
        Detect the language of free text.

        Args:
            text: Text to analyze

        Returns:
            Detected language and confidence
        """
        text = (text or '').lower()
        if not text.strip():
            return UNKNOWN_DETECTION

        scores = self.score_text(text)
        total = sum(scores.values())
        if total == 0:
            return UNKNOWN_DETECTION

        best_lang = LANGUAGE_ORDER[0]
        best_score = 0
        for lang in LANGUAGE_ORDER:
            if scores[lang] > best_score:
                best_lang = lang
                best_score = scores[lang]

        confidence = best_score / total

        if confidence < self.confidence_floor:
            return LanguageDetection(DetectedLanguage.EN, self.fallback_confidence)

        return LanguageDetection(DetectedLanguage(best_lang), confidence)

    def detect(self, title: Optional[str], description: Optional[str]) -> LanguageDetection:
        """Detect the language of a job from its title and description."""
        return self.detect_text(f"{title or ''} {description or ''}")


def detect_language(title: Optional[str], description: Optional[str]) -> LanguageDetection:
    """Detect a job's language with the default rule tables."""
    return LanguageDetector().detect(title, description)
