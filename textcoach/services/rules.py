from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Union
import logging
import re

from textcoach.models.report import Kind, Severity, Suggestion

log = logging.getLogger("rules")

# Replacement is either a "$1 $2" template or a callable over the match
Replacement = Union[str, Callable[[re.Match], str]]


@dataclass(frozen=True)
class Rule:
    name: str
    pattern: re.Pattern
    kind: Kind
    severity: Severity
    message: str
    explanation: str = ""
    replacement: Replacement = ""


# Shared with the heuristic scorer: misspelling -> correct spelling
MISSPELLINGS = {
    "teh": "the",
    "recieve": "receive",
    "seperate": "separate",
    "occured": "occurred",
    "accomodate": "accommodate",
    "definately": "definitely",
    "alot": "a lot",
}

INTENSIFIERS = ("very", "really", "extremely")

# phrase pattern, shorter phrase, message
WORDY_PHRASES = [
    (r"on\s+a\s+daily\s+basis", "daily",
     'Consider using "daily" instead of "on a daily basis" for conciseness'),
    (r"first\s+and\s+foremost", "first",
     'Consider using "first" instead of "first and foremost" for conciseness'),
    (r"free\s+gift", "gift",
     'A gift is already free by definition. Consider using just "gift"'),
    (r"future\s+plans", "plans",
     'Plans are for the future by definition. Consider using just "plans"'),
    (r"unexpected\s+surprise", "surprise",
     'A surprise is unexpected by definition. Consider using just "surprise"'),
    (r"close\s+proximity", "proximity",
     'Proximity implies closeness. Consider using just "proximity"'),
]

_BACKREF = re.compile(r"\$(\d)")


def _words(*alternatives: str) -> re.Pattern:
    return re.compile(r"\b(" + "|".join(alternatives) + r")\b", re.IGNORECASE)


def _capitalize_after(m: re.Match) -> str:
    # ". x" -> ". X", ".\n\nx" -> ".\n\nX", ".x" -> ". X"
    return f"{m.group(1)}{m.group(2) or ' '}{m.group(3).upper()}"


GRAMMAR_RULES = [
    Rule("ITS_ITS", _words("its", "it['’]s"), "grammar", "warning",
         "Possible its/it's confusion",
         "Check if you mean \"it is\" (it's) or the possessive form (its)", "it is"),
    Rule("YOUR_YOURE", _words("your", "you['’]re"), "grammar", "warning",
         "Possible your/you're confusion",
         "Check if you mean \"you are\" (you're) or the possessive form (your)", "you are"),
    Rule("THERE_THEIR", _words("there", "their", "they['’]re"), "grammar", "warning",
         "Possible there/their/they're confusion",
         "Check if you mean \"they are\" (they're), possessive (their), or location (there)",
         "they are"),
    Rule("TO_TOO_TWO", _words("to", "too", "two"), "grammar", "warning",
         "Possible to/too/two confusion",
         "Check if you mean \"to\" (direction), \"too\" (also/excessive), or \"two\" (number)",
         "to"),
    Rule("AFFECT_EFFECT", _words("affect", "effect"), "grammar", "warning",
         "Possible affect/effect confusion",
         "Check if you mean \"affect\" (verb) or \"effect\" (noun)", "affect"),
]

STYLE_RULES = [
    Rule("INTENSIFIER", _words(*INTENSIFIERS), "style", "suggestion",
         "Intensifier detected",
         "Consider using a stronger word instead of intensifiers"),
]

READABILITY_RULES = [
    Rule("SENTENCE_CASE", re.compile(r"([.!?])(\s+)([a-z])"), "readability", "medium",
         "Start sentences with capital letters",
         "Start sentences with capital letters", _capitalize_after),
]

SPELLING_RULES = [
    Rule(f"SPELLING_{wrong.upper()}", _words(wrong), "spelling", "error",
         f'Common spelling mistake: did you mean "{right}"?',
         "Common spelling mistake detected")
    for wrong, right in MISSPELLINGS.items()
]

PUNCTUATION_RULES = [
    Rule("SPACE_BEFORE_COMMA", re.compile(r"[ \t]+,"), "grammar", "medium",
         "Remove space before comma", replacement=","),
    Rule("SPACE_BEFORE_PERIOD", re.compile(r"[ \t]+\."), "grammar", "medium",
         "Remove space before period", replacement="."),
    Rule("SPACE_AFTER_COMMA", re.compile(r",(\S)"), "grammar", "medium",
         "Add space after comma", replacement=", $1"),
    Rule("SPACE_AFTER_PERIOD", re.compile(r"\.(\w)"), "grammar", "medium",
         "Add space after period", replacement=". $1"),
    Rule("EXTRA_SPACES", re.compile(r"[ \t]{2,}"), "style", "low",
         "Remove extra spaces", replacement=" "),
    Rule("EXTRA_LINE_BREAKS", re.compile(r"\n{3,}"), "style", "low",
         "Remove extra line breaks", replacement="\n\n"),
    Rule("CAPITALIZE_AFTER_TERMINAL", re.compile(r"([.!?])(\s*)([a-z])"), "grammar", "medium",
         "Capitalize the first word after a sentence-ending punctuation",
         replacement=_capitalize_after),
]

WORDINESS_RULES = [
    Rule(f"WORDY_{short.upper()}", re.compile(r"\b" + phrase + r"\b", re.IGNORECASE),
         "style", "low", message, message, short)
    for phrase, short, message in WORDY_PHRASES
]

RULES: List[Rule] = (
    GRAMMAR_RULES
    + STYLE_RULES
    + READABILITY_RULES
    + SPELLING_RULES
    + PUNCTUATION_RULES
    + WORDINESS_RULES
)


def expand_replacement(replacement: Replacement, m: re.Match) -> str:
    if callable(replacement):
        return replacement(m)

    def _group(ref: re.Match) -> str:
        idx = int(ref.group(1))
        if idx > m.re.groups:
            return ""
        return m.group(idx) or ""

    return _BACKREF.sub(_group, replacement)


def _suggestions_for(rule: Rule, text: str) -> List[Suggestion]:
    out: List[Suggestion] = []
    for m in rule.pattern.finditer(text):
        start, end = m.span()
        if end <= start:
            continue
        out.append(Suggestion(
            id=f"{rule.name}-{start}-{end}",
            kind=rule.kind,
            severity=rule.severity,
            start=start,
            end=end,
            original_text=m.group(0),
            replacement=expand_replacement(rule.replacement, m),
            message=rule.message,
            explanation=rule.explanation or rule.message,
            rule=rule.name,
        ))
    return out


def check_text(text: str, rules: List[Rule] = RULES) -> List[Suggestion]:
    """
    Run every rule over the whole text and return positioned suggestions.

    Rules are independent, so spans may overlap. Only exact (start, end)
    duplicates are dropped (first rule in table order wins); the result is
    sorted by start offset.
    """
    if not text or not text.strip():
        return []

    seen = set()
    unique: List[Suggestion] = []
    for rule in rules:
        for s in _suggestions_for(rule, text):
            if s.span in seen:
                continue
            seen.add(s.span)
            unique.append(s)

    unique.sort(key=lambda s: s.start)

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            "rules: chars=%d suggestions=%d by_kind=%s by_severity=%s",
            len(text), len(unique),
            dict(Counter(s.kind for s in unique)),
            dict(Counter(s.severity for s in unique)),
        )
    return unique


def apply_suggestion(text: str, suggestion: Suggestion) -> str:
    return text[:suggestion.start] + suggestion.replacement + text[suggestion.end:]
