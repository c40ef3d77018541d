"""Embedded word lists and prompt generation."""

import random

from core.models import Difficulty

# Common English words, duplicates kept so frequent words come up more often
EASY_WORDS: tuple[str, ...] = (
    "the", "be", "to", "of", "and", "a", "in", "that", "have", "i",
    "it", "for", "not", "on", "with", "he", "as", "you", "do", "at",
    "this", "but", "his", "by", "from", "they", "we", "say", "her", "she",
    "or", "an", "will", "my", "one", "all", "would", "there", "their", "what",
    "so", "up", "out", "if", "about", "who", "get", "which", "go", "me",
    "when", "make", "can", "like", "time", "no", "just", "him", "know", "take",
    "people", "into", "year", "your", "good", "some", "could", "them", "see", "other",
    "than", "then", "now", "look", "only", "come", "its", "over", "think", "also",
    "back", "after", "use", "two", "how", "our", "work", "first", "well", "way",
    "even", "new", "want", "because", "any", "these", "give", "day", "most", "us",
    "is", "water", "long", "very", "after", "called", "just", "where", "most", "know",
    "get", "through", "back", "much", "before", "go", "good", "new", "write", "our",
    "used", "me", "man", "too", "any", "day", "same", "right", "look", "think",
    "also", "around", "another", "came", "come", "work", "three", "word", "must", "because",
    "does", "part", "even", "place", "well", "such", "here", "take", "why", "things",
    "help", "put", "years", "different", "away", "again", "off", "went", "old", "number",
    "great", "tell", "men", "say", "small", "every", "found", "still", "between", "name",
    "should", "home", "big", "give", "air", "line", "set", "own", "under", "read",
    "last", "never", "us", "left", "end", "along", "while", "might", "next", "sound",
    "below", "saw", "something", "thought", "both", "few", "those", "always", "show", "large",
)

# Commonly misspelled words
HARD_WORDS: tuple[str, ...] = (
    "accommodate", "embarrass", "millennium", "occurrence", "separate", "necessary",
    "definitely", "calendar", "pneumonia", "rhythm", "conscientious", "deteriorate",
    "fluorescent", "gauge", "hemorrhage", "inoculate", "judgment", "knowledge",
    "liaison", "maintenance", "noticeable", "optimize", "privilege", "questionnaire",
    "reconnaissance", "supersede", "threshold", "unparalleled", "vacuum", "withhold",
    "yacht", "zealous", "acknowledgment", "acquire", "across", "address",
    "amateur", "apparent", "argument", "atheist", "beginning", "believe",
    "bizarre", "business", "cemetery", "changeable", "collectible", "column",
    "committed", "conscience", "conscious", "correspondence", "discipline", "drunkenness",
    "equipment", "exhilarate", "existence", "experience", "fiery", "foreign",
    "grateful", "guarantee", "harass", "height", "hierarchy", "humorous",
    "ignorance", "immediate", "independent", "indispensable", "intelligence", "jewelry",
    "league", "leisure", "library", "license", "maneuver", "medieval",
    "memento", "miniature", "mischievous", "misspell", "mortgage", "neighbor",
    "occasionally", "pamphlet", "pastime", "perseverance", "personnel", "playwright",
    "possession", "potato", "pronunciation", "publicly", "raspberry", "receipt",
    "receive", "recommend", "referred", "relevant", "restaurant", "rhyme",
    "schedule",
)

WORD_LISTS: dict[Difficulty, tuple[str, ...]] = {
    Difficulty.EASY: EASY_WORDS,
    Difficulty.HARD: HARD_WORDS,
}


def generate_text(
    word_count: int,
    difficulty: Difficulty = Difficulty.EASY,
    rng: random.Random | None = None,
) -> str:
    """Generate a prompt of random words.

    Words are drawn uniformly and independently, with replacement.

    Args:
        word_count: Number of words in the prompt
        difficulty: Which word list to draw from
        rng: Random source (defaults to the module-level generator)

    Returns:
        Words joined by single spaces
    """
    words = WORD_LISTS[Difficulty(difficulty)]
    chooser = rng or random
    return " ".join(chooser.choice(words) for _ in range(max(0, word_count)))
