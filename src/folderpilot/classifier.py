"""Summary: Incremental word-frequency folder classifier.

Importance: Learns which folder messages belong to and suggests a better one.
Alternatives: Train a Naive Bayes model offline and reload it periodically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from folderpilot.models import Chance, Classification
from folderpilot.storage.stats_store import StatisticsStore
from folderpilot.tokenizer import Tokenizer


logger = logging.getLogger(__name__)

MIN_MATCHED_WORDS = 10
COMMON_WORD_FACTOR = 0.75
CHANCE_THRESHOLD = 2.0


@dataclass
class _Tally:
    matched_words: int = 0
    total_frequency: int = 0


class MessageClassifier:
    """Summary: Learns from filed messages and predicts their folder.

    Importance: Turns user filing habits into move suggestions without retraining.
    Alternatives: Use fixed keyword rules per folder.
    """

    def __init__(self, store: StatisticsStore, tokenizer: Tokenizer | None = None) -> None:
        self._store = store
        self._tokenizer = tokenizer or Tokenizer()

    def learn(self, account: int, category: str, text: str, added: bool) -> Classification:
        """Summary: Apply one message to the statistics and predict its folder.

        Importance: Single pass for learning and prediction keeps them consistent.
        Alternatives: Predict first and learn in a second tokenization pass.

        When ``added`` is False the message's contribution is removed and no
        prediction is made. Prediction reads frequencies before this message
        is counted.
        """

        with self._store.transaction():
            self._store.get_or_create_account(account)
            if not added:
                return self._unlearn(account, category, text)
            return self._learn_and_predict(account, category, text)

    def _unlearn(self, account: int, category: str, text: str) -> Classification:
        words = 0
        for word in self._tokenizer.tokenize(text):
            words += 1
            self._store.decrement_word_frequency(account, word, category)
        messages = self._store.decrement_category_count(account, category)
        logger.info("Classifier removed class=%s messages=%s words=%s", category, messages, words)
        return Classification(category=category, added=False, words=words)

    def _learn_and_predict(self, account: int, category: str, text: str) -> Classification:
        tallies: dict[str, _Tally] = {}
        max_matched_words = 0
        words = 0

        for word in self._tokenizer.tokenize(text):
            words += 1
            frequencies = self._store.word_frequencies(account, word)
            for candidate in self._distinctive_categories(account, word, frequencies):
                tally = tallies.setdefault(candidate, _Tally())
                tally.matched_words += 1
                tally.total_frequency += frequencies[candidate]
                max_matched_words = max(max_matched_words, tally.matched_words)
            self._store.increment_word_frequency(account, word, category)

        chances = self._chances(account, tallies, max_matched_words)
        predicted = choose_category(chances, max_matched_words)
        messages = self._store.increment_category_count(account, category)

        logger.info(
            "Classifier class=%s messages=%s words=%s matched=%s chances=[%s] classified=%s",
            category,
            messages,
            words,
            max_matched_words,
            ", ".join(f"{chance.category}={chance.chance:.3f}" for chance in chances),
            predicted,
        )
        return Classification(
            category=category,
            added=True,
            predicted=predicted,
            words=words,
            max_matched_words=max_matched_words,
            chances=chances,
        )

    def _distinctive_categories(
        self, account: int, word: str, frequencies: dict[str, int]
    ) -> list[str]:
        """Summary: Drop categories for which a word is not distinctive.

        Importance: Common words such as greetings should not sway the result.
        Alternatives: Use a fixed stop-word list.

        Each unordered pair is compared once. When the relative frequencies
        are similar only the first category of the pair is removed, so the
        outcome depends on the iteration order of the map.
        """

        categories = list(frequencies)
        candidates = list(categories)
        for index, first in enumerate(categories):
            for second in categories[index + 1 :]:
                messages1 = self._store.category_count(account, first)
                messages2 = self._store.category_count(account, second)
                frequency1 = frequencies[first]
                frequency2 = frequencies[second]
                if messages1 == 0 or messages2 == 0 or frequency1 == 0 or frequency2 == 0:
                    continue
                factor = (frequency1 / messages1) / (frequency2 / messages2)
                if factor > 1:
                    factor = 1 / factor
                if factor > COMMON_WORD_FACTOR:
                    logger.debug("Classifier skip class=%s word=%s", first, word)
                    candidates.remove(first)
                    break
        return candidates

    def _chances(
        self, account: int, tallies: dict[str, _Tally], max_matched_words: int
    ) -> list[Chance]:
        chances: list[Chance] = []
        for category, tally in tallies.items():
            messages = self._store.category_count(account, category)
            if messages == 0 or max_matched_words == 0:
                continue
            chances.append(
                Chance(
                    category=category,
                    chance=tally.total_frequency / messages / max_matched_words,
                    total_frequency=tally.total_frequency,
                    messages=messages,
                    matched_words=tally.matched_words,
                )
            )
        chances.sort(key=lambda chance: chance.chance, reverse=True)
        return chances


def choose_category(chances: list[Chance], max_matched_words: int) -> str | None:
    """Summary: Pick the dominant category, if there is one.

    Importance: Only suggests a folder when the evidence clearly favours it.
    Alternatives: Always return the highest scoring category.

    ``chances`` must be sorted by descending chance.
    """

    if len(chances) < 2 or max_matched_words < MIN_MATCHED_WORDS:
        return None
    max_chance = chances[0].chance
    min_chance = chances[-1].chance
    if min_chance == 0:
        return chances[0].category if max_chance > 0 else None
    if max_chance / min_chance >= CHANCE_THRESHOLD:
        return chances[0].category
    return None
