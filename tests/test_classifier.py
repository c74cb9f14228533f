"""Summary: Tests for the incremental folder classifier.

Importance: Validates learning, unlearning, and the discrimination thresholds.
Alternatives: Validate suggestions manually against a real mailbox.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from folderpilot.classifier import MIN_MATCHED_WORDS, MessageClassifier, choose_category
from folderpilot.models import Chance, CategoryCountRecord, StoreSnapshot, WordFrequencyRecord
from folderpilot.storage.stats_store import StatisticsStore
from folderpilot.tokenizer import Tokenizer, WordSegmenter


BILL_WORDS = "invoice payment amount billing statement balance receipt total charges overdue"
SPORT_WORDS = "football match goals league score team player coach stadium season"
FRUIT_WORDS = "apple banana cherry dates elder figs grape honey iris juniper"


def _chance(category: str, chance: float) -> Chance:
    return Chance(category=category, chance=chance, total_frequency=0, messages=1, matched_words=1)


def _seeded_store(counts: dict[str, int], words: list[str], frequencies: dict[str, int]) -> StatisticsStore:
    store = StatisticsStore()
    store.restore(
        StoreSnapshot(
            messages=[
                CategoryCountRecord(account=1, category=category, count=count)
                for category, count in counts.items()
            ],
            words=[
                WordFrequencyRecord(account=1, word=word, category=category, frequency=frequency)
                for word in words
                for category, frequency in frequencies.items()
            ],
        )
    )
    return store


def test_learn_counts_each_word_once_per_message() -> None:
    """Summary: Repeated words add a single frequency per message.

    Importance: Frequencies count messages, not occurrences.
    Alternatives: Weight words by occurrence count.
    """

    store = StatisticsStore()
    classifier = MessageClassifier(store)
    result = classifier.learn(1, "Bills", "invoice invoice INVOICE total", added=True)
    assert result.words == 2
    assert result.predicted is None
    assert store.word_frequencies(1, "invoice") == {"Bills": 1}
    assert store.category_count(1, "Bills") == 1


def test_learn_then_unlearn_restores_previous_statistics() -> None:
    """Summary: Removing learned messages returns counts to their prior values.

    Importance: Moving messages out of a folder must undo their contribution.
    Alternatives: Rebuild statistics from scratch after removals.
    """

    store = StatisticsStore()
    classifier = MessageClassifier(store)
    for _ in range(3):
        classifier.learn(1, "Sports", f"{SPORT_WORDS} invoice", added=True)
    texts = [
        f"{BILL_WORDS} monthly",
        f"{BILL_WORDS} quarterly football",
        "invoice reminder",
    ]
    vocabulary = {word for text in texts for word in Tokenizer().tokenize(text)}
    before = {word: store.word_frequencies(1, word) for word in vocabulary}
    counts_before = store.category_counts(1)

    for text in texts:
        classifier.learn(1, "Bills", text, added=True)
    assert store.category_count(1, "Bills") == 3
    for text in texts:
        classifier.learn(1, "Bills", text, added=False)
        assert all(count >= 0 for count in store.category_counts(1).values())

    assert {word: store.word_frequencies(1, word) for word in vocabulary} == before
    assert store.category_count(1, "Bills") == 0
    assert store.category_count(1, "Sports") == counts_before["Sports"]


def test_unlearn_returns_no_classification() -> None:
    """Summary: The removed direction never predicts.

    Importance: Only newly filed messages get move suggestions.
    Alternatives: Predict on removal as well.
    """

    store = _seeded_store({"Bills": 1, "Sports": 10}, FRUIT_WORDS.split(), {"Bills": 1, "Sports": 1})
    result = MessageClassifier(store).learn(1, "Bills", FRUIT_WORDS, added=False)
    assert result.predicted is None
    assert result.chances == []
    assert store.category_count(1, "Bills") == 0


def test_too_few_matched_words_gives_no_classification() -> None:
    """Summary: Fewer than the minimum matched words never classifies.

    Importance: Short messages carry too little evidence.
    Alternatives: Scale the threshold by message length.
    """

    words = FRUIT_WORDS.split()[: MIN_MATCHED_WORDS - 1]
    store = _seeded_store({"Bills": 1, "Sports": 10}, words, {"Bills": 1, "Sports": 1})
    result = MessageClassifier(store).learn(1, "Inbox", " ".join(words), added=True)
    assert result.max_matched_words == MIN_MATCHED_WORDS - 1
    assert [chance.category for chance in result.chances] == ["Bills", "Sports"]
    assert result.predicted is None


def test_dominant_category_is_predicted() -> None:
    """Summary: A category with at least twice the chance of the weakest one wins.

    Importance: Produces move suggestions for clearly misfiled messages.
    Alternatives: Always suggest the best scoring folder.
    """

    words = FRUIT_WORDS.split()
    store = _seeded_store({"Bills": 1, "Sports": 10}, words, {"Bills": 1, "Sports": 1})
    result = MessageClassifier(store).learn(1, "Inbox", FRUIT_WORDS, added=True)
    assert result.max_matched_words == 10
    assert result.chances[0].chance == pytest.approx(1.0)
    assert result.chances[1].chance == pytest.approx(0.1)
    assert result.predicted == "Bills"
    assert store.category_count(1, "Inbox") == 1
    assert store.word_frequencies(1, "apple") == {"Bills": 1, "Sports": 1, "Inbox": 1}


def test_prediction_reads_frequencies_before_update() -> None:
    """Summary: The message being learned does not count towards its own prediction.

    Importance: Avoids a bias towards the folder the message was filed in.
    Alternatives: Update first and predict afterwards.
    """

    store = StatisticsStore()
    classifier = MessageClassifier(store)
    result = classifier.learn(1, "Bills", BILL_WORDS, added=True)
    assert result.chances == []
    assert result.max_matched_words == 0


def test_chance_threshold_boundary() -> None:
    """Summary: A ratio of exactly two classifies, slightly less does not.

    Importance: Pins down the inclusive threshold.
    Alternatives: Use a strict inequality.
    """

    assert choose_category([_chance("Bills", 4.0), _chance("Sports", 2.0)], 10) == "Bills"
    assert choose_category([_chance("Bills", 3.9), _chance("Sports", 2.0)], 10) is None


def test_chance_threshold_uses_weakest_category() -> None:
    """Summary: Compare the top chance against the bottom of the full list.

    Importance: A strong runner-up does not block a suggestion.
    Alternatives: Compare against the second best category.
    """

    chances = [_chance("Bills", 4.0), _chance("Inbox", 3.5), _chance("Sports", 1.0)]
    assert choose_category(chances, 10) == "Bills"
    assert choose_category(chances[:1], 10) is None
    assert choose_category(chances, 9) is None


def test_common_word_excludes_first_category_only() -> None:
    """Summary: A word spread evenly over two folders drops the first of the pair.

    Importance: Common words must not sway the comparison.
    Alternatives: Drop both categories or use a stop-word list.
    """

    store = _seeded_store({"A": 100, "B": 100}, [], {})
    for _ in range(50):
        store.increment_word_frequency(1, "the", "A")
    for _ in range(48):
        store.increment_word_frequency(1, "the", "B")

    result = MessageClassifier(store).learn(1, "C", "the", added=True)
    assert [chance.category for chance in result.chances] == ["B"]
    assert result.chances[0].matched_words == 1
    assert result.chances[0].total_frequency == 48
    assert store.word_frequencies(1, "the") == {"A": 50, "B": 48, "C": 1}


def test_distinctive_word_keeps_both_categories() -> None:
    """Summary: Words with clearly different relative frequencies count for both folders.

    Importance: Only similar frequencies trigger the common-word filter.
    Alternatives: Filter every word present in more than one folder.
    """

    store = _seeded_store({"A": 100, "B": 100}, [], {})
    for _ in range(50):
        store.increment_word_frequency(1, "ball", "A")
    for _ in range(10):
        store.increment_word_frequency(1, "ball", "B")

    result = MessageClassifier(store).learn(1, "C", "ball", added=True)
    assert sorted(chance.category for chance in result.chances) == ["A", "B"]


def test_categories_without_messages_are_ignored() -> None:
    """Summary: Folders with a zero message count produce no chance.

    Importance: Avoids dividing by an emptied folder.
    Alternatives: Treat empty folders as having one message.
    """

    store = _seeded_store({"A": 0, "B": 5}, ["ball"], {"A": 2, "B": 1})
    result = MessageClassifier(store).learn(1, "C", "ball", added=True)
    assert [chance.category for chance in result.chances] == ["B"]


def test_failure_mid_pass_releases_lock() -> None:
    """Summary: A failing tokenizer propagates but leaves the store usable.

    Importance: Errors must not deadlock later classifications.
    Alternatives: Wrap every store call in its own lock.
    """

    class FailingSegmenter(WordSegmenter):
        def segment(self, text: str):
            yield "invoice"
            raise RuntimeError("segmentation failed")

    store = StatisticsStore()
    classifier = MessageClassifier(store, Tokenizer(FailingSegmenter()))
    with pytest.raises(RuntimeError):
        classifier.learn(1, "Bills", "invoice", added=True)

    with ThreadPoolExecutor(max_workers=1) as executor:
        executor.submit(store.increment_category_count, 1, "Bills").result(timeout=5)
    assert store.word_frequencies(1, "invoice") == {"Bills": 1}
    assert store.category_count(1, "Bills") == 1


def test_concurrent_accounts_do_not_mix() -> None:
    """Summary: Parallel learning on two accounts keeps their statistics separate.

    Importance: Accounts must never influence each other.
    Alternatives: Use one store per account.
    """

    store = StatisticsStore()
    classifier = MessageClassifier(store)
    rounds = 200

    def learn(account: int, category: str, text: str) -> None:
        for _ in range(rounds):
            classifier.learn(account, category, text, added=True)

    with ThreadPoolExecutor(max_workers=4) as executor:
        futures = [
            executor.submit(learn, 1, "Bills", BILL_WORDS),
            executor.submit(learn, 2, "Sports", SPORT_WORDS),
            executor.submit(learn, 1, "Bills", BILL_WORDS),
            executor.submit(learn, 2, "Sports", SPORT_WORDS),
        ]
        for future in futures:
            future.result()

    assert store.category_counts(1) == {"Bills": 2 * rounds}
    assert store.category_counts(2) == {"Sports": 2 * rounds}
    assert store.word_frequencies(1, "invoice") == {"Bills": 2 * rounds}
    assert store.word_frequencies(2, "invoice") == {}
    assert store.word_frequencies(1, "football") == {}
    assert store.vocabulary_size(1) == len(BILL_WORDS.split())
    assert store.vocabulary_size(2) == len(SPORT_WORDS.split())
