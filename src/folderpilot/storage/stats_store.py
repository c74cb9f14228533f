"""Summary: In-memory statistics store for the folder classifier.

Importance: Owns the per-account counts and the lock that guards them.
Alternatives: Keep the counts in SQLite tables and update them with SQL.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from folderpilot.models import CategoryCountRecord, StoreSnapshot, WordFrequencyRecord


class StatisticsStore:
    """Summary: Per-account message counts and word frequencies.

    Importance: Every learn pass reads and updates these tables atomically.
    Alternatives: Use process-wide dictionaries with ad hoc synchronization.

    Layout:
        category counts: account -> category -> messages
        word frequencies: account -> word -> category -> messages
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._category_counts: dict[int, dict[str, int]] = {}
        self._word_frequencies: dict[int, dict[str, dict[str, int]]] = {}
        self._dirty = False

    @contextmanager
    def transaction(self) -> Iterator["StatisticsStore"]:
        """Summary: Hold the store lock across several operations.

        Importance: Makes a whole read-modify-write pass atomic for other callers.
        Alternatives: Lock each dictionary access individually.
        """

        with self._lock:
            yield self

    @property
    def dirty(self) -> bool:
        with self._lock:
            return self._dirty

    def mark_clean(self) -> None:
        with self._lock:
            self._dirty = False

    def get_or_create_account(self, account: int) -> None:
        """Summary: Ensure both tables exist for an account.

        Importance: Lets later operations index the account without checks.
        Alternatives: Create nested entries lazily on every write.
        """

        with self._lock:
            self._category_counts.setdefault(account, {})
            self._word_frequencies.setdefault(account, {})

    def accounts(self) -> list[int]:
        with self._lock:
            return sorted(set(self._category_counts) | set(self._word_frequencies))

    def category_count(self, account: int, category: str) -> int:
        with self._lock:
            return self._category_counts.get(account, {}).get(category, 0)

    def category_counts(self, account: int) -> dict[str, int]:
        with self._lock:
            return dict(self._category_counts.get(account, {}))

    def increment_category_count(self, account: int, category: str) -> int:
        """Summary: Count one more message filed under a category.

        Importance: Supplies the denominator of relative word frequencies.
        Alternatives: Derive counts from the mail store on demand.
        """

        with self._lock:
            counts = self._category_counts.setdefault(account, {})
            counts[category] = counts.get(category, 0) + 1
            self._dirty = True
            return counts[category]

    def decrement_category_count(self, account: int, category: str) -> int:
        """Summary: Count one message less, never going below zero.

        Importance: The entry stays at zero because the folder set is small.
        Alternatives: Delete the entry when the count reaches zero.

        Folders that were never counted are left untouched.
        """

        with self._lock:
            counts = self._category_counts.get(account, {})
            if category not in counts:
                return 0
            counts[category] = max(counts[category] - 1, 0)
            self._dirty = True
            return counts[category]

    def word_frequencies(self, account: int, word: str) -> dict[str, int]:
        with self._lock:
            return dict(self._word_frequencies.get(account, {}).get(word, {}))

    def vocabulary_size(self, account: int) -> int:
        with self._lock:
            return len(self._word_frequencies.get(account, {}))

    def increment_word_frequency(self, account: int, word: str, category: str) -> int:
        with self._lock:
            words = self._word_frequencies.setdefault(account, {})
            frequencies = words.setdefault(word, {})
            frequencies[category] = frequencies.get(category, 0) + 1
            self._dirty = True
            return frequencies[category]

    def decrement_word_frequency(self, account: int, word: str, category: str) -> int:
        """Summary: Remove one message's contribution of a word to a category.

        Importance: Prunes the entry at zero so the vocabulary stays bounded.
        Alternatives: Keep zero entries like the category counts do.
        """

        with self._lock:
            frequencies = self._word_frequencies.get(account, {}).get(word)
            if frequencies is None or category not in frequencies:
                return 0
            value = frequencies[category] - 1
            if value <= 0:
                del frequencies[category]
                value = 0
            else:
                frequencies[category] = value
            self._dirty = True
            return value

    def snapshot(self) -> StoreSnapshot:
        """Summary: Export every count as flat records.

        Importance: Feeds the snapshot codec without exposing internal dictionaries.
        Alternatives: Deep-copy the nested dictionaries.
        """

        with self._lock:
            messages = [
                CategoryCountRecord(account=account, category=category, count=count)
                for account, counts in self._category_counts.items()
                for category, count in counts.items()
            ]
            words = [
                WordFrequencyRecord(
                    account=account, word=word, category=category, frequency=frequency
                )
                for account, vocabulary in self._word_frequencies.items()
                for word, frequencies in vocabulary.items()
                for category, frequency in frequencies.items()
            ]
            return StoreSnapshot(messages=messages, words=words)

    def restore(self, snapshot: StoreSnapshot) -> None:
        """Summary: Merge exported records into the store.

        Importance: Rebuilds the tables from a persisted snapshot.
        Alternatives: Replace the tables wholesale and drop current entries.

        The store is expected to be empty; colliding keys are overwritten.
        """

        with self._lock:
            for record in snapshot.messages:
                counts = self._category_counts.setdefault(record.account, {})
                counts[record.category] = record.count
            for record in snapshot.words:
                self._word_frequencies.setdefault(record.account, {})
                frequencies = self._word_frequencies[record.account].setdefault(record.word, {})
                frequencies[record.category] = record.frequency

    def clear(self) -> None:
        with self._lock:
            self._category_counts.clear()
            self._word_frequencies.clear()
            self._dirty = True
