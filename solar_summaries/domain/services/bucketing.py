"""
Shared bucketing primitive used by the daily and monthly aggregators.
"""
from decimal import Decimal
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
A = TypeVar("A")


def bucket_and_reduce(
    records: Iterable[T],
    key_fn: Callable[[T], K],
    init_fn: Callable[[], A],
    reduce_fn: Callable[[A, T], A],
) -> Dict[K, A]:
    """
    Group records by key and fold each group into an accumulator.

    Buckets keep the order in which their key first appears, so a
    time-ordered input yields time-ordered buckets.
    """
    buckets: Dict[K, A] = {}
    for record in records:
        key = key_fn(record)
        acc = buckets[key] if key in buckets else init_fn()
        buckets[key] = reduce_fn(acc, record)
    return buckets


def _as_number(value: Any) -> Optional[float]:
    # bool is an int subclass but never a measurement
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    return None


class SumMaxReducer:
    """
    Reducer computing a sum or a max per field.

    Accumulators are plain dicts keyed by output field and start at 0.
    Values that are missing or not numeric are skipped.

    Example:
        reducer = SumMaxReducer(
            max_fields={'total': 'generation_today_kwh', 'peak': 'power_kw'},
        )
        bucket_and_reduce(readings, key_fn, reducer.init, reducer.reduce)
    """

    def __init__(
        self,
        sum_fields: Optional[Dict[str, str]] = None,
        max_fields: Optional[Dict[str, str]] = None,
        getter: Callable[[Any, str], Any] = getattr,
    ):
        self.sum_fields = dict(sum_fields or {})
        self.max_fields = dict(max_fields or {})
        self._get = getter

    @property
    def fields(self) -> Sequence[str]:
        return list(self.sum_fields) + list(self.max_fields)

    def init(self) -> Dict[str, float]:
        return {name: 0.0 for name in self.fields}

    def reduce(self, acc: Dict[str, float], record: Any) -> Dict[str, float]:
        for name, attr in self.sum_fields.items():
            value = _as_number(self._get(record, attr))
            if value is not None:
                acc[name] += value
        for name, attr in self.max_fields.items():
            value = _as_number(self._get(record, attr))
            if value is not None and value > acc[name]:
                acc[name] = value
        return acc
