"""Caller-side coordination for CNPJ/CEP registry lookups.

The lookup itself (BrasilAPI, ViaCEP, ...) is injected as a plain callable.
This module only decides *when* to call it and *whether* to keep its answer:

- ``submit``/``flush`` debounce keystrokes: a lookup fires only after a
  quiet period following the last submitted value;
- a key equal to the last resolved one is answered from memory;
- every fetch is tagged with a monotonically increasing sequence number and
  its response is applied only if no newer fetch was issued meanwhile, so a
  slow stale response never overwrites a fresher one.

A failed fetch never blocks the form: ``lookup`` returns None and records
the message in ``error`` so the user can continue with manual entry.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Generic, TypeVar

from tributario.utils.formatters import strip_formatting
from tributario.utils.validators import ValidationResult, validate_cep, validate_cnpj

T = TypeVar("T")

logger = logging.getLogger(__name__)

CNPJ_QUIET_PERIOD = 1.0
CEP_QUIET_PERIOD = 0.8


class SequencedLookup(Generic[T]):
    def __init__(
        self,
        fetch: Callable[[str], T],
        *,
        validate: Callable[[str], ValidationResult] | None = None,
        quiet_period: float = CNPJ_QUIET_PERIOD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._validate = validate
        self._quiet_period = quiet_period
        self._clock = clock
        self._lock = threading.Lock()
        self._seq = 0
        self._pending: str | None = None
        self._pending_at = 0.0
        self._resolved_key: str | None = None
        self.data: T | None = None
        self.error: str | None = None

    @property
    def latest_sequence(self) -> int:
        return self._seq

    def submit(self, key: str) -> None:
        """Record the latest typed value; restarts the quiet period."""
        with self._lock:
            self._pending = key
            self._pending_at = self._clock()

    def flush(self) -> T | None:
        """Fire the pending lookup if the quiet period has elapsed.

        Returns the lookup result, or None when nothing fired (still typing,
        nothing pending, invalid key) or the fetch failed or went stale.
        """
        with self._lock:
            if self._pending is None:
                return None
            if self._clock() - self._pending_at < self._quiet_period:
                return None
            key = self._pending
            self._pending = None
        return self.lookup(key)

    def lookup(self, key: str) -> T | None:
        """Run the lookup for *key* now, bypassing the debounce."""
        key = strip_formatting(key)
        if self._validate is not None:
            result = self._validate(key)
            if not result.valido:
                with self._lock:
                    # responses for the previous key are now stale
                    self._seq += 1
                    self.error = result.erro
                return None

        with self._lock:
            if key == self._resolved_key and self.data is not None:
                return self.data
            self._seq += 1
            seq = self._seq
            self.error = None

        try:
            data = self._fetch(key)
        except Exception as e:
            with self._lock:
                if seq == self._seq:
                    self.error = str(e) or e.__class__.__name__
            logger.warning("Lookup #%d for %s failed: %s", seq, key, e)
            return None

        with self._lock:
            if seq != self._seq:
                logger.info("Discarding stale lookup #%d for %s (latest #%d)", seq, key, self._seq)
                return None
            self._resolved_key = key
            self.data = data
        return data

    def reset(self) -> None:
        """Forget pending input and cached data; in-flight responses become stale."""
        with self._lock:
            self._seq += 1
            self._pending = None
            self._resolved_key = None
            self.data = None
            self.error = None


def cnpj_lookup(fetch: Callable[[str], T], **kwargs) -> SequencedLookup[T]:
    """Coordinator for a company-registry lookup keyed by CNPJ."""
    kwargs.setdefault("quiet_period", CNPJ_QUIET_PERIOD)
    return SequencedLookup(fetch, validate=validate_cnpj, **kwargs)


def cep_lookup(fetch: Callable[[str], T], **kwargs) -> SequencedLookup[T]:
    """Coordinator for a postal-code lookup keyed by CEP."""
    kwargs.setdefault("quiet_period", CEP_QUIET_PERIOD)
    return SequencedLookup(fetch, validate=validate_cep, **kwargs)
