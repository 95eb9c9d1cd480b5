from __future__ import annotations

import logging
import threading

from tributario.services.lookup import (
    CEP_QUIET_PERIOD,
    CNPJ_QUIET_PERIOD,
    SequencedLookup,
    cep_lookup,
    cnpj_lookup,
)

CNPJ = "11222333000181"


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingFetch:
    def __init__(self, result=None) -> None:
        self.calls: list[str] = []
        self.result = result

    def __call__(self, key: str):
        self.calls.append(key)
        return self.result if self.result is not None else {"chave": key}


class TestDebounce:
    def test_fires_after_quiet_period(self):
        clock, fetch = FakeClock(), RecordingFetch()
        lookup = cnpj_lookup(fetch, clock=clock)
        lookup.submit("11.222.333/0001-81")
        clock.advance(CNPJ_QUIET_PERIOD)
        assert lookup.flush() == {"chave": CNPJ}
        assert fetch.calls == [CNPJ]

    def test_nothing_fires_while_typing(self):
        clock, fetch = FakeClock(), RecordingFetch()
        lookup = cnpj_lookup(fetch, clock=clock)
        lookup.submit("11222333000181")
        clock.advance(CNPJ_QUIET_PERIOD / 2)
        assert lookup.flush() is None
        assert fetch.calls == []

    def test_new_input_restarts_quiet_period(self):
        clock, fetch = FakeClock(), RecordingFetch()
        lookup = cnpj_lookup(fetch, clock=clock)
        lookup.submit("1122233300018")
        clock.advance(0.9)
        lookup.submit(CNPJ)
        clock.advance(0.9)
        assert lookup.flush() is None
        clock.advance(0.1)
        lookup.flush()
        assert fetch.calls == [CNPJ]

    def test_flush_without_pending(self):
        lookup = cnpj_lookup(RecordingFetch(), clock=FakeClock())
        assert lookup.flush() is None

    def test_pending_consumed_once(self):
        clock, fetch = FakeClock(), RecordingFetch()
        lookup = cnpj_lookup(fetch, clock=clock)
        lookup.submit(CNPJ)
        clock.advance(2)
        lookup.flush()
        assert lookup.flush() is None
        assert len(fetch.calls) == 1

    def test_cep_quiet_period_shorter(self):
        clock, fetch = FakeClock(), RecordingFetch()
        lookup = cep_lookup(fetch, clock=clock)
        lookup.submit("01310-100")
        clock.advance(CEP_QUIET_PERIOD)
        lookup.flush()
        assert fetch.calls == ["01310100"]
        assert CEP_QUIET_PERIOD < CNPJ_QUIET_PERIOD


class TestLookup:
    def test_invalid_key_never_fetches(self):
        fetch = RecordingFetch()
        lookup = cnpj_lookup(fetch)
        assert lookup.lookup("11.222.333/0001-82") is None
        assert lookup.error == "CNPJ inválido"
        assert fetch.calls == []

    def test_same_key_served_from_memory(self):
        fetch = RecordingFetch()
        lookup = cnpj_lookup(fetch)
        first = lookup.lookup(CNPJ)
        second = lookup.lookup("11.222.333/0001-81")
        assert first is second
        assert fetch.calls == [CNPJ]
        assert lookup.latest_sequence == 1

    def test_different_key_fetches_again(self):
        fetch = RecordingFetch()
        lookup = cep_lookup(fetch)
        lookup.lookup("01310100")
        lookup.lookup("20040002")
        assert fetch.calls == ["01310100", "20040002"]
        assert lookup.data == {"chave": "20040002"}

    def test_failure_recorded_not_raised(self, caplog):
        def fetch(key):
            raise ConnectionError("CNPJ não encontrado")

        lookup = cnpj_lookup(fetch)
        with caplog.at_level(logging.WARNING, logger="tributario.services.lookup"):
            assert lookup.lookup(CNPJ) is None
        assert lookup.error == "CNPJ não encontrado"
        assert lookup.data is None
        assert "failed" in caplog.text

    def test_failure_without_message(self):
        def fetch(key):
            raise TimeoutError()

        lookup = cep_lookup(fetch)
        lookup.lookup("01310100")
        assert lookup.error == "TimeoutError"

    def test_success_clears_previous_error(self):
        lookup = cnpj_lookup(RecordingFetch())
        lookup.lookup("123")
        assert lookup.error is not None
        lookup.lookup(CNPJ)
        assert lookup.error is None

    def test_without_validator(self):
        fetch = RecordingFetch()
        lookup = SequencedLookup(fetch)
        lookup.lookup("abc-1")
        assert fetch.calls == ["1"]


class TestStaleResponses:
    def test_stale_response_discarded(self, caplog):
        """A newer lookup issued while an older one is in flight wins."""
        newer = "01310100"
        lookup: SequencedLookup[dict] | None = None

        def fetch(key):
            if key == "20040002":
                # user typed a new CEP before this response arrived
                lookup.lookup(newer)
            return {"chave": key}

        lookup = cep_lookup(fetch)
        with caplog.at_level(logging.INFO, logger="tributario.services.lookup"):
            assert lookup.lookup("20040002") is None
        assert lookup.data == {"chave": newer}
        assert lookup.latest_sequence == 2
        assert "stale" in caplog.text

    def test_stale_failure_does_not_set_error(self):
        def fetch(key):
            if key == "20040002":
                lookup.lookup("01310100")
                raise ConnectionError("timeout")
            return {"chave": key}

        lookup = cep_lookup(fetch)
        lookup.lookup("20040002")
        assert lookup.error is None
        assert lookup.data == {"chave": "01310100"}

    def test_concurrent_fetches(self):
        """Slow first response arriving after the second is dropped."""
        first_started = threading.Event()
        release_first = threading.Event()
        results: dict[str, object] = {}

        def fetch(key):
            if key == "20040002":
                first_started.set()
                release_first.wait(timeout=5)
            return {"chave": key}

        lookup = cep_lookup(fetch)
        worker = threading.Thread(
            target=lambda: results.setdefault("old", lookup.lookup("20040002"))
        )
        worker.start()
        assert first_started.wait(timeout=5)
        results["new"] = lookup.lookup("01310100")
        release_first.set()
        worker.join(timeout=5)

        assert results["old"] is None
        assert results["new"] == {"chave": "01310100"}
        assert lookup.data == {"chave": "01310100"}

    def test_invalid_key_invalidates_in_flight(self):
        def fetch(key):
            # user kept typing and left an incomplete CEP
            lookup.lookup("0131")
            return {"chave": key}

        lookup = cep_lookup(fetch)
        assert lookup.lookup("20040002") is None
        assert lookup.data is None
        assert lookup.error == "CEP deve ter 8 dígitos"
        assert lookup.latest_sequence == 2

    def test_reset_invalidates_in_flight(self):
        def fetch(key):
            lookup.reset()
            return {"chave": key}

        lookup = cnpj_lookup(fetch)
        assert lookup.lookup(CNPJ) is None
        assert lookup.data is None


class TestReset:
    def test_reset_clears_state(self):
        clock, fetch = FakeClock(), RecordingFetch()
        lookup = cnpj_lookup(fetch, clock=clock)
        lookup.lookup(CNPJ)
        lookup.submit(CNPJ)
        lookup.reset()
        clock.advance(5)
        assert lookup.flush() is None
        assert lookup.data is None
        assert lookup.error is None

    def test_lookup_after_reset_fetches_again(self):
        fetch = RecordingFetch()
        lookup = cnpj_lookup(fetch)
        lookup.lookup(CNPJ)
        lookup.reset()
        lookup.lookup(CNPJ)
        assert fetch.calls == [CNPJ, CNPJ]
