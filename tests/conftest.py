import time

import pytest


class FakeEngine:
    """Stands in for a transformers text-generation pipeline."""

    def __init__(self, reply="Why did the chicken cross the road?", output=None):
        self.reply = reply
        self.output = output
        self.calls = []

    def __call__(self, messages, *, max_new_tokens):
        self.calls.append((messages, max_new_tokens))
        if self.output is not None:
            return self.output
        turns = list(messages) + [{"role": "assistant", "content": self.reply}]
        return [{"generated_text": turns}]


class FakeLoader:
    def __init__(self, engine=None, fail_times=0, message="device not supported", delay=0.0, on_load=None):
        self.engine = engine or FakeEngine()
        self.fail_times = fail_times
        self.message = message
        self.delay = delay
        self.on_load = on_load
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.on_load is not None:
            self.on_load()
        if self.calls <= self.fail_times:
            raise RuntimeError(self.message)
        return self.engine


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def loader(engine):
    return FakeLoader(engine=engine)
