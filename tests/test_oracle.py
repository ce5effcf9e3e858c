import json
import threading
from types import SimpleNamespace

import pytest

from trisolaris.core.model import Snapshot
from trisolaris.services.oracle import (
    CHAOTIC_ERA,
    DESTROYED_RESPONSE,
    SILENT_RESPONSE,
    STABLE_ERA,
    OracleError,
    OracleResponse,
    OracleWorker,
    build_prompt,
    consult_the_oracle,
    make_client,
    parse_response,
)


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


def fake_client(text=None, error=None):
    return SimpleNamespace(models=FakeModels(text, error))


def answer(era=STABLE_ERA, description="Three suns rest.", recommendation="Rehydrate"):
    return json.dumps({"era": era, "description": description, "recommendation": recommendation})


def test_no_planet_means_destroyed_without_calling_the_model(figure8):
    client = fake_client(answer())
    suns = [body for body in figure8 if not body.is_planet]
    assert consult_the_oracle(suns, client=client) == DESTROYED_RESPONSE
    assert client.models.calls == []


def test_valid_answer_is_parsed(figure8):
    client = fake_client(answer())
    response = consult_the_oracle(figure8, client=client)
    assert response == OracleResponse(STABLE_ERA, "Three suns rest.", "Rehydrate")
    assert response.is_stable

    call = client.models.calls[0]
    assert call["model"] == "gemini-2.5-flash"
    assert call["config"].response_mime_type == "application/json"
    assert "Planet Position: (650, 450)" in call["contents"]


def test_client_error_gives_silent_answer(figure8, capsys):
    client = fake_client(error=RuntimeError("quota exceeded"))
    assert consult_the_oracle(figure8, client=client) == SILENT_RESPONSE
    assert "quota exceeded" in capsys.readouterr().err


@pytest.mark.parametrize(
    "text",
    [None, "", "not json", "[1, 2]", answer(era="Golden Era"), json.dumps({"era": CHAOTIC_ERA})],
)
def test_unusable_answers_give_silent_answer(figure8, text):
    assert consult_the_oracle(figure8, client=fake_client(text)) == SILENT_RESPONSE


def test_parse_response_rejects_unknown_era():
    with pytest.raises(OracleError):
        parse_response(answer(era="Golden Era"))


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    with pytest.raises(OracleError):
        make_client()


def test_missing_api_key_is_a_silent_answer(figure8, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    assert consult_the_oracle(figure8) == SILENT_RESPONSE


def test_prompt_lists_sun_distances(figure8):
    planet = next(body for body in figure8 if body.is_planet)
    suns = [body for body in figure8 if not body.is_planet]
    prompt = build_prompt(planet, suns)
    assert "Sun 3 (#a78bfa): 71 units away. Mass: 1000." in prompt
    assert "Oracle of Trisolaris" in prompt


def test_worker_uses_the_snapshot_it_was_given(figure8):
    seen = []

    def consult(bodies):
        seen.append(bodies)
        return DESTROYED_RESPONSE

    snapshot = Snapshot.capture(figure8, 1.0)
    worker = OracleWorker(consult)
    worker.request(snapshot).join(timeout=5)
    assert seen == [snapshot.bodies]
    assert worker.poll() == DESTROYED_RESPONSE
    assert not worker.busy

    worker.dismiss()
    assert worker.poll() is None


def test_newer_request_supersedes_a_slow_older_one(figure8):
    release_slow = threading.Event()
    slow_answer = OracleResponse(CHAOTIC_ERA, "old sky", "Dehydrate")
    fast_answer = OracleResponse(STABLE_ERA, "new sky", "Rehydrate")

    def consult(bodies):
        if len(bodies) == 4:
            release_slow.wait(timeout=5)
            return slow_answer
        return fast_answer

    worker = OracleWorker(consult)
    slow = worker.request(Snapshot.capture(figure8))
    fast = worker.request(Snapshot.capture(figure8[:3]))
    fast.join(timeout=5)
    assert worker.poll() == fast_answer

    release_slow.set()
    slow.join(timeout=5)
    assert worker.poll() == fast_answer
    assert not worker.busy


def test_consult_accepts_a_snapshot(figure8):
    client = fake_client(answer(era=CHAOTIC_ERA))
    response = consult_the_oracle(Snapshot.capture(figure8, 3.0), client=client)
    assert not response.is_stable
    assert "Sun 1 (#fbbf24)" in client.models.calls[0]["contents"]
    assert consult_the_oracle(Snapshot(bodies=()), client=client) == DESTROYED_RESPONSE
