"""The Oracle of Trisolaris: an LLM reading of the current sky.

The oracle never raises into the simulation. Without a planet it answers
locally; any failure on the way to or back from the model yields a fixed
"silent" answer.
"""
from __future__ import annotations

import json
import math
import os
import sys
import threading
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from google import genai
from google.genai import types

from trisolaris.core.config import ORACLE_CFG, OracleCfg
from trisolaris.core.model import Body, Snapshot

STABLE_ERA = "Stable Era"
CHAOTIC_ERA = "Chaotic Era"
ERAS = (STABLE_ERA, CHAOTIC_ERA)


@dataclass(frozen=True)
class OracleResponse:
    era: str
    description: str
    recommendation: str

    @property
    def is_stable(self) -> bool:
        return self.era == STABLE_ERA


DESTROYED_RESPONSE = OracleResponse(
    era=CHAOTIC_ERA,
    description="Trisolaris has been destroyed.",
    recommendation="Mourn.",
)

SILENT_RESPONSE = OracleResponse(
    era=CHAOTIC_ERA,
    description="The Oracle is silent. The magnetic interference from the suns is too strong.",
    recommendation="Wait",
)

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "era": types.Schema(type=types.Type.STRING, enum=list(ERAS)),
        "description": types.Schema(type=types.Type.STRING),
        "recommendation": types.Schema(type=types.Type.STRING),
    },
    required=["era", "description", "recommendation"],
)


class OracleError(Exception):
    """The model could not be reached or gave an unusable answer."""


def build_prompt(planet: Body, suns: Sequence[Body]) -> str:
    distance_lines = []
    for index, sun in enumerate(suns, start=1):
        dx = sun.position.x - planet.position.x
        dy = sun.position.y - planet.position.y
        dist = math.sqrt(dx * dx + dy * dy)
        distance_lines.append(
            f"Sun {index} ({sun.color}): {dist:.0f} units away. Mass: {sun.mass:.0f}."
        )
    distances = "\n".join(distance_lines)

    return (
        "You are the Oracle of Trisolaris (from the Three Body Problem).\n"
        "Analyze the current astronomical data of our world.\n"
        "\n"
        "Data:\n"
        f"Planet Position: ({planet.position.x:.0f}, {planet.position.y:.0f})\n"
        f"{distances}\n"
        "\n"
        "Determine if we are in a Stable Era (suns follow a regular pattern, temperate climate) "
        "or a Chaotic Era (unpredictable sun movement, extreme heat/cold).\n"
        "Provide a cryptic, atmospheric description of the sky and the fate of civilization.\n"
        'Provide a recommendation (e.g., "Dehydrate", "Rehydrate", "Develop Industry").\n'
    )


def parse_response(text: str | None) -> OracleResponse:
    if not text:
        raise OracleError("No response from Oracle")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as err:
        raise OracleError(f"Oracle answered with invalid JSON: {err}") from err
    if not isinstance(payload, dict):
        raise OracleError("Oracle answer is not an object")
    era = payload.get("era")
    if era not in ERAS:
        raise OracleError(f"Unknown era {era!r}")
    description = payload.get("description")
    recommendation = payload.get("recommendation")
    if not isinstance(description, str) or not isinstance(recommendation, str):
        raise OracleError("Oracle answer is missing description or recommendation")
    return OracleResponse(era=era, description=description, recommendation=recommendation)


def make_client(cfg: OracleCfg = ORACLE_CFG) -> genai.Client:
    for name in cfg.api_key_env_vars:
        api_key = os.environ.get(name)
        if api_key:
            return genai.Client(api_key=api_key)
    raise OracleError(f"No API key found in {', '.join(cfg.api_key_env_vars)}")


def consult_the_oracle(
    bodies: Sequence[Body] | Snapshot,
    client: Any | None = None,
    cfg: OracleCfg = ORACLE_CFG,
) -> OracleResponse:
    sky = bodies if isinstance(bodies, Snapshot) else Snapshot(bodies=tuple(bodies))
    planet = sky.planet
    if planet is None:
        return DESTROYED_RESPONSE

    prompt = build_prompt(planet, sky.suns)
    try:
        if client is None:
            client = make_client(cfg)
        response = client.models.generate_content(
            model=cfg.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=RESPONSE_SCHEMA,
            ),
        )
        return parse_response(response.text)
    except Exception as err:  # the oracle must never take the simulation down
        print(f"[Oracle] consultation failed: {err}", file=sys.stderr)
        return SILENT_RESPONSE


class OracleWorker:
    """Runs oracle consultations off the render thread.

    Each request works on the snapshot it was given. A newer request
    supersedes older ones: an older answer that arrives late is dropped.
    """

    def __init__(
        self,
        consult: Callable[[Sequence[Body]], OracleResponse] | None = None,
        *,
        client: Any | None = None,
        cfg: OracleCfg = ORACLE_CFG,
    ) -> None:
        if consult is None:
            def consult(bodies: Sequence[Body]) -> OracleResponse:
                return consult_the_oracle(bodies, client=client, cfg=cfg)
        self._consult = consult
        self._lock = threading.Lock()
        self._latest_request = 0
        self._result_request = 0
        self._result: OracleResponse | None = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._result_request < self._latest_request

    def request(self, snapshot: Snapshot) -> threading.Thread:
        with self._lock:
            self._latest_request += 1
            request_id = self._latest_request
        thread = threading.Thread(
            target=self._run,
            args=(request_id, snapshot.bodies),
            name=f"oracle-{request_id}",
            daemon=True,
        )
        thread.start()
        return thread

    def poll(self) -> OracleResponse | None:
        with self._lock:
            return self._result

    def dismiss(self) -> None:
        with self._lock:
            self._result = None

    def _run(self, request_id: int, bodies: Sequence[Body]) -> None:
        response = self._consult(bodies)
        with self._lock:
            if request_id > self._result_request:
                self._result = response
                self._result_request = request_id


__all__ = [
    "CHAOTIC_ERA",
    "DESTROYED_RESPONSE",
    "OracleError",
    "OracleResponse",
    "OracleWorker",
    "SILENT_RESPONSE",
    "STABLE_ERA",
    "build_prompt",
    "consult_the_oracle",
    "make_client",
    "parse_response",
]
