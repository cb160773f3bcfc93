"""
llm_wrapper for the symptom suggestion flow.

Provides:
- build_prompt: renders the symptom text into the fixed instruction template
- call_llm: one call to OpenAI (if key present) or the offline rule stand-in; logs raw outputs
- parse_and_validate_json: strict JSON array-of-strings validation
- suggest_possible_conditions: request check -> call_llm -> parse_and_validate_json

Failures are raised as SymptomCheckError subclasses, each with a `kind` the
web layer turns into a status code and the UI into a message.
"""

import os
import json
import logging
from typing import Optional

import openai
from dotenv import load_dotenv
from pydantic import ValidationError

# local imports (project)
from pydantic_models import SymptomRequest, SymptomResponse
from rule_based_v2 import infer_conditions

load_dotenv()

# Detect whether to use OpenAI (set OPENAI_API_KEY in env to enable)
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
USE_OPENAI = bool(OPENAI_API_KEY)
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
LLM_TIMEOUT_SECS = float(os.environ.get("LLM_TIMEOUT_SECS", "15"))
LLM_TEMPERATURE = float(os.environ.get("LLM_TEMPERATURE", "0.0"))
RAW_LOG = os.environ.get("RAW_LOG")

logger = logging.getLogger(__name__)
raw_logger = logging.getLogger("llm_raw")

SYSTEM_MSG = "You are a medical expert. Output ONLY a JSON array of strings with no extra text."

# PROMPT_TEMPLATE: literal with a {symptoms} placeholder, filled with .replace (not .format)
# so braces in the user's text are left alone
PROMPT_TEMPLATE = """You are a medical expert. A patient will describe their symptoms to you.
Based on these symptoms, suggest a list of possible medical conditions they might have.
Return only a JSON array of strings naming those conditions, for example ["Common cold", "Influenza"].
Do not provide any additional text, commentary or code fences.
Symptoms: {symptoms}
"""


class SymptomCheckError(Exception):
    kind = "symptom_check_error"


class InvalidSymptoms(SymptomCheckError):
    kind = "invalid_request"


class TransportFailure(SymptomCheckError):
    """The generation service could not be reached or refused the call."""
    kind = "transport_failure"


class SchemaMismatch(SymptomCheckError):
    """The generation service replied, but not with a JSON array of condition names."""
    kind = "schema_mismatch"

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


def _ensure_raw_log():
    if not RAW_LOG or raw_logger.handlers:
        return
    d = os.path.dirname(RAW_LOG)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)
    handler = logging.FileHandler(RAW_LOG, encoding="utf-8")
    handler.setFormatter(logging.Formatter("----%(asctime)s %(message)s"))
    raw_logger.addHandler(handler)
    raw_logger.setLevel(logging.DEBUG)
    # raw completions stay out of the console
    raw_logger.propagate = False


def build_prompt(symptoms: str) -> str:
    return PROMPT_TEMPLATE.replace("{symptoms}", symptoms)


# Offline stand-in: answers the same prompt contract from keyword rules
def mock_llm(symptoms: str) -> str:
    return json.dumps(infer_conditions(symptoms), ensure_ascii=False)


async def _create_completion(client, prompt: str, timeout_secs: float):
    return await client.chat.completions.create(
        model=OPENAI_MODEL,
        messages=[{"role": "system", "content": SYSTEM_MSG}, {"role": "user", "content": prompt}],
        temperature=LLM_TEMPERATURE,
        timeout=timeout_secs,
    )


async def call_llm(symptoms: str, client=None, timeout_secs: Optional[float] = None) -> Optional[str]:
    """
    Returns the raw completion text, from `client`, from OpenAI, or from the mock.
    Exactly one outbound call; transport errors raise TransportFailure and are
    never replaced by mock output.
    """
    _ensure_raw_log()
    prompt = build_prompt(symptoms)
    timeout = LLM_TIMEOUT_SECS if timeout_secs is None else timeout_secs

    # If OpenAI is not configured and no client was handed in, use mock
    if client is None and not USE_OPENAI:
        raw = mock_llm(symptoms)
        raw_logger.debug("MOCK CALL\n%s", raw)
        return raw

    try:
        if client is None:
            async with openai.AsyncOpenAI(api_key=OPENAI_API_KEY, timeout=timeout, max_retries=0) as own_client:
                resp = await _create_completion(own_client, prompt, timeout)
        else:
            resp = await _create_completion(client, prompt, timeout)
    except openai.APIError as e:
        logger.warning("Generation service call failed: %s", e)
        raw_logger.debug("OPENAI_ERROR\n%s", e)
        raise TransportFailure(f"Generation service call failed: {e}") from e

    choices = getattr(resp, "choices", None) or []
    text = choices[0].message.content if choices else None
    raw_logger.debug("CALL\n%s", text)
    return text


def parse_and_validate_json(raw_text: Optional[str]) -> SymptomResponse:
    """
    Validate a completion as a JSON array of non-empty strings.
    A single surrounding code fence is tolerated; nothing else is repaired.
    """
    if raw_text is None:
        raise SchemaMismatch("Generation service returned no output", raw=raw_text)

    raw = raw_text.strip()
    # strip triple-backtick fences if present
    if raw.startswith("```") and raw.endswith("```"):
        raw = "\n".join([l for l in raw.splitlines() if not l.strip().startswith("```")]).strip()

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SchemaMismatch(f"Output is not valid JSON: {e.msg}", raw=raw_text) from e

    if not isinstance(parsed, list):
        raise SchemaMismatch(f"Expected a JSON array, got {type(parsed).__name__}", raw=raw_text)

    try:
        return SymptomResponse(possible_conditions=parsed)
    except ValidationError as e:
        raise SchemaMismatch(
            f"Array holds {e.error_count()} item(s) that are not condition names", raw=raw_text
        ) from e


async def suggest_possible_conditions(symptoms: str, client=None) -> SymptomResponse:
    try:
        request = SymptomRequest(symptoms=symptoms)
    except ValidationError as e:
        raise InvalidSymptoms(e.errors()[0]["msg"]) from e

    raw = await call_llm(request.symptoms, client=client)
    try:
        validated = parse_and_validate_json(raw)
    except SchemaMismatch as e:
        logger.warning("Rejected generation output: %s", e)
        raise
    logger.info("Suggested %d possible condition(s)", len(validated.possible_conditions))
    return validated
