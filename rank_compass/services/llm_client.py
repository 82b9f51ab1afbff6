"""
Language-Model Client

Sends rank records to the Anthropic Messages API and extracts the JSON object
the model answers with. Two analyses are offered:

- generate_narrative_insight: the dashboard's written analysis
  (overall_health, media_asymmetry, competitor_dynamics, golden_time,
  action_items)
- generate_rank_schedule: an hour-by-hour target rank recommendation
  (optimalRankSchedule, optimalRankScheduleReason)

The returned objects are not validated here; rank_compass.services.
insight_normalizer turns them into stable shapes.

Failure modes:
- empty dataset -> EmptyDatasetError
- missing or placeholder API key -> LLMConfigurationError
- non-2xx response or network failure -> LLMTransportError
- no JSON object in the reply, or invalid JSON -> LLMResponseError

Requests are issued once: no retry and no timeout unless one is configured.
The calls are blocking; API handlers run them in the threadpool.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import requests

from rank_compass.core import (
    EmptyDatasetError,
    LLMConfigurationError,
    LLMResponseError,
    LLMTransportError,
    Settings,
    get_settings,
)
from rank_compass.models import RankRecord

# Configure module logger
logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS - Prompts
# =============================================================================

DATA_PLACEHOLDER = "{DATA}"

NARRATIVE_PROMPT = """## 역할
당신은 검색광고 경쟁 분석을 전문으로 하는 시니어 퍼포먼스 마케팅 전략가입니다.

## 목적
키워드별 경쟁사 광고 순위 데이터를 분석하여 PC와 모바일 매체의 경쟁 구도, 경쟁사 순위 변동, 입찰에 유리한 시간대를 정리한 전략 보고서를 작성하세요.

## 입력 데이터
각 행은 광고주 한 곳의 키워드/매체별 시간대 순위입니다. hour_00~hour_23 값이 0이면 해당 시간에 노출되지 않았다는 뜻입니다.
{DATA}

## 분석 가이드라인
1. 전체 분석: 매체별 광고주 수, 평균 순위, 경쟁 강도를 비교합니다.
2. 매체 비대칭: PC와 모바일 사이에서 순위나 노출 패턴이 크게 다른 광고주를 찾습니다.
3. 순위 변동: 순위 변동이 큰 경쟁사와 안정적인 경쟁사를 구분합니다.
4. 최적 입찰시간대: 경쟁사가 빠지거나 순위가 흔들리는 시간대를 찾습니다.
5. 입찰 전략: 위 분석을 근거로 실행 가능한 입찰 전략을 제안합니다.

## 제약사항
- 반드시 JSON 형식으로만 출력.
- 각 문장은 "현상 -> 해석 -> 제안" 흐름의 개조식 한 문장으로 작성.
- 시간은 '오전 0시', '오후 2시'처럼 읽기 쉬운 표현을 사용.
- 순위 변동폭, 업체 수 등 구체적인 수치를 근거로 제시.

## 출력 형식 (Strictly JSON)
{
  "overall_health": ["...", "..."],
  "media_asymmetry": ["...", "..."],
  "competitor_dynamics": {
    "변동이 큰 경쟁사": ["...", "..."],
    "안정적인 경쟁사": ["...", "..."]
  },
  "golden_time": {
    "PC": "...",
    "Mobile": "..."
  },
  "action_items": ["...", "...", "..."]
}"""

RANK_SCHEDULE_PROMPT = """## 역할
당신은 광고 순위 데이터로 경쟁사의 예산 한계와 입찰 허점을 찾아내는 시니어 퍼포먼스 마케팅 전략가입니다.

## 목적
경쟁 강도를 분석하여 최소 비용으로 최대 노출 효율을 낼 수 있는 시간대별 목표 순위를 산출하세요.

## 입력 데이터
{DATA}

## 산출 가이드라인
1. 경쟁 밀도: 특정 시간대에 노출되는 광고주가 많을수록 경쟁이 치열합니다.
2. 변동성: 경쟁사 순위가 크게 흔들리는 시간대는 입찰이 불안정한 공략 구간입니다.
3. 목표 순위 산정:
   - 경쟁 밀도 높음 + 변동성 낮음 = 보수적으로 운영
   - 경쟁 밀도 낮음 + 변동성 높음 = 공격적으로 운영
   - 경쟁사가 빠진 시간대 = 낮은 비용으로 상위를 점유할 기회

## 제약사항
- 반드시 JSON 형식으로만 출력.
- optimalRankSchedule의 값은 1 이상의 정수만 기입.
- optimalRankScheduleReason은 수치 근거를 포함한 개조식 문장 배열.
- 시간은 '오전 0시', '오후 2시'처럼 읽기 쉬운 표현을 사용.

## 출력 형식 (Strictly JSON)
{
  "optimalRankSchedule": {
    "hour00": "목표 순위", "hour01": "목표 순위", "hour02": "목표 순위",
    "hour03": "목표 순위", "hour04": "목표 순위", "hour05": "목표 순위",
    "hour06": "목표 순위", "hour07": "목표 순위", "hour08": "목표 순위",
    "hour09": "목표 순위", "hour10": "목표 순위", "hour11": "목표 순위",
    "hour12": "목표 순위", "hour13": "목표 순위", "hour14": "목표 순위",
    "hour15": "목표 순위", "hour16": "목표 순위", "hour17": "목표 순위",
    "hour18": "목표 순위", "hour19": "목표 순위", "hour20": "목표 순위",
    "hour21": "목표 순위", "hour22": "목표 순위", "hour23": "목표 순위"
  },
  "optimalRankScheduleReason": ["...", "...", "..."]
}"""

# Greedy: from the first '{' to the last '}' across newlines
JSON_OBJECT_PATTERN = re.compile(r'\{[\s\S]*\}')

GENERIC_TRANSPORT_ERROR = "Analysis request failed"
EMPTY_DATASET_ERROR = "No data to analyze"
MISSING_KEY_ERROR = "ANTHROPIC_API_KEY is not configured; set it in the environment or .env file"


# =============================================================================
# Prompt / Response Helpers
# =============================================================================


def build_prompt(template: str, records: Sequence[RankRecord]) -> str:
    """Embed the records, in wire form, into a prompt template."""
    data = json.dumps(
        [record.to_wire() for record in records],
        ensure_ascii=False,
        indent=2,
    )
    return template.replace(DATA_PLACEHOLDER, data)


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Extract the JSON object embedded in a model reply.

    The reply may wrap the object in prose or a code fence; everything from
    the first '{' to the last '}' is parsed.

    Raises:
        LLMResponseError: If no object is found or it does not parse
    """
    match = JSON_OBJECT_PATTERN.search(text or "")
    if not match:
        raise LLMResponseError("Could not find a JSON object in the model response")
    try:
        parsed = json.loads(match.group())
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"Model response is not valid JSON: {e.msg}") from e
    if not isinstance(parsed, dict):
        raise LLMResponseError("Model response JSON is not an object")
    return parsed


def _error_message(response: requests.Response) -> Optional[str]:
    """Message of an API error body ({"error": {"message": ...}}), if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return str(message) if message else None
    if isinstance(error, str) and error:
        return error
    return None


def _response_text(body: Any) -> str:
    """Concatenated text blocks of a Messages API response body."""
    if not isinstance(body, dict):
        return ""
    blocks = body.get("content") or []
    parts: List[str] = []
    for block in blocks:
        if isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


# =============================================================================
# Transport
# =============================================================================


def request_completion(prompt: str, settings: Optional[Settings] = None) -> str:
    """
    Send one prompt to the Messages API and return the reply text.

    Args:
        prompt: User message content
        settings: Application settings (defaults to get_settings())

    Returns:
        The reply text

    Raises:
        LLMConfigurationError: If the API key is missing or a placeholder
        LLMTransportError: On a network failure or a non-2xx response
    """
    settings = settings or get_settings()

    if not settings.has_usable_api_key:
        raise LLMConfigurationError(MISSING_KEY_ERROR)

    logger.info(f"Requesting completion from {settings.anthropic_model} ({len(prompt)} chars)")

    try:
        response = requests.post(
            settings.anthropic_api_url,
            headers={
                "x-api-key": settings.anthropic_api_key,
                "content-type": "application/json",
                "anthropic-version": settings.anthropic_version,
            },
            json={
                "model": settings.anthropic_model,
                "max_tokens": settings.llm_max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            },
            timeout=settings.llm_timeout_seconds,
        )
    except requests.RequestException as e:
        logger.error(f"Completion request failed: {e}", exc_info=True)
        raise LLMTransportError(str(e) or GENERIC_TRANSPORT_ERROR) from e

    if not response.ok:
        message = _error_message(response) or GENERIC_TRANSPORT_ERROR
        logger.error(f"Completion request returned {response.status_code}: {message}")
        raise LLMTransportError(message, upstream_status=response.status_code)

    try:
        body = response.json()
    except ValueError as e:
        raise LLMResponseError("Model response body is not JSON") from e

    return _response_text(body)


# =============================================================================
# Analyses
# =============================================================================


def _run_analysis(
    template: str,
    records: Sequence[RankRecord],
    settings: Optional[Settings]
) -> Dict[str, Any]:
    if not records:
        raise EmptyDatasetError(EMPTY_DATASET_ERROR)

    text = request_completion(build_prompt(template, records), settings)
    return extract_json_object(text)


def generate_narrative_insight(
    records: Sequence[RankRecord],
    settings: Optional[Settings] = None
) -> Dict[str, Any]:
    """
    Ask the model for the written competitor analysis.

    Args:
        records: Records to analyze; must not be empty
        settings: Application settings (defaults to get_settings())

    Returns:
        The raw insight object as the model produced it
    """
    insight = _run_analysis(NARRATIVE_PROMPT, records, settings)
    logger.info(f"Narrative insight received with keys {sorted(insight.keys())}")
    return insight


def generate_rank_schedule(
    records: Sequence[RankRecord],
    settings: Optional[Settings] = None
) -> Dict[str, Any]:
    """Ask the model for an hour-by-hour target rank recommendation."""
    insight = _run_analysis(RANK_SCHEDULE_PROMPT, records, settings)
    logger.info("Rank schedule insight received")
    return insight
