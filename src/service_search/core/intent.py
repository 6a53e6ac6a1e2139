"""Adapter for the external intent classification service."""

import json
import logging
import time
from typing import Any, Dict, Iterator, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..config import IntentServiceConfig
from ..models.intent import ClassificationResult, DegradedReason, IntentResponseModel
from .exceptions import ClassificationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
你是一个政务搜索意图识别专家。请分析用户的搜索内容，提取关键信息。
请必须且只能返回一个 JSON 对象，不要包含任何 Markdown 格式或解释文字。
JSON 格式如下：
{
  "keywords": ["关键词1", "关键词2"],
  "synonyms": ["政务事项常用说法1", "政务事项常用说法2"],
  "target_user": "法人" 或 "自然人" 或 "不确定",
  "location": "城市名" 或 "全省",
  "intent_category": "用户意图分类(如：查询、办理、投诉等)"
}
synonyms 给出用户口语对应的规范政务事项说法，例如"生孩子"对应"生育登记"。
如果用户没有明确提及城市，location 返回 null。如果用户意图不明确，target_user 返回 "不确定"。
""".strip()


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of model output.

    Tries the whole text first, then each balanced ``{...}`` substring in turn.

    Args:
        text: Raw model output

    Returns:
        Parsed JSON object

    Raises:
        ClassificationError: If no JSON object can be parsed
    """
    text = (text or "").strip()
    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    for candidate in _balanced_objects(text):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise ClassificationError(
        f"No JSON object in intent response: {text[:80]!r}", reason=DegradedReason.PARSE
    )


def _balanced_objects(text: str) -> Iterator[str]:
    """Yield balanced brace-delimited substrings in order, ignoring braces in strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    yield text[start:i + 1]
                    break
        start = text.find("{", start + 1)


class IntentClassifier:
    """
    Client for an OpenAI-compatible chat completion endpoint that extracts
    search intent from a query.

    ``classify`` never raises: missing credentials, transport failures and
    unparsable answers all come back as a degraded ClassificationResult.
    """

    def __init__(
        self,
        config: Optional[IntentServiceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize intent classifier.

        Args:
            config: Service URL, credentials and model
            transport: Optional httpx transport (used by tests)
        """
        self.config = config or IntentServiceConfig()
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=transport,
        )
        self._stats = {
            "total_calls": 0,
            "degraded_calls": 0,
        }

    @property
    def enabled(self) -> bool:
        return self.config.has_credentials

    async def classify(self, query: str) -> ClassificationResult:
        """
        Classify a query.

        Args:
            query: Raw query text

        Returns:
            Classification result, degraded on any failure
        """
        if not self.enabled:
            return ClassificationResult.degraded(DegradedReason.NO_CREDENTIALS)

        self._stats["total_calls"] += 1
        start = time.perf_counter()
        try:
            content = await self._request(query)
            payload = extract_json_object(content)
            intent = IntentResponseModel.model_validate(payload).to_intent()
        except ClassificationError as e:
            reason = e.reason or DegradedReason.PARSE
            self._stats["degraded_calls"] += 1
            logger.warning(f"Intent classification degraded ({reason.value}): {str(e)}")
            return ClassificationResult.degraded(reason)
        except PydanticValidationError as e:
            self._stats["degraded_calls"] += 1
            logger.warning(f"Intent response failed validation: {e.error_count()} errors")
            return ClassificationResult.degraded(DegradedReason.PARSE)
        except Exception as e:
            self._stats["degraded_calls"] += 1
            logger.warning(f"Intent classification failed unexpectedly: {str(e)}", exc_info=True)
            return ClassificationResult.degraded(DegradedReason.TRANSPORT)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Intent classified in {elapsed_ms:.0f}ms: keywords={list(intent.keywords)} "
            f"synonyms={list(intent.synonyms)} target={intent.applicant_type.value}"
        )
        return ClassificationResult.ok(intent)

    async def _request(self, query: str) -> str:
        """POST the query and return the model's message content."""
        body = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"用户搜索内容：{query}"},
            ],
            "temperature": self.config.temperature,
            "response_format": {"type": "json_object"},
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

        try:
            response = await self._client.post(self.config.api_url, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise ClassificationError(f"Intent service timed out: {str(e)}", DegradedReason.TIMEOUT) from e
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            raise ClassificationError(f"Intent service unreachable: {str(e)}", DegradedReason.TRANSPORT) from e

        if not response.is_success:
            raise ClassificationError(
                f"Intent service returned HTTP {response.status_code}: {response.text[:200]}",
                DegradedReason.HTTP_STATUS,
            )

        return self._message_content(response.text)

    @staticmethod
    def _message_content(body: str) -> str:
        """Pull ``choices[0].message.content`` out of a completion body.

        Bodies that are not chat completions are returned unchanged so a
        service answering with the intent object directly still works.
        """
        try:
            data = json.loads(body)
        except json.JSONDecodeError:
            return body

        if isinstance(data, dict) and "choices" in data:
            try:
                content = data["choices"][0]["message"]["content"]
            except (KeyError, IndexError, TypeError) as e:
                raise ClassificationError(
                    "Malformed chat completion body", DegradedReason.PARSE
                ) from e
            if not isinstance(content, str):
                raise ClassificationError("Completion content is not text", DegradedReason.PARSE)
            return content
        return body

    def get_stats(self) -> Dict[str, Any]:
        """Get classifier statistics."""
        return {
            **self._stats,
            "enabled": self.enabled,
            "model": self.config.model,
        }

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "IntentClassifier":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
