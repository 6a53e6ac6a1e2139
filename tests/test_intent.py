"""Test the intent classification adapter."""

import json

import httpx
import pytest

from service_search.config import IntentServiceConfig
from service_search.core.exceptions import ClassificationError
from service_search.core.intent import IntentClassifier, extract_json_object
from service_search.models.intent import DegradedReason
from service_search.models.record import ApplicantType

from conftest import completion


INTENT = {
    "keywords": ["生育登记"],
    "synonyms": ["生育登记", "出生医学证明"],
    "target_user": "自然人",
    "location": "长沙",
    "intent_category": "办理",
}


class TestExtractJsonObject:
    """Test lenient JSON parsing of model output."""

    def test_plain_json(self):
        assert extract_json_object('{"keywords": ["社保"]}') == {"keywords": ["社保"]}

    def test_json_inside_prose(self):
        """Test the first balanced object is used when the text is not pure JSON."""
        text = '好的，结果如下：\n```json\n{"keywords": ["社保"], "location": null}\n```\n希望有帮助 {"x": 1}'
        assert extract_json_object(text) == {"keywords": ["社保"], "location": None}

    def test_braces_inside_strings(self):
        text = 'prefix {"keywords": ["a}b", "{c"]} suffix'
        assert extract_json_object(text) == {"keywords": ["a}b", "{c"]}

    def test_skips_unparsable_brace_group(self):
        text = '{not json} then {"keywords": []}'
        assert extract_json_object(text) == {"keywords": []}

    @pytest.mark.parametrize("text", ["", "没有结果", "[1, 2]", "{unterminated"])
    def test_no_object(self, text):
        with pytest.raises(ClassificationError) as exc_info:
            extract_json_object(text)
        assert exc_info.value.reason == DegradedReason.PARSE


class TestIntentClassifier:
    """Test IntentClassifier against a mocked HTTP service."""

    async def test_no_credentials_makes_no_request(self):
        """Test missing key short-circuits without any network call."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=completion(INTENT))

        config = IntentServiceConfig(api_key="")
        async with IntentClassifier(config, transport=httpx.MockTransport(handler)) as classifier:
            result = await classifier.classify("生孩子")

        assert result.is_degraded
        assert result.degraded_reason == DegradedReason.NO_CREDENTIALS
        assert result.intent.is_empty
        assert calls == []

    async def test_successful_classification(self, make_classifier, intent_config):
        """Test request shape and response mapping."""
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion(INTENT))

        result = await make_classifier(handler).classify("想生孩子了")

        assert not result.is_degraded
        assert result.intent.synonyms == ("生育登记", "出生医学证明")
        assert result.intent.applicant_type == ApplicantType.CITIZEN
        assert result.intent.location == "长沙"

        assert seen["auth"] == "Bearer test-key"
        assert seen["url"] == intent_config.api_url
        assert seen["body"]["model"] == "test-model"
        assert seen["body"]["messages"][0]["role"] == "system"
        assert "想生孩子了" in seen["body"]["messages"][1]["content"]
        assert seen["body"]["response_format"] == {"type": "json_object"}

    async def test_content_wrapped_in_prose(self, make_classifier):
        """Test content that is not pure JSON falls back to the embedded object."""
        content = "分析结果：" + json.dumps(INTENT, ensure_ascii=False) + "。"

        def handler(request):
            return httpx.Response(200, json=completion(content))

        result = await make_classifier(handler).classify("生孩子")
        assert not result.is_degraded
        assert result.intent.keywords == ("生育登记",)

    async def test_bare_intent_body(self, make_classifier):
        """Test a service answering with the intent object itself."""

        def handler(request):
            return httpx.Response(200, json=INTENT)

        result = await make_classifier(handler).classify("生孩子")
        assert result.intent.location == "长沙"

    async def test_unparsable_content(self, make_classifier):
        def handler(request):
            return httpx.Response(200, json=completion("抱歉，我无法回答。"))

        result = await make_classifier(handler).classify("生孩子")
        assert result.degraded_reason == DegradedReason.PARSE
        assert result.intent.is_empty

    async def test_malformed_completion(self, make_classifier):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        result = await make_classifier(handler).classify("生孩子")
        assert result.degraded_reason == DegradedReason.PARSE

    async def test_loose_field_types(self, make_classifier):
        """Test odd field shapes are coerced instead of failing the call."""
        payload = {"keywords": "社保", "synonyms": ["社保缴费", None, {"x": 1}], "location": "全省"}

        def handler(request):
            return httpx.Response(200, json=completion(payload))

        result = await make_classifier(handler).classify("交社保")
        assert not result.is_degraded
        assert result.intent.keywords == ("社保",)
        assert result.intent.synonyms == ("社保缴费",)
        assert result.intent.location is None

    async def test_http_error_status(self, make_classifier):
        def handler(request):
            return httpx.Response(401, text="invalid api key")

        result = await make_classifier(handler).classify("生孩子")
        assert result.degraded_reason == DegradedReason.HTTP_STATUS

    async def test_timeout(self, make_classifier):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = await make_classifier(handler).classify("生孩子")
        assert result.degraded_reason == DegradedReason.TIMEOUT

    async def test_connection_error(self, make_classifier):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        classifier = make_classifier(handler)
        result = await classifier.classify("生孩子")

        assert result.degraded_reason == DegradedReason.TRANSPORT
        assert classifier.get_stats()["degraded_calls"] == 1

    async def test_unexpected_error(self, make_classifier):
        """Test any exception from the transport is contained."""

        def handler(request):
            raise RuntimeError("boom")

        result = await make_classifier(handler).classify("生孩子")
        assert result.degraded_reason == DegradedReason.TRANSPORT
