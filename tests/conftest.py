"""Pytest configuration and shared fixtures."""

import itertools
import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from service_search.config import IntentServiceConfig
from service_search.core.intent import IntentClassifier
from service_search.models.record import ApplicantType, ServiceRecord


_codes = itertools.count(20000)


def make_record(name: str, code: str = "", **kwargs: Any) -> ServiceRecord:
    """Build a record whose digest is just its name unless fields are given."""
    return ServiceRecord(code=code or f"SV-{next(_codes)}", name=name, **kwargs)


def completion(payload: Any) -> Dict[str, Any]:
    """Wrap an intent payload in an OpenAI-style chat completion body."""
    content = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def sample_records() -> List[ServiceRecord]:
    """A small catalog modelled on the provincial service list."""
    return [
        ServiceRecord(
            code="SV-10001",
            name="居民身份证损坏换领",
            short_name="居民身份证损坏换...",
            applicant_type=ApplicantType.CITIZEN,
            category="便民服务",
            region="湖南省本级",
            channels=frozenset({"Android", "IOS", "微信小程序"}),
            satisfaction=9.1,
            visit_count=4200,
            tag="民生保障",
        ),
        ServiceRecord(
            code="SV-10004",
            name="居民身份证到期换领",
            short_name="居民身份证到期换...",
            applicant_type=ApplicantType.CITIZEN,
            category="便民服务",
            region="湖南省本级",
            channels=frozenset({"Android", "PC端"}),
            satisfaction=8.7,
            visit_count=1800,
            tag="民生保障",
        ),
        ServiceRecord(
            code="SV-10050",
            name="生育登记",
            applicant_type=ApplicantType.CITIZEN,
            category="便民服务",
            region="全省通用",
            channels=frozenset({"支付宝小程序"}),
            high_frequency=True,
            satisfaction=9.6,
            visit_count=250000,
            tag="民生保障",
        ),
        ServiceRecord(
            code="SV-10053",
            name="公积金提取",
            applicant_type=ApplicantType.CITIZEN,
            category="便民服务",
            region="湖南省本级",
            channels=frozenset({"Android", "IOS", "HarmonyOS"}),
            satisfaction=9.9,
            visit_count=3000000,
            tag="民生保障",
        ),
        ServiceRecord(
            code="SV-10012",
            name="食品生产许可证",
            applicant_type=ApplicantType.LEGAL_ENTITY,
            category="准营准办",
            region="湖南省本级",
            channels=frozenset({"PC端"}),
            satisfaction=8.2,
            visit_count=900,
            tag="营商环境",
        ),
        ServiceRecord(
            code="SV-10072",
            name="长沙住房公积金查询",
            short_name="长沙住房公积金查...",
            applicant_type=ApplicantType.CITIZEN,
            category="便民服务",
            region="长沙市",
            channels=frozenset({"微信小程序", "PC端"}),
            visit_count=60000,
            tag="民生保障",
        ),
    ]


@pytest.fixture
def intent_config() -> IntentServiceConfig:
    """Intent service settings with a test key."""
    return IntentServiceConfig(
        api_url="https://llm.example.test/v1/chat/completions",
        api_key="test-key",
        model="test-model",
        timeout_seconds=5.0,
    )


@pytest.fixture
async def make_classifier(intent_config) -> Callable[..., IntentClassifier]:
    """Factory for classifiers backed by an httpx mock transport."""
    created: List[IntentClassifier] = []

    def factory(handler, config: IntentServiceConfig = None) -> IntentClassifier:
        classifier = IntentClassifier(
            config or intent_config,
            transport=httpx.MockTransport(handler),
        )
        created.append(classifier)
        return classifier

    yield factory

    for classifier in created:
        await classifier.close()
