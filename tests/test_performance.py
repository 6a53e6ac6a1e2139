"""Rough timing checks on a catalog of realistic size."""

import time

import pytest

from service_search.core.catalog import CatalogSnapshot
from service_search.core.engine import search
from service_search.models.context import QueryContext
from service_search.models.intent import AnalyzedIntent
from service_search.models.record import ApplicantType, ServiceRecord

SUBJECTS = ["社保", "公积金", "居民身份证", "营业执照", "不动产", "医保", "出入境", "婚姻", "生育", "税务"]
ACTIONS = ["查询", "办理", "变更", "注销", "补领", "换领", "提取", "缴费", "登记", "预约"]
REGIONS = ["长沙市", "株洲市", "湘潭市", "衡阳市", "全省通用"]


@pytest.fixture(scope="module")
def large_snapshot():
    records = []
    for i in range(10000):
        subject = SUBJECTS[i % len(SUBJECTS)]
        action = ACTIONS[(i // len(SUBJECTS)) % len(ACTIONS)]
        records.append(ServiceRecord(
            code=f"SV-{i:05d}",
            name=f"{subject}{action}{i}",
            applicant_type=ApplicantType.LEGAL_ENTITY if i % 7 == 0 else ApplicantType.CITIZEN,
            category="便民服务",
            region=REGIONS[i % len(REGIONS)],
            channels=frozenset({"Android", "PC端"} if i % 2 else {"微信小程序"}),
            high_frequency=i % 50 == 0,
            satisfaction=(i % 100) / 10,
            visit_count=(i * 37) % 100000,
        ))
    return CatalogSnapshot.build(records)


class TestPerformance:
    """Test search latency over 10,000 records."""

    def test_literal_search(self, large_snapshot):
        start = time.perf_counter()
        results = search("公积金提取", large_snapshot)
        elapsed = time.perf_counter() - start

        assert 0 < len(results) <= 100
        assert elapsed < 2.0

    def test_browse_with_context(self, large_snapshot):
        context = QueryContext(
            applicant_type=ApplicantType.CITIZEN,
            region="长沙",
            channel="PC端",
            satisfaction_weighted=True,
        )
        start = time.perf_counter()
        results = search("", large_snapshot, context, cap=50)
        elapsed = time.perf_counter() - start

        assert len(results) == 50
        assert all("PC端" in r.channels for r in results)
        assert elapsed < 2.0

    def test_expanded_search(self, large_snapshot):
        intent = AnalyzedIntent(keywords=("医保",), synonyms=("医保缴费", "社保缴费"))
        start = time.perf_counter()
        results = search("交医疗保险", large_snapshot, classify=lambda q: intent)
        elapsed = time.perf_counter() - start

        assert results
        assert elapsed < 2.0
