"""
tests/shared/gcp/test_gcp_categories.py - shared/gcp/categories.py 테스트
"""

import pytest

from shared.gcp.categories import (
    CATEGORY_KEYWORDS,
    GCP_SERVICE_CATEGORIES,
    category_display_name,
    is_infrastructure_service,
    service_category,
)


class TestServiceCategory:
    """service_category 테스트"""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("compute.googleapis.com", "compute"),
            ("run.googleapis.com", "compute"),
            ("container.googleapis.com", "compute"),
            ("containerregistry.googleapis.com", "compute"),
            ("bigquery.googleapis.com", "storage"),
            ("storage-api.googleapis.com", "storage"),
            ("sqladmin.googleapis.com", "database"),
            ("spanner.googleapis.com", "database"),
            ("dns.googleapis.com", "networking"),
            ("secretmanager.googleapis.com", "security"),
            ("cloudkms.googleapis.com", "security"),
            ("monitoring.googleapis.com", "monitoring"),
            ("logging.googleapis.com", "monitoring"),
            ("cloudbuild.googleapis.com", "developer"),
            ("artifactregistry.googleapis.com", "developer"),
            ("pubsub.googleapis.com", "other"),
        ],
    )
    def test_category(self, name, expected):
        assert service_category(name) == expected

    def test_case_insensitive(self):
        assert service_category("BigQuery.googleapis.com") == "storage"

    def test_deterministic(self):
        """여러 키워드에 걸리는 이름도 항상 같은 카테고리"""
        results = {service_category("cloudbuild-compute.googleapis.com") for _ in range(20)}
        assert results == {"developer"}

    def test_every_keyword_category_known(self):
        assert {category for _, category in CATEGORY_KEYWORDS} <= set(GCP_SERVICE_CATEGORIES)


class TestDisplayName:
    def test_known(self):
        assert category_display_name("developer") == "Developer Tools"

    def test_unknown(self):
        assert category_display_name("quantum") == "quantum"


class TestInfrastructure:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("compute.googleapis.com", True),
            ("dns.googleapis.com", True),
            ("sqladmin.googleapis.com", True),
            ("bigquery.googleapis.com", False),
            ("logging.googleapis.com", False),
        ],
    )
    def test_infrastructure(self, name, expected):
        assert is_infrastructure_service(name) is expected
