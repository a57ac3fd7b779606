"""GCP 서비스 카테고리 매핑.

서비스 이름(예: "compute.googleapis.com")을 리포트용 카테고리로 분류합니다.
서비스 이름에 키워드가 포함되어 있는지로 판단하며, 키워드는 선언 순서대로
검사하므로 더 구체적인 키워드(예: "containerregistry")를 먼저 둡니다.

Attributes:
    GCP_SERVICE_CATEGORIES: 카테고리 slug -> name, name_ko 딕셔너리.
    CATEGORY_KEYWORDS: (키워드, 카테고리 slug) 목록 (검사 순서).
    INFRASTRUCTURE_KEYWORDS: 인프라 서비스 판별 키워드 집합.
"""

CATEGORY_COMPUTE = "compute"
CATEGORY_STORAGE = "storage"
CATEGORY_DATABASE = "database"
CATEGORY_NETWORKING = "networking"
CATEGORY_SECURITY = "security"
CATEGORY_MONITORING = "monitoring"
CATEGORY_DEVELOPER = "developer"
CATEGORY_OTHER = "other"

GCP_SERVICE_CATEGORIES: dict[str, dict[str, str]] = {
    CATEGORY_COMPUTE: {"name": "Compute", "name_ko": "컴퓨팅"},
    CATEGORY_STORAGE: {"name": "Storage", "name_ko": "스토리지"},
    CATEGORY_DATABASE: {"name": "Database", "name_ko": "데이터베이스"},
    CATEGORY_NETWORKING: {"name": "Networking", "name_ko": "네트워킹"},
    CATEGORY_SECURITY: {"name": "Security", "name_ko": "보안"},
    CATEGORY_MONITORING: {"name": "Monitoring", "name_ko": "모니터링"},
    CATEGORY_DEVELOPER: {"name": "Developer Tools", "name_ko": "개발자 도구"},
    CATEGORY_OTHER: {"name": "Other", "name_ko": "기타"},
}

CATEGORY_KEYWORDS: tuple[tuple[str, str], ...] = (
    # Developer
    ("cloudbuild", CATEGORY_DEVELOPER),
    ("sourcerepo", CATEGORY_DEVELOPER),
    ("artifactregistry", CATEGORY_DEVELOPER),
    # Compute
    ("containerregistry", CATEGORY_COMPUTE),
    ("container", CATEGORY_COMPUTE),
    ("compute", CATEGORY_COMPUTE),
    ("run", CATEGORY_COMPUTE),
    # Storage
    ("bigquery", CATEGORY_STORAGE),
    ("bigtable", CATEGORY_STORAGE),
    ("storage", CATEGORY_STORAGE),
    # Database
    ("spanner", CATEGORY_DATABASE),
    ("redis", CATEGORY_DATABASE),
    ("sql", CATEGORY_DATABASE),
    # Networking
    ("loadbalancing", CATEGORY_NETWORKING),
    ("dns", CATEGORY_NETWORKING),
    ("vpc", CATEGORY_NETWORKING),
    # Security
    ("secretmanager", CATEGORY_SECURITY),
    ("cloudkms", CATEGORY_SECURITY),
    ("iap", CATEGORY_SECURITY),
    # Monitoring
    ("monitoring", CATEGORY_MONITORING),
    ("logging", CATEGORY_MONITORING),
    ("cloudtrace", CATEGORY_MONITORING),
)

INFRASTRUCTURE_KEYWORDS: frozenset[str] = frozenset(
    {
        "compute",
        "container",
        "storage",
        "sql",
        "networking",
        "dns",
        "loadbalancing",
    }
)


def service_category(service_name: str) -> str:
    """서비스 이름을 카테고리 slug로 변환

    Args:
        service_name: 서비스 이름 (예: "bigquery.googleapis.com")

    Returns:
        카테고리 slug (매칭되는 키워드가 없으면 "other")
    """
    name = service_name.lower()
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in name:
            return category
    return CATEGORY_OTHER


def category_display_name(category: str) -> str:
    """카테고리 slug의 표시 이름 (알 수 없으면 slug 그대로)"""
    info = GCP_SERVICE_CATEGORIES.get(category)
    return info["name"] if info else category


def is_infrastructure_service(service_name: str) -> bool:
    """인프라 계열 서비스인지 확인 (컴퓨팅, 스토리지, 네트워크 기반 서비스)"""
    name = service_name.lower()
    return any(keyword in name for keyword in INFRASTRUCTURE_KEYWORDS)
