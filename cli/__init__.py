# cli - Click CLI와 콘솔 UI
"""
cli 패키지

- app: Click 엔트리포인트 (gcp-auditor audit)
- ui: Rich 콘솔 출력, 로깅 설정, 진행 표시, 결과 요약
"""
