"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- accounts: 계좌 CRUD, 잔고 검증/복구
- categories: 카테고리 CRUD, 기본 카테고리 생성
- transactions: 거래 조회/생성/수정/삭제
"""
