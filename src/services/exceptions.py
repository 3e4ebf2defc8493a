# src/services/exceptions.py
from typing import List

from src.domain.models import FieldViolation

# --- General Exceptions ---
class ProcessNotFoundError(Exception):
    """프로세스를 찾을 수 없을 때"""
    pass

class AppNotFoundError(Exception):
    """애플리케이션을 찾을 수 없을 때"""
    pass

# --- Creation/Validation Exceptions ---
class ProcessTypeAlreadyExistsError(Exception):
    """애플리케이션에 같은 타입의 프로세스가 이미 존재할 때"""
    pass

class ProcessValidationError(Exception):
    """
    쿼터, 사용자 허용 목록, 라이프사이클 불일치 등 검증 실패 시.

    필드별 위반 목록 전체를 담으며, 이 예외가 발생하면 저장은 전부 거부됩니다.
    """
    def __init__(self, violations: List[FieldViolation]):
        self.violations = list(violations)
        summary = "; ".join(f"{v.field} {v.message}" for v in self.violations)
        super().__init__(f"Process validation failed: {summary}")

    def on(self, field: str) -> List[FieldViolation]:
        """특정 필드에 대한 위반만 반환합니다."""
        return [v for v in self.violations if v.field == field]
