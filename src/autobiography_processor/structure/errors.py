"""구조 트리 관련 예외"""


class StructureError(Exception):
    """구조 트리 처리 중 발생하는 예외의 기본 클래스"""


class StructureFormatError(StructureError):
    """저장된 {chapters: [...]} 문서의 형식이 잘못됨"""


class UnknownNodeError(StructureError, KeyError):
    """존재하지 않는 챕터/섹션 ID"""

    def __str__(self):
        return str(self.args[0]) if self.args else ""


class EditorValidationError(StructureError):
    """편집기 구조 변경 거부 (사용자에게 보여줄 메시지 포함)

    Attributes:
        message: 사용자 표시용 메시지
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
