"""
EMCC Verifier - Request & Result Types
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from emcc_verifier.errors import ValidationError

MISSING_REFERENCE_ERROR = "Missing eiaNumber parameter"


class VerifyEmccBody(BaseModel):
    """Wire body of POST /verify-emcc"""
    model_config = ConfigDict(extra="ignore")

    eiaNumber: Optional[Union[str, int]] = None
    fullName: Optional[Any] = None


@dataclass(frozen=True)
class VerificationRequest:
    reference_id: str
    subject_name: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "VerificationRequest":
        """
        Build a request from a decoded JSON body.

        Anything that is not an object counts as an empty body.

        Raises:
            ValidationError: eiaNumber missing, null or blank
        """
        if not isinstance(payload, dict):
            payload = {}
        try:
            body = VerifyEmccBody.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(MISSING_REFERENCE_ERROR) from e

        # Kept exactly as sent: containment runs on the literal id
        reference_id = "" if body.eiaNumber is None else str(body.eiaNumber)
        if not reference_id.strip():
            raise ValidationError(MISSING_REFERENCE_ERROR)

        subject_name = body.fullName.strip() if isinstance(body.fullName, str) else None
        return cls(reference_id=reference_id, subject_name=subject_name or None)


@dataclass(frozen=True)
class VerificationResult:
    """
    Outcome of one verification. Built once, returned verbatim.
    """
    success: bool
    reference_id: Optional[str] = None
    html: str = ""
    contains_reference: bool = False
    html_length: int = 0
    error: Optional[str] = None
    stack: Optional[str] = None

    @classmethod
    def succeeded(cls, reference_id: str, html: str, contains_reference: bool) -> "VerificationResult":
        return cls(
            success=True,
            reference_id=reference_id,
            html=html,
            contains_reference=contains_reference,
            html_length=len(html),
        )

    @classmethod
    def failed(cls, error: str, stack: Optional[str] = None) -> "VerificationResult":
        return cls(success=False, error=error, stack=stack)

    def to_response(self) -> Dict[str, Union[str, int, bool]]:
        """JSON body in the shape the edge functions consume"""
        if not self.success:
            body: Dict[str, Union[str, int, bool]] = {"success": False, "error": self.error or "Unknown error"}
            if self.stack:
                body["stack"] = self.stack
            return body
        return {
            "success": True,
            "html": self.html,
            "eiaNumber": self.reference_id,
            "containsEIA": self.contains_reference,
            "htmlLength": self.html_length,
        }
