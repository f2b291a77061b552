from typing import Any, Dict, Optional

from vitalflow.adapters.base_adapter import ImageAdapter, to_data_url


class GeminiImageAdapter(ImageAdapter):
    """
    Adapter for Gemini image models through the generateContent REST call.
    Images come back inline as base64 parts.
    """
    def __init__(self, api_key: str, base_url: str, model: str, timeout_seconds: float):
        super().__init__(f"{base_url.rstrip('/')}/{model}:generateContent", timeout_seconds)
        self.api_key = api_key
        self.model = model

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    def extract_image(self, payload: Dict[str, Any]) -> Optional[str]:
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return None
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return None
        for part in parts:
            inline = part.get("inlineData") if isinstance(part, dict) else None
            if isinstance(inline, dict) and isinstance(inline.get("data"), str) and inline["data"]:
                mime_type = inline.get("mimeType")
                return to_data_url(inline["data"], mime_type if isinstance(mime_type, str) else None)
        return None

    def _get_auth_headers(self) -> Dict[str, str]:
        return {"x-goog-api-key": self.api_key}
